#!/usr/bin/env python3
import argparse
import csv
import os
import sys
from typing import Iterator, List, Optional, Sequence, Tuple

from physiodata.classes.container import PhysioContainer
from physiodata.classes.errors import PhysioDataError
from physiodata.classes.physio_file import load


def header(container: PhysioContainer, add_seconds: bool = True) -> List[str]:
    names = list(container.signals.channel_names)
    return ["t_s"] + names if add_seconds else names


def iter_rows(container: PhysioContainer, add_seconds: bool = True) -> Iterator[Tuple]:
    """One tuple per sample instant, channels in stored order."""
    signals = container.signals
    for i in range(signals.n_samples):
        row = tuple(x[i] for x in signals.channels)
        if add_seconds:
            row = (f"{i / signals.fs:.6f}",) + row
        yield row


def convert(physio_path: str, csv_path: str, add_seconds: bool = True) -> str:
    """Write signals to csv_path and labels to <csv stem>_labels.csv; return the labels path."""
    container = load(physio_path)

    with open(csv_path, "w", newline="") as out_f:
        w = csv.writer(out_f)
        w.writerow(header(container, add_seconds))
        w.writerows(iter_rows(container, add_seconds))

    base, ext = os.path.splitext(csv_path)
    labels_path = f"{base}_labels{ext or '.csv'}"
    labels = container.labels
    with open(labels_path, "w", newline="") as out_f:
        w = csv.writer(out_f)
        w.writerow(["t"] + list(labels.channel_names))
        for i, t in enumerate(labels.t):
            w.writerow([t] + [values[i] for values in labels.channels])

    return labels_path


def main(argv: Optional[Sequence[str]] = None) -> None:
    p = argparse.ArgumentParser(description="Export the signals and labels of a .physioData file to CSV")
    p.add_argument("input", help="Input .physioData file")
    p.add_argument("-o", "--output", help="Output .csv path (default: input name with .csv)")
    p.add_argument("--no-seconds", action="store_true", help="Do not add computed t_s column")
    args = p.parse_args(argv)

    physio_path = args.input
    if args.output:
        csv_path = args.output
    else:
        base, _ = os.path.splitext(physio_path)
        csv_path = base + ".csv"

    try:
        labels_path = convert(physio_path, csv_path, add_seconds=not args.no_seconds)
    except (PhysioDataError, OSError) as e:
        sys.exit(f"Error: {e}")
    print(f"Wrote: {csv_path}")
    print(f"Wrote: {labels_path}")


if __name__ == "__main__":
    main()
