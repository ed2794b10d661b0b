import sys
from argparse import ArgumentParser
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from physiodata.classes.container import PhysioContainer, ProvenanceInfo, current_user
from physiodata.classes.errors import PhysioDataError
from physiodata.classes.loaders import (
    EpochFileLoader,
    InputLoader,
    LabelFileLoader,
    RawSampleLoader,
    StaticEpochs,
    StaticLabels,
    Workspace,
)
from physiodata.classes.physio_file import physiodata_path
from physiodata.classes.runner import Runner
from physiodata.classes.signal_group import ChannelSpec
from physiodata.classes.step import (
    AssembleStep,
    EpochTableStep,
    LabelGroupStep,
    SaveStep,
    SignalGroupStep,
    Step,
)

DEFAULT_FS_HZ = 1000.0
DEFAULT_CHANNELS: Tuple[ChannelSpec, ...] = (
    ChannelSpec(name="ECG", unit="mV", description="ECG data"),
    ChannelSpec(name="EDA", unit="uS", description="EDA data"),
)

# Labels and epochs of the basic authoring example
BASIC_EXAMPLE_LABELS: Tuple[Tuple[float, str], ...] = (
    (30, "Start Baseline"),
    (60, "End Baseline"),
    (70, "Participant ready"),
)
BASIC_EXAMPLE_EPOCHS: Tuple[dict, ...] = (
    {"epochName": "Trial 1", "startTime": 80, "endTime": 95, "condition": "A", "group": 1},
    {"epochName": "Trial 2", "startTime": 100, "endTime": 115, "condition": "B", "group": 1},
    {"epochName": "Trial 3", "startTime": 120, "endTime": 135, "condition": "A", "group": 1},
    {"epochName": "Trial 4", "startTime": 140, "endTime": 155, "condition": "B", "group": 1},
)


def build_steps(channels: Sequence[ChannelSpec], fs: float, info: ProvenanceInfo, output_path: Path) -> List[Step]:
    return [
        SignalGroupStep(
            name="signals",
            inputs=("raw",),
            outputs=("data/signals",),
            channels=tuple(channels),
            fs=fs,
        ),
        LabelGroupStep(
            name="labels",
            inputs=("label_events",),
            outputs=("data/labels",),
            sort=True,
        ),
        EpochTableStep(
            name="epochs",
            inputs=("epoch_rows",),
            outputs=("epochs/epochData",),
        ),
        AssembleStep(
            name="assemble",
            inputs=("data/signals", "data/labels", "epochs/epochData"),
            outputs=("container",),
            info=info,
        ),
        SaveStep(
            name="save",
            inputs=("container",),
            outputs=("output_path",),
            plot_keys=("container",),
            path=output_path,
        ),
    ]


def convert(
    raw_path,
    output_path=None,
    channels: Sequence[ChannelSpec] = DEFAULT_CHANNELS,
    fs: float = DEFAULT_FS_HZ,
    label_loader: Optional[InputLoader] = None,
    epoch_loader: Optional[InputLoader] = None,
    delimiter: str = "\t",
    created: Optional[datetime] = None,
    user: Optional[str] = None,
    make_plots: bool = False,
    artifacts_dir=None,
) -> PhysioContainer:
    """
    Convert one raw recording to a .physioData file and return the container.

    created and user default to the current time and current_user().
    """
    raw_path = Path(raw_path)
    output_path = Path(output_path) if output_path else physiodata_path(raw_path)
    created = created or datetime.now()
    user = current_user() if user is None else user

    # Load inputs (OOP edge)
    loaders: List[InputLoader] = [
        RawSampleLoader(path=raw_path, channel_names=tuple(c.name for c in channels), delimiter=delimiter),
        label_loader or StaticLabels(events=()),
        epoch_loader or StaticEpochs(rows=()),
    ]
    ws: Workspace = {}
    for loader in loaders:
        ws.update(loader.load())

    info = ProvenanceInfo.create(raw_path, created=created, user=user)
    steps = build_steps(channels, fs, info, output_path)

    out_dir = Path(artifacts_dir) if artifacts_dir else Path("run_artifacts") / raw_path.stem
    runner = Runner(out_dir=out_dir, make_plots=make_plots)
    ws = runner.run(ws, steps)
    return ws["container"]


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)

    if args.output and args.out_dir:
        sys.exit("Error: use either --output or --out-dir, not both")
    if args.basic_example and (args.labels or args.epochs):
        sys.exit("Error: --basic-example cannot be combined with --labels/--epochs")

    raw_path = Path(args.raw_file)
    output_path = Path(args.output) if args.output else physiodata_path(raw_path, args.out_dir)

    if args.basic_example:
        label_loader = StaticLabels(events=BASIC_EXAMPLE_LABELS)
        epoch_loader = StaticEpochs(rows=BASIC_EXAMPLE_EPOCHS)
    else:
        label_loader = LabelFileLoader(path=args.labels, delimiter=args.delimiter) if args.labels else None
        epoch_loader = EpochFileLoader(path=args.epochs, delimiter=args.delimiter) if args.epochs else None

    try:
        convert(
            raw_path,
            output_path,
            channels=tuple(args.channel) or DEFAULT_CHANNELS,
            fs=args.fs,
            label_loader=label_loader,
            epoch_loader=epoch_loader,
            delimiter=args.delimiter,
            user=args.user,
            make_plots=args.plot,
            artifacts_dir=args.artifacts_dir,
        )
    except (PhysioDataError, OSError) as e:
        sys.exit(f"Error: {e}")


def parse_args(argv: Optional[Sequence[str]] = None) -> Any:
    parser = ArgumentParser(description="Build a PhysioData Toolbox file from a raw delimited recording")
    parser.add_argument("raw_file", type=str, help="Headerless delimited file, one column per channel")
    parser.add_argument("--fs", type=float, default=DEFAULT_FS_HZ, help="Sampling frequency in Hz (default: %(default)s)")
    parser.add_argument(
        "--channel",
        type=ChannelSpec.parse,
        action="append",
        default=[],
        metavar="NAME:UNIT[:DESCRIPTION]",
        help="Raw column in file order; repeat per column (default: ECG:mV, EDA:uS)",
    )
    parser.add_argument("--delimiter", type=str, default="\t", help="Column delimiter (default: tab)")
    parser.add_argument("--labels", type=str, help="Headerless file of 'timestamp<TAB>value' events")
    parser.add_argument("--epochs", type=str, help="Epoch file with header epochName, startTime, endTime, ...")
    parser.add_argument("--basic-example", action="store_true", help="Use the labels and epochs of the basic example")
    parser.add_argument("-o", "--output", type=str, help="Output path (default: raw file name with .physioData)")
    parser.add_argument("--out-dir", type=str, help="Directory for the output file (default: next to the raw file)")
    parser.add_argument("--plot", action="store_true", help="Write preview plots")
    parser.add_argument("--artifacts-dir", type=str, help="Directory for preview plots (default: run_artifacts/<raw stem>)")
    parser.add_argument("--user", type=str, help="Creating user stored in physioDataInfo (default: current account)")
    return parser.parse_args(argv)


if __name__ == "__main__":
    main()
