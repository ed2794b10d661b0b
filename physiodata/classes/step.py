from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import pandas as pd

from physiodata.classes.builder import (
    assemble,
    build_epoch_table,
    build_label_group,
    build_signal_group,
)
from physiodata.classes.container import ProvenanceInfo
from physiodata.classes.errors import FormatError
from physiodata.classes.loaders import Workspace
from physiodata.classes.physio_file import save
from physiodata.classes.signal_group import ChannelSpec


@dataclass(kw_only=True)
class Step:
    name: str
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...]
    plot_keys: Tuple[str, ...] = ()

    def run(self, ws: Workspace) -> None:
        """Implement in subclasses."""
        raise NotImplementedError


@dataclass
class SignalGroupStep(Step):
    """Turn raw sample columns into data.signals."""
    channels: Tuple[ChannelSpec, ...]
    fs: float

    def run(self, ws: Workspace) -> None:
        raw: pd.DataFrame = ws[self.inputs[0]]

        missing = [c.name for c in self.channels if c.name not in raw.columns]
        if missing:
            raise FormatError(f"Raw samples have no columns {missing} (have {list(raw.columns)})")

        group = build_signal_group(
            [(c.name, raw[c.name].to_numpy(), c.unit, c.description) for c in self.channels],
            fs=self.fs,
        )
        print(len(group.channels), "channels of", group.n_samples, "samples at", group.fs, "Hz")
        ws[self.outputs[0]] = group


@dataclass
class LabelGroupStep(Step):
    """Turn (timestamp, value) events into data.labels."""
    sort: bool = True

    def run(self, ws: Workspace) -> None:
        labels = build_label_group(ws[self.inputs[0]], sort=self.sort)
        print(len(labels), "labels")
        ws[self.outputs[0]] = labels


@dataclass
class EpochTableStep(Step):
    """Turn epoch row mappings into epochs.epochData."""

    def run(self, ws: Workspace) -> None:
        epochs = build_epoch_table(ws[self.inputs[0]])
        print(len(epochs), "epochs with columns", list(epochs.columns))
        ws[self.outputs[0]] = epochs


@dataclass
class AssembleStep(Step):
    """Compose signals, labels and epochs with provenance info."""
    info: ProvenanceInfo

    def run(self, ws: Workspace) -> None:
        signals, labels, epochs = (ws[k] for k in self.inputs)
        ws[self.outputs[0]] = assemble(signals, labels, epochs, self.info)


@dataclass
class SaveStep(Step):
    """Write the assembled container to a .physioData file."""
    path: Path

    def run(self, ws: Workspace) -> None:
        out = save(ws[self.inputs[0]], self.path)
        print(f"Wrote: {out}")
        if self.outputs:
            ws[self.outputs[0]] = out
