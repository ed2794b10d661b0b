from typing import Any, Iterable, List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from physiodata.classes.container import PhysioContainer, ProvenanceInfo
from physiodata.classes.epochs import REQUIRED_COLUMNS, EpochTable
from physiodata.classes.errors import SchemaError, ValidationError
from physiodata.classes.signal_group import (
    LABEL_CHANNEL_NAME,
    LABEL_CHANNEL_UNIT,
    LabelGroup,
    SignalGroup,
)

# (name, values, unit, description)
ColumnSpec = Tuple[str, Sequence[float], str, str]
LabelEvent = Tuple[float, str]


def build_signal_group(columns: Iterable[ColumnSpec], fs: float) -> SignalGroup:
    """Build data.signals from ordered (name, values, unit, description) tuples."""
    columns = list(columns)
    return SignalGroup(
        channels=tuple(values for _, values, _, _ in columns),
        channel_names=tuple(name for name, _, _, _ in columns),
        channel_units=tuple(unit for _, _, unit, _ in columns),
        channel_descriptions=tuple(description for _, _, _, description in columns),
        fs=fs,
    )


def build_label_group(events: Iterable[LabelEvent], sort: bool = False) -> LabelGroup:
    """
    Build data.labels with a single 'Labels' channel.

    Input order is kept unless sort=True, which orders events by timestamp
    (stable, so simultaneous events keep their relative order).
    """
    events = list(events)
    for i, event in enumerate(events):
        if len(event) != 2:
            raise ValidationError(f"Label event {i} must be (timestamp, value), got {event!r}")
        if event[1] is None:
            raise ValidationError(f"Label event {i} at t={event[0]} has no value")
        try:
            float(event[0])
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Label event {i}: timestamp {event[0]!r} is not a number") from e
    if sort:
        events = sorted(events, key=lambda e: float(e[0]))

    return LabelGroup(
        t=np.array([t for t, _ in events], dtype=float),
        channels=(tuple(str(value) for _, value in events),),
        channel_names=(LABEL_CHANNEL_NAME,),
        channel_units=(LABEL_CHANNEL_UNIT,),
    )


def build_epoch_table(rows: Iterable[Mapping[str, Any]]) -> EpochTable:
    """
    Build epochs.epochData from row mappings.

    The first row fixes the column order; every other row must carry the same
    keys. Required keys are epochName, startTime and endTime.
    """
    rows = [dict(row) for row in rows]
    if not rows:
        return EpochTable.empty()

    columns: List[str] = list(rows[0].keys())
    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    if missing:
        raise SchemaError(f"Epoch row 0 is missing required keys: {missing}")

    expected = set(columns)
    for i, row in enumerate(rows[1:], start=1):
        keys = set(row.keys())
        if keys != expected:
            raise SchemaError(
                f"Epoch row {i} ({row.get('epochName')!r}) has keys that differ from row 0: "
                f"missing {sorted(expected - keys)}, unexpected {sorted(keys - expected)}"
            )

    return EpochTable(pd.DataFrame.from_records(rows, columns=columns))


def assemble(
    signals: SignalGroup,
    labels: LabelGroup,
    epochs: EpochTable,
    info: ProvenanceInfo,
) -> PhysioContainer:
    """Compose the container; the parts validate themselves."""
    for name, part, kind in (
        ("signals", signals, SignalGroup),
        ("labels", labels, LabelGroup),
        ("epochs", epochs, EpochTable),
        ("info", info, ProvenanceInfo),
    ):
        if not isinstance(part, kind):
            raise ValidationError(f"{name} must be a {kind.__name__}, got {type(part).__name__}")
    return PhysioContainer(signals=signals, labels=labels, epochs=epochs, info=info)
