"""
Reading and writing .physioData files.

A .physioData file is a MATLAB 5 MAT-file holding the variables 'data',
'epochs' and 'physioDataInfo', laid out the way MATLAB's
save(file, '-struct', 'pdtData') writes the toolbox struct. scipy cannot
write MATLAB table objects, so epochs.epochData is stored in its
column-struct form (one field per column, see table2struct(..., 'ToScalar',
true)); struct2table restores the table.
"""
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import numpy as np
import pandas as pd
from scipy.io import loadmat, savemat

from physiodata.classes.container import PhysioContainer, ProvenanceInfo
from physiodata.classes.epochs import NUMERIC, EpochTable
from physiodata.classes.errors import FormatError
from physiodata.classes.signal_group import LabelGroup, SignalGroup

PHYSIODATA_EXTENSION = ".physioData"

PathLike = Union[str, Path]


def physiodata_path(raw_path: PathLike, out_dir: Optional[PathLike] = None) -> Path:
    """Output path for a raw file: same stem, .physioData extension."""
    raw_path = Path(raw_path)
    out_dir = Path(out_dir) if out_dir is not None else raw_path.parent
    return out_dir / f"{raw_path.stem}{PHYSIODATA_EXTENSION}"


# -----------------------------
# Writing
# -----------------------------

def _row_cell(items: Iterable[Any]) -> np.ndarray:
    """1xN MATLAB cell array."""
    items = list(items)
    cell = np.empty((1, len(items)), dtype=object)
    for i, item in enumerate(items):
        cell[0, i] = item
    return cell


def _column_cell(items: Iterable[Any]) -> np.ndarray:
    """Nx1 MATLAB cell array."""
    items = list(items)
    cell = np.empty((len(items), 1), dtype=object)
    for i, item in enumerate(items):
        cell[i, 0] = item
    return cell


def _column(values) -> np.ndarray:
    return np.asarray(values, dtype=float).reshape(-1, 1)


def _signals_struct(signals: SignalGroup) -> Dict[str, Any]:
    return {
        "channels": _row_cell(_column(x) for x in signals.channels),
        "channelNames": _row_cell(signals.channel_names),
        "channelUnits": _row_cell(signals.channel_units),
        "channelDescription": _row_cell(signals.channel_descriptions),
        "fs": float(signals.fs),
    }


def _labels_struct(labels: LabelGroup) -> Dict[str, Any]:
    return {
        "t": _column(labels.t),
        "channels": _row_cell(_column_cell(values) for values in labels.channels),
        "channelUnits": _row_cell(labels.channel_units),
        "channelNames": _row_cell(labels.channel_names),
    }


def _epoch_struct(epochs: EpochTable) -> Dict[str, Any]:
    struct = {}
    for col in epochs.columns:
        if epochs.column_kinds[col] == NUMERIC or col in ("startTime", "endTime"):
            struct[col] = _column(epochs.data[col].to_numpy(dtype=float))
        else:
            struct[col] = _column_cell(str(v) for v in epochs.data[col])
    return struct


def to_mat_dict(container: PhysioContainer) -> Dict[str, Any]:
    """Top-level MAT variables for a container."""
    info = container.info
    return {
        "data": {
            "signals": _signals_struct(container.signals),
            "labels": _labels_struct(container.labels),
        },
        "epochs": {"epochData": _epoch_struct(container.epochs)},
        "physioDataInfo": {
            "rawDataSource": info.raw_data_source,
            "pdtFileCreationDate": info.creation_date,
            "pdtFileCreationUser": info.creation_user,
        },
    }


def save(container: PhysioContainer, path: PathLike) -> Path:
    """
    Write a container to path, replacing any existing file.

    The file is written next to the target and renamed over it once
    complete, so readers never see a partial file.
    """
    path = Path(path)
    mdict = to_mat_dict(container)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            savemat(f, mdict, do_compression=True, long_field_names=True)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return path


# -----------------------------
# Reading
# -----------------------------

def _struct(value: np.ndarray, where: str) -> np.void:
    if value.dtype.names is None or value.size != 1:
        raise FormatError(f"{where} is not a scalar struct")
    return value.reshape(-1)[0]


def _field(record: np.void, name: str, where: str) -> np.ndarray:
    if record.dtype.names is None or name not in record.dtype.names:
        raise FormatError(f"{where} has no field '{name}'")
    return record[name]


def _text(value) -> str:
    value = np.asarray(value)
    return str(value.reshape(-1)[0]) if value.size else ""


def _cell_items(value: np.ndarray):
    return list(np.asarray(value, dtype=object).reshape(-1))


def _numbers(value) -> np.ndarray:
    return np.asarray(value, dtype=float).reshape(-1)


def _read_signals(record: np.void) -> SignalGroup:
    where = "data.signals"
    return SignalGroup(
        channels=tuple(_numbers(x) for x in _cell_items(_field(record, "channels", where))),
        channel_names=tuple(_text(s) for s in _cell_items(_field(record, "channelNames", where))),
        channel_units=tuple(_text(s) for s in _cell_items(_field(record, "channelUnits", where))),
        channel_descriptions=tuple(
            _text(s) for s in _cell_items(_field(record, "channelDescription", where))
        ),
        fs=float(_numbers(_field(record, "fs", where))[0]),
    )


def _read_labels(record: np.void) -> LabelGroup:
    where = "data.labels"
    return LabelGroup(
        t=_numbers(_field(record, "t", where)),
        channels=tuple(
            tuple(_text(v) for v in _cell_items(values))
            for values in _cell_items(_field(record, "channels", where))
        ),
        channel_names=tuple(_text(s) for s in _cell_items(_field(record, "channelNames", where))),
        channel_units=tuple(_text(s) for s in _cell_items(_field(record, "channelUnits", where))),
    )


def _read_epochs(record: np.void) -> EpochTable:
    columns = {}
    for name in record.dtype.names:
        value = record[name]
        if value.dtype == object:
            columns[name] = [_text(v) for v in _cell_items(value)]
        else:
            columns[name] = _numbers(value)
    return EpochTable(pd.DataFrame(columns, columns=list(record.dtype.names)))


def load(path: PathLike) -> PhysioContainer:
    """Read a .physioData file back into a PhysioContainer."""
    path = Path(path)
    with open(path, "rb") as f:
        mat = loadmat(f)

    for var in ("data", "epochs", "physioDataInfo"):
        if var not in mat:
            raise FormatError(f"{path}: not a physioData file, variable '{var}' is missing")

    data = _struct(mat["data"], "data")
    epochs = _struct(mat["epochs"], "epochs")
    info = _struct(mat["physioDataInfo"], "physioDataInfo")

    return PhysioContainer(
        signals=_read_signals(_struct(_field(data, "signals", "data"), "data.signals")),
        labels=_read_labels(_struct(_field(data, "labels", "data"), "data.labels")),
        epochs=_read_epochs(_struct(_field(epochs, "epochData", "epochs"), "epochs.epochData")),
        info=ProvenanceInfo(
            raw_data_source=_text(_field(info, "rawDataSource", "physioDataInfo")),
            creation_date=_text(_field(info, "pdtFileCreationDate", "physioDataInfo")),
            creation_user=_text(_field(info, "pdtFileCreationUser", "physioDataInfo")),
        ),
    )
