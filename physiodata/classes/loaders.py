from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Protocol, Sequence, Tuple, Union

import pandas as pd

from physiodata.classes.errors import FormatError

Workspace = Dict[str, Any]
PathLike = Union[str, Path]


# -----------------------------
# 2) Input I/O layer (OOP edges)
# -----------------------------

def _require_numeric(df: pd.DataFrame, path: PathLike, columns=None) -> None:
    """Raise FormatError naming the first cell that is not a number."""
    for col_idx, col in enumerate(df.columns):
        if columns is not None and col not in columns:
            continue
        if pd.api.types.is_numeric_dtype(df[col]):
            continue
        coerced = pd.to_numeric(df[col], errors="coerce")
        bad = coerced.isna() & df[col].notna() & (df[col].astype(str).str.strip() != "")
        if not bad.any():
            bad = coerced.isna()
        row = int(bad.to_numpy().argmax())
        raise FormatError(
            f"{path}: non-numeric value {df[col].iloc[row]!r} at row {row + 1}, column {col_idx + 1}"
        )


def load_raw_samples(
    path: PathLike,
    delimiter: str = "\t",
    channel_names: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Read a headerless delimited file of numeric samples, one row per sample.

    Columns are renamed to channel_names (the file carries no header), or to
    Var1..VarN when no names are given. Missing cells load as NaN.
    """
    try:
        df = pd.read_csv(path, sep=delimiter, header=None)
    except pd.errors.EmptyDataError as e:
        raise FormatError(f"{path}: file contains no samples") from e
    except pd.errors.ParserError as e:
        raise FormatError(f"{path}: rows do not share one column layout ({e})") from e
    except UnicodeDecodeError as e:
        raise FormatError(f"{path}: not a delimited text file ({e})") from e

    if channel_names is not None and len(df.columns) != len(channel_names):
        raise FormatError(
            f"{path}: found {len(df.columns)} columns, expected {len(channel_names)} "
            f"({', '.join(channel_names)})"
        )
    _require_numeric(df, path)

    if channel_names is None:
        channel_names = [f"Var{i + 1}" for i in range(len(df.columns))]
    df.columns = list(channel_names)
    return df


class InputLoader(Protocol):
    def load(self) -> Workspace:
        """Return workspace entries, e.g. {'raw': DataFrame(...)}"""
        ...


@dataclass
class RawSampleLoader:
    """Loads the raw recording into a DataFrame with one column per channel."""
    path: PathLike
    channel_names: Tuple[str, ...]
    delimiter: str = "\t"

    def load(self) -> Workspace:
        df = load_raw_samples(self.path, self.delimiter, self.channel_names)
        print(f"Loaded {len(df)} samples x {len(df.columns)} channels from {self.path}")
        return {"raw": df}


@dataclass
class LabelFileLoader:
    """Loads events from a headerless two-column file: timestamp (s), value."""
    path: PathLike
    delimiter: str = "\t"

    def load(self) -> Workspace:
        try:
            df = pd.read_csv(
                self.path, sep=self.delimiter, header=None, dtype={1: str}, keep_default_na=False
            )
        except pd.errors.EmptyDataError:
            return {"label_events": []}
        except pd.errors.ParserError as e:
            raise FormatError(f"{self.path}: rows do not share one column layout ({e})") from e
        except UnicodeDecodeError as e:
            raise FormatError(f"{self.path}: not a delimited text file ({e})") from e

        if len(df.columns) != 2:
            raise FormatError(
                f"{self.path}: label files need 2 columns (timestamp, value), found {len(df.columns)}"
            )
        _require_numeric(df, self.path, columns=[0])
        events = [(float(t), str(value)) for t, value in zip(df[0], df[1])]
        return {"label_events": events}


@dataclass
class EpochFileLoader:
    """Loads epoch rows from a delimited file whose header names the columns."""
    path: PathLike
    delimiter: str = "\t"

    def load(self) -> Workspace:
        try:
            df = pd.read_csv(self.path, sep=self.delimiter, dtype={"epochName": str})
        except pd.errors.EmptyDataError as e:
            raise FormatError(f"{self.path}: epoch file has no header row") from e
        except pd.errors.ParserError as e:
            raise FormatError(f"{self.path}: rows do not share one column layout ({e})") from e
        except UnicodeDecodeError as e:
            raise FormatError(f"{self.path}: not a delimited text file ({e})") from e
        return {"epoch_rows": df.to_dict(orient="records")}


@dataclass
class StaticLabels:
    """Label events defined in code."""
    events: Sequence[Tuple[float, str]]

    def load(self) -> Workspace:
        return {"label_events": list(self.events)}


@dataclass
class StaticEpochs:
    """Epoch rows defined in code."""
    rows: Sequence[Mapping[str, Any]]

    def load(self) -> Workspace:
        return {"epoch_rows": [dict(row) for row in self.rows]}
