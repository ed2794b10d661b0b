from __future__ import annotations

import numbers
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from physiodata.classes.errors import SchemaError, ValidationError

REQUIRED_COLUMNS: Tuple[str, ...] = ("epochName", "startTime", "endTime")

# Column names end up as MATLAB struct field names
_FIELD_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_]{0,62}$")

TEXT = "text"
NUMERIC = "numeric"


def _value_kind(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return TEXT
    if isinstance(value, numbers.Real):
        return NUMERIC
    return None


def _column_kind(name: str, values: pd.Series) -> Optional[str]:
    """Return TEXT or NUMERIC for a uniform column, None when it is empty."""
    kinds = set()
    for i, value in enumerate(values):
        kind = _value_kind(value)
        if kind is None:
            raise SchemaError(f"Epoch column '{name}' row {i}: unsupported value {value!r}")
        kinds.add(kind)
    if len(kinds) > 1:
        raise SchemaError(f"Epoch column '{name}' mixes text and numeric values")
    return kinds.pop() if kinds else None


def _is_finite_number(value: Any) -> bool:
    return _value_kind(value) == NUMERIC and bool(np.isfinite(value))


@dataclass(frozen=True, eq=False)
class EpochTable:
    """Pre-defined analysis windows, one row per epoch, in display order."""
    data: pd.DataFrame
    column_kinds: Dict[str, Optional[str]] = field(init=False, repr=False)

    def __post_init__(self):
        df = self.data
        if df.columns.duplicated().any():
            dupes = sorted(set(df.columns[df.columns.duplicated()]))
            raise SchemaError(f"Duplicate epoch columns: {dupes}")
        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise SchemaError(f"Epoch table is missing required columns: {missing}")
        for col in df.columns:
            if not isinstance(col, str) or not _FIELD_NAME.match(col):
                raise SchemaError(
                    f"Epoch column name {col!r} must start with a letter and contain only "
                    "letters, digits and underscores (max 63 characters)"
                )

        for i, (name, start, end) in enumerate(zip(df["epochName"], df["startTime"], df["endTime"])):
            if not (_is_finite_number(start) and _is_finite_number(end)):
                raise ValidationError(
                    f"Epoch row {i} ({name!r}): startTime and endTime must be finite numbers, "
                    f"got {start!r} and {end!r}"
                )
            if end < start:
                raise ValidationError(
                    f"Epoch row {i} ({name!r}): endTime {end} is before startTime {start}"
                )

        kinds = {col: _column_kind(col, df[col]) for col in df.columns}
        if kinds["epochName"] not in (TEXT, None):
            raise SchemaError("Epoch column 'epochName' must hold text")

        frame = df.reset_index(drop=True).copy()
        frame["startTime"] = frame["startTime"].astype(float)
        frame["endTime"] = frame["endTime"].astype(float)
        object.__setattr__(self, "data", frame)
        object.__setattr__(self, "column_kinds", kinds)

    @classmethod
    def empty(cls) -> "EpochTable":
        return cls(pd.DataFrame(columns=list(REQUIRED_COLUMNS)))

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(self.data.columns)

    def __len__(self) -> int:
        return len(self.data)

    def rows(self) -> List[Dict[str, Any]]:
        return self.data.to_dict(orient="records")
