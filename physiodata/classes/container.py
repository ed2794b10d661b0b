from __future__ import annotations

import getpass
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from physiodata.classes.epochs import EpochTable
from physiodata.classes.signal_group import LabelGroup, SignalGroup

# Layout of MATLAB's datestr(now)
CREATION_DATE_FORMAT = "%d-%b-%Y %H:%M:%S"


def current_user() -> str:
    """Account name of the invoking user, or '' when it cannot be determined."""
    for var in ("USERNAME", "USER"):
        name = os.environ.get(var)
        if name:
            return name
    try:
        return getpass.getuser()
    except (KeyError, OSError, ImportError):
        return ""


@dataclass(frozen=True)
class ProvenanceInfo:
    """Advisory metadata stored under physioDataInfo."""
    raw_data_source: str = ""
    creation_date: str = ""
    creation_user: str = ""

    @classmethod
    def create(
        cls,
        raw_data_source: Union[str, Path],
        created: datetime,
        user: Optional[str] = None,
    ) -> "ProvenanceInfo":
        return cls(
            raw_data_source=str(raw_data_source),
            creation_date=created.strftime(CREATION_DATE_FORMAT),
            creation_user=user or "",
        )


@dataclass(frozen=True, eq=False)
class PhysioContainer:
    """Everything that goes into one .physioData file."""
    signals: SignalGroup
    labels: LabelGroup
    epochs: EpochTable
    info: ProvenanceInfo
