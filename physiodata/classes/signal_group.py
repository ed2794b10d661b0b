from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from physiodata.classes.errors import ValidationError


# -----------------------------
# 1) Data model (uniform signals + sparse labels)
# -----------------------------

LABEL_CHANNEL_NAME = "Labels"
LABEL_CHANNEL_UNIT = "-"


@dataclass(frozen=True)
class ChannelSpec:
    """Name, unit and description of one raw column."""
    name: str
    unit: str
    description: str = ""

    @classmethod
    def parse(cls, text: str) -> "ChannelSpec":
        """Parse 'NAME:UNIT[:DESCRIPTION]'."""
        parts = text.split(":", 2)
        if len(parts) < 2 or not parts[0]:
            raise ValueError(f"Channel must look like NAME:UNIT[:DESCRIPTION], got {text!r}")
        name, unit = parts[0], parts[1]
        description = parts[2] if len(parts) == 3 else f"{name} data"
        return cls(name=name, unit=unit, description=description)


@dataclass(frozen=True)
class SignalGroup:
    """Channels sampled at one shared rate."""
    channels: Tuple[np.ndarray, ...]          # each (M,)
    channel_names: Tuple[str, ...]
    channel_units: Tuple[str, ...]
    channel_descriptions: Tuple[str, ...]
    fs: float                                 # Hz

    def __post_init__(self):
        n = len(self.channels)
        if n == 0:
            raise ValidationError("Signal group needs at least one channel")
        for field_name in ("channel_names", "channel_units", "channel_descriptions"):
            if len(getattr(self, field_name)) != n:
                raise ValidationError(
                    f"{field_name} has {len(getattr(self, field_name))} entries for {n} channels"
                )

        try:
            channels = tuple(np.asarray(x, dtype=float).reshape(-1) for x in self.channels)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Channel samples must be numeric: {e}") from e
        n_samples = len(channels[0])
        for name, x in zip(self.channel_names, channels):
            if len(x) != n_samples:
                raise ValidationError(
                    f"Channel '{name}' has {len(x)} samples, expected {n_samples}"
                )
        object.__setattr__(self, "channels", channels)

        try:
            fs = float(self.fs)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Sampling frequency must be a number, got {self.fs!r}") from e
        if not np.isfinite(fs) or fs <= 0:
            raise ValidationError(f"Sampling frequency must be > 0 Hz, got {self.fs}")
        object.__setattr__(self, "fs", fs)

    @property
    def n_samples(self) -> int:
        return len(self.channels[0])

    @property
    def duration_s(self) -> float:
        return self.n_samples / self.fs

    def time_axis(self) -> np.ndarray:
        return np.arange(self.n_samples) / self.fs


@dataclass(frozen=True)
class LabelGroup:
    """Events at explicit timestamps, one value per label-channel."""
    t: np.ndarray                             # (K,) seconds
    channels: Tuple[Tuple[str, ...], ...]     # each length K
    channel_names: Tuple[str, ...] = (LABEL_CHANNEL_NAME,)
    channel_units: Tuple[str, ...] = (LABEL_CHANNEL_UNIT,)

    def __post_init__(self):
        try:
            t = np.asarray(self.t, dtype=float).reshape(-1)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Label timestamps must be numeric: {e}") from e
        if not np.all(np.isfinite(t)):
            bad = int(np.flatnonzero(~np.isfinite(t))[0])
            raise ValidationError(f"Label timestamp at index {bad} is not a finite number")
        object.__setattr__(self, "t", t)

        if len(self.channels) == 0:
            raise ValidationError("Label group needs at least one label-channel")
        if len(self.channel_names) != len(self.channels) or len(self.channel_units) != len(self.channels):
            raise ValidationError(
                f"{len(self.channels)} label-channels but {len(self.channel_names)} names "
                f"and {len(self.channel_units)} units"
            )

        channels = tuple(tuple(values) for values in self.channels)
        for name, values in zip(self.channel_names, channels):
            if len(values) != len(t):
                raise ValidationError(
                    f"Label-channel '{name}' has {len(values)} values for {len(t)} timestamps"
                )
        object.__setattr__(self, "channels", channels)

    def __len__(self) -> int:
        return len(self.t)

    @property
    def is_sorted(self) -> bool:
        return bool(np.all(np.diff(self.t) >= 0))

    def events(self, channel: int = 0):
        """Yield (t, value) pairs of one label-channel in stored order."""
        for t, value in zip(self.t, self.channels[channel]):
            yield float(t), value
