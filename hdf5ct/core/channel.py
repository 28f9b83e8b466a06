# core/channel.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

import numpy as np

from .exceptions import DecodeError
from .values import NumericValue, SemanticType, numeric_value


@dataclass(frozen=True, slots=True)
class DecodedSample:
    """One (time, value) element of one channel."""

    channel: str
    time: float
    value: NumericValue


@dataclass(frozen=True, slots=True)
class DecodedChannel:
    """
    All decoded elements of one dataset, in file order.

    time is always float64; values keep the storage dtype of value_type.
    Time ordering is not required: the aggregator sorts later.
    """
    name: str
    time: np.ndarray = field(repr=False)
    values: np.ndarray = field(repr=False)
    value_type: SemanticType = SemanticType.FLOAT64

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise DecodeError("DecodedChannel.name must be a non-empty string.")

        t = np.asarray(self.time, dtype=np.float64)
        v = np.asarray(self.values)

        if t.ndim != 1:
            raise DecodeError(f"`time` must be 1D, got shape {t.shape}")
        if v.ndim != 1:
            raise DecodeError(f"`values` must be 1D, got shape {v.shape}")
        if t.size != v.size:
            raise DecodeError(
                f"`time` and `values` must have same length, got {t.size} vs {v.size}"
            )

        object.__setattr__(self, "time", t)
        object.__setattr__(self, "values", v)

    @property
    def n(self) -> int:
        return int(self.time.size)

    def __len__(self) -> int:
        return self.n

    def samples(self) -> Iterator[DecodedSample]:
        kind = self.value_type
        for t, v in zip(self.time.tolist(), self.values):
            yield DecodedSample(channel=self.name, time=t, value=numeric_value(kind, v))
