# hdf5ct/core/values.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

import numpy as np


TEXT_SUFFIX = "txt"


class SemanticType(str, Enum):
    """The fixed-width numeric classifications a compound field can have."""

    FLOAT64 = "float64"
    FLOAT32 = "float32"
    INT64 = "int64"
    UINT64 = "uint64"
    INT32 = "int32"
    UINT32 = "uint32"
    INT16 = "int16"
    UINT16 = "uint16"

    @property
    def is_float(self) -> bool:
        return self in (SemanticType.FLOAT64, SemanticType.FLOAT32)

    @property
    def is_unsigned(self) -> bool:
        return self in (SemanticType.UINT64, SemanticType.UINT32, SemanticType.UINT16)

    @property
    def size(self) -> int:
        return _LAYOUT[self][0]

    @property
    def storage_dtype(self) -> np.dtype:
        """Little-endian dtype used to read the field.

        Unsigned types are read through the signed dtype of the same width,
        so values with the top bit set come out negative.
        """
        return np.dtype(_LAYOUT[self][1])

    @property
    def sink_suffix(self) -> str:
        return _LAYOUT[self][2]


# semantic type -> (byte size, storage dtype, sink suffix)
_LAYOUT: dict[SemanticType, tuple[int, str, str]] = {
    SemanticType.FLOAT64: (8, "<f8", "f64"),
    SemanticType.FLOAT32: (4, "<f4", "f32"),
    SemanticType.INT64: (8, "<i8", "i64"),
    SemanticType.UINT64: (8, "<i8", "i64"),
    SemanticType.INT32: (4, "<i4", "i32"),
    SemanticType.UINT32: (4, "<i4", "i32"),
    SemanticType.INT16: (2, "<i2", "i16"),
    SemanticType.UINT16: (2, "<i2", "i16"),
}


@dataclass(frozen=True, slots=True)
class NumericValue:
    """A decoded number together with the semantic type it was read as."""

    kind: SemanticType
    payload: int | float

    @property
    def suffix(self) -> str:
        return self.kind.sink_suffix

    def to_bytes(self) -> bytes:
        return np.asarray(self.payload, dtype=self.kind.storage_dtype).tobytes()


@dataclass(frozen=True, slots=True)
class TextValue:
    """A string payload, used for attribute channels."""

    text: str

    @property
    def suffix(self) -> str:
        return TEXT_SUFFIX

    def to_bytes(self) -> bytes:
        return self.text.encode("utf-8")


Value = Union[NumericValue, TextValue]


def numeric_value(kind: SemanticType, raw) -> NumericValue:
    """Wrap a raw numpy scalar as a plain-Python NumericValue."""
    payload = float(raw) if kind.is_float else int(raw)
    return NumericValue(kind=kind, payload=payload)
