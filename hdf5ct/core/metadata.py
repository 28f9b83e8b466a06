# hdf5ct/core/metadata.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable
import json

import numpy as np

from .exceptions import ConversionError


ATTRIBUTE_TYPE_TAGS = (
    "INTEGER",
    "FLOAT",
    "CHAR",
    "STRING",
    "BITFIELD",
    "OPAQUE",
    "COMPOUND",
    "REFERENCE",
    "ENUM",
    "VLEN",
    "ARRAY",
    "TIME",
    "UNKNOWN",
)


@dataclass(frozen=True, slots=True)
class AttributeRecord:
    """
    One metadata attribute of a container object.

    - name: attribute name
    - value: stringified value (arrays flattened and comma-joined)
    - type_tag: HDF5 type class, one of ATTRIBUTE_TYPE_TAGS
    """
    name: str
    value: str
    type_tag: str = "UNKNOWN"

    def __post_init__(self) -> None:
        if self.type_tag not in ATTRIBUTE_TYPE_TAGS:
            raise ConversionError(f"Unknown attribute type tag '{self.type_tag}'.")

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value, "type": self.type_tag}


def _scalar_to_str(x: Any) -> str:
    if isinstance(x, (bytes, np.bytes_)):
        return bytes(x).decode("utf-8", errors="replace")
    if isinstance(x, np.generic):
        x = x.item()
        if isinstance(x, bytes):
            return x.decode("utf-8", errors="replace")
    return str(x)


def stringify_attribute_value(value: Any, sep: str = ",") -> str:
    """Render an attribute value as text, whatever its rank or shape."""
    if isinstance(value, (str, bytes, np.bytes_)):
        return _scalar_to_str(value)
    arr = np.asarray(value, dtype=object) if isinstance(value, (list, tuple)) else value
    if isinstance(arr, np.ndarray):
        if arr.ndim == 0:
            return _scalar_to_str(arr[()])
        return sep.join(_scalar_to_str(x) for x in arr.ravel().tolist())
    return _scalar_to_str(value)


def render_attributes_json(records: Iterable[AttributeRecord]) -> str:
    """JSON array of {"name", "value", "type"} objects, compact."""
    return json.dumps([r.to_dict() for r in records], separators=(",", ":"))
