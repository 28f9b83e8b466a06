import numpy as np
import pytest

from hdf5ct.core import SemanticType, NumericValue, TextValue, TEXT_SUFFIX


@pytest.mark.parametrize(
    "kind, suffix, size",
    [
        (SemanticType.FLOAT64, "f64", 8),
        (SemanticType.FLOAT32, "f32", 4),
        (SemanticType.INT64, "i64", 8),
        (SemanticType.UINT64, "i64", 8),
        (SemanticType.INT32, "i32", 4),
        (SemanticType.UINT32, "i32", 4),
        (SemanticType.INT16, "i16", 2),
        (SemanticType.UINT16, "i16", 2),
    ],
)
def test_suffix_and_size(kind, suffix, size):
    assert kind.sink_suffix == suffix
    assert kind.size == size
    assert kind.storage_dtype.itemsize == size


def test_unsigned_types_are_stored_signed():
    assert SemanticType.UINT32.storage_dtype == np.dtype("<i4")
    assert SemanticType.UINT32.is_unsigned
    assert not SemanticType.INT32.is_unsigned


def test_numeric_value_to_bytes_little_endian():
    assert NumericValue(SemanticType.INT16, 1).to_bytes() == b"\x01\x00"
    assert NumericValue(SemanticType.FLOAT64, 1.5).to_bytes() == np.float64(1.5).astype("<f8").tobytes()


def test_text_value():
    v = TextValue("[]")
    assert v.suffix == TEXT_SUFFIX == "txt"
    assert v.to_bytes() == b"[]"
