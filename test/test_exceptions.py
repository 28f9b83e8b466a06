import pytest

from hdf5ct.core import (
    ConversionError,
    ConfigError,
    ResourceError,
    SchemaError,
    DecodeError,
    MetadataWriteError,
)


def test_exception_inheritance_fatal():
    assert issubclass(ConfigError, ConversionError)
    assert issubclass(ResourceError, ConversionError)


def test_exception_inheritance_skip_classes():
    assert issubclass(SchemaError, ConversionError)
    assert issubclass(DecodeError, SchemaError)
    assert issubclass(MetadataWriteError, ConversionError)
    assert not issubclass(MetadataWriteError, SchemaError)


def test_decode_errors_are_caught_as_schema_errors():
    with pytest.raises(SchemaError):
        raise DecodeError("unsigned FLOAT of size 2")
