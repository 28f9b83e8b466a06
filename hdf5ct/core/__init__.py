"""
Core reorganization engine for hdf5ct.

This module defines the container-agnostic pipeline:
- SchemaInspector: validate a dataset's {time, value} compound layout
- RecordDecoder: decode fixed-stride compound bytes into typed samples
- TimeOrderedAggregator: buffer all samples in (time, channel) order
- OutputEmitter: walk the aggregate once, grouping samples per time

The core layer is independent from h5py and from the output sink.
"""

from .values import SemanticType, NumericValue, TextValue, Value, TEXT_SUFFIX
from .schema import (
    MemberDescriptor,
    CompoundDescriptor,
    FieldSpec,
    DatasetSchema,
    classify_member,
    inspect_schema,
)
from .channel import DecodedSample, DecodedChannel
from .decoder import decode_records, record_dtype
from .aggregator import TimeOrderedAggregator
from .emitter import OutputRecord, EmitStats, emit, iter_time_groups, output_records
from .metadata import (
    AttributeRecord,
    ATTRIBUTE_TYPE_TAGS,
    stringify_attribute_value,
    render_attributes_json,
)
from .config import SinkOptions, ConversionConfig
from .exceptions import (
    ConversionError,
    ConfigError,
    ResourceError,
    SchemaError,
    DecodeError,
    MetadataWriteError,
)


__all__ = [
    # values
    "SemanticType",
    "NumericValue",
    "TextValue",
    "Value",
    "TEXT_SUFFIX",

    # schema inspection
    "MemberDescriptor",
    "CompoundDescriptor",
    "FieldSpec",
    "DatasetSchema",
    "classify_member",
    "inspect_schema",

    # decoding
    "DecodedSample",
    "DecodedChannel",
    "decode_records",
    "record_dtype",

    # aggregation / emission
    "TimeOrderedAggregator",
    "OutputRecord",
    "EmitStats",
    "emit",
    "iter_time_groups",
    "output_records",

    # metadata
    "AttributeRecord",
    "ATTRIBUTE_TYPE_TAGS",
    "stringify_attribute_value",
    "render_attributes_json",

    # configuration
    "SinkOptions",
    "ConversionConfig",

    # exceptions
    "ConversionError",
    "ConfigError",
    "ResourceError",
    "SchemaError",
    "DecodeError",
    "MetadataWriteError",
]
