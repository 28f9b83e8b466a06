# hdf5ct/core/decoder.py
from __future__ import annotations

import numpy as np

from .channel import DecodedChannel
from .exceptions import DecodeError
from .schema import DatasetSchema


def record_dtype(schema: DatasetSchema) -> np.dtype:
    """
    Structured dtype that overlays the schema's two fields on one element.

    Both fields are read little-endian; unsigned fields go through the
    signed dtype of the same width (no range check).
    """
    return np.dtype(
        {
            "names": ["time", "value"],
            "formats": [
                schema.time.semantic_type.storage_dtype,
                schema.value.semantic_type.storage_dtype,
            ],
            "offsets": [schema.time.byte_offset, schema.value.byte_offset],
            "itemsize": schema.stride,
        }
    )


def decode_records(buffer: bytes, schema: DatasetSchema, channel_name: str) -> DecodedChannel:
    """Decode N fixed-stride compound elements into one DecodedChannel.

    Parameters
    ----------
    buffer:
        Raw contiguous bytes of the dataset, len(buffer) == N * schema.stride.
    schema:
        Validated layout from inspect_schema().
    channel_name:
        Leaf name of the dataset; used as the channel name of every sample.
    """
    view = memoryview(buffer).cast("B")
    if view.nbytes % schema.stride != 0:
        raise DecodeError(
            f"{channel_name}: buffer of {view.nbytes} bytes is not a multiple "
            f"of the {schema.stride}-byte element size."
        )

    dtype = record_dtype(schema)
    if view.nbytes == 0:
        records = np.zeros(0, dtype=dtype)
    else:
        records = np.frombuffer(view, dtype=dtype)
    value_dtype = schema.value.semantic_type.storage_dtype.newbyteorder("=")

    return DecodedChannel(
        name=channel_name,
        time=records["time"].astype(np.float64),
        values=records["value"].astype(value_dtype),
        value_type=schema.value.semantic_type,
    )
