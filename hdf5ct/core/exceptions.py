from __future__ import annotations


class ConversionError(Exception):
    """Base error for all hdf5ct failures."""


# ---- Fatal errors (abort the run) ----
class ConfigError(ConversionError):
    """Raised when the run configuration is invalid or incomplete."""


class ResourceError(ConversionError):
    """Raised when the input container (or its decoding library) is unusable."""


# ---- Per-dataset errors (dataset skipped, run continues) ----
class SchemaError(ConversionError):
    """Raised when a dataset's layout is not a rank-1 {time, value} compound."""


class DecodeError(SchemaError):
    """Raised when a compound member or raw buffer cannot be decoded."""


# ---- Attribute delivery errors (disables that delivery path only) ----
class MetadataWriteError(ConversionError):
    """Raised when an attribute output file already exists."""
