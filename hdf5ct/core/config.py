# hdf5ct/core/config.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
import math

from .exceptions import ConfigError


DEFAULT_FLUSH_INTERVAL = 1.0
# Jan 1, 2017 00:00:00 GMT-5, in seconds since epoch
DEFAULT_BASE_TIME = 1483246800.0
DEFAULT_OUTPUT_ROOT = "CTdata"


def _as_float(name: str, value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}.") from None
    if not math.isfinite(number):
        raise ConfigError(f"{name} must be a finite number, got {value!r}.")
    return number


@dataclass(frozen=True, slots=True)
class SinkOptions:
    """
    Settings handed through to the output sink.

    - flush_interval: seconds of output time per committed block (> 0)
    - compress: ZIP each block
    - gzip: additionally gzip each entry (requires compress)
    - pack: one entry per channel per block instead of one per time
    - hi_res_time: microsecond instead of millisecond time markers
    - password: encryption key, or None
    """
    flush_interval: float = DEFAULT_FLUSH_INTERVAL
    compress: bool = True
    gzip: bool = False
    pack: bool = False
    hi_res_time: bool = False
    password: str | None = None

    def __post_init__(self) -> None:
        flush = _as_float("Flush interval", self.flush_interval)
        if not flush > 0.0:
            raise ConfigError("Flush interval must be greater than 0.0")
        if self.gzip and not self.compress:
            raise ConfigError("ZIP output cannot be turned off when GZIP is turned on.")
        if self.password is not None and not self.password:
            raise ConfigError("Encryption password must not be empty.")
        object.__setattr__(self, "flush_interval", flush)


@dataclass(frozen=True, slots=True)
class ConversionConfig:
    """Immutable run configuration, validated before any container access."""
    input_path: Path
    output_root: Path = Path(DEFAULT_OUTPUT_ROOT)
    base_time: float = DEFAULT_BASE_TIME
    attributes_to_file: bool = False
    sink: SinkOptions = field(default_factory=SinkOptions)

    def __post_init__(self) -> None:
        if self.input_path is None or not str(self.input_path).strip():
            raise ConfigError("An input HDF5 file must be specified.")
        input_path = Path(self.input_path)
        if not input_path.exists():
            raise ConfigError(f'The given input file, "{input_path}" does not exist.')

        base_time = _as_float("Base time", self.base_time)
        if not base_time >= 0.0:
            raise ConfigError("Base time must be greater than or equal to 0.0")

        if not isinstance(self.sink, SinkOptions):
            raise ConfigError("ConversionConfig.sink must be a SinkOptions instance.")

        object.__setattr__(self, "input_path", input_path)
        object.__setattr__(self, "output_root", Path(self.output_root))
        object.__setattr__(self, "base_time", base_time)

    @property
    def file_name(self) -> str:
        return self.input_path.name
