"""
Output sinks: where time-ordered records end up.

A sink is bound to one destination folder and receives, in ascending
time order:

    sink.set_time(t)            # once per distinct output time
    sink.put("chan.f64", v)     # every payload recorded at t

CTFileSink lays the data out as a CloudTurbine-style folder tree:

    <dest>/<block>/<offset>/<channel>        (unpacked)
    <dest>/<block>/<channel>                 (packed)
    <dest>/<block>.zip                       (compress: same entries, zipped)

<block> is the block start time and <offset> the point time relative to
it, both integers in milliseconds (microseconds with hi_res_time).
"""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path
from typing import Protocol, runtime_checkable
import gzip
import logging
import zipfile

from hdf5ct.core.config import SinkOptions
from hdf5ct.core.exceptions import ConfigError
from hdf5ct.core.values import Value


logger = logging.getLogger(__name__)


@runtime_checkable
class TimeSeriesSink(Protocol):
    """Minimal contract for output sinks."""

    def set_time(self, t: float) -> None:
        ...

    def put(self, channel: str, value: Value) -> None:
        ...

    def close(self) -> None:
        ...


class SinkFactory(Protocol):
    """Opens a sink for a destination.

    A factory may also expose ``check_options(options)``, raising
    ConfigError for options it cannot honor; it is run before the
    input file is opened.
    """

    def __call__(self, destination: Path, options: SinkOptions) -> TimeSeriesSink:
        ...


def check_sink_options(sink_factory: SinkFactory, options: SinkOptions) -> None:
    check = getattr(sink_factory, "check_options", None)
    if check is not None:
        check(options)


class CTFileSink:
    """Local CloudTurbine-style writer honoring SinkOptions.

    Encryption is not supported: a password raises ConfigError.
    """

    def __init__(self, destination: str | Path, options: SinkOptions | None = None):
        self.destination = Path(destination)
        self.options = options if options is not None else SinkOptions()
        self.check_options(self.options)

        self._scale = 1_000_000 if self.options.hi_res_time else 1_000
        self._block_span = max(1, int(round(self.options.flush_interval * self._scale)))

        self._time: int | None = None
        self._block_start: int | None = None
        # (offset, channel, payload), in put order
        self._entries: list[tuple[int, str, bytes]] = []
        self._closed = False
        self.blocks_written = 0

    @staticmethod
    def check_options(options: SinkOptions) -> None:
        """Reject options this writer cannot honor, before anything is opened."""
        if options.password is not None:
            raise ConfigError("CTFileSink does not support encrypted output.")

    # ---- context manager ----
    def __enter__(self) -> "CTFileSink":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ---- sink protocol ----
    def set_time(self, t: float) -> None:
        self._check_open()
        ticks = int(round(t * self._scale))
        if self._block_start is not None and ticks >= self._block_start + self._block_span:
            self.flush()
        if self._block_start is None:
            self._block_start = ticks
        self._time = ticks

    def put(self, channel: str, value: Value) -> None:
        self._check_open()
        if self._time is None:
            raise RuntimeError("CTFileSink.put() called before set_time().")
        self._entries.append((self._time - self._block_start, channel, value.to_bytes()))

    def flush(self) -> None:
        """Write the current block (if any) and start a new one."""
        if self._entries:
            self._write_block(self._block_start, self._entries)
            self.blocks_written += 1
        self._entries = []
        self._block_start = None

    def close(self) -> None:
        if self._closed:
            return
        try:
            self.flush()
        finally:
            self._closed = True

    # ---- internals ----
    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("CTFileSink is closed.")

    def _block_files(self, entries: list[tuple[int, str, bytes]]) -> dict[str, bytes]:
        """Relative path -> content for one block."""
        files: dict[str, bytes]
        if self.options.pack:
            packed: dict[str, bytearray] = defaultdict(bytearray)
            for _, channel, payload in entries:
                packed[channel] += payload
            files = {channel: bytes(data) for channel, data in packed.items()}
        else:
            files = {}
            for offset, channel, payload in entries:
                files[f"{offset}/{channel}"] = payload

        if self.options.gzip:
            files = {f"{path}.gz": gzip.compress(data) for path, data in files.items()}
        return files

    def _write_block(self, block_start: int, entries: list[tuple[int, str, bytes]]) -> None:
        files = self._block_files(entries)
        self.destination.mkdir(parents=True, exist_ok=True)

        if self.options.compress:
            zip_path = self.destination / f"{block_start}.zip"
            with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for rel, data in files.items():
                    zf.writestr(f"{block_start}/{rel}", data)
            logger.debug("Wrote block %s (%d entries)", zip_path, len(files))
            return

        block_dir = self.destination / str(block_start)
        for rel, data in files.items():
            target = block_dir / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        logger.debug("Wrote block %s (%d entries)", block_dir, len(files))
