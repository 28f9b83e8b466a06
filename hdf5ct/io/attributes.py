from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable
import logging

from hdf5ct.core.exceptions import MetadataWriteError
from hdf5ct.core.metadata import AttributeRecord, render_attributes_json
from hdf5ct.core.values import TEXT_SUFFIX, TextValue
from hdf5ct.io.sink import TimeSeriesSink


logger = logging.getLogger(__name__)

ATTRIBUTES_FOLDER = "_Attributes"


def attribute_channel(object_name: str) -> str:
    return f"{object_name}.{TEXT_SUFFIX}"


class SinkAttributeWriter:
    """
    Delivers attribute JSON as text channels through output sinks.

    - root attributes      -> <file_root>/_Attributes, channel "<file>.txt"
    - group and datasets   -> <file_root>/<group>/_Attributes,
                              channels "<group>.txt" and "<dataset>.txt"

    Every payload is written at the time returned by `clock`.
    """

    def __init__(
        self,
        open_sink: Callable[[Path], TimeSeriesSink],
        file_root: Path,
        group_name: str,
        clock: Callable[[], float],
    ):
        self._open_sink = open_sink
        self._file_root = Path(file_root)
        self._group_name = group_name
        self._clock = clock
        self._group_sink: TimeSeriesSink | None = None

    def write_root(self, file_name: str, records: Iterable[AttributeRecord]) -> None:
        sink = self._open_sink(self._file_root / ATTRIBUTES_FOLDER)
        try:
            self._put(sink, attribute_channel(file_name), records)
        finally:
            sink.close()

    def write_group(self, records: Iterable[AttributeRecord]) -> None:
        self._put(self._ensure_group_sink(), attribute_channel(self._group_name), records)

    def write_dataset(self, dataset_name: str, records: Iterable[AttributeRecord]) -> None:
        self._put(self._ensure_group_sink(), attribute_channel(dataset_name), records)

    def close(self) -> None:
        if self._group_sink is not None:
            sink, self._group_sink = self._group_sink, None
            sink.close()

    def _ensure_group_sink(self) -> TimeSeriesSink:
        if self._group_sink is None:
            self._group_sink = self._open_sink(
                self._file_root / self._group_name / ATTRIBUTES_FOLDER
            )
        return self._group_sink

    def _put(self, sink: TimeSeriesSink, channel: str, records: Iterable[AttributeRecord]) -> None:
        text = render_attributes_json(records)
        logger.debug("%s %s", channel, text)
        sink.set_time(self._clock())
        sink.put(channel, TextValue(text))


class FileAttributeWriter:
    """
    Delivers attribute JSON as plain files under the output tree.

    - root attributes -> <file_root>/<file>.txt
    - group           -> <file_root>/<group>/<group>.txt
    - datasets        -> <file_root>/<group>/_Attributes/<dataset>.txt

    Existing files are never overwritten: MetadataWriteError is raised.
    """

    def __init__(self, file_root: Path, group_name: str):
        self._file_root = Path(file_root)
        self._group_name = group_name

    def write_root(self, file_name: str, records: Iterable[AttributeRecord]) -> None:
        self._write(self._file_root / attribute_channel(file_name), records)

    def write_group(self, records: Iterable[AttributeRecord]) -> None:
        group_dir = self._file_root / self._group_name
        self._write(group_dir / attribute_channel(self._group_name), records)

    def write_dataset(self, dataset_name: str, records: Iterable[AttributeRecord]) -> None:
        target = self._file_root / self._group_name / ATTRIBUTES_FOLDER / attribute_channel(dataset_name)
        self._write(target, records)

    def close(self) -> None:
        pass

    def _write(self, target: Path, records: Iterable[AttributeRecord]) -> None:
        if target.exists():
            raise MetadataWriteError(f"The given attributes output file already exists: {target}")
        text = render_attributes_json(records)
        logger.debug("%s %s", target, text)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
