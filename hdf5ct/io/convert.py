# hdf5ct/io/convert.py
from __future__ import annotations

from contextlib import closing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable
import logging
import time

from hdf5ct.core import (
    ConversionConfig,
    DecodeError,
    MetadataWriteError,
    SchemaError,
    TimeOrderedAggregator,
    decode_records,
    emit,
    inspect_schema,
)
from hdf5ct.io.attributes import FileAttributeWriter, SinkAttributeWriter
from hdf5ct.io.h5_reader import H5Reader
from hdf5ct.io.sink import CTFileSink, SinkFactory, check_sink_options


logger = logging.getLogger(__name__)


@dataclass
class ConversionReport:
    """Outcome of one conversion run."""

    file_name: str
    group_name: str = ""
    destination: Path | None = None
    datasets_converted: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)
    samples_decoded: int = 0
    records_emitted: int = 0
    times_emitted: int = 0
    samples_rejected: int = 0
    metadata_errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.metadata_errors


class _AttributeDelivery:
    """Wraps an attribute writer; the first MetadataWriteError disables it.

    Attributes are read lazily through `read`, and only while delivery is
    enabled. A read failure is recorded and skips that object only.
    """

    def __init__(self, writer, report: ConversionReport):
        self._writer = writer
        self._report = report
        self.enabled = True

    def deliver(self, method: str, *args, read: Callable[[], list]) -> None:
        if not self.enabled:
            return
        try:
            records = read()
        except DecodeError as e:
            logger.error("%s; attributes not written", e)
            self._report.metadata_errors.append(str(e))
            return
        try:
            getattr(self._writer, method)(*args, records)
        except MetadataWriteError as e:
            logger.error("%s; attribute output disabled for the rest of the run", e)
            self._report.metadata_errors.append(str(e))
            self.enabled = False


def destination_for(config: ConversionConfig, group_name: str) -> Path:
    """<output-root>/<input-file-name>/<parent-group-name>"""
    return config.output_root / config.file_name / group_name


def convert_file(
    config: ConversionConfig,
    *,
    sink_factory: SinkFactory = CTFileSink,
    clock: Callable[[], float] = time.time,
) -> ConversionReport:
    """Convert one HDF5 file into a time-ordered sink stream.

    Steps:
    1. open the container and locate the parent group
    2. deliver root and parent-group attributes
    3. per dataset: inspect schema (skip on failure), deliver attributes,
       decode, aggregate
    4. one emission pass over the aggregate into the data sink

    ConfigError / ResourceError propagate; per-dataset schema, decode and
    read errors are recorded in the report.
    """
    report = ConversionReport(file_name=config.file_name)

    # options the sink cannot honor are rejected before the file is touched
    check_sink_options(sink_factory, config.sink)

    def open_sink(destination: Path):
        return sink_factory(destination, config.sink)

    with H5Reader(config.input_path) as reader:
        report.group_name = reader.group_name
        file_root = config.output_root / config.file_name

        if config.attributes_to_file:
            writer = FileAttributeWriter(file_root, reader.group_name)
        else:
            writer = SinkAttributeWriter(open_sink, file_root, reader.group_name, clock)

        aggregator = TimeOrderedAggregator()
        # attribute sinks are released before the data pass starts
        with closing(writer):
            attributes = _AttributeDelivery(writer, report)
            attributes.deliver("write_root", config.file_name, read=reader.root_attributes)
            attributes.deliver("write_group", read=reader.group_attributes)

            for info in reader.list_datasets():
                try:
                    schema = inspect_schema(info.descriptor, name=info.path)
                except SchemaError as e:
                    logger.warning("Skipping dataset %s: %s", info.path, e)
                    report.skipped[info.name] = str(e)
                    continue

                attributes.deliver("write_dataset", info.name, read=info.attributes)

                try:
                    channel = decode_records(info.loader(), schema, info.name)
                except SchemaError as e:
                    logger.warning("Skipping dataset %s: %s", info.path, e)
                    report.skipped[info.name] = str(e)
                    continue

                report.samples_decoded += aggregator.extend(channel.samples())
                report.datasets_converted.append(info.name)

        destination = destination_for(config, report.group_name)
        report.destination = destination
        with closing(open_sink(destination)) as sink:
            stats = emit(aggregator, sink, config.base_time)

    report.records_emitted = stats.records_emitted
    report.times_emitted = stats.times_emitted
    report.samples_rejected = stats.samples_rejected

    logger.info(
        "%s: %d dataset(s) converted, %d skipped, %d record(s) at %d time(s) -> %s",
        config.file_name,
        len(report.datasets_converted),
        len(report.skipped),
        report.records_emitted,
        report.times_emitted,
        destination,
    )
    return report
