# hdf5ct/core/emitter.py
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator
import logging

from .aggregator import TimeOrderedAggregator
from .channel import DecodedSample
from .values import Value

if TYPE_CHECKING:
    from hdf5ct.io.sink import TimeSeriesSink


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OutputRecord:
    output_time: float
    channel: str
    payload: Value


@dataclass(slots=True)
class EmitStats:
    records_emitted: int = 0
    times_emitted: int = 0
    samples_rejected: int = 0


def sink_channel_name(sample: DecodedSample) -> str:
    return f"{sample.channel}.{sample.value.suffix}"


def iter_time_groups(
    index: TimeOrderedAggregator,
    stats: EmitStats | None = None,
) -> Iterator[tuple[float, list[DecodedSample]]]:
    """
    Walk the aggregate once, yielding (time, bucket) per distinct valid time.

    The walk goes over one key per stored sample; keys equal to the one
    just handled are skipped, negative keys are logged and never yielded.
    Buckets come back ordered by channel name.
    """
    stats = stats if stats is not None else EmitStats()

    for sample in index.unordered:
        logger.warning("Skipping non-finite timestamp %r (channel %s)", sample.time, sample.channel)
        stats.samples_rejected += 1

    prev_time: float | None = None
    for t in index.keys():
        if t == prev_time:
            continue
        prev_time = t

        if t < 0:
            n = len(index.bucket(t))
            logger.warning("Skipping negative timestamp %r (%d sample(s))", t, n)
            stats.samples_rejected += n
            continue

        yield t, index.bucket(t)


def output_records(
    index: TimeOrderedAggregator,
    base_time: float,
    stats: EmitStats | None = None,
) -> Iterator[OutputRecord]:
    """Flatten the time groups into OutputRecords (outputTime = base_time + t)."""
    stats = stats if stats is not None else EmitStats()
    for t, bucket in iter_time_groups(index, stats):
        out_time = base_time + t
        stats.times_emitted += 1
        for sample in bucket:
            stats.records_emitted += 1
            yield OutputRecord(
                output_time=out_time,
                channel=sink_channel_name(sample),
                payload=sample.value,
            )


def emit(index: TimeOrderedAggregator, sink: "TimeSeriesSink", base_time: float) -> EmitStats:
    """Drive the sink: one set_time per distinct time, then every payload at that time."""
    stats = EmitStats()
    current: float | None = None
    for record in output_records(index, base_time, stats):
        if record.output_time != current:
            current = record.output_time
            sink.set_time(current)
        sink.put(record.channel, record.payload)
    return stats
