# hdf5ct/core/aggregator.py
from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Iterator
import math

from .channel import DecodedSample


class TimeOrderedAggregator:
    """
    Holds every decoded sample of a file in (time, channel) order.

    Samples arrive grouped by channel (one dataset after another) and in
    any time order; they are kept in an ordered map from time to a bucket
    of samples sharing that exact time. Nothing is overwritten: duplicate
    times, within one channel or across channels, are all retained.

    Design goals:
    - order-independent: the same set of samples yields the same walk
      whatever order datasets were added in
    - complete: the whole file is buffered before anything is emitted
      (memory is O(total samples))

    Samples whose time is NaN or infinite cannot be placed in the order;
    they are kept aside in `unordered`.
    """

    def __init__(self) -> None:
        self._buckets: dict[float, list[DecodedSample]] = defaultdict(list)
        self._unordered: list[DecodedSample] = []
        self._count = 0
        # sorted views, rebuilt lazily after insertions
        self._times: list[float] | None = None
        self._sorted_buckets: set[float] = set()

    # ---- insertion ----
    def add(self, sample: DecodedSample) -> None:
        t = sample.time
        if not math.isfinite(t):
            self._unordered.append(sample)
        else:
            # -0.0 and 0.0 share a bucket
            key = t + 0.0
            if key not in self._buckets:
                self._times = None
            self._buckets[key].append(sample)
            self._sorted_buckets.discard(key)
        self._count += 1

    def extend(self, samples: Iterable[DecodedSample]) -> int:
        n = 0
        for sample in samples:
            self.add(sample)
            n += 1
        return n

    # ---- size ----
    def __len__(self) -> int:
        return self._count

    @property
    def unordered(self) -> list[DecodedSample]:
        return list(self._unordered)

    # ---- ordered access ----
    def times(self) -> list[float]:
        """Distinct finite times, ascending."""
        if self._times is None:
            self._times = sorted(self._buckets)
        return list(self._times)

    def bucket(self, time: float) -> list[DecodedSample]:
        """All samples recorded at exactly `time`, ordered by channel name.

        Samples of the same channel keep their arrival order.
        """
        key = time + 0.0
        if key not in self._buckets:
            return []
        if key not in self._sorted_buckets:
            self._buckets[key].sort(key=lambda s: s.channel)
            self._sorted_buckets.add(key)
        return list(self._buckets[key])

    def keys(self) -> Iterator[float]:
        """One time per stored (finite-time) sample, ascending, duplicates repeated."""
        for t in self.times():
            for _ in range(len(self._buckets[t])):
                yield t

    def __iter__(self) -> Iterator[DecodedSample]:
        for t in self.times():
            yield from self.bucket(t)
