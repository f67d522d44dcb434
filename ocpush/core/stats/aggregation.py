"""Aggregation state.

One state class per aggregation kind. Each class carries its kind so
consumers dispatch on ``data.kind`` instead of inspecting types.
"""

from __future__ import annotations

import bisect
import copy
import math
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

from ocpush.core.stats.measure import Number
from ocpush.core.stats.view import Aggregation, AggregationKind


@dataclass
class CountData:
    """Number of recorded values."""
    kind: ClassVar[AggregationKind] = AggregationKind.COUNT
    value: int = 0

    def add(self, value: Number) -> None:
        self.value += 1

    def copy(self) -> "CountData":
        return CountData(self.value)


@dataclass
class SumData:
    """Running sum of recorded values."""
    kind: ClassVar[AggregationKind] = AggregationKind.SUM
    value: Number = 0

    def add(self, value: Number) -> None:
        self.value += value

    def copy(self) -> "SumData":
        return SumData(self.value)


@dataclass
class LastValueData:
    """Most recently recorded value."""
    kind: ClassVar[AggregationKind] = AggregationKind.LAST_VALUE
    value: Number = 0

    def add(self, value: Number) -> None:
        self.value = value

    def copy(self) -> "LastValueData":
        return LastValueData(self.value)


@dataclass
class DistributionData:
    """Bucketed distribution of recorded values.

    ``counts_per_bucket`` has one slot per bound plus an overflow slot for
    values above the highest bound. A value lands in the first bucket whose
    bound is >= the value. NaN values are rejected, so the meter drops
    them with a warning.
    """
    kind: ClassVar[AggregationKind] = AggregationKind.DISTRIBUTION
    bounds: Tuple[float, ...] = ()
    counts_per_bucket: List[int] = field(default_factory=list)
    count: int = 0
    sum: float = 0.0
    min: float = math.inf
    max: float = -math.inf

    def __post_init__(self):
        if not self.counts_per_bucket:
            self.counts_per_bucket = [0] * (len(self.bounds) + 1)

    def bucket_index(self, value: Number) -> int:
        return bisect.bisect_left(self.bounds, value)

    def add(self, value: Number) -> None:
        """Count a value.

        Raises:
            ValueError: the value is NaN, which has no bucket.
            TypeError: the value is not a number.
        """
        if isinstance(value, float) and math.isnan(value):
            raise ValueError("NaN cannot be placed in a distribution bucket")
        # resolve everything that can fail before touching the state
        index = self.bucket_index(value)
        total = self.sum + value
        self.counts_per_bucket[index] += 1
        self.count += 1
        self.sum = total
        if value < self.min:
            self.min = value
        if value > self.max:
            self.max = value

    @property
    def mean(self) -> float:
        return self.sum / self.count if self.count else 0.0

    def cumulative_counts(self) -> List[int]:
        """Counts of values <= each bound, one entry per bound."""
        running = 0
        cumulative = []
        for bucket_count in self.counts_per_bucket[:len(self.bounds)]:
            running += bucket_count
            cumulative.append(running)
        return cumulative

    def copy(self) -> "DistributionData":
        return DistributionData(
            bounds=self.bounds,
            counts_per_bucket=list(self.counts_per_bucket),
            count=self.count,
            sum=self.sum,
            min=self.min,
            max=self.max,
        )


AggregationData = Union[CountData, SumData, LastValueData, DistributionData]


def new_aggregation_data(aggregation: Aggregation) -> AggregationData:
    """Create the empty state for an aggregation."""
    kind = aggregation.kind
    if kind is AggregationKind.COUNT:
        return CountData()
    if kind is AggregationKind.SUM:
        return SumData()
    if kind is AggregationKind.LAST_VALUE:
        return LastValueData()
    if kind is AggregationKind.DISTRIBUTION:
        return DistributionData(bounds=aggregation.buckets)
    raise ValueError(f"Unsupported aggregation kind: {kind}")


@dataclass
class Row:
    """Snapshot of one view's state for one tag combination."""
    tags: Tuple[Tuple[str, str], ...]
    data: AggregationData
    attachments: Optional[Dict[str, Any]] = None

    @property
    def labels(self) -> Dict[str, str]:
        return dict(self.tags)

    def copy(self) -> "Row":
        attachments = copy.copy(self.attachments) if self.attachments else None
        return Row(self.tags, self.data.copy(), attachments)
