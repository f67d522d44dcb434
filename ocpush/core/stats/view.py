"""View definitions.

A view binds a measure to an aggregation and to the tag keys that
partition its rows. Views are immutable once built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple

from ocpush.core.errors import InvalidTagError, InvalidViewError
from ocpush.core.stats.measure import Measure
from ocpush.core.tags import validate_key


class AggregationKind(Enum):
    """Aggregation algorithms."""
    COUNT = "count"
    SUM = "sum"
    LAST_VALUE = "last_value"
    DISTRIBUTION = "distribution"


@dataclass(frozen=True)
class Aggregation:
    """Aggregation kind plus bucket bounds for distributions."""
    kind: AggregationKind
    buckets: Tuple[float, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "buckets", tuple(float(b) for b in self.buckets))
        if self.kind is AggregationKind.DISTRIBUTION:
            if not self.buckets:
                raise InvalidViewError("Distribution needs at least one bucket bound")
            for low, high in zip(self.buckets, self.buckets[1:]):
                if not low < high:
                    raise InvalidViewError(
                        f"Bucket bounds must be strictly ascending: {self.buckets}"
                    )
        elif self.buckets:
            raise InvalidViewError(f"{self.kind.value} aggregation takes no buckets")


def count() -> Aggregation:
    return Aggregation(AggregationKind.COUNT)


def sum() -> Aggregation:  # noqa: A001
    return Aggregation(AggregationKind.SUM)


def last_value() -> Aggregation:
    return Aggregation(AggregationKind.LAST_VALUE)


def distribution(bounds: Iterable[float]) -> Aggregation:
    """Distribution aggregation with ascending bucket upper bounds."""
    return Aggregation(AggregationKind.DISTRIBUTION, tuple(float(b) for b in bounds))


@dataclass(frozen=True)
class View:
    """Named aggregation of a measure, partitioned by tag keys."""
    name: str
    measure: Measure
    aggregation: Aggregation
    description: str = ""
    tag_keys: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.name:
            raise InvalidViewError("View name must not be empty")
        keys = tuple(self.tag_keys)
        try:
            for key in keys:
                validate_key(key)
        except InvalidTagError as e:
            raise InvalidViewError(f"View {self.name!r}: {e}") from e
        if len(set(keys)) != len(keys):
            raise InvalidViewError(f"View {self.name!r} has duplicate tag keys {keys}")
        # frozen dataclass: normalize lists passed by callers
        object.__setattr__(self, "tag_keys", keys)

    @property
    def help_text(self) -> str:
        return self.description or self.measure.description


def new_view(
    name: str,
    measure: Measure,
    aggregation: Aggregation,
    description: str = "",
    tag_keys: Optional[Sequence[str]] = None,
) -> View:
    """Create a view."""
    return View(
        name=name,
        measure=measure,
        aggregation=aggregation,
        description=description,
        tag_keys=tuple(tag_keys or ()),
    )
