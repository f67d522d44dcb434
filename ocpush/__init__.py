"""Push-based metrics exporter."""

from ocpush.core.errors import DuplicateViewError, OcPushError
from ocpush.core.exporter import PushExporter, PushReport, render
from ocpush.core.stats import (
    Measure,
    Meter,
    View,
    count,
    distribution,
    float_measure,
    int_measure,
    last_value,
    new_view,
    sum_aggregation,
)
from ocpush.core.tags import TagMap, child_scope, current_tags, tag_scope

__version__ = "0.3.0"

__all__ = [
    "DuplicateViewError",
    "Measure",
    "Meter",
    "OcPushError",
    "PushExporter",
    "PushReport",
    "TagMap",
    "View",
    "child_scope",
    "count",
    "current_tags",
    "distribution",
    "float_measure",
    "int_measure",
    "last_value",
    "new_view",
    "render",
    "sum_aggregation",
    "tag_scope",
]
