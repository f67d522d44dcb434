"""Rendering of view rows.

Two body formats are supported:
- Text exposition format (``# HELP`` / ``# TYPE`` / sample lines)
- JSON objects in the push gateway telemetry schema
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Sequence, Tuple

from ocpush.core.errors import SerializationError
from ocpush.core.stats.aggregation import Row
from ocpush.core.stats.view import AggregationKind, View

TYPE_NAMES: Dict[AggregationKind, str] = {
    AggregationKind.COUNT: "counter",
    AggregationKind.SUM: "summary",
    AggregationKind.LAST_VALUE: "gauge",
    AggregationKind.DISTRIBUTION: "histogram",
}

BUCKET_LABEL = "quantile"


def metric_name(namespace: str, view: View) -> str:
    if namespace:
        return f"{namespace}_{view.name}"
    return view.name


def metric_type(kind: Any) -> str:
    """Exposition type for an aggregation kind, ``untyped`` if unknown."""
    return TYPE_NAMES.get(kind, "untyped")


def format_value(value: Any) -> str:
    """Format a sample value or bucket bound."""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return repr(value)


def escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def format_labels(pairs: Sequence[Tuple[str, str]]) -> str:
    if not pairs:
        return ""
    parts = [f'{key}="{escape_label_value(value)}"' for key, value in pairs]
    return "{" + ",".join(parts) + "}"


def _row_lines(name: str, row: Row) -> List[str]:
    data = row.data
    kind = data.kind

    if kind is AggregationKind.DISTRIBUTION:
        lines = []
        for bound, bucket_count in zip(data.bounds, data.cumulative_counts()):
            bucket_labels = row.tags + ((BUCKET_LABEL, format_value(bound)),)
            lines.append(f"{name}{format_labels(bucket_labels)} {bucket_count}")
        labels = format_labels(row.tags)
        lines.append(f"{name}_sum{labels} {format_value(data.sum)}")
        lines.append(f"{name}_count{labels} {data.count}")
        return lines

    if kind in (AggregationKind.COUNT, AggregationKind.SUM, AggregationKind.LAST_VALUE):
        return [f"{name}{format_labels(row.tags)} {format_value(data.value)}"]

    raise SerializationError(f"Unsupported aggregation data: {kind}")


def render(namespace: str, view: View, rows: Sequence[Row]) -> str:
    """Render a view's rows in the text exposition format.

    Distribution buckets are cumulative: each bucket line counts the
    values less than or equal to its bound.

    Raises:
        SerializationError: a row cannot be formatted.
    """
    name = metric_name(namespace, view)
    lines = [
        f"# HELP {name} {escape_help(view.help_text)}".rstrip(),
        f"# TYPE {name} {metric_type(view.aggregation.kind)}",
    ]
    try:
        for row in rows:
            lines.extend(_row_lines(name, row))
    except SerializationError:
        raise
    except (AttributeError, TypeError, ValueError) as e:
        raise SerializationError(f"Cannot render view {view.name}: {e}") from e
    return "".join(f"{line}\n" for line in lines)


def _json_value(row: Row) -> Any:
    data = row.data
    if data.kind is AggregationKind.DISTRIBUTION:
        return {
            format_value(bound): bucket_count
            for bound, bucket_count in zip(data.bounds, data.cumulative_counts())
        }
    if data.kind in (AggregationKind.COUNT, AggregationKind.SUM, AggregationKind.LAST_VALUE):
        return data.value
    raise SerializationError(f"Unsupported aggregation data: {data.kind}")


def render_json(namespace: str, view: View, rows: Sequence[Row]) -> Dict[str, Any]:
    """Render a view's rows as a push gateway telemetry object."""
    try:
        values = [{"labels": row.labels, "value": _json_value(row)} for row in rows]
    except SerializationError:
        raise
    except (AttributeError, TypeError, ValueError) as e:
        raise SerializationError(f"Cannot render view {view.name}: {e}") from e
    return {
        "baseLabels": {"__name__": metric_name(namespace, view)},
        "docstring": view.help_text,
        "metric": {
            "type": metric_type(view.aggregation.kind),
            "value": values,
        },
    }
