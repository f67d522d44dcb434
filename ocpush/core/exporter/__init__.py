"""Exporter Module.

Provides rendering and push of aggregated views:
- Text exposition and JSON renderers
- Push exporter with periodic push loop
"""

from ocpush.core.exporter.push import (
    JSON_CONTENT_TYPE,
    TEXT_CONTENT_TYPE,
    PushExporter,
    PushReport,
)
from ocpush.core.exporter.render import (
    escape_label_value,
    format_value,
    metric_name,
    metric_type,
    render,
    render_json,
)

__all__ = [
    # Push
    "JSON_CONTENT_TYPE",
    "TEXT_CONTENT_TYPE",
    "PushExporter",
    "PushReport",
    # Render
    "escape_label_value",
    "format_value",
    "metric_name",
    "metric_type",
    "render",
    "render_json",
]
