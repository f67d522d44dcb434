"""Tests for the text exposition and JSON renderers."""

import math

import pytest

from ocpush.core.errors import SerializationError
from ocpush.core.exporter.render import (
    escape_label_value,
    format_value,
    metric_name,
    metric_type,
    render,
    render_json,
)
from ocpush.core.stats import (
    AggregationKind,
    CountData,
    Meter,
    Row,
    count,
    distribution,
    float_measure,
    int_measure,
    last_value,
    new_view,
    sum_aggregation,
)


def _rows(view, recordings):
    meter = Meter()
    meter.register(view)
    for tags, value in recordings:
        meter.record(tags, [view.measure.m(value)])
    return meter.retrieve_data(view.name)


class TestHelpers:
    """Tests for formatting helpers."""

    def test_metric_name(self):
        """Metric names are prefixed with the namespace."""
        view = new_view("requests", int_measure("r"), count())

        assert metric_name("myapp", view) == "myapp_requests"
        assert metric_name("", view) == "requests"

    @pytest.mark.parametrize(
        "kind,expected",
        [
            (AggregationKind.COUNT, "counter"),
            (AggregationKind.SUM, "summary"),
            (AggregationKind.LAST_VALUE, "gauge"),
            (AggregationKind.DISTRIBUTION, "histogram"),
            ("something_else", "untyped"),
        ],
    )
    def test_metric_type(self, kind, expected):
        """Each aggregation kind maps to its exposition type."""
        assert metric_type(kind) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (3, "3"),
            (True, "1"),
            (2.5, "2.5"),
            (10.0, "10.0"),
            (math.inf, "+Inf"),
            (-math.inf, "-Inf"),
            (math.nan, "NaN"),
        ],
    )
    def test_format_value(self, value, expected):
        """Values are formatted for the exposition format."""
        assert format_value(value) == expected

    def test_escape_label_value(self):
        """Backslash, quote and newline are escaped in label values."""
        assert escape_label_value('a"b\\c\nd') == 'a\\"b\\\\c\\nd'


class TestRenderText:
    """Tests for render()."""

    def test_count_scenario(self):
        """A count view renders HELP, TYPE and one sample per row."""
        view = new_view(
            "requests",
            int_measure("requests"),
            count(),
            description="Number of requests",
            tag_keys=["method"],
        )
        rows = _rows(
            view,
            [({"method": "GET"}, 1)] * 3 + [({"method": "POST"}, 1)] * 2,
        )

        text = render("myapp", view, rows)

        assert text == (
            "# HELP myapp_requests Number of requests\n"
            "# TYPE myapp_requests counter\n"
            'myapp_requests{method="GET"} 3\n'
            'myapp_requests{method="POST"} 2\n'
        )

    def test_sum_and_last_value(self):
        """Sum and last value views render their values."""
        latency = float_measure("latency", "Latency in ms")
        sum_view = new_view("latency_total", latency, sum_aggregation())
        gauge_view = new_view("latency_last", latency, last_value(), tag_keys=["host"])

        sum_text = render("app", sum_view, _rows(sum_view, [(None, 1.5), (None, 2.0)]))
        gauge_text = render("app", gauge_view, _rows(gauge_view, [({"host": "h1"}, 7.25)]))

        assert sum_text == (
            "# HELP app_latency_total Latency in ms\n"
            "# TYPE app_latency_total summary\n"
            "app_latency_total 3.5\n"
        )
        assert gauge_text.splitlines()[1] == "# TYPE app_latency_last gauge"
        assert gauge_text.splitlines()[2] == 'app_latency_last{host="h1"} 7.25'

    def test_distribution_buckets_are_cumulative(self):
        """Distribution bucket lines carry cumulative counts."""
        view = new_view(
            "latency",
            float_measure("latency"),
            distribution([1, 5, 10]),
            description="Latency",
        )
        rows = _rows(view, [(None, v) for v in (0.5, 3, 3, 7, 20)])

        text = render("app", view, rows)

        assert text == (
            "# HELP app_latency Latency\n"
            "# TYPE app_latency histogram\n"
            'app_latency{quantile="1.0"} 1\n'
            'app_latency{quantile="5.0"} 3\n'
            'app_latency{quantile="10.0"} 4\n'
            "app_latency_sum 33.5\n"
            "app_latency_count 5\n"
        )

    def test_distribution_with_tags(self):
        """Distribution lines carry the row's tags."""
        view = new_view(
            "latency",
            float_measure("latency"),
            distribution([1]),
            description="Latency",
            tag_keys=["method"],
        )
        rows = _rows(view, [({"method": "GET"}, 0.5), ({"method": "GET"}, 2)])

        lines = render("app", view, rows).splitlines()

        assert lines[2:] == [
            'app_latency{method="GET",quantile="1.0"} 1',
            'app_latency_sum{method="GET"} 2.5',
            'app_latency_count{method="GET"} 2',
        ]

    def test_no_rows_renders_header_only(self):
        """A view without rows renders only its header."""
        view = new_view("requests", int_measure("r"), count(), description="Requests")

        assert render("app", view, []) == (
            "# HELP app_requests Requests\n"
            "# TYPE app_requests counter\n"
        )

    def test_label_values_escaped(self):
        """Label values are escaped in sample lines."""
        view = new_view("requests", int_measure("r"), count(), tag_keys=["path"])
        rows = [Row((("path", 'say "hi"'),), CountData(1))]

        text = render("app", view, rows)

        assert 'app_requests{path="say \\"hi\\""} 1' in text

    def test_help_escaped(self):
        """HELP text is escaped."""
        view = new_view("requests", int_measure("r"), count(), description="two\nlines")

        assert render("app", view, []).startswith("# HELP app_requests two\\nlines\n")

    def test_rendering_is_deterministic(self):
        """Rendering the same rows twice gives the same text."""
        view = new_view("requests", int_measure("r"), count(), tag_keys=["a", "b"])
        rows = _rows(view, [({"a": "1", "b": "2"}, 1), ({"a": "x", "b": "y"}, 1)])

        assert render("app", view, rows) == render("app", view, rows)

    def test_bad_row_raises_serialization_error(self):
        """A row that cannot be rendered raises SerializationError."""
        view = new_view("requests", int_measure("r"), count())
        rows = [Row((), object())]

        with pytest.raises(SerializationError):
            render("app", view, rows)


class TestRenderJson:
    """Tests for render_json()."""

    def test_counter_object(self):
        """A count view renders as a push gateway counter object."""
        view = new_view(
            "requests",
            int_measure("requests"),
            count(),
            description="Number of requests",
            tag_keys=["method"],
        )
        rows = _rows(view, [({"method": "GET"}, 1)] * 2)

        payload = render_json("app", view, rows)

        assert payload == {
            "baseLabels": {"__name__": "app_requests"},
            "docstring": "Number of requests",
            "metric": {
                "type": "counter",
                "value": [{"labels": {"method": "GET"}, "value": 2}],
            },
        }

    def test_histogram_values(self):
        """A distribution renders as histogram buckets."""
        view = new_view("latency", float_measure("latency"), distribution([1, 5]))
        rows = _rows(view, [(None, v) for v in (0.5, 3, 9)])

        payload = render_json("app", view, rows)

        assert payload["metric"]["type"] == "histogram"
        assert payload["metric"]["value"] == [
            {"labels": {}, "value": {"1.0": 1, "5.0": 2}},
        ]
