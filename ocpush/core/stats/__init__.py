"""Stats Module.

Provides measurement aggregation:
- Measures and measurements
- Views and aggregation kinds
- Meter (view registry and row tables)
"""

from ocpush.core.stats.aggregation import (
    AggregationData,
    CountData,
    DistributionData,
    LastValueData,
    Row,
    SumData,
    new_aggregation_data,
)
from ocpush.core.stats.measure import (
    Measure,
    Measurement,
    ValueType,
    float_measure,
    int_measure,
)
from ocpush.core.stats.meter import Meter
from ocpush.core.stats.view import (
    Aggregation,
    AggregationKind,
    View,
    count,
    distribution,
    last_value,
    new_view,
)
from ocpush.core.stats.view import sum as sum_aggregation

__all__ = [
    # Measures
    "Measure",
    "Measurement",
    "ValueType",
    "float_measure",
    "int_measure",
    # Views
    "Aggregation",
    "AggregationKind",
    "View",
    "count",
    "distribution",
    "last_value",
    "new_view",
    "sum_aggregation",
    # State
    "AggregationData",
    "CountData",
    "DistributionData",
    "LastValueData",
    "Row",
    "SumData",
    "new_aggregation_data",
    # Meter
    "Meter",
]
