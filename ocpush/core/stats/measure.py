"""Measures and measurements."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

Number = Union[int, float]


class ValueType(Enum):
    """Value type of a measure."""
    INT = "int64"
    FLOAT = "float64"


@dataclass(frozen=True)
class Measure:
    """A named, typed quantity recorded by the application."""
    name: str
    description: str = ""
    unit: str = "1"
    value_type: ValueType = ValueType.FLOAT

    def __post_init__(self):
        if not self.name:
            raise ValueError("Measure name must not be empty")

    def m(self, value: Number) -> "Measurement":
        """Create a measurement of this measure."""
        if self.value_type is ValueType.INT:
            return Measurement(self, int(value))
        return Measurement(self, float(value))


def int_measure(name: str, description: str = "", unit: str = "1") -> Measure:
    """Create an integer measure."""
    return Measure(name, description, unit, ValueType.INT)


def float_measure(name: str, description: str = "", unit: str = "1") -> Measure:
    """Create a floating point measure."""
    return Measure(name, description, unit, ValueType.FLOAT)


@dataclass(frozen=True)
class Measurement:
    """A single value recorded against a measure."""
    measure: Measure
    value: Number
