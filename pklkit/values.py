"""Python representations of Pkl's built-in value types."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from enum import IntEnum
from typing import Any, Generic, TypeVar

A = TypeVar("A")
B = TypeVar("B")


@dataclass
class Object:
    """A ``pkl.base#Object``: a container of properties, entries and elements."""

    module_uri: str = ""
    name: str = ""
    properties: dict[str, Any] = field(default_factory=dict)
    entries: dict[Any, Any] = field(default_factory=dict)
    elements: list[Any] = field(default_factory=list)


@dataclass
class Pair(Generic[A, B]):
    """A ``pkl.base#Pair``: an ordered pair of values."""

    first: A
    second: B


@dataclass
class Regex:
    """A ``pkl.base#Regex``, kept as its pattern text."""

    pattern: str


@dataclass
class Class:
    """An opaque ``pkl.base#Class`` value."""


@dataclass
class TypeAlias:
    """An opaque ``pkl.base#TypeAlias`` value."""


@dataclass
class IntSeq:
    """A ``pkl.base#IntSeq``."""

    start: int
    end: int
    step: int


class DurationUnit(IntEnum):
    """Unit of a Duration, valued in nanoseconds."""

    NANOSECOND = 1
    MICROSECOND = 1_000
    MILLISECOND = 1_000_000
    SECOND = 1_000_000_000
    MINUTE = 60 * 1_000_000_000
    HOUR = 60 * 60 * 1_000_000_000
    DAY = 24 * 60 * 60 * 1_000_000_000

    def __str__(self) -> str:
        return _DURATION_SYMBOLS[self]


_DURATION_SYMBOLS = {
    DurationUnit.NANOSECOND: "ns",
    DurationUnit.MICROSECOND: "us",
    DurationUnit.MILLISECOND: "ms",
    DurationUnit.SECOND: "s",
    DurationUnit.MINUTE: "min",
    DurationUnit.HOUR: "h",
    DurationUnit.DAY: "d",
}
_DURATION_BY_SYMBOL = {symbol: unit for unit, symbol in _DURATION_SYMBOLS.items()}


def to_duration_unit(text: str) -> DurationUnit:
    """Return the DurationUnit named by ``text``; raise ValueError if unknown."""
    try:
        return _DURATION_BY_SYMBOL[text]
    except KeyError:
        raise ValueError(f"unrecognized Duration unit: `{text}`") from None


@dataclass
class Duration:
    """A ``pkl.base#Duration``: a value and its unit."""

    value: float
    unit: DurationUnit | int

    def to_timedelta(self) -> timedelta:
        """Return the duration as a timedelta, truncated to whole nanoseconds."""
        nanoseconds = int(self.value * int(self.unit))
        return timedelta(microseconds=nanoseconds / 1000)


class DataSizeUnit(IntEnum):
    """Unit of a DataSize, valued in bytes."""

    BYTES = 1
    KILOBYTES = 1000
    KIBIBYTES = 1024
    MEGABYTES = 1000**2
    MEBIBYTES = 1024**2
    GIGABYTES = 1000**3
    GIBIBYTES = 1024**3
    TERABYTES = 1000**4
    TEBIBYTES = 1024**4
    PETABYTES = 1000**5
    PEBIBYTES = 1024**5

    def __str__(self) -> str:
        return _DATA_SIZE_SYMBOLS[self]


_DATA_SIZE_SYMBOLS = {
    DataSizeUnit.BYTES: "b",
    DataSizeUnit.KILOBYTES: "kb",
    DataSizeUnit.KIBIBYTES: "kib",
    DataSizeUnit.MEGABYTES: "mb",
    DataSizeUnit.MEBIBYTES: "mib",
    DataSizeUnit.GIGABYTES: "gb",
    DataSizeUnit.GIBIBYTES: "gib",
    DataSizeUnit.TERABYTES: "tb",
    DataSizeUnit.TEBIBYTES: "tib",
    DataSizeUnit.PETABYTES: "pb",
    DataSizeUnit.PEBIBYTES: "pib",
}
_DATA_SIZE_BY_SYMBOL = {symbol: unit for unit, symbol in _DATA_SIZE_SYMBOLS.items()}


def to_data_size_unit(text: str) -> DataSizeUnit:
    """Return the DataSizeUnit named by ``text``; raise ValueError if unknown."""
    try:
        return _DATA_SIZE_BY_SYMBOL[text]
    except KeyError:
        raise ValueError(f"unrecognized DataSize unit: `{text}`") from None


def _format_float(value: float) -> str:
    """Shortest decimal form of ``value`` without an exponent."""
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _unit_symbol(unit: int) -> str:
    try:
        return str(DataSizeUnit(unit))
    except ValueError:
        return "<invalid>"


@dataclass
class DataSize:
    """A ``pkl.base#DataSize``: a quantity of binary data."""

    value: float
    unit: DataSizeUnit | int

    def __str__(self) -> str:
        return f"{_format_float(self.value)}.{_unit_symbol(self.unit)}"

    def to_unit(self, unit: DataSizeUnit) -> DataSize:
        """Return this size expressed with ``unit``."""
        return DataSize(value=self.value / int(unit), unit=unit)