from datetime import timedelta

import pytest

from pklkit.values import (
    DataSize,
    DataSizeUnit,
    Duration,
    DurationUnit,
    Object,
    Pair,
    to_data_size_unit,
    to_duration_unit,
)


@pytest.mark.parametrize(
    "size, expected",
    [
        (DataSize(value=1.0, unit=DataSizeUnit.BYTES), "1.b"),
        (DataSize(value=5.3, unit=DataSizeUnit.KIBIBYTES), "5.3.kib"),
        (DataSize(value=5.0, unit=0), "5.<invalid>"),
    ],
    ids=["bytes", "kebibytes", "invalid"],
)
def test_data_size_string(size, expected):
    assert str(size) == expected


@pytest.mark.parametrize(
    "symbol, unit",
    [
        ("b", DataSizeUnit.BYTES),
        ("kb", DataSizeUnit.KILOBYTES),
        ("kib", DataSizeUnit.KIBIBYTES),
        ("mb", DataSizeUnit.MEGABYTES),
        ("mib", DataSizeUnit.MEBIBYTES),
        ("gb", DataSizeUnit.GIGABYTES),
        ("gib", DataSizeUnit.GIBIBYTES),
        ("tb", DataSizeUnit.TERABYTES),
        ("tib", DataSizeUnit.TEBIBYTES),
        ("pb", DataSizeUnit.PETABYTES),
        ("pib", DataSizeUnit.PEBIBYTES),
    ],
)
def test_data_size_unit_round_trip(symbol, unit):
    assert to_data_size_unit(symbol) is unit
    assert str(unit) == symbol


def test_data_size_unit_values():
    assert to_data_size_unit("kib") == 1024
    assert to_data_size_unit("mib") == 1024 * 1024
    assert to_data_size_unit("pb") == 1000**5


def test_unknown_data_size_unit():
    with pytest.raises(ValueError, match="unrecognized DataSize unit: `zb`"):
        to_data_size_unit("zb")


def test_data_size_to_unit():
    result = DataSize(2048.0, DataSizeUnit.BYTES).to_unit(DataSizeUnit.KIBIBYTES)
    assert result == DataSize(2.0, DataSizeUnit.KIBIBYTES)


@pytest.mark.parametrize(
    "symbol, unit",
    [
        ("ns", DurationUnit.NANOSECOND),
        ("us", DurationUnit.MICROSECOND),
        ("ms", DurationUnit.MILLISECOND),
        ("s", DurationUnit.SECOND),
        ("min", DurationUnit.MINUTE),
        ("h", DurationUnit.HOUR),
        ("d", DurationUnit.DAY),
    ],
)
def test_duration_unit_round_trip(symbol, unit):
    assert to_duration_unit(symbol) is unit
    assert str(unit) == symbol


def test_unknown_duration_unit():
    with pytest.raises(ValueError, match="unrecognized Duration unit: `week`"):
        to_duration_unit("week")


@pytest.mark.parametrize(
    "duration, expected",
    [
        (Duration(5, DurationUnit.MINUTE), timedelta(minutes=5)),
        (Duration(7, DurationUnit.DAY), timedelta(days=7)),
        (Duration(1.5, DurationUnit.SECOND), timedelta(seconds=1.5)),
        (Duration(3, DurationUnit.MILLISECOND), timedelta(milliseconds=3)),
        (Duration(6, DurationUnit.HOUR), timedelta(hours=6)),
    ],
)
def test_duration_to_timedelta(duration, expected):
    assert duration.to_timedelta() == expected


def test_object_defaults_are_independent():
    first = Object()
    second = Object()
    first.properties["res3"] = 5
    assert second.properties == {}
    assert first.elements == [] and first.entries == {}


def test_pair_equality():
    assert Pair("hello", "goodbye") == Pair(first="hello", second="goodbye")
    assert Pair(1, 5.0).second == 5.0