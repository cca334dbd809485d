"""
Unit selection and number formatting.
Run: pytest tests/test_units.py
"""
import pytest

from mapmeasure.core.exceptions import InvalidConfig, InvalidInput
from mapmeasure.geodesy.units import (
    METRIC_AREA_UNITS,
    METRIC_DISTANCE_UNITS,
    FormatOptions,
    UnitTable,
    format_measurement,
    format_value,
    select_unit,
)

DISTANCE = {"meter": 1, "kilometer": 1000}


@pytest.mark.parametrize(
    "value, expected",
    [
        (999, ("meter", 1)),
        (1000, ("kilometer", 1000)),
        (0.5, ("meter", 1)),
        (0, ("meter", 1)),
        (-250, ("meter", 1)),
        (123456, ("kilometer", 1000)),
    ],
)
def test_select_unit(value, expected):
    assert select_unit(value, DISTANCE) == expected


def test_select_unit_area_table():
    assert select_unit(25000, METRIC_AREA_UNITS) == ("hectare", 1e4)
    assert select_unit(5e6, METRIC_AREA_UNITS) == ("squareKilometer", 1e6)
    assert select_unit(12, METRIC_AREA_UNITS) == ("squareMeter", 1)


def test_select_unit_equal_sizes_pick_smallest_name():
    assert select_unit(5, {"metre": 1, "meter": 1}) == ("meter", 1)
    assert select_unit(0.1, {"b": 10, "a": 10, "c": 20}) == ("a", 10)


def test_select_unit_order_independent():
    forward = {"meter": 1, "kilometer": 1000}
    backward = {"kilometer": 1000, "meter": 1}
    for value in (0.2, 5, 999.9, 1000, 4e6):
        assert select_unit(value, forward) == select_unit(value, backward)


def test_unit_table_rejects_bad_tables():
    with pytest.raises(InvalidConfig):
        UnitTable({})
    with pytest.raises(InvalidConfig):
        UnitTable({"meter": 0})
    with pytest.raises(InvalidConfig):
        UnitTable({"meter": -1})
    with pytest.raises(InvalidConfig):
        UnitTable({"meter": "1"})
    with pytest.raises(InvalidConfig):
        select_unit(10, {})


def test_unit_table_is_read_only_mapping():
    table = UnitTable(DISTANCE)
    assert dict(table) == {"meter": 1.0, "kilometer": 1000.0}
    assert UnitTable.of(table) is table
    with pytest.raises(TypeError):
        table["mile"] = 1609.344


def test_format_grouping_and_rounding():
    assert format_value(1234567.891, "meter", 1) == "1,234,568 m"
    assert format_value(999, "meter", 1) == "999 m"
    assert format_value(100000, "meter", 1) == "100,000 m"
    assert format_value(0, "meter", 1) == "0 m"


def test_format_decimals_per_unit():
    assert format_value(1500, "kilometer", 1000) == "1.50 km"
    assert format_value(1234567890, "kilometer", 1000) == "1,234,567.89 km"
    assert format_value(25000, "hectare", 1e4) == "2.50 ha"


def test_format_negative_value():
    options = FormatOptions().replace(decimals={"meter": 1})
    text = format_value(-5.5, "meter", 1, options)
    assert text == "-5.5 m"
    assert text.startswith("-")
    assert len(text.split(" ")[0].split(".")[1]) == 1
    assert format_value(-1234567, "meter", 1) == "-1,234,567 m"


def test_format_rounds_half_away_from_zero():
    assert format_value(2.5, "meter", 1) == "3 m"
    assert format_value(-2.5, "meter", 1) == "-3 m"
    options = FormatOptions().replace(decimals={"meter": 2})
    assert format_value(0.125, "meter", 1, options) == "0.13 m"
    # 1.005 is stored as 1.00499999..., so it rounds down like toFixed does
    assert format_value(1.005, "meter", 1, options) == "1.00 m"


def test_format_rounding_carries_into_integer_part():
    options = FormatOptions().replace(decimals={"meter": 1})
    assert format_value(999.96, "meter", 1, options) == "1,000.0 m"


def test_format_custom_separators():
    options = FormatOptions(thousands_separator=".", decimal_point=",", minus_sign="−", unit_space=" ")
    assert format_value(12345.678, "kilometer", 1, options) == "12.345,68 km"
    assert format_value(-1000, "meter", 1, options) == "−1.000 m"


def test_format_symbol_handling():
    hidden = FormatOptions().replace(symbols={"meter": None})
    assert format_value(12, "meter", 1, hidden) == "12"
    blank = FormatOptions().replace(symbols={"meter": ""})
    assert format_value(12, "meter", 1, blank) == "12"
    assert format_value(3, "league", 1) == "3 league"
    assert format_value(3, None, 1) == "3"


def test_format_rejects_bad_input():
    with pytest.raises(InvalidInput):
        format_value(float("nan"), "meter", 1)
    with pytest.raises(InvalidConfig):
        format_value(10, "meter", 0)
    with pytest.raises(InvalidConfig):
        FormatOptions(decimals={"meter": -1})
    with pytest.raises(InvalidConfig):
        FormatOptions(symbols={"meter": 5})


def test_format_options_replace_keeps_other_entries():
    options = FormatOptions().replace(decimals={"meter": 3})
    assert options.decimals_for("meter") == 3
    assert options.decimals_for("kilometer") == 2
    assert FormatOptions.default().decimals_for("meter") == 0


def test_format_measurement():
    assert format_measurement(1500, METRIC_DISTANCE_UNITS) == "1.50 km"
    assert format_measurement(25000, METRIC_AREA_UNITS) == "2.50 ha"
    assert format_measurement(12, METRIC_AREA_UNITS) == "12 m²"
