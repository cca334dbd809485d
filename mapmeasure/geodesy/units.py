"""
Unit tables and number formatting for measurement labels.

A unit table maps unit names to their size in the base unit (meters for
distance, square meters for area). select_unit() picks the best-fit unit for
a value; format_value() renders it with grouping, decimals and symbol.
"""
import math
from collections.abc import Mapping
from dataclasses import dataclass, field, replace as _replace
from decimal import ROUND_HALF_UP, Decimal, localcontext
from types import MappingProxyType
from typing import Optional, Tuple

from mapmeasure.core.exceptions import InvalidConfig, InvalidInput

# ---------------------------------------------------------------------------
# Built-in unit tables
# ---------------------------------------------------------------------------
METRIC_DISTANCE_UNITS = {"meter": 1.0, "kilometer": 1000.0}
METRIC_AREA_UNITS = {"squareMeter": 1.0, "hectare": 1e4, "squareKilometer": 1e6}
IMPERIAL_DISTANCE_UNITS = {"foot": 0.3048, "mile": 1609.344}
IMPERIAL_AREA_UNITS = {"squareFoot": 0.09290304, "acre": 4046.8564224, "squareMile": 2589988.110336}

UNIT_SYSTEMS = {
    "metric": (METRIC_DISTANCE_UNITS, METRIC_AREA_UNITS),
    "imperial": (IMPERIAL_DISTANCE_UNITS, IMPERIAL_AREA_UNITS),
}

DEFAULT_SYMBOLS = {
    "meter": "m",
    "kilometer": "km",
    "squareMeter": "m²",
    "hectare": "ha",
    "squareKilometer": "km²",
    "foot": "ft",
    "mile": "mi",
    "squareFoot": "sq ft",
    "acre": "acres",
    "squareMile": "sq mi",
}

DEFAULT_DECIMALS = {
    "meter": 0,
    "kilometer": 2,
    "squareMeter": 0,
    "hectare": 2,
    "squareKilometer": 2,
    "foot": 0,
    "mile": 2,
    "squareFoot": 0,
    "acre": 2,
    "squareMile": 2,
}


class UnitTable(Mapping):
    """Read-only mapping unit name -> size in the base unit. Validated on construction."""

    def __init__(self, units: Mapping):
        if not units:
            raise InvalidConfig("unit table is empty")
        table = {}
        for name, size in units.items():
            if not isinstance(name, str) or not name:
                raise InvalidConfig("unit name must be a non-empty string, got %r" % (name,))
            if isinstance(size, bool) or not isinstance(size, (int, float)):
                raise InvalidConfig("unit %r: conversion factor must be a number, got %r" % (name, size))
            size = float(size)
            if not math.isfinite(size) or size <= 0:
                raise InvalidConfig("unit %r: conversion factor must be > 0, got %r" % (name, size))
            table[name] = size
        self._units = table

    @classmethod
    def of(cls, units: Mapping) -> "UnitTable":
        """Return units unchanged if already a UnitTable, else validate into one."""
        return units if isinstance(units, cls) else cls(units)

    def __getitem__(self, name: str) -> float:
        return self._units[name]

    def __iter__(self):
        return iter(self._units)

    def __len__(self) -> int:
        return len(self._units)

    def __repr__(self) -> str:
        return "UnitTable(%r)" % self._units


@dataclass(frozen=True)
class FormatOptions:
    """Separators, sign and per-unit symbol/decimals used by format_value()."""

    thousands_separator: str = ","
    decimal_point: str = "."
    minus_sign: str = "-"
    unit_space: str = " "
    symbols: Mapping = field(default_factory=lambda: dict(DEFAULT_SYMBOLS))
    decimals: Mapping = field(default_factory=lambda: dict(DEFAULT_DECIMALS))

    def __post_init__(self):
        for name in ("thousands_separator", "decimal_point", "minus_sign", "unit_space"):
            if not isinstance(getattr(self, name), str):
                raise InvalidConfig("format option %s must be a string" % name)
        for unit, places in self.decimals.items():
            if isinstance(places, bool) or not isinstance(places, int) or places < 0:
                raise InvalidConfig("decimals for %r must be a non-negative integer, got %r" % (unit, places))
        for unit, symbol in self.symbols.items():
            if symbol is not None and not isinstance(symbol, str):
                raise InvalidConfig("symbol for %r must be a string or null, got %r" % (unit, symbol))
        object.__setattr__(self, "symbols", MappingProxyType(dict(self.symbols)))
        object.__setattr__(self, "decimals", MappingProxyType(dict(self.decimals)))

    @classmethod
    def default(cls) -> "FormatOptions":
        return cls()

    def replace(self, **changes) -> "FormatOptions":
        """Per-instance override; symbols/decimals given here are merged over the current ones."""
        for key in ("symbols", "decimals"):
            if key in changes:
                merged = dict(getattr(self, key))
                merged.update(changes[key])
                changes[key] = merged
        return _replace(self, **changes)

    def symbol_for(self, unit: Optional[str]) -> Optional[str]:
        """Display symbol; unit name when none configured, None or "" when hidden."""
        if unit is None:
            return None
        return self.symbols[unit] if unit in self.symbols else unit

    def decimals_for(self, unit: Optional[str]) -> int:
        if unit is None:
            return 0
        return self.decimals.get(unit, 0)


def select_unit(value: float, units: Mapping) -> Tuple[str, float]:
    """
    Pick the largest unit whose size is <= value, or the smallest unit if none fits.
    Units of equal size resolve to the lexicographically smallest name.
    """
    table = UnitTable.of(units)
    best_unit, best_size = None, 0.0
    smallest_unit, smallest_size = None, 0.0
    for name in sorted(table):
        size = table[name]
        if smallest_unit is None or size < smallest_size:
            smallest_unit, smallest_size = name, size
        if size <= value and size > best_size:
            best_unit, best_size = name, size
    if best_unit is None:
        return smallest_unit, smallest_size
    return best_unit, best_size


def _group_thousands(digits: str, separator: str) -> str:
    head = len(digits) % 3 or 3
    groups = [digits[:head]] + [digits[i:i + 3] for i in range(head, len(digits), 3)]
    return separator.join(groups)


def _round_half_up(number: float, places: int) -> str:
    """Fixed-point string of number rounded half away from zero (exact binary value, like toFixed)."""
    with localcontext() as ctx:
        ctx.prec = 400 + places
        rounded = Decimal(number).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    return "{:f}".format(rounded)


def format_value(
    value: float,
    unit: Optional[str] = None,
    unit_size: float = 1.0,
    options: Optional[FormatOptions] = None,
) -> str:
    """
    Render value / unit_size with thousands grouping, the unit's decimal places,
    minus sign and unit symbol, e.g. format_value(1234567.891, "meter", 1) -> "1,234,568 m".
    """
    if options is None:
        options = FormatOptions.default()
    if unit_size <= 0:
        raise InvalidConfig("unit size must be > 0, got %r" % (unit_size,))
    if not math.isfinite(value):
        raise InvalidInput("cannot format non-finite value %r" % (value,))

    number = value / unit_size
    sign = options.minus_sign if number < 0 else ""
    places = options.decimals_for(unit)
    int_part, _, frac_part = _round_half_up(abs(number), places).partition(".")

    text = sign + _group_thousands(int_part, options.thousands_separator)
    if places:
        text += options.decimal_point + frac_part
    symbol = options.symbol_for(unit)
    if symbol:
        text += options.unit_space + symbol
    return text


def format_measurement(value: float, units: Mapping, options: Optional[FormatOptions] = None) -> str:
    """select_unit() + format_value() in one call."""
    unit, size = select_unit(value, units)
    return format_value(value, unit, size, options)
