"""MapMeasure exceptions."""


class MapMeasureError(Exception):
    """Base exception for MapMeasure."""


class InvalidConfig(MapMeasureError):
    """Invalid configuration (unit tables, format options, CRS, config file)."""


class InvalidInput(MapMeasureError):
    """Invalid input at runtime (malformed coordinates, unknown event or mode)."""
