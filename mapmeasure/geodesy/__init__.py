"""
Geodesy backend: great-circle distance, ring area, unit selection and formatting.
No GUI dependency.
"""

from mapmeasure.geodesy.engine import (
    CRS,
    CRS_PRESETS,
    EARTH,
    SIMPLE,
    SPHERICAL_MERCATOR,
    GeoPoint,
    GeodesyEngine,
    distance,
    enclosed_area,
    path_length,
)
from mapmeasure.geodesy.units import (
    FormatOptions,
    UnitTable,
    format_measurement,
    format_value,
    select_unit,
)

__all__ = [
    "CRS",
    "CRS_PRESETS",
    "EARTH",
    "SIMPLE",
    "SPHERICAL_MERCATOR",
    "GeoPoint",
    "GeodesyEngine",
    "distance",
    "enclosed_area",
    "path_length",
    "FormatOptions",
    "UnitTable",
    "format_measurement",
    "format_value",
    "select_unit",
]
