"""MapMeasure: geodesic distance/area measurement engine for interactive maps."""

__version__ = "0.1.0"

from mapmeasure.core.config import MeasureConfig, build_measure_config, load_config
from mapmeasure.core.events import MapEvent
from mapmeasure.core.exceptions import InvalidConfig, InvalidInput, MapMeasureError
from mapmeasure.geodesy import (
    CRS,
    FormatOptions,
    GeoPoint,
    GeodesyEngine,
    UnitTable,
    distance,
    enclosed_area,
    format_value,
    select_unit,
)
from mapmeasure.tools import MeasureSession, MeasurementResult, SessionRegistry

__all__ = [
    "__version__",
    "MeasureConfig",
    "build_measure_config",
    "load_config",
    "MapEvent",
    "MapMeasureError",
    "InvalidConfig",
    "InvalidInput",
    "CRS",
    "FormatOptions",
    "GeoPoint",
    "GeodesyEngine",
    "UnitTable",
    "distance",
    "enclosed_area",
    "format_value",
    "select_unit",
    "MeasureSession",
    "MeasurementResult",
    "SessionRegistry",
]
