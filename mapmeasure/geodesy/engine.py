"""
Geodesic distance and enclosed area on a sphere, with a flat-plane fallback.

radius > 0: haversine distance and spherical-excess ring area.
radius == 0: the map uses raw planar coordinates (e.g. pixels); distance is
Euclidean and area uses the shoelace formula on (lng, lat) as (x, y).
No GUI dependency.
"""
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Optional

import numpy as np

from mapmeasure.core.exceptions import InvalidInput
from mapmeasure.core.logger import get_logger
from mapmeasure.geodesy.units import (
    FormatOptions,
    METRIC_AREA_UNITS,
    METRIC_DISTANCE_UNITS,
    UnitTable,
    format_measurement,
)

log = get_logger("geodesy")

EARTH_RADIUS = 6371000.0
SPHERICAL_MERCATOR_RADIUS = 6378137.0


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees (or y/x on a flat map)."""

    lat: float
    lng: float

    def __post_init__(self):
        try:
            lat = float(self.lat)
            lng = float(self.lng)
        except (TypeError, ValueError) as e:
            raise InvalidInput("coordinates must be numbers, got (%r, %r)" % (self.lat, self.lng)) from e
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise InvalidInput("coordinates must be finite, got (%r, %r)" % (self.lat, self.lng))
        object.__setattr__(self, "lat", lat)
        object.__setattr__(self, "lng", lng)

    @classmethod
    def of(cls, value) -> "GeoPoint":
        """Accept a GeoPoint, a (lat, lng) pair, or a mapping with lat and lng/lon keys."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            if "lat" not in value or ("lng" not in value and "lon" not in value):
                raise InvalidInput("point mapping needs lat and lng keys: %r" % (value,))
            return cls(value["lat"], value["lng"] if "lng" in value else value["lon"])
        if isinstance(value, (str, bytes)):
            raise InvalidInput("point must be a pair, got %r" % (value,))
        try:
            lat, lng = value
        except (TypeError, ValueError) as e:
            raise InvalidInput("point must be a (lat, lng) pair, got %r" % (value,)) from e
        return cls(lat, lng)

    def as_xy(self) -> tuple[float, float]:
        return (self.lng, self.lat)


@dataclass(frozen=True)
class CRS:
    """Coordinate system of the map: a sphere of radius meters, or flat when radius is 0."""

    name: str
    radius: float

    def __post_init__(self):
        object.__setattr__(self, "radius", _check_radius(self.radius))

    @property
    def is_flat(self) -> bool:
        return self.radius == 0

    @classmethod
    def from_name(cls, name: str) -> "CRS":
        key = str(name).strip().lower()
        if key not in CRS_PRESETS:
            raise InvalidInput("unknown CRS %r (choose from %s)" % (name, ", ".join(sorted(CRS_PRESETS))))
        return CRS_PRESETS[key]


def _check_radius(radius) -> float:
    try:
        radius = float(radius or 0.0)
    except (TypeError, ValueError) as e:
        raise InvalidInput("radius must be a number, got %r" % (radius,)) from e
    if not math.isfinite(radius) or radius < 0:
        raise InvalidInput("radius must be finite and >= 0, got %r" % (radius,))
    return radius


EARTH = CRS("earth", EARTH_RADIUS)
SPHERICAL_MERCATOR = CRS("mercator", SPHERICAL_MERCATOR_RADIUS)
SIMPLE = CRS("simple", 0.0)

CRS_PRESETS = {
    "earth": EARTH,
    "mercator": SPHERICAL_MERCATOR,
    "simple": SIMPLE,
}


def _as_array(points: Sequence) -> np.ndarray:
    """(N, 2) float64 array of [lat, lng]; validates every point."""
    pts = [GeoPoint.of(p) for p in points]
    if not pts:
        return np.empty((0, 2), dtype=np.float64)
    return np.array([(p.lat, p.lng) for p in pts], dtype=np.float64)


def distance(a, b, radius: float = EARTH_RADIUS) -> float:
    """Haversine great-circle distance in meters; Euclidean distance when radius == 0."""
    a = GeoPoint.of(a)
    b = GeoPoint.of(b)
    radius = _check_radius(radius)
    if radius == 0:
        return math.hypot(b.lng - a.lng, b.lat - a.lat)

    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng) - math.radians(a.lng)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    # rounding can push h a hair above 1 for antipodal points
    return 2 * radius * math.asin(math.sqrt(min(1.0, h)))


def path_length(points: Sequence, radius: float = EARTH_RADIUS) -> float:
    """Sum of segment distances along an open path. 0 for fewer than two points."""
    pts = [GeoPoint.of(p) for p in points]
    return sum(distance(p, q, radius) for p, q in zip(pts, pts[1:]))


def enclosed_area(points: Sequence, radius: float = EARTH_RADIUS) -> float:
    """
    Area enclosed by the closed ring through points (last joins first).

    radius > 0: spherical-excess approximation, square meters. Valid for
    polygons small relative to the sphere; not corrected for rings crossing
    the antimeridian.
    radius == 0: shoelace formula on (lng, lat) as (x, y), square map units.
    Fewer than three points enclose nothing and give 0.0.
    """
    arr = _as_array(points)
    radius = _check_radius(radius)
    if len(arr) < 3:
        return 0.0

    lat1 = np.roll(arr[:, 0], 1)
    lng1 = np.roll(arr[:, 1], 1)
    lat2 = arr[:, 0]
    lng2 = arr[:, 1]

    if radius > 0:
        terms = np.radians(lng2 - lng1) * (2 + np.sin(np.radians(lat1)) + np.sin(np.radians(lat2)))
        return float(abs(terms.sum() * radius * radius / 2.0))
    terms = lng1 * lat2 - lat1 * lng2
    return float(abs(terms.sum()) / 2.0)


class GeodesyEngine:
    """
    Distance/area computations for one CRS plus unit-aware label strings.
    Build from a MeasureConfig with GeodesyEngine.from_config(config).
    """

    def __init__(
        self,
        crs: CRS = EARTH,
        distance_units: Optional[Mapping] = None,
        area_units: Optional[Mapping] = None,
        format_options: Optional[FormatOptions] = None,
    ):
        self.crs = crs
        self.distance_units = UnitTable.of(distance_units or METRIC_DISTANCE_UNITS)
        self.area_units = UnitTable.of(area_units or METRIC_AREA_UNITS)
        self.format_options = format_options or FormatOptions.default()
        log.debug("GeodesyEngine: crs=%s radius=%s", crs.name, crs.radius)

    @classmethod
    def from_config(cls, config) -> "GeodesyEngine":
        return cls(
            crs=config.crs,
            distance_units=config.distance_units,
            area_units=config.area_units,
            format_options=config.format,
        )

    @property
    def radius(self) -> float:
        return self.crs.radius

    def distance(self, a, b) -> float:
        return distance(a, b, self.radius)

    def path_length(self, points: Sequence) -> float:
        return path_length(points, self.radius)

    def enclosed_area(self, points: Sequence) -> float:
        return enclosed_area(points, self.radius)

    def distance_string(self, meters: float) -> str:
        return format_measurement(meters, self.distance_units, self.format_options)

    def area_string(self, points: Sequence) -> str:
        return format_measurement(self.enclosed_area(points), self.area_units, self.format_options)
