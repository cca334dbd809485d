"""
Load configuration from YAML and build the immutable MeasureConfig.
Default: mapmeasure/core/config/default.yaml. Override: --config <file> or MAPMEASURE_CONFIG.

Config files carry a "version". Version 1 is the flat camelCase option set of
the Leaflet measure plugin (thousandsSeparator, meterDecimals, distanceUnits, ...);
it is migrated to the current layout when loaded.
"""
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from mapmeasure.core.exceptions import InvalidConfig

CONFIG_VERSION = 2
SUPPORTED_VERSIONS = (1, 2)

ENV_CONFIG = "MAPMEASURE_CONFIG"
ENV_CRS = "MAPMEASURE_CRS"
ENV_LOG_LEVEL = "MAPMEASURE_LOG_LEVEL"
ENV_LOG_DIR = "MAPMEASURE_LOG_DIR"

MODES = ("distance", "area")
MODELS = ("user",) + MODES

_CACHE: dict[str, Any] | None = None
_CONFIG_DIR = Path(__file__).resolve().parent

# ---------------------------------------------------------------------------
# Version 1 (flat plugin options) -> version 2
# ---------------------------------------------------------------------------
_V1_RENAMED = {
    "linearMeasurement": "distanceMeasurement",
    "squareKilometers": "squareKilometer",
    "squareKilometersDecimals": "squareKilometerDecimals",
}

_V1_FORMAT_KEYS = {
    "thousandsSeparator": "thousands_separator",
    "decimalPoint": "decimal_point",
    "minusSign": "minus_sign",
    "unitSpace": "unit_space",
}

_V1_TOP_KEYS = {
    "distanceUnits": "distance_units",
    "areaUnits": "area_units",
    "model": "model",
    "start": "start_label",
    "color": "color",
    "pointColor": "point_color",
}

_V1_LABEL_KEYS = {
    "distanceMeasurement": "distance_measurement",
    "areaMeasurement": "area_measurement",
}

# control placement and tooltip; the host UI owns these
_V1_IGNORED = {"position", "collapsed", "title"}


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base (recursive). base is not mutated. Unit tables are replaced whole."""
    out = dict(base)
    for k, v in override.items():
        if k in ("distance_units", "area_units"):
            out[k] = v
        elif k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _load_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidConfig("cannot parse %s: %s" % (path, e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfig("%s: top level must be a mapping" % path)
    return migrate(data)


def _detect_version(data: dict) -> int:
    if "version" in data:
        return data["version"]
    # model and color are spelled the same in both layouts
    legacy = set(_V1_RENAMED) | set(_V1_FORMAT_KEYS) | (set(_V1_TOP_KEYS) - {"model", "color"})
    legacy |= _known_units()
    if any(k in legacy or str(k).endswith("Decimals") for k in data):
        return 1
    return CONFIG_VERSION


def _migrate_v1(data: dict) -> dict:
    """Map flat plugin options onto the version 2 layout."""
    data = dict(data)
    for old, new in _V1_RENAMED.items():
        if old in data:
            data.setdefault(new, data[old])
            del data[old]

    unit_names = set(data.get("distanceUnits") or {}) | set(data.get("areaUnits") or {})
    out: dict[str, Any] = {"version": CONFIG_VERSION}
    fmt, symbols, decimals, labels = {}, {}, {}, {}
    for key, value in data.items():
        if key == "version":
            continue
        if key in _V1_FORMAT_KEYS:
            fmt[_V1_FORMAT_KEYS[key]] = value
        elif key in _V1_TOP_KEYS:
            out[_V1_TOP_KEYS[key]] = value
        elif key in _V1_LABEL_KEYS:
            labels[_V1_LABEL_KEYS[key]] = value
        elif str(key).endswith("Decimals"):
            decimals[key[: -len("Decimals")]] = value
        elif key in _V1_IGNORED:
            continue
        elif value is None or isinstance(value, str):
            # any other string option is a unit symbol (meter: "m", acre: "acres")
            symbols[key] = value
        else:
            raise InvalidConfig("unknown version 1 option %r" % key)
    unknown = set(symbols) - unit_names - _known_units()
    if unknown:
        raise InvalidConfig("symbols given for unknown units: %s" % ", ".join(sorted(unknown)))
    if fmt:
        out["format"] = fmt
    if symbols:
        out["symbols"] = symbols
    if decimals:
        out["decimals"] = decimals
    if labels:
        out["labels"] = labels
    return out


def _known_units() -> set:
    from mapmeasure.geodesy.units import DEFAULT_SYMBOLS
    return set(DEFAULT_SYMBOLS)


def migrate(data: dict) -> dict:
    """Return data in the current (version 2) layout. Raises InvalidConfig on unsupported versions."""
    version = _detect_version(data)
    if version not in SUPPORTED_VERSIONS:
        raise InvalidConfig("unsupported config version %r (supported: %s)" % (version, SUPPORTED_VERSIONS))
    if version == 1:
        return _migrate_v1(data)
    return dict(data, version=CONFIG_VERSION)


def _defaults() -> dict:
    """Built-in defaults (no file)."""
    return {
        "version": CONFIG_VERSION,
        "crs": "earth",
        "radius": None,  # If set, overrides the radius of the named CRS
        "model": "user",
        "start_label": "Start",
        "color": "#FF0080",
        "point_color": "#FFFFFF",
        "unit_system": "metric",
        "distance_units": None,  # None: take the table of unit_system
        "area_units": None,
        "format": {
            "thousands_separator": ",",
            "decimal_point": ".",
            "minus_sign": "-",
            "unit_space": " ",
        },
        "symbols": {},
        "decimals": {},
        "labels": {
            "distance_measurement": "Distance measurement",
            "area_measurement": "Area measurement",
        },
    }


def load_config(override_path: str | Path | None = None) -> dict:
    """
    Load config: defaults + default.yaml + env MAPMEASURE_CONFIG + optional override file.
    Returns merged dict (version 2 layout). Cached after first call unless override_path is given.
    """
    global _CACHE
    if override_path is not None:
        _CACHE = None

    if _CACHE is not None:
        return _CACHE

    base = _defaults()
    default_file = _CONFIG_DIR / "default.yaml"
    if default_file.exists():
        base = _deep_merge(base, _load_yaml(default_file))

    env_path = os.environ.get(ENV_CONFIG)
    if env_path and Path(env_path).exists():
        base = _deep_merge(base, _load_yaml(Path(env_path)))

    if override_path is not None:
        p = Path(override_path)
        if not p.exists():
            raise InvalidConfig("config file not found: %s" % p)
        base = _deep_merge(base, _load_yaml(p))

    crs = os.environ.get(ENV_CRS, "").strip().lower()
    if crs:
        base["crs"] = crs

    _CACHE = base
    return base


def get_config(override_path: str | Path | None = None) -> dict:
    """Alias for load_config; use for read-only access."""
    return load_config(override_path)


def reset_config() -> None:
    """Clear cache (e.g. for tests)."""
    global _CACHE
    _CACHE = None


# ---------------------------------------------------------------------------
# Canonical immutable configuration
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class MeasureConfig:
    """Everything a measurement session needs; built once, never mutated."""

    distance_units: Any
    area_units: Any
    format: Any
    crs: Any
    model: str = "user"
    start_label: str = "Start"
    color: str = "#FF0080"
    point_color: str = "#FFFFFF"
    labels: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def default_mode(self) -> str:
        return "distance" if self.model == "user" else self.model

    def caption(self, mode: str) -> str:
        """Display name of a measurement mode, e.g. "Distance measurement"."""
        return self.labels.get(mode + "_measurement", mode)

    def path_style(self, mode: str):
        from mapmeasure.tools.renderer import PathStyle
        return PathStyle(color=self.color, point_color=self.point_color, caption=self.caption(mode))


def build_measure_config(raw: Optional[dict] = None) -> MeasureConfig:
    """Validate a version 2 config dict (default: load_config()) into a MeasureConfig."""
    from mapmeasure.core.exceptions import InvalidInput
    from mapmeasure.geodesy.engine import CRS
    from mapmeasure.geodesy.units import (
        DEFAULT_DECIMALS,
        DEFAULT_SYMBOLS,
        UNIT_SYSTEMS,
        FormatOptions,
        UnitTable,
    )

    if raw is None:
        raw = load_config()
    else:
        raw = _deep_merge(_defaults(), migrate(raw))

    system = str(raw.get("unit_system") or "metric").strip().lower()
    if system not in UNIT_SYSTEMS:
        raise InvalidConfig("unknown unit_system %r (choose from %s)" % (system, ", ".join(sorted(UNIT_SYSTEMS))))
    default_distance, default_area = UNIT_SYSTEMS[system]
    distance_units = raw.get("distance_units")
    area_units = raw.get("area_units")
    if distance_units is not None and not isinstance(distance_units, dict):
        raise InvalidConfig("distance_units must be a mapping of unit name to meters")
    if area_units is not None and not isinstance(area_units, dict):
        raise InvalidConfig("area_units must be a mapping of unit name to square meters")
    distance_units = UnitTable(default_distance if distance_units is None else distance_units)
    area_units = UnitTable(default_area if area_units is None else area_units)

    symbols = dict(DEFAULT_SYMBOLS)
    symbols.update(raw.get("symbols") or {})
    decimals = dict(DEFAULT_DECIMALS)
    decimals.update(raw.get("decimals") or {})
    fmt = raw.get("format") or {}
    try:
        options = FormatOptions(symbols=symbols, decimals=decimals, **fmt)
    except TypeError as e:
        raise InvalidConfig("bad format section: %s" % e) from e

    try:
        crs = CRS.from_name(raw.get("crs") or "earth")
        if raw.get("radius") is not None:
            crs = CRS("custom", raw["radius"])
    except InvalidInput as e:
        raise InvalidConfig(str(e)) from e

    model = raw.get("model") or "user"
    if model not in MODELS:
        raise InvalidConfig("invalid model %r (choose from %s)" % (model, ", ".join(MODELS)))

    labels = raw.get("labels") or {}
    if not isinstance(labels, dict):
        raise InvalidConfig("labels must be a mapping of label name to text")

    return MeasureConfig(
        distance_units=distance_units,
        area_units=area_units,
        format=options,
        crs=crs,
        model=model,
        start_label=str(raw.get("start_label", "Start")),
        color=str(raw.get("color", "#FF0080")),
        point_color=str(raw.get("point_color", "#FFFFFF")),
        labels=MappingProxyType({str(k): str(v) for k, v in labels.items()}),
    )
