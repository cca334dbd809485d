"""
YAML config loading, legacy (version 1) migration and MeasureConfig validation.
Run: pytest tests/test_config.py
"""
import pytest

from mapmeasure.core.config import (
    CONFIG_VERSION,
    build_measure_config,
    get_config,
    load_config,
    migrate,
)
from mapmeasure.core.exceptions import InvalidConfig
from mapmeasure.geodesy.engine import EARTH, EARTH_RADIUS


def test_defaults(config):
    assert dict(config.distance_units) == {"meter": 1.0, "kilometer": 1000.0}
    assert dict(config.area_units) == {"squareMeter": 1.0, "hectare": 1e4, "squareKilometer": 1e6}
    assert config.crs == EARTH
    assert config.model == "user"
    assert config.default_mode == "distance"
    assert config.start_label == "Start"
    assert config.format.thousands_separator == ","
    assert config.format.symbol_for("squareMeter") == "m²"


def test_load_config_reads_packaged_defaults():
    raw = load_config()
    assert raw["version"] == CONFIG_VERSION
    assert raw["crs"] == "earth"
    assert get_config() is raw


def test_override_file_is_merged(tmp_path):
    path = tmp_path / "measure.yaml"
    path.write_text(
        "version: 2\n"
        "crs: mercator\n"
        "format:\n"
        "  thousands_separator: \"'\"\n"
        "decimals:\n"
        "  meter: 1\n",
        encoding="utf-8",
    )
    raw = load_config(override_path=path)
    assert raw["format"]["thousands_separator"] == "'"
    assert raw["format"]["decimal_point"] == "."
    config = build_measure_config(raw)
    assert config.crs.radius == 6378137.0
    assert config.format.decimals_for("meter") == 1
    assert config.format.decimals_for("kilometer") == 2


def test_unit_tables_replace_rather_than_merge(tmp_path):
    path = tmp_path / "measure.yaml"
    path.write_text("distance_units:\n  foot: 0.3048\n  mile: 1609.344\n", encoding="utf-8")
    config = build_measure_config(load_config(override_path=path))
    assert set(config.distance_units) == {"foot", "mile"}


def test_env_config_and_crs(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text("start_label: Begin\n", encoding="utf-8")
    monkeypatch.setenv("MAPMEASURE_CONFIG", str(path))
    monkeypatch.setenv("MAPMEASURE_CRS", "simple")
    config = build_measure_config(load_config())
    assert config.start_label == "Begin"
    assert config.crs.is_flat


def test_missing_override_file(tmp_path):
    with pytest.raises(InvalidConfig):
        load_config(override_path=tmp_path / "nope.yaml")


def test_malformed_yaml(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("format: [unclosed\n", encoding="utf-8")
    with pytest.raises(InvalidConfig):
        load_config(override_path=path)
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(InvalidConfig):
        load_config(override_path=path)


def test_migrate_legacy_options():
    legacy = {
        "thousandsSeparator": " ",
        "decimalPoint": ",",
        "meterDecimals": 1,
        "squareKilometers": "sq km",
        "squareKilometersDecimals": 3,
        "linearMeasurement": "Line",
        "distanceUnits": {"foot": 0.3048, "mile": 1609.344},
        "start": "Go",
        "position": "topright",
        "collapsed": True,
    }
    data = migrate(legacy)
    assert data["version"] == CONFIG_VERSION
    assert data["format"] == {"thousands_separator": " ", "decimal_point": ","}
    assert data["decimals"] == {"meter": 1, "squareKilometer": 3}
    assert data["symbols"] == {"squareKilometer": "sq km"}
    assert data["labels"] == {"distance_measurement": "Line"}
    assert data["distance_units"] == {"foot": 0.3048, "mile": 1609.344}
    assert data["start_label"] == "Go"
    assert "position" not in data and "collapsed" not in data


def test_build_from_legacy_options():
    config = build_measure_config({"thousandsSeparator": " ", "kilometerDecimals": 1, "meter": None})
    assert config.format.thousands_separator == " "
    assert config.format.decimals_for("kilometer") == 1
    assert config.format.symbol_for("meter") is None


def test_legacy_file(tmp_path):
    path = tmp_path / "old.yaml"
    path.write_text("version: 1\nareaUnits: {acre: 4046.8564224}\nacre: ac\n", encoding="utf-8")
    config = build_measure_config(load_config(override_path=path))
    assert dict(config.area_units) == {"acre": 4046.8564224}
    assert config.format.symbol_for("acre") == "ac"


def test_legacy_rejects_unknown_options():
    with pytest.raises(InvalidConfig):
        migrate({"version": 1, "someFlag": 3})
    with pytest.raises(InvalidConfig):
        migrate({"version": 1, "furlong": "fur"})


def test_unsupported_version():
    with pytest.raises(InvalidConfig):
        migrate({"version": 7})


@pytest.mark.parametrize(
    "raw",
    [
        {"distance_units": {}},
        {"area_units": {"squareMeter": 0}},
        {"distance_units": {"meter": -1}},
        {"distance_units": [1, 2]},
        {"unit_system": "nautical"},
        {"crs": "lambert"},
        {"radius": -1},
        {"model": "volume"},
        {"format": {"grouping": 3}},
        {"decimals": {"meter": -2}},
    ],
)
def test_invalid_config(raw):
    with pytest.raises(InvalidConfig):
        build_measure_config(raw)


def test_imperial_and_custom_radius():
    config = build_measure_config({"unit_system": "imperial", "radius": 1000})
    assert set(config.distance_units) == {"foot", "mile"}
    assert set(config.area_units) == {"squareFoot", "acre", "squareMile"}
    assert config.crs.name == "custom"
    assert config.crs.radius == 1000.0


def test_style_and_labels_are_read_only():
    config = build_measure_config({"pointColor": "#123456", "areaMeasurement": "Fläche", "title": "Messen"})
    assert config.point_color == "#123456"
    assert config.caption("area") == "Fläche"
    assert config.caption("distance") == "Distance measurement"
    assert "title" not in config.labels
    with pytest.raises(TypeError):
        config.labels["area_measurement"] = "x"
    style = config.path_style("area")
    assert (style.color, style.point_color, style.caption) == ("#FF0080", "#123456", "Fläche")


def test_labels_must_be_mapping():
    with pytest.raises(InvalidConfig):
        build_measure_config({"labels": ["a"]})
