"""
Pytest configuration and shared fixtures.

The config cache and logging handlers are module-level state; every test
starts from a clean slate so MAPMEASURE_* env vars or --config files used by
one test do not leak into the next.
"""
import pytest

from mapmeasure.core.config import build_measure_config, reset_config
from mapmeasure.core.event_bus import EventBus
from mapmeasure.core.logger import reset_logging
from mapmeasure.geodesy.engine import GeodesyEngine
from mapmeasure.tools.renderer import RecordingRenderer


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    for name in ("MAPMEASURE_CONFIG", "MAPMEASURE_CRS", "MAPMEASURE_LOG_LEVEL", "MAPMEASURE_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()
    reset_logging()


@pytest.fixture
def config():
    """Built-in defaults: earth CRS, metric units."""
    return build_measure_config({})


@pytest.fixture
def engine(config):
    return GeodesyEngine.from_config(config)


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def bus_log(bus):
    """List of (event_name, data) for everything emitted on bus."""
    seen = []
    bus.subscribe("*", lambda name, data: seen.append((name, data)))
    return seen
