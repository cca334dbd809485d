from .config import MeasureConfig, build_measure_config, load_config, get_config, reset_config
from .event_bus import EventBus
from .events import MapEvent
from .exceptions import MapMeasureError, InvalidConfig, InvalidInput
from .logger import get_logger, get_session_logger, setup_logging

__all__ = [
    "MeasureConfig", "build_measure_config", "load_config", "get_config", "reset_config",
    "EventBus", "MapEvent",
    "MapMeasureError", "InvalidConfig", "InvalidInput",
    "get_logger", "get_session_logger", "setup_logging",
]
