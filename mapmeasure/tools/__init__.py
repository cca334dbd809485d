"""Measurement tools: distance and area sessions on a map."""

from mapmeasure.tools.measurement import (
    MeasureSession,
    MeasurementResult,
    SessionState,
    Trail,
)
from mapmeasure.tools.registry import SessionRegistry
from mapmeasure.tools.renderer import (
    LoggingRenderer,
    NullRenderer,
    PathStyle,
    RecordingRenderer,
    Renderer,
)

__all__ = [
    "MeasureSession",
    "MeasurementResult",
    "SessionState",
    "Trail",
    "SessionRegistry",
    "LoggingRenderer",
    "NullRenderer",
    "PathStyle",
    "RecordingRenderer",
    "Renderer",
]
