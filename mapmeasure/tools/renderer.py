"""
Rendering collaborators for measurement sessions.

The session never draws anything itself: it tells a Renderer which path,
markers and labels to show. Hosts implement Renderer on top of their map
widget; RecordingRenderer and LoggingRenderer serve tests and headless runs.
"""
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

from mapmeasure.core.logger import get_logger

log = get_logger("renderer")


@dataclass(frozen=True)
class PathStyle:
    """Colors of the path and vertex markers, and the caption of the current mode."""

    color: str = "#FF0080"
    point_color: str = "#FFFFFF"
    caption: str = ""


class Renderer(Protocol):
    """What a measurement session needs from the map display."""

    def set_style(self, style: PathStyle) -> None:
        """Use style for everything drawn from now on."""

    def draw_path(self, points: Sequence, closed: bool, preview: bool) -> None:
        """Show (or replace) the committed path, or the rubber-band preview when preview is True."""

    def add_marker(self, point) -> None:
        """Drop a vertex marker at point."""

    def add_label(self, point, text: str, is_final: bool) -> None:
        """Place a text label at point; final labels carry a close control."""

    def clear_labels(self) -> None:
        """Remove all labels of the session."""

    def clear_path(self) -> None:
        """Remove path, preview and markers of the session."""

    def clear(self) -> None:
        """Remove every overlay the session created."""

    def show_result(self, result) -> None:
        """A session finished with result."""


class NullRenderer:
    """Renderer that draws nothing."""

    def set_style(self, style):
        pass

    def draw_path(self, points, closed, preview):
        pass

    def add_marker(self, point):
        pass

    def add_label(self, point, text, is_final):
        pass

    def clear_labels(self):
        pass

    def clear_path(self):
        pass

    def clear(self):
        pass

    def show_result(self, result):
        pass


@dataclass(frozen=True)
class RenderCall:
    name: str
    args: tuple


class RecordingRenderer:
    """
    Keeps the current overlay state plus an ordered log of every call.
    Useful for tests and for hosts that redraw from state.
    """

    def __init__(self):
        self.calls: list[RenderCall] = []
        self.path: list = []
        self.path_closed = False
        self.preview: list = []
        self.markers: list = []
        self.labels: list[tuple[Any, str, bool]] = []
        self.results: list = []
        self.style: Optional[PathStyle] = None

    def _record(self, name, *args):
        self.calls.append(RenderCall(name, args))

    def set_style(self, style):
        self._record("set_style", style)
        self.style = style

    def draw_path(self, points, closed, preview):
        self._record("draw_path", tuple(points), closed, preview)
        if preview:
            self.preview = list(points)
        else:
            self.path = list(points)
            self.path_closed = closed

    def add_marker(self, point):
        self._record("add_marker", point)
        self.markers.append(point)

    def add_label(self, point, text, is_final):
        self._record("add_label", point, text, is_final)
        self.labels.append((point, text, is_final))

    def clear_labels(self):
        self._record("clear_labels")
        self.labels = []

    def clear_path(self):
        self._record("clear_path")
        self.path = []
        self.preview = []
        self.markers = []

    def clear(self):
        self._record("clear")
        self.clear_path()
        self.clear_labels()

    def show_result(self, result):
        self._record("show_result", result)
        self.results.append(result)

    @property
    def label_texts(self) -> list[str]:
        return [text for _, text, _ in self.labels]

    @property
    def final_label(self) -> Optional[str]:
        finals = [text for _, text, final in self.labels if final]
        return finals[-1] if finals else None

    def names(self) -> list[str]:
        return [c.name for c in self.calls]


class LoggingRenderer:
    """Renderer that writes every overlay change to the mapmeasure log."""

    def __init__(self, logger=None):
        self.log = logger or log

    def set_style(self, style):
        self.log.debug("set_style: %s path=%s points=%s", style.caption or "-", style.color, style.point_color)

    def draw_path(self, points, closed, preview):
        self.log.debug("draw_path: %d points closed=%s preview=%s", len(points), closed, preview)

    def add_marker(self, point):
        self.log.debug("add_marker: %.6f, %.6f", point.lat, point.lng)

    def add_label(self, point, text, is_final):
        self.log.info("%slabel at %.6f, %.6f: %s", "final " if is_final else "", point.lat, point.lng, text)

    def clear_labels(self):
        self.log.debug("clear_labels")

    def clear_path(self):
        self.log.debug("clear_path")

    def clear(self):
        self.log.debug("clear")

    def show_result(self, result):
        self.log.info("measurement finished: %s = %s", result.mode, result.text)
