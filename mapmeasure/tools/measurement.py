"""Measurement sessions: click points on the map, get a running distance or a final area."""

import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional

from mapmeasure.core import events
from mapmeasure.core.config import MODES
from mapmeasure.core.event_bus import EventBus
from mapmeasure.core.events import MapEvent
from mapmeasure.core.exceptions import InvalidInput
from mapmeasure.core.logger import get_logger, get_session_logger
from mapmeasure.geodesy.engine import GeoPoint, GeodesyEngine
from mapmeasure.geodesy.units import format_value, select_unit
from mapmeasure.tools.renderer import NullRenderer, PathStyle

logger = get_logger("tools.measurement")

_session_ids = itertools.count(1)


class SessionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    FINISHED = "finished"


class Trail:
    """
    Points placed so far and the length of each segment.
    distances[0] is 0 and distances[i] is the segment from points[i-1] to points[i].
    """

    def __init__(self):
        self.points: list[GeoPoint] = []
        self.distances: list[float] = []

    def __len__(self) -> int:
        return len(self.points)

    @property
    def last_point(self) -> Optional[GeoPoint]:
        return self.points[-1] if self.points else None

    @property
    def total_distance(self) -> float:
        return sum(self.distances)

    def append(self, point: GeoPoint, segment: float) -> None:
        if not self.points:
            segment = 0.0
        self.points.append(point)
        self.distances.append(segment)

    def cumulative_distances(self) -> list[float]:
        return list(itertools.accumulate(self.distances))

    def clear(self) -> None:
        self.points = []
        self.distances = []


@dataclass(frozen=True)
class MeasurementResult:
    """Outcome of a finished session. value is meters (distance) or square meters (area)."""

    mode: str
    value: float
    unit: str
    text: str
    points: tuple


def _check_mode(mode: str) -> str:
    if mode not in MODES:
        raise InvalidInput("invalid measurement mode %r (choose from %s)" % (mode, ", ".join(MODES)))
    return mode


class MeasureSession:
    """
    One measurement on one map: IDLE until the first click, ACTIVE while points
    are added, FINISHED after finish() or cancel(). A finished session ignores
    further events.

    styles maps each mode to the PathStyle handed to the renderer. on_end is
    called with the session as soon as it is FINISHED, before any event is
    emitted about it.
    """

    def __init__(
        self,
        engine: GeodesyEngine,
        renderer=None,
        mode: str = "distance",
        start_label: str = "Start",
        event_bus: Optional[EventBus] = None,
        session_id: Optional[str] = None,
        styles: Optional[Mapping[str, PathStyle]] = None,
        on_end: Optional[Callable[["MeasureSession"], None]] = None,
    ):
        self.engine = engine
        self.renderer = renderer or NullRenderer()
        self.mode = _check_mode(mode)
        self.start_label = start_label
        self.event_bus = event_bus
        self.session_id = session_id or "session-%d" % next(_session_ids)
        self.state = SessionState.IDLE
        self.trail = Trail()
        self.result: Optional[MeasurementResult] = None
        self.styles = dict(styles or {})
        self.on_end = on_end
        self.log = get_session_logger(logger, self.session_id, mode=self.mode)

    def _emit(self, name, data=None):
        if self.event_bus is not None:
            self.event_bus.emit(name, data)

    def _apply_style(self):
        self.renderer.set_style(self.styles.get(self.mode) or PathStyle(caption=self.mode))

    def _end(self):
        self.state = SessionState.FINISHED
        if self.on_end is not None:
            self.on_end(self)

    @property
    def is_area(self) -> bool:
        return self.mode == "area"

    @property
    def is_finished(self) -> bool:
        return self.state is SessionState.FINISHED

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def handle(self, event: MapEvent) -> Optional[MeasurementResult]:
        """Dispatch one map event. Returns the result when the event finished the session."""
        if self.is_finished:
            self.log.debug("ignoring %s: session finished", event.type)
            return None
        if event.type == events.CLICK:
            self.add_point(event.point)
        elif event.type == events.MOVE:
            self.move(event.point)
        elif event.finishes:
            if event.type == events.CANCEL:
                self.cancel()
            else:
                return self.finish()
        return None

    def add_point(self, point) -> None:
        """Commit a clicked point. A click on the previous point is ignored."""
        if self.is_finished:
            raise InvalidInput("session %s has ended" % self.session_id)
        point = GeoPoint.of(point)
        trail = self.trail
        if trail.last_point == point:
            return

        if not trail.points:
            trail.append(point, 0.0)
            self.state = SessionState.ACTIVE
            self._apply_style()
            self.log.info("started %s measurement at %.6f, %.6f", self.mode, point.lat, point.lng)
            self._emit(events.SESSION_STARTED, self)
        else:
            trail.append(point, self.engine.distance(trail.last_point, point))

        self.renderer.draw_path(list(trail.points), self.is_area, False)
        self.renderer.draw_path(list(trail.points), self.is_area, True)
        self.renderer.add_marker(point)
        if not self.is_area:
            if len(trail) == 1:
                self.renderer.add_label(point, self.start_label, False)
            else:
                self.renderer.add_label(point, self.engine.distance_string(trail.total_distance), False)
        self._emit(events.POINT_ADDED, point)

    def move(self, point) -> None:
        """Rubber-band preview from the last committed point to the cursor. Never touches the trail."""
        if self.is_finished or not self.trail.points:
            return
        point = GeoPoint.of(point)
        self.renderer.draw_path(self.trail.points + [point], self.is_area, True)

    def preview_text(self, point) -> Optional[str]:
        """Label the host may show at the cursor: what the measurement would be if point were clicked."""
        if not self.trail.points:
            return None
        point = GeoPoint.of(point)
        if self.is_area:
            return self.engine.area_string(self.trail.points + [point])
        total = self.trail.total_distance + self.engine.distance(self.trail.last_point, point)
        return self.engine.distance_string(total)

    # ------------------------------------------------------------------
    # Ending
    # ------------------------------------------------------------------
    def finish(self) -> Optional[MeasurementResult]:
        """
        Finalize: with two or more points, label and return the measurement
        (area with fewer than three points is 0). Otherwise discard.
        """
        if self.is_finished:
            return self.result
        if len(self.trail) < 2:
            self._discard()
            return None

        points = tuple(self.trail.points)
        if self.is_area:
            value = self.engine.enclosed_area(points)
            units = self.engine.area_units
        else:
            value = self.trail.total_distance
            units = self.engine.distance_units
        unit, size = select_unit(value, units)
        text = format_value(value, unit, size, self.engine.format_options)
        result = MeasurementResult(mode=self.mode, value=value, unit=unit, text=text, points=points)

        # drop the rubber-band segment to the cursor
        self.renderer.draw_path(list(points), self.is_area, True)
        self.renderer.add_label(points[-1], text, True)
        self.renderer.show_result(result)

        self.result = result
        self.trail.clear()
        self._end()
        self.log.info("finished %s measurement: %s (%d points)", self.mode, text, len(points))
        self._emit(events.MEASUREMENT_FINISHED, result)
        return result

    def cancel(self) -> None:
        """Discard the measurement without a result."""
        if self.is_finished:
            return
        self._discard()

    def _discard(self) -> None:
        self.renderer.clear()
        placed = len(self.trail)
        self.trail.clear()
        self._end()
        self.log.info("discarded %s measurement (%d points)", self.mode, placed)
        self._emit(events.SESSION_CANCELLED, self)

    # ------------------------------------------------------------------
    # Mode switching
    # ------------------------------------------------------------------
    def set_mode(self, mode: str) -> None:
        """Switch between distance and area, keeping the points; path and labels are redrawn."""
        _check_mode(mode)
        if self.is_finished:
            raise InvalidInput("session %s has ended" % self.session_id)
        if mode == self.mode:
            return
        self.log.info("switching mode %s -> %s", self.mode, mode)
        self.mode = mode
        self.log.extra["mode"] = mode
        self._apply_style()
        self._redraw_path()
        self._redraw_labels()
        self._emit(events.MODE_CHANGED, mode)

    def _redraw_path(self) -> None:
        self.renderer.clear_path()
        points = list(self.trail.points)
        if not points:
            return
        self.renderer.draw_path(points, self.is_area, False)
        self.renderer.draw_path(points, self.is_area, True)
        for point in points:
            self.renderer.add_marker(point)

    def _redraw_labels(self) -> None:
        self.renderer.clear_labels()
        # area labels only appear once the ring is closed by finish()
        if self.is_area or not self.trail.points:
            return
        for i, (point, total) in enumerate(zip(self.trail.points, self.trail.cumulative_distances())):
            if i == 0:
                self.renderer.add_label(point, self.start_label, False)
            else:
                self.renderer.add_label(point, self.engine.distance_string(total), False)
