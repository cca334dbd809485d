"""
One active measurement session per map.

The registry is the only place that starts and ends sessions, so a map can
never have two measurements in flight: starting again on the same map reuses
the running session and switches its mode instead.
"""
from typing import Callable, Hashable, Optional

from mapmeasure.core.config import MODES, MeasureConfig, build_measure_config
from mapmeasure.core.event_bus import EventBus
from mapmeasure.core.events import MapEvent
from mapmeasure.core.exceptions import InvalidInput
from mapmeasure.core.logger import get_logger
from mapmeasure.geodesy.engine import GeodesyEngine
from mapmeasure.tools.measurement import MeasureSession, MeasurementResult
from mapmeasure.tools.renderer import NullRenderer

logger = get_logger("tools.registry")


class SessionRegistry:
    """Active MeasureSession per map id, with start_session / switch_mode / end_session."""

    def __init__(
        self,
        config: Optional[MeasureConfig] = None,
        renderer_factory: Optional[Callable[[Hashable], object]] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.config = config or build_measure_config()
        self.engine = GeodesyEngine.from_config(self.config)
        self.renderer_factory = renderer_factory or (lambda map_id: NullRenderer())
        self.event_bus = event_bus if event_bus is not None else EventBus()
        self._sessions: dict[Hashable, MeasureSession] = {}
        self._counter = 0

    def __contains__(self, map_id) -> bool:
        return map_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def active(self, map_id) -> Optional[MeasureSession]:
        session = self._sessions.get(map_id)
        if session is not None and session.is_finished:
            # ended directly through the session object
            self._forget(map_id, session)
            return None
        return session

    def start_session(self, map_id, mode: Optional[str] = None) -> MeasureSession:
        """
        Start measuring on map_id. If a session is already active there it is
        returned, switched to mode when a different mode is asked for.
        """
        mode = mode or self.config.default_mode
        session = self.active(map_id)
        if session is not None:
            if session.mode != mode:
                session.set_mode(mode)
            else:
                logger.debug("start_session: %s already measuring %s", map_id, mode)
            return session

        self._counter += 1
        session = MeasureSession(
            self.engine,
            renderer=self.renderer_factory(map_id),
            mode=mode,
            start_label=self.config.start_label,
            event_bus=self.event_bus,
            session_id="%s#%d" % (map_id, self._counter),
            styles={m: self.config.path_style(m) for m in MODES},
            on_end=lambda ended: self._forget(map_id, ended),
        )
        self._sessions[map_id] = session
        logger.info("start_session: %s (%s)", session.session_id, mode)
        return session

    def switch_mode(self, map_id, mode: str) -> MeasureSession:
        session = self._require(map_id)
        session.set_mode(mode)
        return session

    def end_session(self, map_id, cancel: bool = False) -> Optional[MeasurementResult]:
        """Finish (or cancel) the session on map_id and forget it. None when nothing was measured."""
        session = self._require(map_id)
        if cancel:
            session.cancel()
            return None
        return session.finish()

    def dispatch(self, map_id, event: MapEvent) -> Optional[MeasurementResult]:
        """Feed an event to the active session; events for maps without one are dropped."""
        session = self.active(map_id)
        if session is None:
            logger.debug("dispatch: no session on %s, dropping %s", map_id, event.type)
            return None
        if event.finishes:
            logger.debug("dispatch: %s ends %s", event.type, session.session_id)
        return session.handle(event)

    def _forget(self, map_id, session: MeasureSession) -> None:
        """Unregister session if it is still the one registered for map_id."""
        if self._sessions.get(map_id) is session:
            del self._sessions[map_id]
            logger.debug("unregistered %s", session.session_id)

    def _require(self, map_id) -> MeasureSession:
        session = self.active(map_id)
        if session is None:
            raise InvalidInput("no active measurement session on %r" % (map_id,))
        return session
