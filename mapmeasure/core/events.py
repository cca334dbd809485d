"""Map input events delivered to measurement sessions, and session event names."""
from mapmeasure.core.exceptions import InvalidInput

CLICK = "click"
MOVE = "move"
DOUBLE_CLICK = "doubleclick"
RIGHT_CLICK = "rightclick"
CANCEL = "cancel"

EVENT_TYPES = (CLICK, MOVE, DOUBLE_CLICK, RIGHT_CLICK, CANCEL)
FINISHING_EVENTS = (DOUBLE_CLICK, RIGHT_CLICK, CANCEL)

# Emitted on the EventBus by MeasureSession
SESSION_STARTED = "session_started"
POINT_ADDED = "point_added"
MODE_CHANGED = "mode_changed"
MEASUREMENT_FINISHED = "measurement_finished"
SESSION_CANCELLED = "session_cancelled"


class MapEvent:
    """One pointer event from the map: type plus the point under the cursor (None for cancel)."""

    __slots__ = ("type", "point")

    def __init__(self, type_, point=None):
        if type_ not in EVENT_TYPES:
            raise InvalidInput("unknown map event type %r" % (type_,))
        if point is None and type_ in (CLICK, MOVE):
            raise InvalidInput("%s event needs a point" % type_)
        if point is not None:
            from mapmeasure.geodesy.engine import GeoPoint
            point = GeoPoint.of(point)
        self.type = type_
        self.point = point

    @property
    def finishes(self) -> bool:
        return self.type in FINISHING_EVENTS

    def __repr__(self):
        return "MapEvent(%r, %r)" % (self.type, self.point)
