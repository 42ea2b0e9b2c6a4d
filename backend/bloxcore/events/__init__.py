"""In-process publish/subscribe used for remote preset change streams."""

from bloxcore.events.event_bus import USER_KEY
from bloxcore.events.event_bus import EventBus
from bloxcore.events.event_bus import EventType
from bloxcore.events.event_bus import event_bus

__all__ = ["USER_KEY", "EventBus", "EventType", "event_bus"]
