"""In-process async pub/sub carrying change notices between preset stores."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any
from typing import Awaitable
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

logger = logging.getLogger(__name__)

EventCallback = Callable[[Dict[str, Any]], Awaitable[None]]
Unsubscribe = Callable[[], None]
UserGetter = Callable[[], Optional[str]]

# Events without a userId (shared rows) reach every scoped subscriber.
USER_KEY = "userId"


class EventType(str, Enum):
    PRESETS_CHANGED = "presets_changed"


@dataclass(frozen=True, eq=False)
class Subscription:
    callback: EventCallback
    # Reads the subscriber's current user; None means unscoped.
    user: Optional[UserGetter] = None

    def wants(self, data: Dict[str, Any]) -> bool:
        if self.user is None:
            return True
        changed_for = data.get(USER_KEY)
        return changed_for is None or changed_for == self.user()


class EventBus:
    """Delivers events to subscribers, optionally scoped to one user.

    A subscription scoped with ``user`` (a getter for the subscriber's
    current user id, ``None`` for anonymous) only sees events for that user
    plus events that carry no ``userId``.
    """

    def __init__(self):
        self._subscribers: Dict[EventType, List[Subscription]] = {}

    async def publish(self, event_type: EventType, data: Dict[str, Any]) -> None:
        """Await each interested subscriber in turn; failures are logged and skipped."""
        subscriptions = [s for s in self._subscribers.get(event_type, ()) if s.wants(data)]
        if not subscriptions:
            return

        logger.debug(f"Publishing {event_type.value} to {len(subscriptions)} subscribers: {data}")
        for subscription in subscriptions:
            try:
                await subscription.callback(data)
            except Exception as e:
                logger.error(f"Error in event handler for {event_type.value}: {e}")

    def subscribe(
        self, event_type: EventType, callback: EventCallback, user: Optional[UserGetter] = None
    ) -> Unsubscribe:
        """Register *callback*; the returned function removes it again."""
        subscription = Subscription(callback, user)
        self._subscribers.setdefault(event_type, []).append(subscription)

        def unsubscribe() -> None:
            self._remove(event_type, subscription)

        return unsubscribe

    def unsubscribe(self, event_type: EventType, callback: EventCallback) -> None:
        """Drop every subscription of *callback* to *event_type*."""
        for subscription in [s for s in self._subscribers.get(event_type, ()) if s.callback is callback]:
            self._remove(event_type, subscription)

    def subscriber_count(self, event_type: EventType) -> int:
        return len(self._subscribers.get(event_type, ()))

    def _remove(self, event_type: EventType, subscription: Subscription) -> None:
        remaining = [s for s in self._subscribers.get(event_type, ()) if s is not subscription]
        if remaining:
            self._subscribers[event_type] = remaining
        else:
            self._subscribers.pop(event_type, None)


# Default bus shared by stores that are not handed one explicitly
event_bus = EventBus()
