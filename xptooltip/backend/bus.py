"""Synchronous in-process dispatch of host map events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from xptooltip.backend.events import MapEvent

EventHandler = Callable[[MapEvent], Any]


class MapEventBus:
    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> Subscription:
        self._handlers.append(handler)
        return Subscription(bus=self, handler=handler)

    def publish(self, event: MapEvent) -> None:
        for handler in list(self._handlers):
            handler(event)

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def _unsubscribe(self, handler: EventHandler) -> None:
        for index, candidate in enumerate(self._handlers):
            if candidate is handler:
                del self._handlers[index]
                return


@dataclass
class Subscription:
    """Handle for one registered handler; release it to stop receiving events."""

    bus: MapEventBus
    handler: EventHandler
    released: bool = False

    def release(self) -> None:
        if self.released:
            return
        self.bus._unsubscribe(self.handler)
        self.released = True

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
