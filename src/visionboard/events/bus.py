"""Async event bus for visionboard services."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable, Coroutine
from typing import Any

from visionboard.events.types import EventType

logger = logging.getLogger(__name__)

Listener = Callable[[EventType, dict[str, Any]], Coroutine[Any, Any, None]]


class EventBus:
    """Fan-out of service events to async listeners.

    A failing listener is logged and skipped; it never aborts the mutation
    that emitted the event.
    """

    def __init__(self) -> None:
        self._listeners: dict[EventType, list[Listener]] = defaultdict(list)
        self._global_listeners: list[Listener] = []

    def on(self, event_type: EventType, listener: Listener) -> None:
        self._listeners[event_type].append(listener)

    def on_all(self, listener: Listener) -> None:
        self._global_listeners.append(listener)

    def off(self, event_type: EventType, listener: Listener) -> None:
        if listener in self._listeners[event_type]:
            self._listeners[event_type].remove(listener)

    def listener_count(self, event_type: EventType) -> int:
        return len(self._listeners.get(event_type, [])) + len(self._global_listeners)

    async def emit(self, event_type: EventType, data: dict[str, Any] | None = None) -> int:
        """Deliver an event. Returns the number of listeners that succeeded."""
        data = data or {}
        delivered = 0
        for listener in [*self._listeners.get(event_type, []), *self._global_listeners]:
            try:
                await listener(event_type, data)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Listener failed for %s", event_type)
            else:
                delivered += 1
        return delivered

    def clear(self) -> None:
        self._listeners.clear()
        self._global_listeners.clear()
