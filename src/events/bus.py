"""
Incredicer - Event Bus

Observer registry the engine publishes to. Subscribers register plain
callables and never see the engine's internals; the engine never sees the
subscribers' types.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterable, Iterator

from src.events.types import CoreEvent, EventPayload

logger = logging.getLogger(__name__)

Subscriber = Callable[[EventPayload], None]


class EventBus:
    """Dispatches EventPayloads to registered callbacks.

    Callbacks run synchronously on the publishing thread. A failing callback
    is logged and skipped; it never propagates into the publisher.

    Inside ``batch()`` publications are queued and delivered in order when
    the outermost batch exits, so a multi-step mutation is observed only
    once it has fully completed.
    """

    def __init__(self) -> None:
        self._subscribers: list[tuple[Subscriber, frozenset[CoreEvent] | None]] = []
        self._lock = threading.Lock()
        self._local = threading.local()

    def subscribe(
        self,
        callback: Subscriber,
        events: Iterable[CoreEvent] | None = None,
    ) -> Subscriber:
        """Register a callback for all events, or only for ``events``.

        Returns the callback so it can be handed back to ``unsubscribe``.
        """
        wanted = frozenset(events) if events is not None else None
        with self._lock:
            self._subscribers.append((callback, wanted))
        return callback

    def unsubscribe(self, callback: Subscriber) -> None:
        """Remove every registration of ``callback``."""
        with self._lock:
            self._subscribers = [
                (cb, wanted) for cb, wanted in self._subscribers if cb is not callback
            ]

    def publish(self, event: CoreEvent, **data: Any) -> None:
        """Publish an event now, or queue it if a batch is open."""
        payload = EventPayload(event=event, data=data)
        state = self._state()
        if state.depth > 0:
            state.queue.append(payload)
            return
        self._dispatch(payload)

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Hold publications until the outermost batch exits.

        Queued events are dropped if the block raises.
        """
        state = self._state()
        state.depth += 1
        completed = False
        try:
            yield
            completed = True
        finally:
            state.depth -= 1
            if state.depth == 0:
                queued, state.queue = state.queue, []
                if completed:
                    for payload in queued:
                        self._dispatch(payload)

    def _state(self) -> threading.local:
        state = self._local
        if not hasattr(state, "depth"):
            state.depth = 0
            state.queue = []
        return state

    def _dispatch(self, payload: EventPayload) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback, wanted in subscribers:
            if wanted is not None and payload.event not in wanted:
                continue
            try:
                callback(payload)
            except Exception:
                logger.exception("Subscriber %r failed handling %s", callback, payload.event.name)
