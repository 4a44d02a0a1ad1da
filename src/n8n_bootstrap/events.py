"""In-process event bus connecting collaborators to the controller."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

_LOG = logging.getLogger(__name__)

Listener = Callable[[Any], None]
Unlisten = Callable[[], None]


class EventBus:
    """Named-event fan-out, delivered synchronously on the emitting thread.

    Collaborators emit from the event loop, so listeners run to completion
    before the emitter resumes.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def listen(self, event: str, listener: Listener) -> Unlisten:
        """Subscribe *listener* to *event*; the returned callable unsubscribes it (idempotent)."""
        self._listeners.setdefault(event, []).append(listener)

        def unlisten() -> None:
            listeners = self._listeners.get(event, [])
            if listener in listeners:
                listeners.remove(listener)

        return unlisten

    def emit(self, event: str, payload: Any) -> None:
        for listener in list(self._listeners.get(event, ())):
            try:
                listener(payload)
            except Exception:
                _LOG.exception("Listener for %s failed", event)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))
