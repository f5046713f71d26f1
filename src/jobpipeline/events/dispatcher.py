"""In-process event dispatcher that pipeline listeners attach to."""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventDispatcher:
    """IEventDispatcher keyed by event class or string name.

    Listeners run synchronously in registration order; a listener that raises
    stops dispatch and the error reaches the caller of :meth:`dispatch`.
    """

    def __init__(self) -> None:
        self._listeners: dict[type | str, list[Callable[..., Any]]] = {}

    def listen(self, event: type | str, listener: Callable[..., Any]) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def has_listeners(self, event: type | str) -> bool:
        return bool(self._listeners.get(event))

    def forget(self, event: type | str) -> None:
        self._listeners.pop(event, None)

    def listeners_for(self, event: Any) -> list[Callable[..., Any]]:
        if isinstance(event, str):
            return list(self._listeners.get(event, []))
        listeners: list[Callable[..., Any]] = []
        for cls in type(event).__mro__:
            listeners.extend(self._listeners.get(cls, []))
        return listeners

    def dispatch(self, event: Any, *payload: Any) -> None:
        """Fire ``event``; a string event passes only ``payload`` to listeners."""
        listeners = self.listeners_for(event)
        logger.debug("Dispatching %s to %d listener(s)", _event_name(event), len(listeners))
        args = payload if isinstance(event, str) else (event, *payload)
        for listener in listeners:
            listener(*args)


def _event_name(event: Any) -> str:
    return event if isinstance(event, str) else type(event).__qualname__
