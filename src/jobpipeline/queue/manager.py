"""Connection name → queue backend registry."""

from __future__ import annotations

import logging
from typing import Callable

from jobpipeline.core.exceptions import UnknownConnectionError
from jobpipeline.core.protocols import IQueueBackend

logger = logging.getLogger(__name__)


class QueueManager:
    """Lazily builds and caches one backend per connection name."""

    def __init__(self, default: str = "memory") -> None:
        self.default = default
        self._factories: dict[str, Callable[[], IQueueBackend]] = {}
        self._connections: dict[str, IQueueBackend] = {}

    def extend(self, name: str, factory: Callable[[], IQueueBackend]) -> None:
        """Register a factory for a connection; replaces any cached backend."""
        self._factories[name] = factory
        self._connections.pop(name, None)

    def add(self, name: str, backend: IQueueBackend) -> None:
        self._connections[name] = backend

    def connection(self, name: str | None = None) -> IQueueBackend:
        name = name or self.default
        if name not in self._connections:
            if name not in self._factories:
                raise UnknownConnectionError(name)
            logger.debug("Opening queue connection %r", name)
            self._connections[name] = self._factories[name]()
        return self._connections[name]

    def names(self) -> list[str]:
        return sorted(set(self._factories) | set(self._connections))
