"""JobPipeline: the configurable definition a listener is generated from."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Callable, Iterable, Sequence

from jobpipeline.core.types import Listener, Passable, SendFn
from jobpipeline.models.pipeline import RoutingMetadata
from jobpipeline.pipeline.executable import Executable

if TYPE_CHECKING:
    from jobpipeline.runtime import Runtime

logger = logging.getLogger(__name__)


def _passthrough(event: Any, *_: Any) -> Any:
    # Without a send transform the event itself is what the jobs receive.
    return event


def normalize_passable(value: Any) -> Passable:
    """Wrap anything that is not a list or tuple into a one-element passable."""
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


class JobPipeline:
    """An ordered chain of jobs triggered by an event.

    Usage::

        listener = (
            runtime.pipeline([CreateDatabase, MigrateDatabase])
            .send(lambda event: event.tenant)
            .should_be_queued("provisioning")
            .tries(3)
            .to_listener()
        )
        runtime.events.listen(TenantCreated, listener)
    """

    def __init__(
        self,
        jobs: Iterable[Any],
        runtime: Runtime,
        send: SendFn | None = None,
        should_be_queued: bool | None = None,
    ) -> None:
        self._runtime = runtime
        self.jobs = runtime.registry.describe_all(jobs)
        self._send: SendFn = send or _passthrough
        if should_be_queued is None:
            should_be_queued = runtime.settings.pipeline.queued_by_default
        self.queued = should_be_queued
        self.routing = RoutingMetadata()

    @classmethod
    def make(cls, jobs: Iterable[Any], runtime: Runtime) -> JobPipeline:
        return cls(jobs, runtime)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def send(self, send: Callable[..., Any]) -> JobPipeline:
        """Set the transform from event arguments to the passable."""
        if not callable(send):
            raise TypeError(f"send expects a callable, got {type(send).__name__}")
        self._send = send
        return self

    def should_be_queued(self, should_be_queued: bool | str = True) -> JobPipeline:
        """Queue the pipeline; a string also names the queue it is pushed to."""
        if isinstance(should_be_queued, bool):
            self.queued = should_be_queued
        elif isinstance(should_be_queued, str):
            self.queued = True
            self._route(queue=should_be_queued)
        else:
            raise TypeError(f"should_be_queued expects a bool or a queue name, got {should_be_queued!r}")
        return self

    def on_connection(self, connection: str | None) -> JobPipeline:
        if connection is not None and not isinstance(connection, str):
            raise TypeError(f"connection must be a string or None, got {connection!r}")
        self._route(connection=connection)
        return self

    def on_queue(self, queue: str | None) -> JobPipeline:
        if queue is not None and not isinstance(queue, str):
            raise TypeError(f"queue must be a string or None, got {queue!r}")
        self._route(queue=queue)
        return self

    def delay(self, delay: float | timedelta | datetime | None) -> JobPipeline:
        """Defer a queued run by a number of seconds, a timedelta or until a datetime."""
        if isinstance(delay, timedelta):
            delay = delay.total_seconds()
        elif delay is not None and (isinstance(delay, bool) or not isinstance(delay, (int, float, datetime))):
            raise TypeError(f"delay must be seconds, a timedelta or a datetime, got {delay!r}")
        self._route(delay=delay)
        return self

    def tries(self, max_tries: int | None) -> JobPipeline:
        if max_tries is not None and (isinstance(max_tries, bool) or not isinstance(max_tries, int)):
            raise TypeError(f"max_tries must be an int or None, got {max_tries!r}")
        if max_tries is not None and max_tries < 1:
            raise ValueError(f"max_tries must be at least 1, got {max_tries}")
        self._route(max_tries=max_tries)
        return self

    def _route(self, **changes: Any) -> None:
        # Executables already taken keep the routing object they were given.
        self.routing = RoutingMetadata(**{**self.routing.model_dump(), **changes})

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def to_executable(self, event_args: Sequence[Any]) -> Executable:
        """Run the send transform and snapshot the pipeline around its result."""
        passable = normalize_passable(self._send(*event_args))
        executable = Executable(
            jobs=self.jobs,
            passable=passable,
            routing=self.routing,
            should_be_queued=self.queued,
        )
        logger.debug("Created %r with %d passable value(s)", executable, len(passable))
        return executable

    def to_listener(self) -> Listener:
        """Return a callable that runs or queues the pipeline for each event."""

        def listener(*args: Any) -> None:
            executable = self.to_executable(args)
            if executable.should_be_queued:
                self._runtime.dispatcher.enqueue(executable)
            else:
                executable.run(self._runtime.container)

        return listener
