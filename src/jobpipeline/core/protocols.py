"""Protocol interfaces for the job pipeline's collaborators.

The pipeline core only talks to the container, the queue layer and the event
dispatcher through these Protocols: structural typing, no inheritance
required, easy to test with isinstance().
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from jobpipeline.models.pipeline import ReservedJob
    from jobpipeline.pipeline.executable import Executable


# ---------------------------------------------------------------------------
# Jobs
# ---------------------------------------------------------------------------

@runtime_checkable
class HandlesFailure(Protocol):
    """A job that recovers its own handler failures."""

    def failed(self, error: BaseException) -> Any: ...


# ---------------------------------------------------------------------------
# Dependency injection
# ---------------------------------------------------------------------------

@runtime_checkable
class IContainer(Protocol):
    """Builds job instances and invokes handlers with resolved parameters."""

    def make(self, cls: type, *args: Any) -> Any: ...

    def call(self, func: Callable[..., Any], values: Sequence[Any] = ()) -> Any: ...


# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------

@runtime_checkable
class IQueueBackend(Protocol):
    """Transport that stores encoded executables until a worker reserves them."""

    def push(self, queue: str, body: str, delay: float = 0) -> str: ...

    def pop(self, queue: str) -> ReservedJob | None: ...

    def delete(self, job: ReservedJob) -> None: ...

    def release(self, job: ReservedJob, delay: float = 0) -> None: ...

    def bury(self, job: ReservedJob, error: str) -> None: ...

    def size(self, queue: str) -> int: ...

    def failed_count(self, queue: str) -> int: ...

    def ping(self) -> bool: ...


@runtime_checkable
class IQueueDispatcher(Protocol):
    """Hands an executable over to the queue named by its routing metadata."""

    def enqueue(self, executable: Executable) -> str: ...


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventDispatcher(Protocol):
    """Registers listeners for event types and fires events at them."""

    def listen(self, event: type | str, listener: Callable[..., Any]) -> None: ...

    def dispatch(self, event: Any, *payload: Any) -> None: ...
