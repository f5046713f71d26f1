"""Job pipeline exception hierarchy."""

from __future__ import annotations


class JobPipelineError(Exception):
    """Base exception for all job pipeline errors."""


class PipelineError(JobPipelineError):
    """Error in pipeline configuration or execution bookkeeping."""


class PipelineAlreadyRunError(PipelineError):
    """An executable was run more than once."""

    def __init__(self, executable_id: str) -> None:
        self.executable_id = executable_id
        super().__init__(f"Executable {executable_id} has already been run")


class JobNotRegisteredError(JobPipelineError):
    """No job class or function is registered under the given name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No job registered under {name!r}")


class BindingResolutionError(JobPipelineError):
    """The container could not build an instance or resolve a parameter."""

    def __init__(self, target: str, parameter: str, message: str = "") -> None:
        self.target = target
        self.parameter = parameter
        detail = f": {message}" if message else ""
        super().__init__(f"Unresolvable parameter {parameter!r} of {target}{detail}")


class SerializationError(JobPipelineError):
    """An executable could not be encoded to or decoded from its wire format."""


class QueueError(JobPipelineError):
    """Error in the queue layer."""


class UnknownConnectionError(QueueError):
    """No queue backend is configured under the given connection name."""

    def __init__(self, connection: str) -> None:
        self.connection = connection
        super().__init__(f"Queue connection {connection!r} is not configured")


class QueueBackendError(QueueError):
    """A queue backend operation failed."""
