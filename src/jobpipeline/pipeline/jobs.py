"""Job descriptors and the registry that resolves them by name."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from jobpipeline.core.exceptions import JobNotRegisteredError, SerializationError
from jobpipeline.models.pipeline import JobKind, JobReference


@dataclass(frozen=True)
class NamedJob:
    """A registered job class, built through the container on every run."""

    name: str
    job_class: type


@dataclass(frozen=True)
class InlineJob:
    """A plain function invoked directly with the passable."""

    func: Callable[..., Any]


JobDescriptor = NamedJob | InlineJob


def qualified_name(target: Any) -> str:
    return f"{target.__module__}.{target.__qualname__}"


class JobRegistry:
    """Name → job class / function lookup.

    Job classes are always referenced by name, so a pipeline holding them can be
    serialized. Inline functions only need a name when their pipeline is queued.
    """

    def __init__(self) -> None:
        self._classes: dict[str, type] = {}
        self._functions: dict[str, Callable[..., Any]] = {}

    def register(self, job: type | Callable[..., Any], name: str | None = None) -> str:
        """Register a job class or function; returns the name it is stored under."""
        key = name or qualified_name(job)
        if isinstance(job, type):
            self._classes[key] = job
        else:
            self._functions[key] = job
        return key

    def job(self, name: str | None = None):
        """Decorator form of :meth:`register`."""

        def decorator(target):
            self.register(target, name)
            return target

        return decorator

    def resolve_class(self, name: str) -> type:
        try:
            return self._classes[name]
        except KeyError:
            raise JobNotRegisteredError(name) from None

    def resolve_function(self, name: str) -> Callable[..., Any]:
        try:
            return self._functions[name]
        except KeyError:
            raise JobNotRegisteredError(name) from None

    def name_of(self, func: Callable[..., Any]) -> str | None:
        for key, registered in self._functions.items():
            if registered is func:
                return key
        return None

    def __contains__(self, name: str) -> bool:
        return name in self._classes or name in self._functions

    # ------------------------------------------------------------------
    # Descriptor conversion
    # ------------------------------------------------------------------

    def describe(self, job: str | type | Callable[..., Any] | JobDescriptor) -> JobDescriptor:
        """Turn a user-supplied job into a descriptor, registering classes on the way."""
        if isinstance(job, (NamedJob, InlineJob)):
            return job
        if isinstance(job, str):
            return NamedJob(job, self.resolve_class(job))
        if isinstance(job, type):
            for key, registered in self._classes.items():
                if registered is job:
                    return NamedJob(key, job)
            return NamedJob(self.register(job), job)
        if callable(job):
            return InlineJob(job)
        raise TypeError(f"Not a job: {job!r}")

    def describe_all(self, jobs: Iterable[Any]) -> tuple[JobDescriptor, ...]:
        return tuple(self.describe(job) for job in jobs)

    def reference(self, descriptor: JobDescriptor) -> JobReference:
        if isinstance(descriptor, NamedJob):
            return JobReference(kind=JobKind.NAMED, name=descriptor.name)
        name = self.name_of(descriptor.func)
        if name is None:
            raise SerializationError(
                f"Inline job {descriptor.func!r} must be registered before its pipeline can be queued"
            )
        return JobReference(kind=JobKind.INLINE, name=name)

    def from_reference(self, reference: JobReference) -> JobDescriptor:
        if reference.kind is JobKind.NAMED:
            return NamedJob(reference.name, self.resolve_class(reference.name))
        return InlineJob(self.resolve_function(reference.name))
