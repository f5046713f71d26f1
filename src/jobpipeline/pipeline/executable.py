"""Executable: a one-shot snapshot of a pipeline bound to its passable."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Iterable

from jobpipeline.core.exceptions import PipelineAlreadyRunError
from jobpipeline.core.protocols import HandlesFailure, IContainer
from jobpipeline.core.types import Passable
from jobpipeline.models.pipeline import RoutingMetadata
from jobpipeline.pipeline.jobs import JobDescriptor, NamedJob

logger = logging.getLogger(__name__)


class Executable:
    """Jobs, passable and routing for a single pipeline run.

    Holds no send transform. Runs at most once, either inline or on a worker
    after a round trip through :mod:`jobpipeline.pipeline.codec`.
    """

    def __init__(
        self,
        jobs: Iterable[JobDescriptor],
        passable: Iterable[Any],
        routing: RoutingMetadata | None = None,
        should_be_queued: bool = False,
        id: str | None = None,
    ) -> None:
        self.id = id or uuid.uuid4().hex
        self.jobs: tuple[JobDescriptor, ...] = tuple(jobs)
        self.passable: Passable = tuple(passable)
        self.routing = routing or RoutingMetadata()
        self.should_be_queued = should_be_queued
        self._ran = False

    @property
    def has_run(self) -> bool:
        return self._ran

    def run(self, container: IContainer) -> None:
        """Run the jobs in order until one returns ``False`` or fails.

        A failing job that implements ``failed`` receives the error and the
        chain stops quietly. Any other failure propagates unchanged.
        """
        if self._ran:
            raise PipelineAlreadyRunError(self.id)
        self._ran = True

        for position, descriptor in enumerate(self.jobs):
            fail_handler = None
            if isinstance(descriptor, NamedJob):
                instance = container.make(descriptor.job_class, *self.passable)
                invocable = instance.handle
                if isinstance(instance, HandlesFailure):
                    fail_handler = instance.failed
                label = descriptor.name
            else:
                invocable = descriptor.func
                label = getattr(descriptor.func, "__qualname__", repr(descriptor.func))

            try:
                result = container.call(invocable, self.passable)
            except Exception as exc:
                if fail_handler is None:
                    raise
                logger.warning(
                    "Job %s (%d/%d) of executable %s failed, delegating to its failed handler: %s",
                    label, position + 1, len(self.jobs), self.id, exc,
                )
                fail_handler(exc)
                return

            if result is False:
                logger.info(
                    "Job %s (%d/%d) cancelled executable %s",
                    label, position + 1, len(self.jobs), self.id,
                )
                return

    def __repr__(self) -> str:
        names = [d.name if isinstance(d, NamedJob) else getattr(d.func, "__name__", "?") for d in self.jobs]
        return f"Executable(id={self.id!r}, jobs={names!r}, queued={self.should_be_queued})"
