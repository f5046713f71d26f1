"""Runtime: the explicit context a pipeline, its listener and workers share."""

from __future__ import annotations

from typing import Any, Iterable

from jobpipeline.core.config import AppSettings
from jobpipeline.di.container import Container
from jobpipeline.events.dispatcher import EventDispatcher
from jobpipeline.pipeline.definition import JobPipeline
from jobpipeline.pipeline.jobs import JobRegistry
from jobpipeline.queue import create_queue_manager
from jobpipeline.queue.dispatcher import QueueDispatcher
from jobpipeline.queue.manager import QueueManager
from jobpipeline.queue.worker import Worker


class Runtime:
    """Settings, container, job registry, queues and events for one process.

    Nothing here is global: tests build a fresh Runtime per case, and a worker
    process builds the same Runtime as the application that queued the work so
    job names resolve identically on both sides.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        container: Container | None = None,
        registry: JobRegistry | None = None,
        queues: QueueManager | None = None,
        events: EventDispatcher | None = None,
    ) -> None:
        self.settings = settings or AppSettings()
        self.container = container or Container()
        self.registry = registry or JobRegistry()
        self.queues = queues or create_queue_manager(self.settings)
        self.events = events or EventDispatcher()
        self.dispatcher = QueueDispatcher(self.queues, self.registry, self.settings.pipeline)
        self.container.instance(Runtime, self)

    def pipeline(self, jobs: Iterable[Any]) -> JobPipeline:
        return JobPipeline.make(jobs, self)

    def worker(self) -> Worker:
        return Worker(self)
