"""Hands executables to the queue backend their routing names."""

from __future__ import annotations

import logging

from jobpipeline.core.config import PipelineSettings
from jobpipeline.pipeline.codec import encode
from jobpipeline.pipeline.executable import Executable
from jobpipeline.pipeline.jobs import JobRegistry
from jobpipeline.queue.manager import QueueManager

logger = logging.getLogger(__name__)


class QueueDispatcher:
    """IQueueDispatcher that encodes executables and pushes them to a backend."""

    def __init__(self, queues: QueueManager, registry: JobRegistry,
                 settings: PipelineSettings | None = None) -> None:
        self._queues = queues
        self._registry = registry
        self._settings = settings or PipelineSettings()

    def enqueue(self, executable: Executable) -> str:
        """Push the executable and return the backend's message id."""
        routing = executable.routing
        connection = routing.connection or self._settings.default_connection
        queue = routing.queue or self._settings.default_queue
        body = encode(executable, self._registry, self._settings.signing_secret())
        message_id = self._queues.connection(connection).push(queue, body, routing.delay_seconds())
        logger.info(
            "Queued executable %s on %s/%s as message %s", executable.id, connection, queue, message_id,
        )
        return message_id
