"""Queue worker: pops encoded executables and runs them."""

from __future__ import annotations

import logging
import time
import traceback
from typing import TYPE_CHECKING, Callable

from jobpipeline.core.config import WorkerConfig
from jobpipeline.core.exceptions import JobNotRegisteredError, SerializationError
from jobpipeline.models.pipeline import JobOutcome
from jobpipeline.pipeline.codec import decode

if TYPE_CHECKING:
    from jobpipeline.runtime import Runtime

logger = logging.getLogger(__name__)


class Worker:
    """Runs queued executables one message at a time.

    A run that raises is released back to its queue while it has tries left,
    and buried once ``max_tries`` attempts have failed. Failures a job handled
    through its own ``failed`` method never reach the worker.
    """

    def __init__(self, runtime: Runtime, config: WorkerConfig | None = None,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self._runtime = runtime
        self._config = config or runtime.settings.worker
        self._sleep = sleep
        self._should_stop = False

    def stop(self) -> None:
        self._should_stop = True

    def run_next(self, connection: str | None = None, queue: str | None = None) -> JobOutcome | None:
        """Process a single message; returns ``None`` when the queue is empty."""
        settings = self._runtime.settings.pipeline
        queue = queue or settings.default_queue
        backend = self._runtime.queues.connection(connection)

        job = backend.pop(queue)
        if job is None:
            return None

        try:
            executable = decode(job.body, self._runtime.registry, settings.signing_secret())
        except (SerializationError, JobNotRegisteredError) as exc:
            # Undecodable messages are buried without retry.
            logger.error("Burying undecodable message %s from %s: %s", job.id, queue, exc)
            backend.bury(job, _format_error(exc))
            return JobOutcome.FAILED

        max_tries = executable.routing.max_tries
        if max_tries is None:
            max_tries = settings.default_tries
        try:
            executable.run(self._runtime.container)
        except Exception as exc:
            if job.attempts < max_tries:
                logger.warning(
                    "Executable %s failed on attempt %d/%d, releasing: %s",
                    executable.id, job.attempts, max_tries, exc,
                )
                backend.release(job, self._config.backoff_seconds)
                return JobOutcome.RELEASED
            logger.error(
                "Executable %s failed after %d attempt(s), burying: %s",
                executable.id, job.attempts, exc,
            )
            backend.bury(job, _format_error(exc))
            return JobOutcome.FAILED

        backend.delete(job)
        logger.info("Executable %s completed on attempt %d", executable.id, job.attempts)
        return JobOutcome.COMPLETED

    def work(self, connection: str | None = None, queue: str | None = None, once: bool = False) -> int:
        """Process messages until stopped; returns how many were processed."""
        processed = 0
        self._should_stop = False
        while not self._should_stop:
            outcome = self.run_next(connection, queue)
            if outcome is not None:
                processed += 1
            if once:
                break
            if self._config.max_jobs and processed >= self._config.max_jobs:
                break
            if outcome is None:
                self._sleep(self._config.sleep_seconds)
        return processed


def _format_error(exc: BaseException) -> str:
    return "".join(traceback.format_exception(exc)).strip()
