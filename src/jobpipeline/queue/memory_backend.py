"""In-memory queue backend — process-local, also the test fake."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Callable

from jobpipeline.models.pipeline import FailedJob, ReservedJob


@dataclass
class _Entry:
    id: str
    body: str
    available_at: float
    attempts: int = 0


class MemoryQueueBackend:
    """Dict-backed IQueueBackend.

    ``pushed`` keeps every ``(queue, body)`` ever pushed, so tests can assert on
    what a listener handed over without running a worker.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._queues: dict[str, list[_Entry]] = {}
        self._reserved: dict[str, ReservedJob] = {}
        self.pushed: list[tuple[str, str]] = []
        self.failed: list[FailedJob] = []

    def push(self, queue: str, body: str, delay: float = 0) -> str:
        entry = _Entry(id=uuid.uuid4().hex, body=body, available_at=self._clock() + delay)
        self._queues.setdefault(queue, []).append(entry)
        self.pushed.append((queue, body))
        return entry.id

    def pop(self, queue: str) -> ReservedJob | None:
        now = self._clock()
        entries = self._queues.get(queue, [])
        for index, entry in enumerate(entries):
            if entry.available_at <= now:
                del entries[index]
                job = ReservedJob(id=entry.id, queue=queue, body=entry.body, attempts=entry.attempts + 1)
                self._reserved[job.id] = job
                return job
        return None

    def delete(self, job: ReservedJob) -> None:
        self._reserved.pop(job.id, None)

    def release(self, job: ReservedJob, delay: float = 0) -> None:
        self._reserved.pop(job.id, None)
        entry = _Entry(id=job.id, body=job.body, available_at=self._clock() + delay, attempts=job.attempts)
        self._queues.setdefault(job.queue, []).append(entry)

    def bury(self, job: ReservedJob, error: str) -> None:
        self._reserved.pop(job.id, None)
        self.failed.append(
            FailedJob(id=job.id, queue=job.queue, body=job.body, error=error, attempts=job.attempts)
        )

    def size(self, queue: str) -> int:
        return len(self._queues.get(queue, []))

    def failed_count(self, queue: str) -> int:
        return sum(1 for job in self.failed if job.queue == queue)

    def ping(self) -> bool:
        return True

    def pushed_to(self, queue: str) -> list[str]:
        return [body for name, body in self.pushed if name == queue]
