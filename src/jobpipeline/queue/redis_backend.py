"""Redis queue backend implementing IQueueBackend.

Each queue is a sorted set scored by the time a message becomes available, so
delayed and released messages share one structure. Reserved messages sit in a
hash until the worker deletes, releases or buries them; buried messages are
appended to a failed list.
"""

from __future__ import annotations

import time
import uuid
from typing import Callable

import redis
from pydantic import BaseModel

from jobpipeline.core.exceptions import QueueBackendError
from jobpipeline.models.pipeline import FailedJob, ReservedJob


class _Envelope(BaseModel):
    id: str
    body: str
    attempts: int = 0


class RedisQueueBackend:
    """Production IQueueBackend backed by Redis."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 key_prefix: str = "jobpipeline",
                 clock: Callable[[], float] = time.time) -> None:
        self._host = host
        self._port = port
        self._db = db
        self._prefix = key_prefix
        self._clock = clock
        self._client = redis.Redis(
            host=host, port=port, db=db, decode_responses=True,
        )

    def _key(self, queue: str, suffix: str = "") -> str:
        key = f"{self._prefix}:queues:{queue}"
        return f"{key}:{suffix}" if suffix else key

    def push(self, queue: str, body: str, delay: float = 0) -> str:
        envelope = _Envelope(id=uuid.uuid4().hex, body=body)
        try:
            self._client.zadd(self._key(queue), {envelope.model_dump_json(): self._clock() + delay})
        except Exception as exc:
            raise QueueBackendError(f"Redis push failed for queue={queue!r}: {exc}") from exc
        return envelope.id

    def pop(self, queue: str) -> ReservedJob | None:
        key = self._key(queue)
        try:
            members = self._client.zrangebyscore(key, "-inf", self._clock(), start=0, num=1)
            if not members:
                return None
            member = members[0]
            if not self._client.zrem(key, member):
                return None  # another worker claimed it first
            envelope = _Envelope.model_validate_json(member)
            envelope.attempts += 1
            self._client.hset(self._key(queue, "reserved"), envelope.id, envelope.model_dump_json())
        except Exception as exc:
            raise QueueBackendError(f"Redis pop failed for queue={queue!r}: {exc}") from exc
        return ReservedJob(
            id=envelope.id, queue=queue, body=envelope.body,
            attempts=envelope.attempts, receipt=member,
        )

    def delete(self, job: ReservedJob) -> None:
        try:
            self._client.hdel(self._key(job.queue, "reserved"), job.id)
        except Exception as exc:
            raise QueueBackendError(f"Redis delete failed for job={job.id!r}: {exc}") from exc

    def release(self, job: ReservedJob, delay: float = 0) -> None:
        envelope = _Envelope(id=job.id, body=job.body, attempts=job.attempts)
        try:
            pipe = self._client.pipeline()
            pipe.hdel(self._key(job.queue, "reserved"), job.id)
            pipe.zadd(self._key(job.queue), {envelope.model_dump_json(): self._clock() + delay})
            pipe.execute()
        except Exception as exc:
            raise QueueBackendError(f"Redis release failed for job={job.id!r}: {exc}") from exc

    def bury(self, job: ReservedJob, error: str) -> None:
        failed = FailedJob(id=job.id, queue=job.queue, body=job.body, error=error, attempts=job.attempts)
        try:
            pipe = self._client.pipeline()
            pipe.hdel(self._key(job.queue, "reserved"), job.id)
            pipe.rpush(self._key(job.queue, "failed"), failed.model_dump_json())
            pipe.execute()
        except Exception as exc:
            raise QueueBackendError(f"Redis bury failed for job={job.id!r}: {exc}") from exc

    def size(self, queue: str) -> int:
        try:
            return int(self._client.zcard(self._key(queue)))
        except Exception as exc:
            raise QueueBackendError(f"Redis ZCARD failed for queue={queue!r}: {exc}") from exc

    def failed_count(self, queue: str) -> int:
        try:
            return int(self._client.llen(self._key(queue, "failed")))
        except Exception as exc:
            raise QueueBackendError(f"Redis LLEN failed for queue={queue!r}: {exc}") from exc

    def failed_jobs(self, queue: str) -> list[FailedJob]:
        try:
            raw = self._client.lrange(self._key(queue, "failed"), 0, -1)
        except Exception as exc:
            raise QueueBackendError(f"Redis LRANGE failed for queue={queue!r}: {exc}") from exc
        return [FailedJob.model_validate_json(item) for item in raw]

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except Exception as exc:
            raise QueueBackendError(f"Redis PING failed: {exc}") from exc
