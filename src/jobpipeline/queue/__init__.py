"""Pluggable queue backends behind the IQueueBackend protocol."""

from __future__ import annotations

from jobpipeline.core.config import AppSettings
from jobpipeline.queue.manager import QueueManager
from jobpipeline.queue.memory_backend import MemoryQueueBackend
from jobpipeline.queue.redis_backend import RedisQueueBackend
from jobpipeline.queue.sqs_backend import SQSQueueBackend


def create_queue_manager(settings: AppSettings | None = None) -> QueueManager:
    """Create a queue manager with the memory, redis and sqs connections wired up.

    Backends are only constructed when a connection is first used.
    """
    if settings is None:
        settings = AppSettings()

    manager = QueueManager(default=settings.pipeline.default_connection)
    manager.extend("memory", MemoryQueueBackend)
    manager.extend("redis", lambda: RedisQueueBackend(
        host=settings.redis.host,
        port=settings.redis.port,
        db=settings.redis.db,
        key_prefix=settings.redis.key_prefix,
    ))
    manager.extend("sqs", lambda: SQSQueueBackend(
        region=settings.sqs.region,
        endpoint_url=settings.sqs.endpoint_url,
        queue_prefix=settings.sqs.queue_prefix,
        wait_time_seconds=settings.sqs.wait_time_seconds,
        failed_suffix=settings.sqs.failed_suffix,
    ))
    return manager


__all__ = [
    "MemoryQueueBackend",
    "QueueManager",
    "RedisQueueBackend",
    "SQSQueueBackend",
    "create_queue_manager",
]
