"""Shared test doubles — re-export the memory queue and sample jobs."""

from __future__ import annotations

from jobpipeline.queue.memory_backend import MemoryQueueBackend
from tests.fakes.jobs import (
    ExceptionJob,
    FalseJob,
    FirstJob,
    FlakyJob,
    FooJob,
    JobWithMultipleArguments,
    ModelCreated,
    RaisingJob,
    SampleModel,
    SecondJob,
    ValueStore,
    record_inline,
)

__all__ = [
    "ExceptionJob",
    "FalseJob",
    "FirstJob",
    "FlakyJob",
    "FooJob",
    "JobWithMultipleArguments",
    "MemoryQueueBackend",
    "ModelCreated",
    "RaisingJob",
    "SampleModel",
    "SecondJob",
    "ValueStore",
    "record_inline",
]
