"""Shared fixtures: a fresh runtime and value store per test."""

from __future__ import annotations

import pytest

from jobpipeline.core.config import AppSettings
from jobpipeline.queue.memory_backend import MemoryQueueBackend
from jobpipeline.runtime import Runtime
from tests.fakes import ValueStore


@pytest.fixture
def settings():
    return AppSettings()


@pytest.fixture
def runtime(settings):
    return Runtime(settings)


@pytest.fixture
def memory_queue(runtime) -> MemoryQueueBackend:
    return runtime.queues.connection("memory")


@pytest.fixture
def store(tmp_path):
    return ValueStore(tmp_path / "jobpipelinetest.json").flush()
