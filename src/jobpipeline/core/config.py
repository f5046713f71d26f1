"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings


class PipelineSettings(BaseSettings):
    """Process-wide pipeline defaults."""

    model_config = {"env_prefix": "JOBPIPELINE_PIPELINE_"}

    queued_by_default: bool = False
    default_connection: str = "memory"
    default_queue: str = "default"
    default_tries: int = 1
    signing_key: SecretStr | None = None  # HMAC key for queued payloads

    def signing_secret(self) -> bytes | None:
        if self.signing_key is None:
            return None
        return self.signing_key.get_secret_value().encode("utf-8")


class RedisConfig(BaseSettings):
    """Redis queue connection configuration."""

    model_config = {"env_prefix": "JOBPIPELINE_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    key_prefix: str = "jobpipeline"


class SQSConfig(BaseSettings):
    """SQS queue connection configuration."""

    model_config = {"env_prefix": "JOBPIPELINE_SQS_"}

    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    queue_prefix: str = ""  # prepended to queue names, e.g. "prod-"
    wait_time_seconds: int = 0
    failed_suffix: str = "-failed"


class WorkerConfig(BaseSettings):
    """Queue worker loop configuration."""

    model_config = {"env_prefix": "JOBPIPELINE_WORKER_"}

    sleep_seconds: float = 3.0
    backoff_seconds: float = 0.0
    max_jobs: int = 0  # 0 = unlimited


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "JOBPIPELINE_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    pipeline: PipelineSettings = PipelineSettings()
    redis: RedisConfig = RedisConfig()
    sqs: SQSConfig = SQSConfig()
    worker: WorkerConfig = WorkerConfig()
