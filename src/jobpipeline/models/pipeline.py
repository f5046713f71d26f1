"""Routing, wire-format and queue reservation models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field


class JobKind(StrEnum):
    NAMED = "named"
    INLINE = "inline"


class RoutingMetadata(BaseModel):
    """Where and when a queued executable should run. Unset fields use defaults."""

    model_config = {"frozen": True}

    queue: Optional[str] = None
    connection: Optional[str] = None
    delay: Optional[float | datetime] = None  # seconds, or an absolute time
    max_tries: Optional[int] = Field(default=None, ge=1)

    def delay_seconds(self, now: datetime | None = None) -> float:
        """Return the delay as a non-negative number of seconds from ``now``."""
        if self.delay is None:
            return 0.0
        if isinstance(self.delay, datetime):
            if now is None:
                now = datetime.now(timezone.utc)
            target = self.delay
            if target.tzinfo is None:
                target = target.replace(tzinfo=timezone.utc)
            return max((target - now).total_seconds(), 0.0)
        return max(float(self.delay), 0.0)


class JobReference(BaseModel):
    """Serialized form of a job descriptor: its kind and registry name."""

    kind: JobKind
    name: str


class ExecutablePayload(BaseModel):
    """Wire format of an executable pushed onto a queue."""

    id: str
    jobs: list[JobReference] = Field(default_factory=list)
    passable: str  # base64-encoded pickle of the passable tuple
    routing: RoutingMetadata = Field(default_factory=RoutingMetadata)
    should_be_queued: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    signature: Optional[str] = None  # base64 HMAC-SHA256, see pipeline.codec


class ReservedJob(BaseModel):
    """A queue message a worker has popped and must delete, release or bury."""

    id: str
    queue: str
    body: str
    attempts: int = 1
    receipt: str = ""  # backend handle needed to acknowledge the message


class FailedJob(BaseModel):
    """A message that exhausted its tries."""

    id: str
    queue: str
    body: str
    error: str
    attempts: int
    failed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class JobOutcome(StrEnum):
    COMPLETED = "COMPLETED"
    RELEASED = "RELEASED"
    FAILED = "FAILED"
