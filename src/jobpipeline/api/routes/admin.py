"""Admin endpoints for queue inspection."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from jobpipeline.core.exceptions import QueueError, UnknownConnectionError

router = APIRouter(tags=["admin"])


@router.get("/queues/{connection}/{queue}")
def queue_stats(connection: str, queue: str, request: Request) -> dict:
    """Return pending and failed message counts for a queue."""
    runtime = request.app.state.runtime
    try:
        backend = runtime.queues.connection(connection)
        return {
            "connection": connection,
            "queue": queue,
            "pending": backend.size(queue),
            "failed": backend.failed_count(queue),
        }
    except UnknownConnectionError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except QueueError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
