"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from jobpipeline.core.exceptions import QueueError

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
def ready(request: Request):
    runtime = request.app.state.runtime
    connection = runtime.settings.pipeline.default_connection
    try:
        runtime.queues.connection(connection).ping()
    except QueueError as exc:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "connection": connection, "error": str(exc)},
        )
    return {"status": "ready", "connection": connection}
