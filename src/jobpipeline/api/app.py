"""FastAPI admin application for queue health and depth."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from jobpipeline.api.routes import admin, health
from jobpipeline.runtime import Runtime


def create_app(runtime: Runtime | None = None) -> FastAPI:
    """Create the admin app around an existing runtime (or a default one)."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.runtime = runtime or Runtime()
        yield

    app = FastAPI(
        title="Job Pipeline Admin",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(admin.router, prefix="/admin")
    return app
