"""
FastAPI app factory.

Responsibilities:
- Create and configure FastAPI app
- Build the process-wide JibriWorker (status manager + webhook client)
- Register routes
- Release webhook resources on shutdown
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from config import AppConfig
from observability.logger import log_event, now_ms
from server.routes import register_routes
from worker import JibriWorker


def create_app(
    config: AppConfig | None = None,
    worker: JibriWorker | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    This is the app factory pattern that allows:
    - Testing with different configurations or an injected worker
    - ASGI server compatibility
    """
    config = config or AppConfig.load_from_env()
    worker = worker or JibriWorker(config=config)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        log_event({
            "ts_ms": now_ms(),
            "event_type": "WORKER_STARTED",
            "jibri_id": config.jibri_id,
            "subscribers": sorted(worker.webhook_client.subscribers()),
        })
        try:
            yield
        finally:
            worker.shutdown()
            log_event({
                "ts_ms": now_ms(),
                "event_type": "WORKER_STOPPED",
                "jibri_id": config.jibri_id,
            })

    app = FastAPI(title="Jibri Worker", lifespan=lifespan)

    app.state.config = config
    app.state.worker = worker

    register_routes(app)

    return app
