"""
Route registration for the worker's HTTP surface.

Responsibilities:
- Expose the current worker status (read-only)
- Pull dependencies from app.state
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from constants import HEALTH_ROUTE
from worker import JibriWorker


def register_routes(app: FastAPI) -> None:
    """Register all routes on the FastAPI app."""
    @app.get(HEALTH_ROUTE)
    async def health() -> dict[str, Any]: # pyright: ignore[reportUnusedFunction]
        worker: JibriWorker = app.state.worker
        return worker.status_manager.status.to_dict()
