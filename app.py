"""
app.py - FastAPI application factory.

This is the ASGI application object imported by uvicorn. It wires the
seating service onto app.state and registers the routers.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from seatplan.controllers.seating_controller import router as seating_router
from seatplan.services.seating_service import SeatingService
from seatplan.utils.config import Settings, get_settings
from seatplan.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    The seating engine keeps no state between requests, so a single service
    instance is shared by every request via app.state.
    """
    settings = settings or get_settings()
    seating_service = SeatingService(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Startup complete | app=%s | version=%s | default_capacity=%s | strategy=%s",
            settings.app_name,
            settings.app_version,
            settings.seating_default_capacity,
            settings.seating_default_strategy,
        )
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.include_router(seating_router)

    app.state.settings = settings
    app.state.seating_service = seating_service

    return app


# Module-level app object for uvicorn
app = create_app()
