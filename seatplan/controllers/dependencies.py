"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from seatplan.services.seating_service import SeatingService
from seatplan.utils.config import get_settings


def get_seating_service(request: Request) -> SeatingService:
    service = getattr(request.app.state, "seating_service", None)
    if service is None:
        settings = getattr(request.app.state, "settings", None) or get_settings()
        service = SeatingService(settings=settings)
        request.app.state.seating_service = service
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Seating service is not initialized",
        )
    return service
