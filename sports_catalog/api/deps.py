"""
Shared FastAPI dependencies.

Tests replace these through ``app.dependency_overrides``.
"""
from typing import Generator

from fastapi import HTTPException, Request

from sports_catalog.core.database import get_session_factory
from sports_catalog.repositories.unit_of_work import UnitOfWork
from sports_catalog.services.catalog.coordinator import SportClientCoordinator


def get_uow() -> Generator[UnitOfWork, None, None]:
    """Unit of work on a fresh session, closed after the request."""
    with UnitOfWork.from_factory(get_session_factory()) as uow:
        yield uow


def get_coordinator(request: Request) -> SportClientCoordinator:
    """The application's sport client coordinator (created during startup)."""
    coordinator = getattr(request.app.state, "coordinator", None)
    if coordinator is None:
        raise HTTPException(status_code=503, detail="Sport client coordinator is not available")
    return coordinator
