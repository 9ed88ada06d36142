"""Sync API routes for catalog synchronization.

Provides endpoints for:
- Listing the sports the coordinator can sync
- Manually triggering a sport sync (all entities or one entity type)
"""
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from sports_catalog.api.deps import get_coordinator, get_uow
from sports_catalog.core.exceptions import NotInitializedError, ProviderError, SportNotFoundError
from sports_catalog.repositories.unit_of_work import UnitOfWork
from sports_catalog.services.catalog.coordinator import SportClientCoordinator
from sports_catalog.services.sync.catalog_sync import CatalogSyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/sports")
async def list_supported_sports(
    coordinator: SportClientCoordinator = Depends(get_coordinator)
) -> Dict:
    """Sport keys that have a provider client and are active."""
    try:
        sports = coordinator.list_supported_sports()
    except NotInitializedError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return {
        'count': len(sports),
        'sports': sports
    }


@router.post("/{sport_code}")
async def trigger_sport_sync(
    sport_code: str,
    uow: UnitOfWork = Depends(get_uow),
    coordinator: SportClientCoordinator = Depends(get_coordinator)
) -> Dict:
    """
    Manually sync stadiums, teams and players for one sport.

    Returns:
        Sync result with per-entity counts
    """
    return await _run_sync(uow, coordinator, sport_code)


@router.post("/{sport_code}/{entity_type}")
async def trigger_entity_sync(
    sport_code: str,
    entity_type: str,
    uow: UnitOfWork = Depends(get_uow),
    coordinator: SportClientCoordinator = Depends(get_coordinator)
) -> Dict:
    """
    Manually sync one entity type (stadiums, teams or players) for one sport.
    """
    return await _run_sync(uow, coordinator, sport_code, entity_type.lower())


async def _run_sync(
    uow: UnitOfWork,
    coordinator: SportClientCoordinator,
    sport_code: str,
    entity_type: Optional[str] = None
) -> Dict:
    service = CatalogSyncService(uow, coordinator)
    try:
        result = await service.sync_sport(sport_code, entity_type=entity_type)
    except SportNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotInitializedError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except ProviderError as e:
        logger.error(f"Provider failure during {sport_code} sync: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return result.to_dict()
