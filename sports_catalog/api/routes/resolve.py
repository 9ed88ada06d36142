"""Resolution API routes.

- Sport keyword -> canonical sport key
- Free text -> ranked team / player candidates
"""
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from sports_catalog.api.deps import get_coordinator, get_uow
from sports_catalog.core.exceptions import NotInitializedError
from sports_catalog.repositories.unit_of_work import UnitOfWork
from sports_catalog.services.catalog.coordinator import SportClientCoordinator
from sports_catalog.services.resolution.alias_resolver import AliasResolver

router = APIRouter(prefix="/resolve", tags=["resolve"])


@router.get("/sport/{keyword}")
async def resolve_sport(
    keyword: str,
    coordinator: SportClientCoordinator = Depends(get_coordinator)
) -> Dict:
    """
    Resolve a sport keyword ("football", "nfl", "americanfootball_nfl").

    Returns 404 when the keyword maps to no supported sport.
    """
    try:
        sport_key = coordinator.resolve_sport_key(keyword)
    except NotInitializedError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if sport_key is None:
        raise HTTPException(status_code=404, detail=f"Unknown sport keyword '{keyword}'")

    return {
        'keyword': keyword,
        'sport_key': sport_key,
        'supported': coordinator.is_supported(sport_key),
        'provider_code': coordinator.get_provider_code(sport_key),
    }


@router.get("/{term}")
async def resolve_term(
    term: str,
    entity_type: Optional[str] = Query(None, description="Restrict to 'team' or 'player'"),
    sport: Optional[str] = Query(None, description="Restrict to a sport code, e.g. NFL"),
    high_confidence_only: bool = Query(False, description="Only matches with confidence >= 0.85"),
    uow: UnitOfWork = Depends(get_uow)
) -> Dict:
    """
    Resolve free text to ranked team and player candidates.
    """
    resolver = AliasResolver(uow)
    try:
        if high_confidence_only:
            results = resolver.resolve_high_confidence(term, entity_type, sport)
        else:
            results = resolver.resolve(term, entity_type, sport)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        'term': term,
        'count': len(results),
        'results': [r.to_dict() for r in results]
    }
