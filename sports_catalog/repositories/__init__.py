"""
Repository layer for the canonical catalog.

Repositories never commit; the unit of work owns the transaction.

Usage:
    from sports_catalog.repositories import UnitOfWork
    from sports_catalog.core.database import SessionLocal

    with UnitOfWork.from_factory(SessionLocal) as uow:
        team = uow.teams.get_by_alias("Chiefs")
"""

from sports_catalog.repositories.base import BaseRepository, SyncRepository, ActiveSyncRepository
from sports_catalog.repositories.sport_repository import SportRepository
from sports_catalog.repositories.team_repository import TeamRepository
from sports_catalog.repositories.player_repository import PlayerRepository
from sports_catalog.repositories.stadium_repository import StadiumRepository
from sports_catalog.repositories.unit_of_work import UnitOfWork

__all__ = [
    "BaseRepository",
    "SyncRepository",
    "ActiveSyncRepository",
    "SportRepository",
    "TeamRepository",
    "PlayerRepository",
    "StadiumRepository",
    "UnitOfWork",
]
