"""
Catalog models.

Usage:
    from sports_catalog.models import Sport, Team, Player, Stadium

    nfl_teams = db.query(Team).filter(Team.sport_id == 1).all()
"""
from sports_catalog.models.catalog import (
    Base,
    Sport,
    Stadium,
    Team,
    Player,
    TeamAlias,
    PlayerAlias,
    TeamAliasTypes,
    PlayerAliasTypes,
)

__all__ = [
    "Base",
    "Sport",
    "Stadium",
    "Team",
    "Player",
    "TeamAlias",
    "PlayerAlias",
    "TeamAliasTypes",
    "PlayerAliasTypes",
]
