"""
Team Repository for team data access.

Usage:
    repo = TeamRepository(db)
    chiefs = repo.get_by_key_and_sport("KC", sport_id=1)
    team = repo.get_by_alias("chiefs")
    repo.bulk_upsert(snapshot_teams)
"""
from typing import Optional, List
from sqlalchemy import case, func, or_
from sqlalchemy.orm import joinedload, selectinload

from sports_catalog.models import Player, Sport, Team, TeamAlias, TeamAliasTypes
from sports_catalog.repositories.base import ActiveSyncRepository, DEFAULT_CHUNK_SIZE
from sports_catalog.utils.timezone import utcnow


class TeamRepository(ActiveSyncRepository[Team]):
    """Repository for team data access."""

    def __init__(self, db, chunk_size: int = DEFAULT_CHUNK_SIZE):
        super().__init__(Team, db, chunk_size=chunk_size)

    # ========================================================================
    # Basic Lookups
    # ========================================================================

    def get_by_key(self, key: str) -> Optional[Team]:
        """Find the first team with this abbreviation in any sport."""
        return self.db.query(Team).options(joinedload(Team.sport)).filter(
            Team.key == key
        ).first()

    def get_by_key_and_sport(self, key: str, sport_id: int) -> Optional[Team]:
        """Find a team by abbreviation within a sport."""
        return self.db.query(Team).options(joinedload(Team.sport)).filter(
            Team.key == key,
            Team.sport_id == sport_id
        ).first()

    def get_by_global_team_id(self, global_team_id: int) -> Optional[Team]:
        """Find a team by the provider's cross-sport global ID."""
        return self.db.query(Team).options(joinedload(Team.sport)).filter(
            Team.global_team_id == global_team_id
        ).first()

    # ========================================================================
    # Sport-based Queries
    # ========================================================================

    def get_by_sport(self, sport_id: int, active_only: bool = False) -> List[Team]:
        """All teams of a sport ordered by city, then name."""
        query = self.db.query(Team).filter(Team.sport_id == sport_id)
        if active_only:
            query = query.filter(Team.active.is_(True))
        return query.order_by(Team.city, Team.name).all()

    def get_by_sport_code(self, sport_code: str) -> List[Team]:
        """All teams of a sport, by sport code."""
        return self.db.query(Team).join(Sport, Team.sport_id == Sport.id).filter(
            func.upper(Sport.code) == sport_code.upper()
        ).order_by(Team.city, Team.name).all()

    def get_key_map(self, sport_id: int) -> dict[str, int]:
        """Abbreviation -> team ID for a sport."""
        rows = self.db.query(Team.key, Team.id).filter(Team.sport_id == sport_id).all()
        return {key: id for key, id in rows}

    # ========================================================================
    # Search
    # ========================================================================

    def search_by_name(self, search_term: str, sport_id: Optional[int] = None, limit: int = 10) -> List[Team]:
        """
        Case-insensitive partial match on key, name, city or full name.

        Exact key matches sort first, then by full name.
        """
        pattern = f"%{search_term.strip()}%"
        query = self.db.query(Team).options(joinedload(Team.sport))
        if sport_id is not None:
            query = query.filter(Team.sport_id == sport_id)

        exact_key_first = case((func.upper(Team.key) == search_term.strip().upper(), 0), else_=1)
        return query.filter(
            or_(
                Team.key.ilike(pattern),
                Team.name.ilike(pattern),
                Team.city.ilike(pattern),
                Team.full_name.ilike(pattern),
            )
        ).order_by(exact_key_first, Team.full_name).limit(limit).all()

    def get_by_conference(self, sport_id: int, conference: str) -> List[Team]:
        """Teams in a conference ordered by division, then name."""
        return self.db.query(Team).filter(
            Team.sport_id == sport_id,
            Team.conference == conference
        ).order_by(Team.division, Team.name).all()

    def get_by_division(self, sport_id: int, division: str) -> List[Team]:
        """Teams in a division ordered by name."""
        return self.db.query(Team).filter(
            Team.sport_id == sport_id,
            Team.division == division
        ).order_by(Team.name).all()

    # ========================================================================
    # Include Related Data
    # ========================================================================

    def get_with_players(self, team_id: int) -> Optional[Team]:
        """Team with its sport and active players loaded."""
        return self.db.query(Team).options(
            joinedload(Team.sport),
            selectinload(Team.players.and_(Player.active.is_(True))),
        ).execution_options(populate_existing=True).filter(Team.id == team_id).first()

    def get_with_aliases(self, team_id: int) -> Optional[Team]:
        """Team with its sport and aliases loaded."""
        return self.db.query(Team).options(
            joinedload(Team.sport),
            selectinload(Team.aliases),
        ).filter(Team.id == team_id).first()

    def get_with_all_related(self, team_id: int) -> Optional[Team]:
        """Team with sport, stadium, aliases and active players loaded."""
        return self.db.query(Team).options(
            joinedload(Team.sport),
            joinedload(Team.stadium),
            selectinload(Team.aliases),
            selectinload(Team.players.and_(Player.active.is_(True))),
        ).execution_options(populate_existing=True).filter(Team.id == team_id).first()

    # ========================================================================
    # Alias Operations
    # ========================================================================

    def get_by_alias(self, alias: str, sport_id: Optional[int] = None) -> Optional[Team]:
        """
        Resolve an alias to its team (case-insensitive exact match).

        Args:
            alias: Alias text, e.g. "Chiefs"
            sport_id: Optional sport scope

        Returns:
            Team with sport and stadium loaded, or None
        """
        if not alias or not alias.strip():
            return None

        query = self.db.query(Team).join(TeamAlias, TeamAlias.team_id == Team.id).options(
            joinedload(Team.sport),
            joinedload(Team.stadium),
        ).filter(func.lower(TeamAlias.alias) == alias.strip().lower())

        if sport_id is not None:
            query = query.filter(Team.sport_id == sport_id)

        return query.first()

    def find_alias(self, alias: str) -> Optional[TeamAlias]:
        """Stored or pending alias row matching ``alias`` case-insensitively."""
        needle = alias.strip().lower()
        for obj in self.db.new:
            if isinstance(obj, TeamAlias) and obj.alias.lower() == needle:
                return obj
        return self.db.query(TeamAlias).filter(func.lower(TeamAlias.alias) == needle).first()

    def add_alias(
        self,
        team_id: int,
        alias: str,
        alias_type: str = TeamAliasTypes.NICKNAME,
        is_primary: bool = False
    ) -> bool:
        """
        Add an alias unless the text already exists for any team.

        First writer wins: an existing alias is never reassigned, even when
        it belongs to a different team.

        Returns:
            True if a new alias row was queued
        """
        if not alias or not alias.strip():
            return False

        text = alias.strip()
        if self.find_alias(text) is not None:
            return False

        self.db.add(TeamAlias(
            team_id=team_id,
            alias=text,
            alias_type=alias_type,
            is_primary=is_primary,
            created_date=utcnow(),
        ))
        return True
