"""
Player Repository for player data access.

Usage:
    repo = PlayerRepository(db)
    players = repo.search_by_name("mahomes", sport_id=1)
    qbs = repo.get_by_position(sport_id=1, position="QB")
    repo.deactivate_not_in_list(sport_id=1, active_ids=fetched_ids)
"""
from typing import Iterable, List, Optional
from sqlalchemy import case, func, or_
from sqlalchemy.orm import joinedload, selectinload

from sports_catalog.models import Player, PlayerAlias, PlayerAliasTypes, Sport, Team
from sports_catalog.repositories.base import ActiveSyncRepository, DEFAULT_CHUNK_SIZE
from sports_catalog.utils.timezone import utcnow

# Draft rank used for players without one, so they sort last
UNRANKED_DRAFT_POSITION = 999


class PlayerRepository(ActiveSyncRepository[Player]):
    """Repository for player data access."""

    def __init__(self, db, chunk_size: int = DEFAULT_CHUNK_SIZE):
        super().__init__(Player, db, chunk_size=chunk_size)

    @staticmethod
    def _draft_rank():
        return func.coalesce(Player.average_draft_position, UNRANKED_DRAFT_POSITION)

    # ========================================================================
    # Basic Lookups
    # ========================================================================

    def get_by_global_player_id(self, global_player_id: int) -> Optional[Player]:
        """Find a player by the provider's cross-sport global ID."""
        return self.first(Player.global_player_id == global_player_id)

    def get_by_full_name(self, name: str, sport_id: Optional[int] = None) -> Optional[Player]:
        """Find a player by exact display name (case-insensitive)."""
        if not name or not name.strip():
            return None
        query = self.db.query(Player).options(
            joinedload(Player.sport),
            joinedload(Player.team),
        ).filter(func.lower(Player.name) == name.strip().lower())
        if sport_id is not None:
            query = query.filter(Player.sport_id == sport_id)
        return query.order_by(Player.active.desc(), Player.id).first()

    # ========================================================================
    # Sport / Team Queries
    # ========================================================================

    def get_by_sport(self, sport_id: int, active_only: bool = True) -> List[Player]:
        """Players of a sport ordered by last name, then first name."""
        query = self.db.query(Player).filter(Player.sport_id == sport_id)
        if active_only:
            query = query.filter(Player.active.is_(True))
        return query.order_by(Player.last_name, Player.first_name).all()

    def get_by_sport_code(self, sport_code: str, active_only: bool = True) -> List[Player]:
        """Players of a sport, by sport code."""
        query = self.db.query(Player).join(Sport, Player.sport_id == Sport.id).filter(
            func.upper(Sport.code) == sport_code.upper()
        )
        if active_only:
            query = query.filter(Player.active.is_(True))
        return query.order_by(Player.last_name, Player.first_name).all()

    def get_by_team_id(self, team_id: int, active_only: bool = True) -> List[Player]:
        """Roster of a team ordered by position, then depth."""
        query = self.db.query(Player).filter(Player.team_id == team_id)
        if active_only:
            query = query.filter(Player.active.is_(True))
        return query.order_by(Player.position, Player.depth_order).all()

    def get_by_team_key(self, team_key: str, sport_id: Optional[int] = None) -> List[Player]:
        """Active players carrying a team abbreviation."""
        query = self.db.query(Player).filter(
            Player.team_key == team_key,
            Player.active.is_(True)
        )
        if sport_id is not None:
            query = query.filter(Player.sport_id == sport_id)
        return query.order_by(Player.position, Player.depth_order).all()

    # ========================================================================
    # Position Queries
    # ========================================================================

    def get_by_position(self, sport_id: int, position: str) -> List[Player]:
        """
        Active players at a position, best draft rank first.

        Players without a draft rank sort after every ranked player.
        """
        return self.db.query(Player).filter(
            Player.sport_id == sport_id,
            Player.position == position,
            Player.active.is_(True)
        ).order_by(self._draft_rank(), Player.last_name).all()

    def get_by_fantasy_position(self, sport_id: int, fantasy_position: str) -> List[Player]:
        """Active players at a fantasy position, best draft rank first."""
        return self.db.query(Player).filter(
            Player.sport_id == sport_id,
            Player.fantasy_position == fantasy_position,
            Player.active.is_(True)
        ).order_by(self._draft_rank(), Player.last_name).all()

    # ========================================================================
    # Search
    # ========================================================================

    def search_by_name(
        self,
        search_term: str,
        sport_id: Optional[int] = None,
        active_only: bool = True,
        limit: int = 20
    ) -> List[Player]:
        """
        Case-insensitive partial match on name, first, last or short name.

        Ordering: exact last-name matches first, then draft rank ascending
        (unranked last), then last name.

        Args:
            search_term: Text to look for
            sport_id: Optional sport scope
            active_only: Skip deactivated players
            limit: Maximum rows returned

        Returns:
            Matching players with sport and team loaded
        """
        term = search_term.strip()
        if not term:
            return []
        pattern = f"%{term}%"

        query = self.db.query(Player).options(
            joinedload(Player.sport),
            joinedload(Player.team),
        ).filter(
            or_(
                Player.name.ilike(pattern),
                Player.first_name.ilike(pattern),
                Player.last_name.ilike(pattern),
                Player.short_name.ilike(pattern),
            )
        )
        if sport_id is not None:
            query = query.filter(Player.sport_id == sport_id)
        if active_only:
            query = query.filter(Player.active.is_(True))

        exact_last_first = case((func.lower(Player.last_name) == term.lower(), 0), else_=1)
        return query.order_by(
            exact_last_first, self._draft_rank(), Player.last_name
        ).limit(limit).all()

    def get_name_candidates(
        self,
        first_names: Iterable[str],
        last_names: Iterable[str],
        sport_id: Optional[int] = None,
        limit: int = 200
    ) -> List[Player]:
        """
        Active players sharing a first name or a last name with the given forms.

        Matching is whole-word and case-insensitive. Last names also match on
        their first three letters, so stored spellings with accents or
        punctuation later in the word ("Dončić" for "Doncic") are still
        returned. Callers narrow the rows down themselves.
        """
        firsts = {name.lower() for name in first_names if name}
        lasts = {name.lower() for name in last_names if name}
        if not firsts and not lasts:
            return []

        conditions = []
        if firsts:
            conditions.append(func.lower(Player.first_name).in_(firsts))
        if lasts:
            conditions.append(func.lower(Player.last_name).in_(lasts))
            conditions.extend(
                Player.last_name.ilike(f"{prefix}%")
                for prefix in {name[:3] for name in lasts if len(name) >= 3}
            )

        query = self.db.query(Player).options(
            joinedload(Player.sport),
            joinedload(Player.team),
        ).filter(or_(*conditions), Player.active.is_(True))
        if sport_id is not None:
            query = query.filter(Player.sport_id == sport_id)
        return query.order_by(self._draft_rank(), Player.last_name).limit(limit).all()

    def search_by_last_name(self, last_name: str, sport_id: Optional[int] = None) -> List[Player]:
        """Active players with this exact last name (case-insensitive)."""
        query = self.db.query(Player).options(joinedload(Player.team)).filter(
            func.lower(Player.last_name) == last_name.strip().lower(),
            Player.active.is_(True)
        )
        if sport_id is not None:
            query = query.filter(Player.sport_id == sport_id)
        return query.order_by(self._draft_rank(), Player.first_name).all()

    # ========================================================================
    # Injuries
    # ========================================================================

    def get_injured_players(self, sport_id: int) -> List[Player]:
        """Active players with any injury status, grouped by team."""
        return self.db.query(Player).filter(
            Player.sport_id == sport_id,
            Player.active.is_(True),
            Player.injury_status.isnot(None),
            Player.injury_status != ""
        ).order_by(Player.team_key, Player.last_name).all()

    def get_by_injury_status(self, sport_id: int, injury_status: str) -> List[Player]:
        """Active players with a specific injury status (Out, Questionable, ...)."""
        return self.db.query(Player).filter(
            Player.sport_id == sport_id,
            Player.active.is_(True),
            Player.injury_status == injury_status
        ).order_by(Player.team_key, Player.last_name).all()

    # ========================================================================
    # Include Related Data
    # ========================================================================

    def get_with_team(self, player_id: int) -> Optional[Player]:
        """Player with sport and team loaded."""
        return self.db.query(Player).options(
            joinedload(Player.sport),
            joinedload(Player.team),
        ).filter(Player.id == player_id).first()

    def get_with_aliases(self, player_id: int) -> Optional[Player]:
        """Player with sport, team and aliases loaded."""
        return self.db.query(Player).options(
            joinedload(Player.sport),
            joinedload(Player.team),
            selectinload(Player.aliases),
        ).filter(Player.id == player_id).first()

    # ========================================================================
    # Alias Operations
    # ========================================================================

    def get_by_alias(self, alias: str, sport_id: Optional[int] = None) -> Optional[Player]:
        """
        Resolve an alias to its player (case-insensitive exact match).

        Returns:
            Player with sport and team loaded, or None
        """
        if not alias or not alias.strip():
            return None

        query = self.db.query(Player).join(PlayerAlias, PlayerAlias.player_id == Player.id).options(
            joinedload(Player.sport),
            joinedload(Player.team),
        ).filter(func.lower(PlayerAlias.alias) == alias.strip().lower())

        if sport_id is not None:
            query = query.filter(Player.sport_id == sport_id)

        return query.first()

    def find_alias(self, alias: str) -> Optional[PlayerAlias]:
        """Stored or pending alias row matching ``alias`` case-insensitively."""
        needle = alias.strip().lower()
        for obj in self.db.new:
            if isinstance(obj, PlayerAlias) and obj.alias.lower() == needle:
                return obj
        return self.db.query(PlayerAlias).filter(func.lower(PlayerAlias.alias) == needle).first()

    def add_alias(self, player_id: int, alias: str, alias_type: str = PlayerAliasTypes.NICKNAME) -> bool:
        """
        Add an alias unless the text already exists for any player.

        Returns:
            True if a new alias row was queued
        """
        if not alias or not alias.strip():
            return False

        text = alias.strip()
        if self.find_alias(text) is not None:
            return False

        self.db.add(PlayerAlias(
            player_id=player_id,
            alias=text,
            alias_type=alias_type,
            created_date=utcnow(),
        ))
        return True
