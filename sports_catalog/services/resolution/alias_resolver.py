"""
Alias Resolver.

Maps free text ("Chiefs", "KC", "Kansas City Chiefs", "Mahomes") to
canonical team and player rows.

Matching Strategy (in order of priority):
1. Exact team key ("KC")                         → ExactKeyMatch      1.00
2. Team alias table                              → AliasMatch         0.95
3. Player alias table                            → PlayerAliasMatch   0.95
4. Exact team name / full name                   → ExactNameMatch     0.90
5. Exact player name (accent / suffix tolerant)  → ExactPlayerMatch   0.90
6. Exact player last name                        → LastNameMatch      0.70
7. Partial team match (key, name, city)          → PartialTeamMatch   0.50
8. Partial player match                          → PartialPlayerMatch 0.40

Results with confidence >= 0.85 are considered safe to auto-accept.

Alias writes follow first-writer-wins: an alias that already exists is never
moved to another owner. The resolver does not commit; call
``uow.save_changes()`` after adding aliases.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from sports_catalog.models import Player, Team, TeamAliasTypes, PlayerAliasTypes
from sports_catalog.repositories.unit_of_work import UnitOfWork
from sports_catalog.services.resolution.name_normalizer import clean_alias, normalize, split_name

logger = logging.getLogger(__name__)

ENTITY_TEAM = "team"
ENTITY_PLAYER = "player"
ENTITY_TYPES = (ENTITY_TEAM, ENTITY_PLAYER)

HIGH_CONFIDENCE_THRESHOLD = 0.85


class MatchType(Enum):
    """How a term was matched to an entity."""
    EXACT_KEY = "ExactKeyMatch"
    ALIAS = "AliasMatch"
    EXACT_NAME = "ExactNameMatch"
    PLAYER_ALIAS = "PlayerAliasMatch"
    EXACT_PLAYER = "ExactPlayerMatch"
    LAST_NAME = "LastNameMatch"
    PARTIAL_TEAM = "PartialTeamMatch"
    PARTIAL_PLAYER = "PartialPlayerMatch"
    NO_MATCH = "NoMatch"


MATCH_CONFIDENCE: Dict[MatchType, float] = {
    MatchType.EXACT_KEY: 1.0,
    MatchType.ALIAS: 0.95,
    MatchType.PLAYER_ALIAS: 0.95,
    MatchType.EXACT_NAME: 0.9,
    MatchType.EXACT_PLAYER: 0.9,
    MatchType.LAST_NAME: 0.7,
    MatchType.PARTIAL_TEAM: 0.5,
    MatchType.PARTIAL_PLAYER: 0.4,
    MatchType.NO_MATCH: 0.0,
}

# Team match types that identify a single team unambiguously
_EXACT_TEAM_MATCHES = (MatchType.EXACT_KEY, MatchType.EXACT_NAME)


@dataclass
class ResolutionResult:
    """One candidate entity for a search term."""
    entity_type: str  # "team" or "player"
    entity_id: int
    name: str
    sport_id: int
    sport_code: Optional[str]
    match_type: MatchType
    confidence: float
    team_key: Optional[str] = None

    @property
    def is_high_confidence(self) -> bool:
        return self.confidence >= HIGH_CONFIDENCE_THRESHOLD

    def to_dict(self) -> dict:
        return {
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "name": self.name,
            "sport_id": self.sport_id,
            "sport_code": self.sport_code,
            "team_key": self.team_key,
            "match_type": self.match_type.value,
            "confidence": self.confidence,
            "is_high_confidence": self.is_high_confidence,
        }

    def __repr__(self):
        return (f"ResolutionResult({self.entity_type}={self.entity_id} {self.name!r}, "
                f"{self.match_type.value}, confidence={self.confidence:.2f})")


def _team_result(team: Team, match_type: MatchType) -> ResolutionResult:
    return ResolutionResult(
        entity_type=ENTITY_TEAM,
        entity_id=team.id,
        name=team.full_name or f"{team.city} {team.name}",
        sport_id=team.sport_id,
        sport_code=team.sport.code if team.sport else None,
        match_type=match_type,
        confidence=MATCH_CONFIDENCE[match_type],
        team_key=team.key,
    )


def _player_result(player: Player, match_type: MatchType) -> ResolutionResult:
    return ResolutionResult(
        entity_type=ENTITY_PLAYER,
        entity_id=player.id,
        name=player.name or f"{player.first_name} {player.last_name}",
        sport_id=player.sport_id,
        sport_code=player.sport.code if player.sport else None,
        match_type=match_type,
        confidence=MATCH_CONFIDENCE[match_type],
        team_key=player.team_key,
    )


def _exact_player_match(player: Player, wanted: str) -> Optional[MatchType]:
    """EXACT_PLAYER or LAST_NAME when the normalized forms agree, else None."""
    if not wanted:
        return None
    if normalize(player.name or "") == wanted:
        return MatchType.EXACT_PLAYER
    if normalize(player.last_name or "") == wanted:
        return MatchType.LAST_NAME
    return None


class AliasResolver:
    """
    Resolves free-text terms to canonical teams and players.

    One resolver per unit of work; it reads through the unit of work's
    repositories and shares its session.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    # ========================================================================
    # Direct ID Resolution
    # ========================================================================

    def resolve_team_id(self, term: str, sport_id: Optional[int] = None) -> Optional[int]:
        """
        Resolve a term to a team ID.

        Tries the alias table first, then an exact key, then an exact name.

        Returns:
            Team ID, or None when nothing matches exactly
        """
        text = clean_alias(term)
        if not text:
            return None

        team = self.uow.teams.get_by_alias(text, sport_id=sport_id)
        if team is not None:
            return team.id

        exact = [r for r in self._team_candidates(text, sport_id) if r.match_type in _EXACT_TEAM_MATCHES]
        if exact:
            exact.sort(key=lambda r: -r.confidence)
            return exact[0].entity_id
        return None

    def resolve_player_id(self, term: str, sport_id: Optional[int] = None) -> Optional[int]:
        """
        Resolve a term to a player ID.

        Tries the alias table first, then an exact full name.

        Returns:
            Player ID, or None when nothing matches exactly
        """
        text = clean_alias(term)
        if not text:
            return None

        player = self.uow.players.get_by_alias(text, sport_id=sport_id)
        if player is not None:
            return player.id

        player = self.uow.players.get_by_full_name(text, sport_id=sport_id)
        if player is not None:
            return player.id

        for result in self._player_candidates(text, sport_id):
            if result.match_type == MatchType.EXACT_PLAYER:
                return result.entity_id
        return None

    # ========================================================================
    # Ranked Resolution
    # ========================================================================

    def resolve(
        self,
        term: str,
        entity_type_hint: Optional[str] = None,
        sport_hint: Optional[str] = None
    ) -> List[ResolutionResult]:
        """
        Every candidate for a term, best first.

        Args:
            term: Free text to resolve
            entity_type_hint: "team" or "player" to restrict the search
            sport_hint: Sport code ("NFL") to restrict the search

        Returns:
            Candidates ranked by confidence, each entity at most once
            (with its strongest match). Empty when nothing matches.

        Raises:
            ValueError: If entity_type_hint is not "team" or "player"
        """
        if entity_type_hint is not None and entity_type_hint not in ENTITY_TYPES:
            raise ValueError(f"entity_type_hint must be one of {ENTITY_TYPES}, got {entity_type_hint!r}")

        text = clean_alias(term)
        if not text:
            return []

        sport_id = None
        if sport_hint:
            sport_id = self.uow.sports.get_sport_id_by_code(sport_hint)
            if sport_id is None:
                logger.debug(f"Unknown sport hint {sport_hint!r}, no candidates for {text!r}")
                return []

        best: Dict[Tuple[str, int], ResolutionResult] = {}
        candidates: List[ResolutionResult] = []

        if entity_type_hint in (None, ENTITY_TEAM):
            candidates.extend(self._team_candidates(text, sport_id))
        if entity_type_hint in (None, ENTITY_PLAYER):
            candidates.extend(self._player_candidates(text, sport_id))

        for result in candidates:
            key = (result.entity_type, result.entity_id)
            current = best.get(key)
            if current is None or result.confidence > current.confidence:
                best[key] = result

        return sorted(best.values(), key=lambda r: (-r.confidence, r.name))

    def resolve_best_match(
        self,
        term: str,
        entity_type_hint: Optional[str] = None,
        sport_hint: Optional[str] = None
    ) -> Optional[ResolutionResult]:
        """Top candidate for a term, or None."""
        results = self.resolve(term, entity_type_hint, sport_hint)
        return results[0] if results else None

    def resolve_high_confidence(
        self,
        term: str,
        entity_type_hint: Optional[str] = None,
        sport_hint: Optional[str] = None
    ) -> List[ResolutionResult]:
        """Candidates safe to auto-accept (confidence >= 0.85)."""
        return [r for r in self.resolve(term, entity_type_hint, sport_hint) if r.is_high_confidence]

    def resolve_bulk(
        self,
        terms: Iterable[str],
        entity_type_hint: Optional[str] = None,
        sport_hint: Optional[str] = None
    ) -> Dict[str, Optional[ResolutionResult]]:
        """Best match per term, keyed by the term as given."""
        return {
            term: self.resolve_best_match(term, entity_type_hint, sport_hint)
            for term in terms
        }

    # ========================================================================
    # Alias Writes
    # ========================================================================

    def add_team_alias(
        self,
        team_id: int,
        alias: str,
        alias_type: str = TeamAliasTypes.NICKNAME,
        is_primary: bool = False
    ) -> bool:
        """
        Register a team alias (first writer wins).

        Returns:
            True if a new alias was queued, False if blank or already taken
        """
        text = clean_alias(alias)
        if not text:
            return False

        existing = self.uow.teams.find_alias(text)
        if existing is not None:
            if existing.team_id != team_id:
                logger.warning(
                    f"Team alias {text!r} already belongs to team {existing.team_id}, "
                    f"ignoring request for team {team_id}"
                )
            return False

        return self.uow.teams.add_alias(team_id, text, alias_type, is_primary)

    def add_player_alias(
        self,
        player_id: int,
        alias: str,
        alias_type: str = PlayerAliasTypes.NICKNAME
    ) -> bool:
        """
        Register a player alias (first writer wins).

        Returns:
            True if a new alias was queued, False if blank or already taken
        """
        text = clean_alias(alias)
        if not text:
            return False

        existing = self.uow.players.find_alias(text)
        if existing is not None:
            if existing.player_id != player_id:
                logger.warning(
                    f"Player alias {text!r} already belongs to player {existing.player_id}, "
                    f"ignoring request for player {player_id}"
                )
            return False

        return self.uow.players.add_alias(player_id, text, alias_type)

    # ========================================================================
    # Candidate Collection
    # ========================================================================

    def _team_candidates(self, text: str, sport_id: Optional[int]) -> List[ResolutionResult]:
        results = []

        aliased = self.uow.teams.get_by_alias(text, sport_id=sport_id)
        if aliased is not None:
            results.append(_team_result(aliased, MatchType.ALIAS))

        wanted = normalize(text)
        for team in self.uow.teams.search_by_name(text, sport_id=sport_id):
            if team.key.upper() == text.upper():
                match_type = MatchType.EXACT_KEY
            elif wanted and wanted in (normalize(team.full_name or ""), normalize(team.name)):
                match_type = MatchType.EXACT_NAME
            else:
                match_type = MatchType.PARTIAL_TEAM
            results.append(_team_result(team, match_type))

        return results

    def _player_candidates(self, text: str, sport_id: Optional[int]) -> List[ResolutionResult]:
        results = []

        aliased = self.uow.players.get_by_alias(text, sport_id=sport_id)
        if aliased is not None:
            results.append(_player_result(aliased, MatchType.PLAYER_ALIAS))

        wanted = normalize(text)
        seen = set()
        for player in self.uow.players.search_by_name(text, sport_id=sport_id):
            seen.add(player.id)
            match_type = _exact_player_match(player, wanted) or MatchType.PARTIAL_PLAYER
            results.append(_player_result(player, match_type))

        # Spellings the substring search misses ("Doncic" for "Dončić", "PJ" for "P.J.")
        for player in self._name_variant_candidates(text, sport_id):
            if player.id in seen:
                continue
            match_type = _exact_player_match(player, wanted)
            if match_type is not None:
                results.append(_player_result(player, match_type))

        return results

    def _name_variant_candidates(self, text: str, sport_id: Optional[int]) -> List[Player]:
        firsts, lasts = set(), set()
        for form in (text, normalize(text)):
            first, last = split_name(form)
            if last:
                firsts.add(first)
                lasts.add(last)
            else:
                # A single word may be either name
                firsts.add(first)
                lasts.add(first)
        return self.uow.players.get_name_candidates(firsts, lasts, sport_id=sport_id)
