"""Catalog sync service: reconciles the canonical catalog with provider snapshots.

One sync of one sport:
1. Resolve the sport and its provider client (unsupported sports are skipped)
2. Fetch stadium, team and player snapshots from the provider
3. In one transaction:
   - bulk upsert stadiums
   - bulk upsert teams (sports with teams only), add key / nickname aliases,
     deactivate teams missing from the snapshot
   - bulk upsert players linked to their team, deactivate players missing
     from the snapshot
4. Commit, or roll back everything on any failure

Snapshots are fetched before the transaction opens, so a slow or failing
provider never holds a database transaction. Rows are never deleted.

Sync Schedule (recommended cron):
- full catalog: "0 2 1 * *" (monthly, 2am UTC on the 1st)
"""
import logging
import time
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

from sports_catalog.core.exceptions import SportNotFoundError
from sports_catalog.core.logging import correlation_scope
from sports_catalog.models import Player, Stadium, Team, TeamAliasTypes
from sports_catalog.providers.types import PlayerRecord, StadiumRecord, TeamRecord
from sports_catalog.repositories.unit_of_work import UnitOfWork
from sports_catalog.services.catalog.coordinator import SportClientCoordinator

logger = logging.getLogger(__name__)

ENTITY_STADIUMS = "stadiums"
ENTITY_TEAMS = "teams"
ENTITY_PLAYERS = "players"
ENTITY_TYPES = (ENTITY_STADIUMS, ENTITY_TEAMS, ENTITY_PLAYERS)


@dataclass
class SyncResult:
    """Outcome of syncing one sport."""
    sport_code: str
    entity_type: Optional[str] = None
    skipped: bool = False
    reason: Optional[str] = None
    error: Optional[str] = None
    stadiums: int = 0
    teams: int = 0
    players: int = 0
    team_aliases_added: int = 0
    teams_deactivated: int = 0
    players_deactivated: int = 0
    duration_ms: int = 0
    correlation_id: str = ""

    @property
    def success(self) -> bool:
        return not self.skipped and self.error is None

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["success"] = self.success
        return data


@dataclass
class _Snapshot:
    stadiums: List[StadiumRecord] = field(default_factory=list)
    teams: List[TeamRecord] = field(default_factory=list)
    players: List[PlayerRecord] = field(default_factory=list)
    include_stadiums: bool = False
    include_teams: bool = False
    include_players: bool = False


# ============================================================================
# Record -> entity mapping
# ============================================================================

def stadium_from_record(record: StadiumRecord) -> Stadium:
    return Stadium(**record.model_dump())


def team_from_record(record: TeamRecord, sport_id: int, known_stadium_ids: set) -> Team:
    data = record.model_dump()
    # Venues the catalog does not know yet are left unlinked
    if data["stadium_id"] not in known_stadium_ids:
        data["stadium_id"] = None
    return Team(sport_id=sport_id, active=True, **data)


def player_from_record(record: PlayerRecord, sport_id: int, team_ids: Dict[str, int]) -> Player:
    data = record.model_dump(exclude={"active"})
    team_id = team_ids.get(record.team_key) if record.team_key else None
    return Player(sport_id=sport_id, team_id=team_id, active=record.is_active, **data)


class CatalogSyncService:
    """
    Synchronizes sports, one transaction per sport.

    The unit of work supplies the session; the coordinator supplies the
    provider client for each sport.
    """

    def __init__(self, uow: UnitOfWork, coordinator: SportClientCoordinator):
        self.uow = uow
        self.coordinator = coordinator

    async def sync_sport(self, sport_code: str, entity_type: Optional[str] = None) -> SyncResult:
        """
        Sync one sport from its provider.

        Args:
            sport_code: Sport registry code ("NFL")
            entity_type: Restrict to "stadiums", "teams" or "players"; None syncs all

        Returns:
            SyncResult with per-entity counts, or ``skipped=True`` when the
            sport has no usable provider client

        Raises:
            SportNotFoundError: If no sport has this code
            ValueError: If entity_type is not recognised
            NotInitializedError: If the coordinator has not been initialized
            ProviderError: If a provider fetch failed (nothing was written)
            SQLAlchemyError: If the store failed (the sync was rolled back)
        """
        if entity_type is not None and entity_type not in ENTITY_TYPES:
            raise ValueError(f"entity_type must be one of {ENTITY_TYPES}, got {entity_type!r}")

        with correlation_scope() as run_id:
            started = time.monotonic()

            sport = self.uow.sports.get_by_code(sport_code)
            if sport is None:
                raise SportNotFoundError(sport_code)

            result = SyncResult(sport_code=sport.code, entity_type=entity_type, correlation_id=run_id)

            client = self.coordinator.get_client(sport.code)
            if client is None:
                result.skipped = True
                result.reason = "no provider client for sport"
                logger.info(f"Skipping {sport.code} sync: {result.reason}")
                return result

            logger.info(f"Starting {sport.code} catalog sync (entity_type={entity_type or 'all'})")

            snapshot = await self._fetch_snapshot(client, entity_type, sport.has_teams)

            sport_id = sport.id
            with self.uow.transaction():
                self._apply_snapshot(sport_id, snapshot, result)

            result.duration_ms = int((time.monotonic() - started) * 1000)
            logger.info(
                f"{sport.code} catalog sync complete: {result.stadiums} stadiums, "
                f"{result.teams} teams, {result.players} players, "
                f"{result.players_deactivated} players deactivated ({result.duration_ms}ms)"
            )
            return result

    async def sync_all(self) -> List[SyncResult]:
        """
        Sync every active sport in turn, each in its own transaction.

        A failing sport is logged and reported in its result; later sports
        still run.
        """
        results = []
        for code in [sport.code for sport in self.uow.sports.get_active()]:
            try:
                results.append(await self.sync_sport(code))
            except Exception as e:
                logger.exception(f"{code} catalog sync failed")
                results.append(SyncResult(sport_code=code, error=str(e) or type(e).__name__))

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"Catalog sync finished: {succeeded}/{len(results)} sports synced")
        return results

    # ========================================================================
    # Internals
    # ========================================================================

    async def _fetch_snapshot(self, client, entity_type: Optional[str], has_teams: bool) -> _Snapshot:
        snapshot = _Snapshot(
            include_stadiums=entity_type in (None, ENTITY_STADIUMS),
            include_teams=entity_type in (None, ENTITY_TEAMS) and has_teams,
            include_players=entity_type in (None, ENTITY_PLAYERS),
        )

        if snapshot.include_stadiums:
            snapshot.stadiums = await client.list_stadiums()
        if snapshot.include_teams:
            snapshot.teams = await client.list_teams()
        if snapshot.include_players:
            snapshot.players = await client.list_players()

        logger.debug(
            f"Fetched snapshot: {len(snapshot.stadiums)} stadiums, "
            f"{len(snapshot.teams)} teams, {len(snapshot.players)} players"
        )
        return snapshot

    def _apply_snapshot(self, sport_id: int, snapshot: _Snapshot, result: SyncResult) -> None:
        uow = self.uow

        if snapshot.include_stadiums:
            result.stadiums = uow.stadiums.bulk_upsert(
                stadium_from_record(r) for r in snapshot.stadiums
            )
            uow.save_changes()

        if snapshot.include_teams:
            known_stadiums = uow.stadiums.existing_ids(
                r.stadium_id for r in snapshot.teams if r.stadium_id is not None
            )
            result.teams = uow.teams.bulk_upsert(
                team_from_record(r, sport_id, known_stadiums) for r in snapshot.teams
            )
            uow.save_changes()

            for record in snapshot.teams:
                if uow.teams.add_alias(record.id, record.key, TeamAliasTypes.ABBREVIATION):
                    result.team_aliases_added += 1
                if uow.teams.add_alias(record.id, record.name, TeamAliasTypes.NICKNAME):
                    result.team_aliases_added += 1

            result.teams_deactivated = uow.teams.deactivate_not_in_list(
                sport_id, [r.id for r in snapshot.teams]
            )
            uow.save_changes()

        if snapshot.include_players:
            team_ids = uow.teams.get_key_map(sport_id)
            result.players = uow.players.bulk_upsert(
                player_from_record(r, sport_id, team_ids) for r in snapshot.players
            )
            uow.save_changes()

            result.players_deactivated = uow.players.deactivate_not_in_list(
                sport_id, [r.id for r in snapshot.players]
            )
            uow.save_changes()
