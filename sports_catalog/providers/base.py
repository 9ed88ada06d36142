"""
Base client for the SportsDataIO v3 JSON feed.

Each sport has its own feed path (``/nfl``, ``/nba``, ...) and its own
field names for the same concepts; subclasses override the ``_map_*``
hooks where their feed differs from the common shape.

Requests are not retried here. Any transport or HTTP failure surfaces as
``ProviderError`` and the caller decides whether to try again later.

Usage:
    async with NflClient(api_key) as client:
        teams = await client.list_teams()
        season = await client.get_current_season()
"""
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

import httpx

from sports_catalog.core.exceptions import ProviderError
from sports_catalog.core.logging import get_logger
from sports_catalog.providers.types import GameRecord, PlayerRecord, StadiumRecord, TeamRecord
from sports_catalog.utils.timezone import utcnow

logger = get_logger(__name__)

API_KEY_HEADER = "Ocp-Apim-Subscription-Key"


@runtime_checkable
class SportClient(Protocol):
    """Contract every sport client satisfies."""

    sport_key: str

    async def list_teams(self) -> List[TeamRecord]: ...

    async def list_players(self) -> List[PlayerRecord]: ...

    async def list_stadiums(self) -> List[StadiumRecord]: ...

    async def get_current_season(self) -> int: ...

    async def list_season_games(self, season: int) -> List[GameRecord]: ...

    async def list_current_season_games(self) -> List[GameRecord]: ...

    async def close(self) -> None: ...


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


class SportsDataClient:
    """
    Shared HTTP plumbing and default field mapping for SportsDataIO feeds.

    Attributes:
        provider_code: Code used to select this client (NFL, NBA, ...)
        sport_key: Odds-feed style sport key ("americanfootball_nfl")
        feed: Path segment of the sport's feed ("nfl")
    """

    provider_code: str = ""
    sport_key: str = ""
    feed: str = ""

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_key: SportsDataIO subscription key
            base_url: Feed root, defaults to ``settings.SPORTSDATA_BASE_URL``
            timeout: Request timeout in seconds, defaults to ``settings.PROVIDER_TIMEOUT``
            transport: Optional httpx transport (tests pass ``httpx.MockTransport``)
        """
        if base_url is None or timeout is None:
            from sports_catalog.core.config import settings
            base_url = base_url or settings.SPORTSDATA_BASE_URL
            timeout = timeout if timeout is not None else settings.PROVIDER_TIMEOUT

        self._client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/{self.feed}",
            timeout=timeout,
            headers={API_KEY_HEADER: api_key},
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    # ========================================================================
    # HTTP
    # ========================================================================

    async def _get_json(self, endpoint: str) -> Any:
        """
        GET a feed endpoint and decode its JSON body.

        Raises:
            ProviderError: On transport errors, non-2xx responses or invalid JSON
        """
        try:
            response = await self._client.get(endpoint)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"{self.provider_code} {endpoint} returned HTTP {status}")
            raise ProviderError(self.provider_code, endpoint, f"HTTP {status}", status_code=status) from e
        except httpx.HTTPError as e:
            logger.error(f"{self.provider_code} {endpoint} request failed: {e}")
            raise ProviderError(self.provider_code, endpoint, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise ProviderError(self.provider_code, endpoint, f"invalid JSON: {e}") from e

    async def _get_list(self, endpoint: str) -> List[Dict[str, Any]]:
        data = await self._get_json(endpoint)
        if not isinstance(data, list):
            raise ProviderError(self.provider_code, endpoint, f"expected a JSON array, got {type(data).__name__}")
        return data

    # ========================================================================
    # Catalog
    # ========================================================================

    async def list_teams(self) -> List[TeamRecord]:
        rows = await self._get_list("scores/json/AllTeams")
        return [self._map_team(row) for row in rows]

    async def list_players(self) -> List[PlayerRecord]:
        rows = await self._get_list("scores/json/Players")
        return [self._map_player(row) for row in rows]

    async def list_stadiums(self) -> List[StadiumRecord]:
        rows = await self._get_list("scores/json/Stadiums")
        return [self._map_stadium(row) for row in rows]

    # ========================================================================
    # Seasons & Games
    # ========================================================================

    async def get_current_season(self) -> int:
        """Current season year; falls back to the current UTC year when the feed has none."""
        data = await self._get_json("scores/json/CurrentSeason")
        season = self._parse_season(data)
        return season if season is not None else utcnow().year

    async def list_season_games(self, season: int) -> List[GameRecord]:
        rows = await self._get_list(self._season_games_endpoint(season))
        return [self._map_game(row) for row in rows]

    async def list_current_season_games(self) -> List[GameRecord]:
        season = await self.get_current_season()
        return await self.list_season_games(season)

    def _season_games_endpoint(self, season: int) -> str:
        return f"scores/json/Games/{season}"

    def _parse_season(self, data: Any) -> Optional[int]:
        # Most feeds return a season object; some return a bare year
        if isinstance(data, dict):
            data = data.get("Season")
        if data is None:
            return None
        return int(data)

    # ========================================================================
    # Field Mapping (common feed shape)
    # ========================================================================

    def _map_team(self, row: Dict[str, Any]) -> TeamRecord:
        city = row.get("City") or ""
        name = row.get("Name") or ""
        return TeamRecord(
            id=row["TeamID"],
            key=row.get("Key") or "",
            city=city,
            name=name,
            full_name=row.get("FullName") or f"{city} {name}".strip(),
            stadium_id=row.get("StadiumID"),
            conference=row.get("Conference"),
            division=row.get("Division"),
            global_team_id=row.get("GlobalTeamID"),
            head_coach=row.get("HeadCoach"),
            primary_color=row.get("PrimaryColor"),
            secondary_color=row.get("SecondaryColor"),
        )

    def _map_player(self, row: Dict[str, Any]) -> PlayerRecord:
        first = row.get("FirstName")
        last = row.get("LastName")
        return PlayerRecord(
            id=row["PlayerID"],
            name=row.get("Name") or " ".join(p for p in (first, last) if p),
            first_name=first,
            last_name=last,
            short_name=row.get("ShortName") or last,
            team_key=row.get("Team"),
            position=row.get("Position"),
            position_category=row.get("PositionCategory"),
            status=row.get("Status"),
            number=row.get("Jersey"),
            height=_as_str(row.get("Height")),
            weight=row.get("Weight"),
            birth_date=row.get("BirthDate"),
            college=row.get("College"),
            experience=row.get("Experience"),
            injury_status=row.get("InjuryStatus"),
            injury_body_part=row.get("InjuryBodyPart"),
            injury_start_date=row.get("InjuryStartDate"),
            injury_notes=row.get("InjuryNotes"),
            depth_order=row.get("DepthOrder"),
            global_player_id=row.get("GlobalPlayerID"),
            photo_url=row.get("PhotoUrl"),
        )

    def _map_stadium(self, row: Dict[str, Any]) -> StadiumRecord:
        return StadiumRecord(
            id=row["StadiumID"],
            name=row.get("Name") or "",
            city=row.get("City") or "",
            state=row.get("State"),
            country=row.get("Country") or "",
            capacity=row.get("Capacity"),
            playing_surface=row.get("PlayingSurface") or row.get("Surface"),
            geo_lat=row.get("GeoLat"),
            geo_long=row.get("GeoLong"),
            type=row.get("Type"),
        )

    def _map_game(self, row: Dict[str, Any]) -> GameRecord:
        return GameRecord(
            id=row["GameID"],
            season=row["Season"],
            season_type=_as_str(row.get("SeasonType")),
            status=row.get("Status"),
            date_time=row.get("DateTime"),
            home_team=row.get("HomeTeam"),
            away_team=row.get("AwayTeam"),
            home_score=row.get("HomeTeamScore"),
            away_score=row.get("AwayTeamScore"),
            stadium_id=row.get("StadiumID"),
            is_completed=bool(row.get("IsClosed")),
        )

    def __repr__(self):
        return f"{type(self).__name__}(sport_key={self.sport_key!r})"
