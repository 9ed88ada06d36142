"""
Sport-specific SportsDataIO clients.

Only the fields that differ from the common feed shape are mapped here.
"""
from typing import Any, Dict

from sports_catalog.providers.base import SportsDataClient, _as_str
from sports_catalog.providers.types import GameRecord, PlayerRecord, StadiumRecord, TeamRecord


class NflClient(SportsDataClient):
    """NFL feed: scores instead of games, richer team and player profiles."""

    provider_code = "NFL"
    sport_key = "americanfootball_nfl"
    feed = "nfl"

    def _season_games_endpoint(self, season: int) -> str:
        return f"scores/json/Scores/{season}"

    def _map_team(self, row: Dict[str, Any]) -> TeamRecord:
        base = super()._map_team(row)
        return base.model_copy(update={
            "bye_week": row.get("ByeWeek"),
            "average_draft_position": row.get("AverageDraftPosition"),
        })

    def _map_player(self, row: Dict[str, Any]) -> PlayerRecord:
        base = super()._map_player(row)
        return base.model_copy(update={
            "number": row.get("Number"),
            "fantasy_position": row.get("FantasyPosition"),
            "active": row.get("Active"),
            "average_draft_position": row.get("AverageDraftPosition"),
        })

    def _map_game(self, row: Dict[str, Any]) -> GameRecord:
        # Score rows use ScoreID / Date / IsOver
        return GameRecord(
            id=row["ScoreID"],
            season=row["Season"],
            season_type=_as_str(row.get("SeasonType")),
            status=row.get("Status"),
            date_time=row.get("Date"),
            home_team=row.get("HomeTeam"),
            away_team=row.get("AwayTeam"),
            home_score=row.get("HomeScore"),
            away_score=row.get("AwayScore"),
            stadium_id=row.get("StadiumID"),
            is_completed=bool(row.get("IsOver")),
        )


class NbaClient(SportsDataClient):
    """NBA feed."""

    provider_code = "NBA"
    sport_key = "basketball_nba"
    feed = "nba"

    def _map_stadium(self, row: Dict[str, Any]) -> StadiumRecord:
        base = super()._map_stadium(row)
        if base.type is None:
            # Arenas are indoor
            return base.model_copy(update={"type": "Indoor"})
        return base


class MlbClient(SportsDataClient):
    """MLB feed: leagues instead of conferences, runs instead of scores."""

    provider_code = "MLB"
    sport_key = "baseball_mlb"
    feed = "mlb"

    def _map_team(self, row: Dict[str, Any]) -> TeamRecord:
        base = super()._map_team(row)
        return base.model_copy(update={"conference": row.get("League")})

    def _map_game(self, row: Dict[str, Any]) -> GameRecord:
        base = super()._map_game(row)
        return base.model_copy(update={
            "home_score": row.get("HomeTeamRuns"),
            "away_score": row.get("AwayTeamRuns"),
        })


class NhlClient(SportsDataClient):
    """NHL feed."""

    provider_code = "NHL"
    sport_key = "icehockey_nhl"
    feed = "nhl"

    def _map_stadium(self, row: Dict[str, Any]) -> StadiumRecord:
        base = super()._map_stadium(row)
        if base.type is None:
            return base.model_copy(update={"type": "Indoor"})
        return base
