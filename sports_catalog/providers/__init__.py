"""Sport data provider clients (SportsDataIO v3)."""
from sports_catalog.providers.base import SportClient, SportsDataClient
from sports_catalog.providers.clients import MlbClient, NbaClient, NflClient, NhlClient
from sports_catalog.providers.registry import PROVIDER_CLIENTS, create_client
from sports_catalog.providers.types import GameRecord, PlayerRecord, StadiumRecord, TeamRecord

__all__ = [
    "SportClient",
    "SportsDataClient",
    "NflClient",
    "NbaClient",
    "MlbClient",
    "NhlClient",
    "PROVIDER_CLIENTS",
    "create_client",
    "TeamRecord",
    "PlayerRecord",
    "StadiumRecord",
    "GameRecord",
]
