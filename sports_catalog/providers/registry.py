"""
Provider code -> sport client lookup.

Adding a sport means adding a client class and one entry to
``PROVIDER_CLIENTS``; nothing else branches on the provider code.
"""
from typing import Dict, Optional, Type

from sports_catalog.providers.base import SportsDataClient
from sports_catalog.providers.clients import MlbClient, NbaClient, NflClient, NhlClient

PROVIDER_CLIENTS: Dict[str, Type[SportsDataClient]] = {
    "NFL": NflClient,
    "NBA": NbaClient,
    "MLB": MlbClient,
    "NHL": NhlClient,
}


def create_client(
    provider_code: str,
    api_key: str,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Optional[SportsDataClient]:
    """
    Build the client for a provider code.

    Returns:
        A new client, or None if no client exists for the code
    """
    client_class = PROVIDER_CLIENTS.get((provider_code or "").upper())
    if client_class is None:
        return None
    return client_class(api_key, base_url=base_url, timeout=timeout)
