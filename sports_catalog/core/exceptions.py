"""
Error taxonomy for the catalog core.

Unknown or unsupported aliases are not errors: lookups return ``None`` or
``False``. Store failures are SQLAlchemy's own ``SQLAlchemyError`` hierarchy
and are propagated unchanged.
"""
from typing import Optional


class CatalogError(Exception):
    """Base class for catalog errors."""


class NotInitializedError(CatalogError):
    """The sport client coordinator was used before ``initialize()`` completed."""

    def __init__(self, component: str = "SportClientCoordinator"):
        super().__init__(
            f"{component} has not been initialized. Call initialize() during application startup."
        )
        self.component = component


class SportNotFoundError(CatalogError):
    """No sport with this code exists in the registry."""

    def __init__(self, sport_code: str):
        super().__init__(f"Unknown sport: {sport_code}")
        self.sport_code = sport_code


class TransactionStateError(CatalogError):
    """Commit or begin called out of sequence on a unit of work."""


class ProviderError(CatalogError):
    """A provider feed request failed. Not retried inside the catalog core."""

    def __init__(
        self,
        provider_code: str,
        endpoint: str,
        message: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(f"{provider_code} {endpoint}: {message}")
        self.provider_code = provider_code
        self.endpoint = endpoint
        self.status_code = status_code
