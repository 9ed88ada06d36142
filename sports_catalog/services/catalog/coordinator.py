"""
Sport Client Coordinator.

Owns the mapping from free-text sport keywords to canonical sport keys and
the lazily created provider client for each supported sport.

Lifecycle:
    UNINITIALIZED --initialize()--> READY

``initialize()`` loads the active sports once, builds three lookup
structures and publishes them atomically:

- alias -> sport key   ("football" -> "NFL", "nfl" -> "NFL")
- sport key -> provider code ("NFL" -> "NFL")
- supported sport keys

All lookups are case-insensitive. Every other operation raises
``NotInitializedError`` until ``initialize()`` has succeeded.

Usage:
    coordinator = SportClientCoordinator(SessionLocal)
    coordinator.initialize(check_active=store_liveness_check(feed_registry_sessions))
    client = coordinator.get_client("football")
"""
import threading
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from sports_catalog.core.exceptions import NotInitializedError
from sports_catalog.core.logging import get_logger
from sports_catalog.providers.base import SportClient
from sports_catalog.providers.registry import create_client
from sports_catalog.repositories.unit_of_work import UnitOfWork

logger = get_logger(__name__)

LivenessCheck = Callable[[str], bool]
ClientFactory = Callable[[str, str], Optional[SportClient]]


class CoordinatorState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


def store_liveness_check(session_factory: Callable[[], Session]) -> LivenessCheck:
    """
    Build a liveness callback backed by a sport registry.

    The callback reports whether the sport whose code equals the provider
    code is active in the store reached through ``session_factory``.
    """
    def check(provider_code: str) -> bool:
        with UnitOfWork.from_factory(session_factory) as uow:
            return uow.sports.is_active(provider_code)

    return check


class SportClientCoordinator:
    """
    Thread-safe, lazily initialized cache of per-sport provider clients.

    One lock guards initialization and client construction. After READY the
    published lookup maps are never mutated, so keyword resolution reads them
    without locking.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        provider_codes: Optional[Mapping[str, str]] = None,
        api_key: Optional[str] = None,
        client_factory: ClientFactory = create_client,
    ):
        """
        Args:
            session_factory: Opens sessions on the catalog store
            provider_codes: Sport code -> provider code; defaults to ``settings.PROVIDER_CODES``
            api_key: Provider key; defaults to ``settings.SPORTSDATA_API_KEY``
            client_factory: Builds a client from (provider code, api key), None if unknown
        """
        if provider_codes is None or api_key is None:
            from sports_catalog.core.config import settings
            provider_codes = provider_codes if provider_codes is not None else settings.PROVIDER_CODES
            api_key = api_key if api_key is not None else settings.SPORTSDATA_API_KEY

        self._session_factory = session_factory
        self._provider_codes = {code.upper(): provider for code, provider in provider_codes.items()}
        self._api_key = api_key
        self._client_factory = client_factory

        self._lock = threading.Lock()
        self._state = CoordinatorState.UNINITIALIZED

        self._aliases: Dict[str, str] = {}
        self._sport_provider_codes: Dict[str, str] = {}
        self._supported: FrozenSet[str] = frozenset()
        self._clients: Dict[str, SportClient] = {}

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is CoordinatorState.READY

    # ========================================================================
    # Initialization
    # ========================================================================

    def initialize(self, check_active: Optional[LivenessCheck] = None) -> None:
        """
        Load sport mappings from the catalog store. Call once at startup.

        Safe to call from many threads at once: exactly one caller loads,
        the rest wait and return. Calls after READY return immediately.

        Args:
            check_active: Optional ``provider_code -> bool`` callback; sports it
                reports inactive are dropped along with every alias pointing at them

        Raises:
            Whatever the store or the callback raised. The coordinator stays
            UNINITIALIZED and a later call retries.
        """
        if self._state is CoordinatorState.READY:
            return

        with self._lock:
            if self._state is CoordinatorState.READY:
                return

            logger.info("Initializing sport client coordinator from database...")
            try:
                aliases, provider_codes, supported = self._load_mappings(check_active)
            except Exception:
                logger.exception("Failed to initialize sport client coordinator")
                raise

            self._aliases = aliases
            self._sport_provider_codes = provider_codes
            self._supported = frozenset(supported)
            self._state = CoordinatorState.READY

        logger.info(
            f"Sport client coordinator initialized with {len(supported)} sports "
            f"and {len(aliases)} aliases"
        )

    def _load_mappings(
        self, check_active: Optional[LivenessCheck]
    ) -> Tuple[Dict[str, str], Dict[str, str], set]:
        aliases: Dict[str, str] = {}
        provider_codes: Dict[str, str] = {}
        supported = set()

        with UnitOfWork.from_factory(self._session_factory) as uow:
            for sport in uow.sports.get_active():
                provider_code = self._provider_codes.get(sport.code.upper())
                if not provider_code:
                    continue

                key = sport.code
                aliases[key.lower()] = key
                provider_codes[key.lower()] = provider_code
                supported.add(key)

                for keyword in sport.keyword_list:
                    # First sport to claim a keyword keeps it
                    aliases.setdefault(keyword.lower(), key)

                logger.debug(
                    f"Loaded sport {key} (provider code: {provider_code}) "
                    f"with {len(sport.keyword_list)} keywords"
                )

        if check_active is not None:
            for key in sorted(supported):
                if check_active(provider_codes[key.lower()]):
                    continue
                logger.info(f"Sport {key} is not active at its provider, dropping it")
                supported.discard(key)
                del provider_codes[key.lower()]
                for alias in [a for a, target in aliases.items() if target == key]:
                    del aliases[alias]

        return aliases, provider_codes, supported

    def _ensure_initialized(self) -> None:
        if self._state is not CoordinatorState.READY:
            raise NotInitializedError("SportClientCoordinator")

    # ========================================================================
    # Lookups
    # ========================================================================

    def resolve_sport_key(self, keyword: str) -> Optional[str]:
        """Canonical sport key for a keyword or alias, or None."""
        if not keyword or not keyword.strip():
            return None

        self._ensure_initialized()
        return self._aliases.get(keyword.strip().lower())

    def is_supported(self, keyword: str) -> bool:
        """True if the keyword resolves to a supported sport."""
        if not keyword or not keyword.strip():
            return False

        self._ensure_initialized()
        key = self._aliases.get(keyword.strip().lower())
        return key is not None and key in self._supported

    def get_provider_code(self, keyword: str) -> Optional[str]:
        """Provider code of the sport a keyword resolves to, or None."""
        key = self.resolve_sport_key(keyword)
        if key is None:
            return None
        return self._sport_provider_codes.get(key.lower())

    def list_supported_sports(self) -> List[str]:
        """Supported sport keys, sorted."""
        self._ensure_initialized()
        return sorted(self._supported)

    # ========================================================================
    # Clients
    # ========================================================================

    def get_client(self, keyword: str) -> Optional[SportClient]:
        """
        Provider client for the sport a keyword resolves to.

        The client is built on first request and reused afterwards; concurrent
        first requests for one sport all receive the same instance.

        Returns:
            The client, or None for blank, unknown or unsupported keywords and
            for provider codes without a client
        """
        if not keyword or not keyword.strip():
            return None

        self._ensure_initialized()

        key = self._aliases.get(keyword.strip().lower())
        if key is None:
            logger.debug(f"Unknown sport keyword: {keyword}")
            return None
        if key not in self._supported:
            logger.debug(f"Sport not supported: {key}")
            return None

        with self._lock:
            client = self._clients.get(key)
            if client is None:
                client = self._create_client(key)
                if client is not None:
                    self._clients[key] = client
            return client

    def _create_client(self, key: str) -> Optional[SportClient]:
        provider_code = self._sport_provider_codes.get(key.lower())
        if provider_code is None:
            logger.warning(f"No provider code mapping for sport key: {key}")
            return None

        client = self._client_factory(provider_code, self._api_key)
        if client is None:
            logger.warning(f"No client available for provider code {provider_code}")
        else:
            logger.debug(f"Created {provider_code} client for sport {key}")
        return client

    async def close(self) -> None:
        """Close every cached client."""
        with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()

        for client in clients:
            await client.close()
