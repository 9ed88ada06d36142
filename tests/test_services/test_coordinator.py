"""Tests for SportClientCoordinator.

Test Strategy:
1. Lookups before initialize() raise NotInitializedError
2. Keyword resolution is case-insensitive and total
3. Concurrent initialize() loads exactly once
4. Concurrent get_client() builds exactly one client per sport
5. Liveness check drops a sport together with its aliases
6. A failed initialize() stays UNINITIALIZED and can be retried
"""
import threading
from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from sports_catalog.core.exceptions import NotInitializedError
from sports_catalog.providers.clients import NbaClient
from sports_catalog.repositories.sport_repository import SportRepository
from sports_catalog.services.catalog.coordinator import (
    CoordinatorState, SportClientCoordinator, store_liveness_check,
)

DEFAULT_CODES = {"NFL": "NFL", "NBA": "NBA", "MLB": "MLB", "NHL": "NHL"}


@pytest.fixture
def counting_factory():
    """Client factory that records every call and returns a fresh mock client."""
    calls = []
    lock = threading.Lock()

    def factory(provider_code, api_key):
        with lock:
            calls.append(provider_code)
        client = Mock(name=f"{provider_code}-client")
        client.close = AsyncMock()
        return client

    factory.calls = calls
    return factory


@pytest.fixture
def coordinator(session_factory: sessionmaker, db_session: Session, counting_factory) -> SportClientCoordinator:
    """Uninitialized coordinator over the seeded test database."""
    return SportClientCoordinator(
        session_factory,
        provider_codes=DEFAULT_CODES,
        api_key="test-key",
        client_factory=counting_factory,
    )


class TestBeforeInitialize:
    """Tests for the UNINITIALIZED state."""

    def test_starts_uninitialized(self, coordinator):
        """Should start in UNINITIALIZED."""
        assert coordinator.state is CoordinatorState.UNINITIALIZED
        assert coordinator.is_initialized is False

    @pytest.mark.parametrize("call", [
        lambda c: c.resolve_sport_key("football"),
        lambda c: c.is_supported("football"),
        lambda c: c.get_provider_code("football"),
        lambda c: c.list_supported_sports(),
        lambda c: c.get_client("football"),
    ])
    def test_lookups_raise(self, coordinator, call):
        """Should raise NotInitializedError from every lookup."""
        with pytest.raises(NotInitializedError):
            call(coordinator)

    def test_blank_keyword_needs_no_initialization(self, coordinator):
        """Should answer blank keywords without touching the maps."""
        assert coordinator.resolve_sport_key("  ") is None
        assert coordinator.is_supported("") is False
        assert coordinator.get_client(None) is None


class TestKeywordResolution:
    """Tests for resolve_sport_key() / is_supported() / get_provider_code()."""

    @pytest.fixture(autouse=True)
    def ready(self, coordinator):
        coordinator.initialize()

    @pytest.mark.parametrize("keyword", ["football", "FOOTBALL", " Football ", "nfl", "NFL", "americanfootball_nfl"])
    def test_resolves_case_insensitively(self, coordinator, keyword):
        """Should resolve any casing of a keyword or the key itself."""
        assert coordinator.resolve_sport_key(keyword) == "NFL"
        assert coordinator.is_supported(keyword) is True

    def test_unknown_keyword_is_not_an_error(self, coordinator):
        """Should return None / False for unknown keywords."""
        assert coordinator.resolve_sport_key("cricket") is None
        assert coordinator.is_supported("cricket") is False
        assert coordinator.get_provider_code("cricket") is None
        assert coordinator.get_client("cricket") is None

    def test_sports_without_provider_code_are_unreachable(self, coordinator):
        """Should ignore seeded sports missing from the provider code map."""
        assert coordinator.resolve_sport_key("golf") is None
        assert coordinator.resolve_sport_key("NCAAF") is None
        assert coordinator.list_supported_sports() == ["MLB", "NBA", "NFL", "NHL"]

    def test_provider_code(self, coordinator):
        """Should map a keyword to its provider code."""
        assert coordinator.get_provider_code("basketball") == "NBA"
        assert coordinator.get_provider_code("icehockey_nhl") == "NHL"

    def test_second_initialize_is_a_no_op(self, coordinator, monkeypatch):
        """Should return immediately once READY."""
        load = Mock(side_effect=AssertionError("reloaded"))
        monkeypatch.setattr(coordinator, "_load_mappings", load)

        coordinator.initialize()

        load.assert_not_called()


class TestKeywordCollisions:
    """Tests for keywords declared by more than one sport."""

    def test_first_sport_by_name_keeps_shared_keyword(self, session_factory, db_session: Session):
        """Should keep a shared keyword on the sport loaded first and leave own keys intact."""
        repo = SportRepository(db_session)
        repo.update_by_id(5, keywords="football,college football")  # NCAAF also claims "football"
        db_session.commit()

        coordinator = SportClientCoordinator(
            session_factory,
            provider_codes={"NFL": "NFL", "NCAAF": "CFB"},
            api_key="test-key",
            client_factory=Mock(return_value=None),
        )
        coordinator.initialize()

        # "NCAA Football" sorts before "National Football League"
        assert coordinator.resolve_sport_key("football") == "NCAAF"
        assert coordinator.resolve_sport_key("nfl") == "NFL"
        assert coordinator.resolve_sport_key("ncaaf") == "NCAAF"


class TestConcurrentInitialize:
    """Tests for initialize() under contention."""

    def test_fifty_threads_load_once(self, coordinator, monkeypatch):
        """Should load sports exactly once and leave every caller READY."""
        load_count = []
        original = SportRepository.get_active

        def counting_get_active(self):
            load_count.append(1)
            return original(self)

        monkeypatch.setattr(SportRepository, "get_active", counting_get_active)

        barrier = threading.Barrier(50)
        errors = []

        def worker():
            try:
                barrier.wait()
                coordinator.initialize()
                assert coordinator.resolve_sport_key("football") == "NFL"
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(50)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(load_count) == 1
        assert coordinator.state is CoordinatorState.READY


class TestClients:
    """Tests for get_client()."""

    def test_client_is_cached(self, coordinator, counting_factory):
        """Should build once and return the same instance for every keyword of a sport."""
        coordinator.initialize()

        first = coordinator.get_client("football")
        second = coordinator.get_client("NFL")

        assert first is second
        assert counting_factory.calls == ["NFL"]

    def test_concurrent_first_requests_share_one_client(self, coordinator, counting_factory):
        """Should construct exactly one client when many threads race for it."""
        coordinator.initialize()
        barrier = threading.Barrier(20)
        seen = []
        lock = threading.Lock()

        def worker():
            barrier.wait()
            client = coordinator.get_client("basketball")
            with lock:
                seen.append(client)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(seen) == 20
        assert all(client is seen[0] for client in seen)
        assert counting_factory.calls == ["NBA"]

    def test_unknown_provider_code_yields_none(self, session_factory, db_session: Session):
        """Should return None when no client exists for the provider code."""
        coordinator = SportClientCoordinator(
            session_factory, provider_codes={"NFL": "XFL"}, api_key="test-key"
        )
        coordinator.initialize()

        assert coordinator.is_supported("nfl") is True
        assert coordinator.get_client("nfl") is None

    async def test_default_factory_builds_provider_client(self, session_factory, db_session: Session):
        """Should build the sport's provider client with the registry."""
        coordinator = SportClientCoordinator(
            session_factory, provider_codes=DEFAULT_CODES, api_key="test-key"
        )
        coordinator.initialize()

        client = coordinator.get_client("basketball")

        assert isinstance(client, NbaClient)
        await coordinator.close()

    async def test_close_closes_every_client(self, coordinator):
        """Should close cached clients and forget them."""
        coordinator.initialize()
        nfl = coordinator.get_client("nfl")
        nba = coordinator.get_client("nba")

        await coordinator.close()

        nfl.close.assert_awaited_once()
        nba.close.assert_awaited_once()
        assert coordinator.get_client("nfl") is not nfl


class TestLiveness:
    """Tests for the optional liveness check."""

    def test_inactive_sport_dropped_with_aliases(self, coordinator):
        """Should remove the sport and every alias pointing at it."""
        coordinator.initialize(check_active=lambda provider_code: provider_code != "NFL")

        assert coordinator.resolve_sport_key("football") is None
        assert coordinator.resolve_sport_key("nfl") is None
        assert coordinator.is_supported("americanfootball_nfl") is False
        assert coordinator.get_client("football") is None
        assert coordinator.list_supported_sports() == ["MLB", "NBA", "NHL"]

    def test_liveness_receives_provider_codes(self, session_factory, db_session: Session):
        """Should call the check with provider codes, not sport keys."""
        seen = []
        coordinator = SportClientCoordinator(
            session_factory,
            provider_codes={"NFL": "FOOTBALL_FEED"},
            api_key="test-key",
            client_factory=Mock(return_value=None),
        )

        coordinator.initialize(check_active=lambda code: seen.append(code) or True)

        assert seen == ["FOOTBALL_FEED"]

    def test_store_liveness_check(self, session_factory, db_session: Session):
        """Should report sports active in the registry."""
        SportRepository(db_session).update_by_id(3, is_active=False)  # MLB
        db_session.commit()

        check = store_liveness_check(session_factory)

        assert check("NFL") is True
        assert check("MLB") is False
        assert check("XFL") is False


class TestFailedInitialize:
    """Tests for initialization failures."""

    def test_failure_leaves_uninitialized_and_retry_succeeds(self, coordinator, monkeypatch):
        """Should propagate the store error, stay UNINITIALIZED and allow a retry."""
        original = SportRepository.get_active
        attempts = []

        def flaky_get_active(self):
            attempts.append(1)
            if len(attempts) == 1:
                raise OperationalError("SELECT", {}, Exception("database is locked"))
            return original(self)

        monkeypatch.setattr(SportRepository, "get_active", flaky_get_active)

        with pytest.raises(OperationalError):
            coordinator.initialize()
        assert coordinator.state is CoordinatorState.UNINITIALIZED
        with pytest.raises(NotInitializedError):
            coordinator.resolve_sport_key("football")

        coordinator.initialize()

        assert coordinator.state is CoordinatorState.READY
        assert coordinator.resolve_sport_key("football") == "NFL"

    def test_failing_liveness_check_propagates(self, coordinator):
        """Should propagate callback errors and publish nothing."""
        def broken(code):
            raise RuntimeError("feed down")

        with pytest.raises(RuntimeError):
            coordinator.initialize(check_active=broken)

        assert coordinator.is_initialized is False
