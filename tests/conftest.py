"""Shared pytest fixtures for sports catalog tests."""
import sys
from datetime import datetime
from pathlib import Path
from typing import AsyncGenerator, Generator, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sports_catalog.core.database import enable_sqlite_foreign_keys
from sports_catalog.models import Base, Player, Stadium, Team, TeamAlias, TeamAliasTypes
from sports_catalog.models.seed import seed_sports
from sports_catalog.repositories.unit_of_work import UnitOfWork

NFL_ID = 1
NBA_ID = 2

# Fixed audit timestamp for rows created by fixtures
FIXTURE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """
    Fresh in-memory SQLite engine per test.

    StaticPool keeps a single connection so every session (and every thread)
    sees the same in-memory database. Foreign keys are enforced.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to the test engine, configured like the application's."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Session on a database seeded with the fixed sport registry."""
    session = session_factory()
    seed_sports(session)

    yield session

    session.close()


@pytest.fixture(scope="function")
def uow(db_session: Session) -> UnitOfWork:
    """Unit of work over the seeded test session."""
    return UnitOfWork(db_session, chunk_size=2000)


# ============================================================================
# Sample catalog rows
# ============================================================================

def make_stadium(id: int, name: str, city: str, state: str = None, **fields) -> Stadium:
    return Stadium(
        id=id, name=name, city=city, state=state, country=fields.pop("country", "USA"),
        created_date=FIXTURE_TIME, updated_date=FIXTURE_TIME, **fields
    )


def make_team(id: int, key: str, city: str, name: str, sport_id: int = NFL_ID, **fields) -> Team:
    return Team(
        id=id, sport_id=sport_id, key=key, city=city, name=name,
        full_name=fields.pop("full_name", f"{city} {name}"),
        active=fields.pop("active", True),
        created_date=FIXTURE_TIME, updated_date=FIXTURE_TIME, **fields
    )


def make_player(id: int, first: str, last: str, sport_id: int = NFL_ID, **fields) -> Player:
    return Player(
        id=id, sport_id=sport_id, first_name=first, last_name=last,
        name=fields.pop("name", f"{first} {last}"),
        status=fields.pop("status", "Active"),
        active=fields.pop("active", True),
        created_date=FIXTURE_TIME, updated_date=FIXTURE_TIME, **fields
    )


@pytest.fixture
def sample_stadiums(db_session: Session) -> List[Stadium]:
    stadiums = [
        make_stadium(1, "GEHA Field at Arrowhead Stadium", "Kansas City", "MO", type="Outdoor"),
        make_stadium(2, "Lincoln Financial Field", "Philadelphia", "PA", type="Outdoor"),
        make_stadium(3, "Caesars Superdome", "New Orleans", "LA", type="Dome"),
    ]
    db_session.add_all(stadiums)
    db_session.commit()
    return stadiums


@pytest.fixture
def sample_teams(db_session: Session, sample_stadiums) -> List[Team]:
    teams = [
        make_team(16, "KC", "Kansas City", "Chiefs", stadium_id=1, conference="AFC", division="West"),
        make_team(26, "PHI", "Philadelphia", "Eagles", stadium_id=2, conference="NFC", division="East"),
        make_team(22, "NO", "New Orleans", "Saints", stadium_id=3, conference="NFC", division="South"),
        make_team(9, "DAL", "Dallas", "Mavericks", sport_id=NBA_ID, conference="Western", division="Southwest"),
    ]
    db_session.add_all(teams)
    db_session.commit()
    return teams


@pytest.fixture
def sample_players(db_session: Session, sample_teams) -> List[Player]:
    players = [
        make_player(18890, "Patrick", "Mahomes", team_id=16, team_key="KC", position="QB",
                    fantasy_position="QB", average_draft_position=40.0),
        make_player(15048, "Travis", "Kelce", team_id=16, team_key="KC", position="TE",
                    fantasy_position="TE", average_draft_position=22.0),
        make_player(21831, "Jalen", "Hurts", team_id=26, team_key="PHI", position="QB",
                    fantasy_position="QB", average_draft_position=30.0),
        make_player(19801, "Kenneth", "Walker", team_id=22, team_key="NO", position="RB",
                    fantasy_position="RB"),
        make_player(20000, "Luka", "Dončić", sport_id=NBA_ID, team_id=9, team_key="DAL", position="PG"),
    ]
    db_session.add_all(players)
    db_session.commit()
    return players


@pytest.fixture
def chiefs_aliases(db_session: Session, sample_teams) -> List[TeamAlias]:
    aliases = [
        TeamAlias(team_id=16, alias="Chiefs", alias_type=TeamAliasTypes.NICKNAME, is_primary=True),
        TeamAlias(team_id=16, alias="KC", alias_type=TeamAliasTypes.ABBREVIATION),
        TeamAlias(team_id=16, alias="Kansas City", alias_type=TeamAliasTypes.CITY),
    ]
    db_session.add_all(aliases)
    db_session.commit()
    return aliases


# ============================================================================
# API client
# ============================================================================

@pytest.fixture(scope="function")
async def async_client(session_factory, db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client for the FastAPI app, wired to the test database.

    Lifespan does not run under ASGITransport, so the coordinator is built and
    attached here; tests replace ``app.state.coordinator`` when they need a fake.
    """
    from sports_catalog.main import app
    from sports_catalog.api.deps import get_uow
    from sports_catalog.services.catalog.coordinator import SportClientCoordinator

    def override_get_uow():
        with UnitOfWork.from_factory(session_factory, chunk_size=2000) as test_uow:
            yield test_uow

    app.dependency_overrides[get_uow] = override_get_uow

    coordinator = SportClientCoordinator(session_factory, api_key="test-key")
    coordinator.initialize()
    app.state.coordinator = coordinator

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()
    app.state.coordinator = None
