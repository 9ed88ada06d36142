"""Tests for the sync operations shared by team, player and stadium repositories.

Test Strategy:
1. upsert() inserts new rows and overwrites existing ones
2. created_date survives every overwrite, updated_date moves forward
3. bulk_upsert() batches existence checks by chunk size
4. deactivate_not_in_list() flips exactly the absent active rows
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import event
from sqlalchemy.orm import Session

from sports_catalog.models import Player, Stadium, Team
from sports_catalog.repositories.base import chunked
from sports_catalog.repositories.player_repository import PlayerRepository
from sports_catalog.repositories.stadium_repository import StadiumRepository
from sports_catalog.repositories.team_repository import TeamRepository

# Import helpers from conftest
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import FIXTURE_TIME, NBA_ID, NFL_ID, make_player, make_stadium


class Clock:
    """Deterministic replacement for utcnow(): one minute later on every call."""

    def __init__(self, start: datetime = datetime(2025, 3, 1, 8, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(minutes=1)
        return self.current


@pytest.fixture
def clock(monkeypatch) -> Clock:
    clock = Clock()
    monkeypatch.setattr("sports_catalog.repositories.base.utcnow", clock)
    return clock


@pytest.fixture
def select_log(engine):
    """Every SELECT statement sent to the database during the test."""
    statements = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT"):
            statements.append(statement)

    event.listen(engine, "before_cursor_execute", _record)
    yield statements
    event.remove(engine, "before_cursor_execute", _record)


def stadium(id: int, name: str, city: str = "Somewhere", **fields) -> Stadium:
    """Incoming snapshot entity: no audit columns set."""
    return Stadium(id=id, name=name, city=city, country=fields.pop("country", "USA"), **fields)


class TestChunked:
    """Tests for the chunked() helper."""

    def test_splits_into_slices_of_at_most_size(self):
        """Should yield consecutive slices with the remainder last."""
        assert list(chunked([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]

    def test_empty_input_yields_nothing(self):
        """Should yield no slices for an empty list."""
        assert list(chunked([], 3)) == []


class TestUpsert:
    """Tests for SyncRepository.upsert()."""

    def test_insert_sets_both_audit_dates(self, db_session: Session, clock):
        """Should insert a new row with created_date == updated_date == now."""
        repo = StadiumRepository(db_session)

        saved = repo.upsert(stadium(10, "Arrowhead"))
        db_session.commit()

        row = db_session.get(Stadium, 10)
        assert row is saved
        assert row.created_date == row.updated_date
        assert row.created_date == clock.current

    def test_update_preserves_created_date(self, db_session: Session, sample_stadiums, clock):
        """Should overwrite columns but keep the stored created_date."""
        repo = StadiumRepository(db_session)

        repo.upsert(stadium(1, "Arrowhead Stadium", city="Kansas City", capacity=76416))
        db_session.commit()

        row = db_session.get(Stadium, 1)
        assert row.name == "Arrowhead Stadium"
        assert row.capacity == 76416
        assert row.created_date == FIXTURE_TIME
        assert row.updated_date == clock.current
        assert row.updated_date > row.created_date

    def test_updated_date_strictly_increases(self, db_session: Session, sample_stadiums, clock):
        """Should bump updated_date on every upsert of the same ID."""
        repo = StadiumRepository(db_session)

        repo.upsert(stadium(2, "Lincoln Financial Field", city="Philadelphia"))
        db_session.commit()
        first = db_session.get(Stadium, 2).updated_date

        repo.upsert(stadium(2, "Lincoln Financial Field", city="Philadelphia"))
        db_session.commit()
        second = db_session.get(Stadium, 2).updated_date

        assert second > first

    def test_upsert_is_idempotent(self, db_session: Session, clock):
        """Should leave exactly one row with the same values after repeated upserts."""
        repo = StadiumRepository(db_session)

        for _ in range(3):
            repo.upsert(stadium(11, "Allegiant Stadium", city="Las Vegas", capacity=65000))
            db_session.commit()

        rows = db_session.query(Stadium).filter(Stadium.id == 11).all()
        assert len(rows) == 1
        assert rows[0].name == "Allegiant Stadium"
        assert rows[0].capacity == 65000

    def test_upsert_twice_before_flush_keeps_one_row(self, db_session: Session, clock):
        """Should overwrite a pending row rather than queue a duplicate insert."""
        repo = StadiumRepository(db_session)

        repo.upsert(stadium(12, "Old Name"))
        repo.upsert(stadium(12, "New Name"))
        db_session.commit()

        rows = db_session.query(Stadium).filter(Stadium.id == 12).all()
        assert len(rows) == 1
        assert rows[0].name == "New Name"

    def test_none_in_required_column_keeps_stored_value(self, db_session: Session, sample_stadiums, clock):
        """Should not null out NOT NULL columns the incoming entity left unset."""
        repo = StadiumRepository(db_session)

        incoming = Stadium(id=1, name="Arrowhead", city="Kansas City", country=None)
        repo.upsert(incoming)
        db_session.commit()

        assert db_session.get(Stadium, 1).country == "USA"


class TestBulkUpsert:
    """Tests for SyncRepository.bulk_upsert()."""

    def test_existing_rows_updated_and_new_rows_inserted(self, db_session: Session, clock):
        """Should overwrite B, insert C and leave A alone for snapshot {B', C} over {A, B}."""
        db_session.add_all([
            make_stadium(1, "A", "City A"),
            make_stadium(2, "B", "City B"),
        ])
        db_session.commit()

        repo = StadiumRepository(db_session)
        processed = repo.bulk_upsert([
            stadium(2, "B prime", city="City B"),
            stadium(3, "C", city="City C"),
        ])
        db_session.commit()

        assert processed == 2

        a, b, c = (db_session.get(Stadium, i) for i in (1, 2, 3))
        assert a.name == "A"
        assert a.updated_date == FIXTURE_TIME

        assert b.name == "B prime"
        assert b.created_date == FIXTURE_TIME
        assert b.updated_date > FIXTURE_TIME

        assert c.name == "C"
        assert c.created_date == c.updated_date

    def test_players_keep_created_date_and_new_rows_get_equal_dates(self, db_session: Session, clock):
        """Should keep T0 on the stored player and stamp the two new players once."""
        db_session.add(make_player(100, "Josh", "Allen", position="QB"))
        db_session.commit()

        repo = PlayerRepository(db_session)
        processed = repo.bulk_upsert([
            Player(id=100, sport_id=NFL_ID, name="Josh Allen", first_name="Josh",
                   last_name="Allen", position="QB", status="Active", active=True, number=17),
            Player(id=101, sport_id=NFL_ID, name="Dalton Kincaid", first_name="Dalton",
                   last_name="Kincaid", status="Active", active=True),
            Player(id=102, sport_id=NFL_ID, name="James Cook", first_name="James",
                   last_name="Cook", status="Active", active=True),
        ])
        db_session.commit()

        assert processed == 3

        existing = db_session.get(Player, 100)
        assert existing.created_date == FIXTURE_TIME
        assert existing.updated_date > FIXTURE_TIME
        assert existing.number == 17
        assert existing.active is True

        for new_id in (101, 102):
            new = db_session.get(Player, new_id)
            assert new.sport_id == NFL_ID
            assert new.created_date == new.updated_date
            assert new.created_date > FIXTURE_TIME

    def test_repeating_snapshot_is_idempotent(self, db_session: Session, clock):
        """Should produce the same rows when the same snapshot is applied twice."""
        repo = StadiumRepository(db_session)

        def snapshot():
            return [stadium(i, f"Venue {i}", capacity=1000 * i) for i in range(1, 6)]

        repo.bulk_upsert(snapshot())
        db_session.commit()
        before = {s.id: (s.name, s.capacity, s.created_date) for s in db_session.query(Stadium)}

        repo.bulk_upsert(snapshot())
        db_session.commit()
        after = {s.id: (s.name, s.capacity, s.created_date) for s in db_session.query(Stadium)}

        assert before == after
        assert len(after) == 5

    def test_duplicate_ids_collapse_to_last_occurrence(self, db_session: Session, clock):
        """Should keep one row per ID with the last occurrence's values."""
        repo = StadiumRepository(db_session)

        processed = repo.bulk_upsert([
            stadium(7, "First"),
            stadium(7, "Second"),
        ])
        db_session.commit()

        assert processed == 2
        rows = db_session.query(Stadium).filter(Stadium.id == 7).all()
        assert len(rows) == 1
        assert rows[0].name == "Second"

    def test_existence_checks_are_chunked(self, db_session: Session, select_log):
        """Should issue one existence query per chunk, never one per entity."""
        repo = StadiumRepository(db_session, chunk_size=2)

        repo.bulk_upsert([stadium(i, f"Venue {i}") for i in range(100, 105)])

        stadium_selects = [s for s in select_log if "stadiums" in s]
        assert len(stadium_selects) == 3

    def test_default_chunk_covers_snapshot_in_one_query(self, db_session: Session, select_log):
        """Should check 50 IDs with a single query at the default chunk size."""
        repo = StadiumRepository(db_session)

        repo.bulk_upsert([stadium(i, f"Venue {i}") for i in range(1000, 1050)])

        assert len([s for s in select_log if "stadiums" in s]) == 1

    def test_empty_snapshot_is_a_no_op(self, db_session: Session, select_log):
        """Should return 0 without querying."""
        repo = StadiumRepository(db_session)

        assert repo.bulk_upsert([]) == 0
        assert select_log == []

    def test_invalid_chunk_size_rejected(self, db_session: Session):
        """Should refuse a non-positive chunk size."""
        with pytest.raises(ValueError):
            StadiumRepository(db_session, chunk_size=0)

    def test_existing_ids_returns_stored_subset(self, db_session: Session, sample_stadiums):
        """Should report only IDs that have rows."""
        repo = StadiumRepository(db_session, chunk_size=2)

        assert repo.existing_ids([1, 3, 99, 100]) == {1, 3}


class TestDeactivateNotInList:
    """Tests for ActiveSyncRepository.deactivate_not_in_list()."""

    @pytest.fixture
    def roster(self, db_session: Session):
        players = [
            make_player(1, "A", "One"),
            make_player(2, "B", "Two"),
            make_player(3, "C", "Three"),
            make_player(4, "D", "Four", active=False, status="Inactive"),
            make_player(5, "E", "Five", sport_id=NBA_ID),
        ]
        db_session.add_all(players)
        db_session.commit()
        return players

    def test_flips_exactly_the_absent_active_rows(self, db_session: Session, roster, clock):
        """Should deactivate active rows of the sport missing from the list and nothing else."""
        repo = PlayerRepository(db_session)

        count = repo.deactivate_not_in_list(NFL_ID, [1, 3])
        db_session.commit()

        assert count == 1
        states = {p.id: p.active for p in db_session.query(Player)}
        assert states == {1: True, 2: False, 3: True, 4: False, 5: True}

    def test_bumps_updated_date_only_on_flipped_rows(self, db_session: Session, roster, clock):
        """Should touch updated_date of deactivated rows only."""
        repo = PlayerRepository(db_session)

        repo.deactivate_not_in_list(NFL_ID, [1, 3])
        db_session.commit()

        assert db_session.get(Player, 2).updated_date == clock.current
        assert db_session.get(Player, 1).updated_date == FIXTURE_TIME
        assert db_session.get(Player, 4).updated_date == FIXTURE_TIME

    def test_never_deletes_rows(self, db_session: Session, roster):
        """Should keep every row even when the list is empty."""
        repo = PlayerRepository(db_session)

        count = repo.deactivate_not_in_list(NFL_ID, [])
        db_session.commit()

        assert count == 3
        assert db_session.query(Player).count() == 5

    def test_second_run_is_a_no_op(self, db_session: Session, roster):
        """Should flip nothing when the same list is applied again."""
        repo = PlayerRepository(db_session)

        repo.deactivate_not_in_list(NFL_ID, [1])
        db_session.commit()

        assert repo.deactivate_not_in_list(NFL_ID, [1]) == 0

    def test_teams_deactivate_the_same_way(self, db_session: Session, sample_teams):
        """Should soft-delete teams missing from the snapshot."""
        repo = TeamRepository(db_session)

        count = repo.deactivate_not_in_list(NFL_ID, [16, 26])
        db_session.commit()

        assert count == 1
        assert db_session.get(Team, 22).active is False
        assert db_session.get(Team, 9).active is True
