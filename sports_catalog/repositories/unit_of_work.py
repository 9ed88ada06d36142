"""
Unit of Work over one SQLAlchemy session.

Groups the catalog repositories behind a single transaction boundary so a
sync either lands completely or not at all.

Usage:
    with UnitOfWork.from_factory(SessionLocal) as uow:
        with uow.transaction():
            uow.stadiums.bulk_upsert(stadiums)
            uow.teams.bulk_upsert(teams)
            uow.save_changes()  # flush only, still inside the transaction
            uow.players.bulk_upsert(players)
"""
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy.orm import Session

from sports_catalog.core.exceptions import TransactionStateError
from sports_catalog.repositories.player_repository import PlayerRepository
from sports_catalog.repositories.sport_repository import SportRepository
from sports_catalog.repositories.stadium_repository import StadiumRepository
from sports_catalog.repositories.team_repository import TeamRepository

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Lazily built repositories sharing one session and one transaction.

    Not thread-safe; one instance per caller.
    """

    def __init__(self, session: Session, chunk_size: Optional[int] = None):
        if chunk_size is None:
            from sports_catalog.core.config import settings
            chunk_size = settings.BULK_UPSERT_CHUNK_SIZE

        self.session = session
        self.chunk_size = chunk_size
        self._in_transaction = False
        self._closed = False

        self._sports: Optional[SportRepository] = None
        self._teams: Optional[TeamRepository] = None
        self._players: Optional[PlayerRepository] = None
        self._stadiums: Optional[StadiumRepository] = None

    @classmethod
    def from_factory(cls, session_factory: Callable[[], Session], chunk_size: Optional[int] = None) -> "UnitOfWork":
        """Open a new session from ``session_factory`` and wrap it."""
        return cls(session_factory(), chunk_size=chunk_size)

    # ========================================================================
    # Repositories
    # ========================================================================

    @property
    def sports(self) -> SportRepository:
        if self._sports is None:
            self._sports = SportRepository(self.session)
        return self._sports

    @property
    def teams(self) -> TeamRepository:
        if self._teams is None:
            self._teams = TeamRepository(self.session, chunk_size=self.chunk_size)
        return self._teams

    @property
    def players(self) -> PlayerRepository:
        if self._players is None:
            self._players = PlayerRepository(self.session, chunk_size=self.chunk_size)
        return self._players

    @property
    def stadiums(self) -> StadiumRepository:
        if self._stadiums is None:
            self._stadiums = StadiumRepository(self.session, chunk_size=self.chunk_size)
        return self._stadiums

    # ========================================================================
    # Persistence
    # ========================================================================

    @property
    def in_transaction(self) -> bool:
        """True between ``begin_transaction`` and commit / rollback."""
        return self._in_transaction

    def save_changes(self) -> None:
        """
        Persist pending changes.

        Inside an explicit transaction this only flushes, so the changes stay
        revocable until ``commit_transaction``. Outside one it commits.
        """
        if self._in_transaction:
            self.session.flush()
            return

        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    def begin_transaction(self) -> None:
        """
        Open an explicit transaction.

        Raises:
            TransactionStateError: If a transaction is already active
        """
        if self._in_transaction:
            raise TransactionStateError("A transaction is already active on this unit of work")

        # The session may already have autobegun on an earlier read
        if not self.session.in_transaction():
            self.session.begin()
        self._in_transaction = True

    def commit_transaction(self) -> None:
        """
        Flush and commit the active transaction.

        Any failure rolls the transaction back before the error propagates.

        Raises:
            TransactionStateError: If no transaction is active
        """
        if not self._in_transaction:
            raise TransactionStateError("No active transaction to commit")

        try:
            self.session.flush()
            self.session.commit()
        except Exception:
            logger.warning("Commit failed, rolling back transaction")
            self.session.rollback()
            raise
        finally:
            self._in_transaction = False

    def rollback_transaction(self) -> None:
        """Discard the active transaction. No-op when none is active."""
        if not self._in_transaction:
            return
        try:
            self.session.rollback()
        finally:
            self._in_transaction = False

    @contextmanager
    def transaction(self) -> Iterator["UnitOfWork"]:
        """
        Transaction scope: commit on normal exit, roll back on any exception.

        Exactly one of commit or rollback runs. Cancellation of an enclosing
        coroutine also rolls back.
        """
        self.begin_transaction()
        try:
            yield self
        except BaseException:
            self.rollback_transaction()
            raise
        self.commit_transaction()

    # ========================================================================
    # Lifetime
    # ========================================================================

    def close(self) -> None:
        """Roll back any open transaction and release the session."""
        if self._closed:
            return
        try:
            self.rollback_transaction()
        finally:
            self.session.close()
            self._closed = True

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
