"""
Base repository classes for the catalog data access layer.

- ``BaseRepository``: typed CRUD and query helpers for any model.
- ``SyncRepository``: adds idempotent ``upsert`` / ``bulk_upsert`` for models
  keyed by a provider-assigned ``id`` with ``created_date`` / ``updated_date``
  audit columns.
- ``ActiveSyncRepository``: adds ``deactivate_not_in_list`` for models that
  soft-delete through an ``active`` flag.

Repositories never commit. The unit of work owns flush / commit / rollback.

Example:
    class StadiumRepository(SyncRepository[Stadium]):
        def get_by_name(self, name: str) -> Optional[Stadium]:
            return self.first(Stadium.name == name)
"""
import logging
from typing import TypeVar, Generic, Type, Optional, List, Any, Dict, Iterable, Iterator, Sequence
from sqlalchemy import desc, func, inspect as sa_inspect
from sqlalchemy.orm import Query, Session

from sports_catalog.utils.timezone import utcnow

T = TypeVar("T")

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 2000


def chunked(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    """Yield consecutive slices of at most ``size`` items."""
    for start in range(0, len(items), size):
        yield items[start:start + size]


class BaseRepository(Generic[T]):
    """
    Base repository class providing common data access methods.

    Attributes:
        model_type: The SQLAlchemy model class this repository manages
        db: The database session
    """

    def __init__(self, model_type: Type[T], db: Session):
        self.model_type = model_type
        self.db = db

    # ========================================================================
    # Reads
    # ========================================================================

    def get_by_id(self, id: Any) -> Optional[T]:
        """Find a single record by primary key."""
        return self.db.get(self.model_type, id)

    def get_all(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[str] = None
    ) -> List[T]:
        """
        Find all records with optional pagination.

        Args:
            limit: Maximum number of records to return
            offset: Number of records to skip
            order_by: Column name to order by (prefix with '-' for descending)

        Returns:
            List of records
        """
        query = self.db.query(self.model_type)

        if order_by:
            if order_by.startswith('-'):
                query = query.order_by(desc(getattr(self.model_type, order_by[1:])))
            else:
                query = query.order_by(getattr(self.model_type, order_by))

        if offset is not None:
            query = query.offset(offset)

        if limit is not None:
            query = query.limit(limit)

        return query.all()

    def query(self) -> Query:
        """Get a new query object for this model."""
        return self.db.query(self.model_type)

    def find(self, *criterion) -> List[T]:
        """Filter records using SQLAlchemy expressions."""
        return self.db.query(self.model_type).filter(*criterion).all()

    def first(self, *criterion) -> Optional[T]:
        """Filter records using SQLAlchemy expressions and return first match."""
        return self.db.query(self.model_type).filter(*criterion).first()

    def exists(self, *criterion) -> bool:
        """Check if any record matching the criterion exists."""
        return self.db.query(
            self.db.query(self.model_type).filter(*criterion).exists()
        ).scalar()

    def count(self, *criterion) -> int:
        """Count records matching optional criterion."""
        query = self.db.query(func.count()).select_from(self.model_type)
        if criterion:
            query = query.filter(*criterion)
        return query.scalar() or 0

    # ========================================================================
    # Writes (pending until the unit of work flushes)
    # ========================================================================

    def add(self, entity: T) -> T:
        """Queue a new record for insert."""
        self.db.add(entity)
        return entity

    def add_range(self, entities: Iterable[T]) -> None:
        """Queue several new records for insert."""
        self.db.add_all(list(entities))

    def update(self, entity: T) -> T:
        """
        Attach a (possibly detached) entity as the current state of its row.

        Returns:
            The persistent instance tracked by this session
        """
        return self.db.merge(entity)

    def update_by_id(self, id: Any, **fields) -> Optional[T]:
        """
        Update selected columns of a record by ID.

        Returns:
            The updated record, or None if not found
        """
        instance = self.get_by_id(id)
        if instance is not None:
            for key, value in fields.items():
                if hasattr(instance, key):
                    setattr(instance, key, value)
            if hasattr(instance, "updated_date"):
                instance.updated_date = utcnow()
        return instance

    def remove(self, entity: T) -> None:
        """Queue a record for delete."""
        self.db.delete(entity)

    def remove_range(self, entities: Iterable[T]) -> None:
        """Queue several records for delete."""
        for entity in entities:
            self.db.delete(entity)


class SyncRepository(BaseRepository[T]):
    """
    Repository for provider-keyed models kept in sync with snapshots.

    Overwrite rule shared by ``upsert`` and ``bulk_upsert``: every column is
    copied from the incoming entity except ``created_date``, which keeps the
    stored value; ``updated_date`` is set to now.
    """

    PRESERVED_COLUMNS = frozenset({"created_date"})

    def __init__(self, model_type: Type[T], db: Session, chunk_size: int = DEFAULT_CHUNK_SIZE):
        super().__init__(model_type, db)
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        column_attrs = sa_inspect(model_type).column_attrs
        self._column_keys = [attr.key for attr in column_attrs]
        self._required_keys = frozenset(
            attr.key for attr in column_attrs if not attr.columns[0].nullable
        )

    # ========================================================================
    # Sync Operations
    # ========================================================================

    def upsert(self, entity: T) -> T:
        """
        Insert a new row or overwrite the existing row with the same ID.

        Returns:
            The inserted or updated persistent entity
        """
        now = utcnow()
        existing = self.get_by_id(entity.id)
        if existing is None:
            existing = self._pending_by_id().get(entity.id)

        if existing is None:
            entity.created_date = now
            entity.updated_date = now
            self.db.add(entity)
            return entity

        if existing is not entity:
            self._overwrite(existing, entity)
        existing.updated_date = now
        return existing

    def bulk_upsert(self, entities: Iterable[T]) -> int:
        """
        Upsert a full snapshot with batched existence checks.

        Existing rows are loaded ``chunk_size`` IDs per query, matches are
        overwritten in memory and new rows are queued with one ``add_all``.
        A duplicate ID later in the same snapshot overwrites the earlier one.

        Returns:
            Number of entities processed (not rows changed)
        """
        items = list(entities)
        if not items:
            return 0

        ids = list(dict.fromkeys(entity.id for entity in items))
        existing = self._load_existing(ids)
        for id, pending in self._pending_by_id().items():
            existing.setdefault(id, pending)

        now = utcnow()
        to_add: List[T] = []
        updated = 0

        for entity in items:
            current = existing.get(entity.id)
            if current is None:
                entity.created_date = now
                entity.updated_date = now
                to_add.append(entity)
                existing[entity.id] = entity
                continue

            if current is not entity:
                self._overwrite(current, entity)
            current.updated_date = now
            updated += 1

        if to_add:
            self.db.add_all(to_add)

        logger.debug(
            f"Bulk upsert {self.model_type.__name__}: {len(items)} processed, "
            f"{len(to_add)} new, {updated} updated"
        )
        return len(items)

    def existing_ids(self, ids: Iterable[Any]) -> set:
        """Subset of ``ids`` already stored, one query per chunk."""
        wanted = list(dict.fromkeys(ids))
        found = set()
        for batch in chunked(wanted, self.chunk_size):
            found.update(
                id for (id,) in self.db.query(self.model_type.id).filter(self.model_type.id.in_(batch))
            )
        return found

    def _load_existing(self, ids: List[Any]) -> Dict[Any, T]:
        """Load stored rows for ``ids`` keyed by ID, one query per chunk."""
        found: Dict[Any, T] = {}
        for batch in chunked(ids, self.chunk_size):
            rows = self.db.query(self.model_type).filter(self.model_type.id.in_(batch)).all()
            for row in rows:
                found[row.id] = row
        return found

    def _pending_by_id(self) -> Dict[Any, T]:
        """Rows of this model added to the session but not flushed yet."""
        return {
            obj.id: obj
            for obj in self.db.new
            if isinstance(obj, self.model_type)
        }

    def _overwrite(self, existing: T, incoming: T) -> None:
        for key in self._column_keys:
            if key in self.PRESERVED_COLUMNS:
                continue
            value = getattr(incoming, key)
            # NOT NULL columns left unset on the incoming entity keep their stored value
            if value is None and key in self._required_keys:
                continue
            setattr(existing, key, value)


class ActiveSyncRepository(SyncRepository[T]):
    """Sync repository for models that soft-delete through ``active``."""

    def deactivate_not_in_list(self, sport_id: int, active_ids: Iterable[Any]) -> int:
        """
        Flip ``active`` off for rows of a sport missing from the provider's list.

        Rows are never deleted. Rows whose ID is in ``active_ids`` are left
        untouched, as are rows that are already inactive.

        Args:
            sport_id: Sport to reconcile
            active_ids: Every ID the provider currently reports for the sport

        Returns:
            Number of rows deactivated
        """
        keep = set(active_ids)
        rows = self.db.query(self.model_type).filter(
            self.model_type.sport_id == sport_id,
            self.model_type.active.is_(True),
        ).all()

        now = utcnow()
        deactivated = 0
        for row in rows:
            if row.id in keep:
                continue
            row.active = False
            row.updated_date = now
            deactivated += 1

        if deactivated:
            logger.info(
                f"Deactivated {deactivated} {self.model_type.__name__} rows for sport_id={sport_id}"
            )
        return deactivated
