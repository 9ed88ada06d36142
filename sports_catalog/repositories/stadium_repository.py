"""
Stadium Repository for venue data access.
"""
from typing import Optional, List
from sqlalchemy import func

from sports_catalog.models import Stadium
from sports_catalog.repositories.base import SyncRepository, DEFAULT_CHUNK_SIZE


class StadiumRepository(SyncRepository[Stadium]):
    """Repository for stadiums. Stadiums are shared across sports and never deactivated."""

    def __init__(self, db, chunk_size: int = DEFAULT_CHUNK_SIZE):
        super().__init__(Stadium, db, chunk_size=chunk_size)

    def get_by_name(self, name: str) -> Optional[Stadium]:
        return self.first(func.lower(Stadium.name) == name.strip().lower())

    def get_by_city(self, city: str) -> List[Stadium]:
        return self.db.query(Stadium).filter(
            func.lower(Stadium.city) == city.strip().lower()
        ).order_by(Stadium.name).all()

    def get_by_state(self, state: str) -> List[Stadium]:
        return self.db.query(Stadium).filter(
            func.upper(Stadium.state) == state.strip().upper()
        ).order_by(Stadium.city, Stadium.name).all()
