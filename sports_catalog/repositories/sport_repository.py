"""
Sport Repository for the sport registry.

Usage:
    repo = SportRepository(db)
    nfl = repo.get_by_code("NFL")
    active = repo.get_active()
"""
from typing import Optional, List
from sqlalchemy import func

from sports_catalog.models import Sport
from sports_catalog.repositories.base import BaseRepository


class SportRepository(BaseRepository[Sport]):
    """Repository for sport registry rows."""

    def __init__(self, db):
        super().__init__(Sport, db)

    def get_by_code(self, code: str) -> Optional[Sport]:
        """Find a sport by code (case-insensitive)."""
        if not code:
            return None
        return self.first(func.upper(Sport.code) == code.strip().upper())

    def get_active(self) -> List[Sport]:
        """All active sports ordered by name."""
        return self.db.query(Sport).filter(
            Sport.is_active.is_(True)
        ).order_by(Sport.name).all()

    def get_sport_id_by_code(self, code: str) -> Optional[int]:
        """Resolve a sport code to its ID without loading the row."""
        if not code:
            return None
        return self.db.query(Sport.id).filter(
            func.upper(Sport.code) == code.strip().upper()
        ).scalar()

    def is_active(self, code: str) -> bool:
        """True if a sport with this code exists and is active."""
        sport = self.get_by_code(code)
        return bool(sport and sport.is_active)
