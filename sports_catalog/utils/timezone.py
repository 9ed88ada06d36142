"""
Time helpers.

Audit columns (created_date / updated_date) are stored as naive UTC
datetimes so that values read back from SQLite and PostgreSQL compare
cleanly with freshly generated ones.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
