"""
Fixed sport seed set.

Sport rows are seeded once at deployment. Re-running the seed only inserts
codes that are missing; existing rows are left untouched.
"""
import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from sports_catalog.models.catalog import Sport
from sports_catalog.utils.timezone import utcnow

logger = logging.getLogger(__name__)


SEED_SPORTS: List[Dict] = [
    {"id": 1, "code": "NFL", "name": "National Football League", "has_teams": True,
     "keywords": "football,american football,americanfootball_nfl"},
    {"id": 2, "code": "NBA", "name": "National Basketball Association", "has_teams": True,
     "keywords": "basketball,basketball_nba"},
    {"id": 3, "code": "MLB", "name": "Major League Baseball", "has_teams": True,
     "keywords": "baseball,baseball_mlb"},
    {"id": 4, "code": "NHL", "name": "National Hockey League", "has_teams": True,
     "keywords": "hockey,icehockey_nhl"},
    {"id": 5, "code": "NCAAF", "name": "NCAA Football", "has_teams": True,
     "keywords": "college football,americanfootball_ncaaf"},
    {"id": 6, "code": "NCAAB", "name": "NCAA Basketball", "has_teams": True,
     "keywords": "college basketball,march madness,basketball_ncaab"},
    {"id": 7, "code": "MMA/UFC", "name": "Mixed Martial Arts", "has_teams": False,
     "keywords": "mma,ufc,mma_mixed_martial_arts"},
    {"id": 8, "code": "PGA", "name": "PGA Golf", "has_teams": False,
     "keywords": "golf,golf_pga"},
    {"id": 9, "code": "WNBA", "name": "Women's National Basketball Association", "has_teams": True,
     "keywords": "womens basketball,basketball_wnba"},
    {"id": 10, "code": "SOCCER", "name": "Soccer", "has_teams": True,
     "keywords": "futbol,soccer_epl"},
]


def seed_sports(db: Session) -> int:
    """
    Insert any seed sports that are missing and commit.

    Returns:
        Number of sports created
    """
    existing_codes = {code for (code,) in db.query(Sport.code).all()}
    now = utcnow()
    created = 0

    for row in SEED_SPORTS:
        if row["code"] in existing_codes:
            continue
        db.add(Sport(is_active=True, created_date=now, updated_date=now, **row))
        created += 1

    if created:
        db.commit()
        logger.info(f"Seeded {created} sports")

    return created
