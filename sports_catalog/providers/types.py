"""
Provider-neutral records returned by sport clients.

Every record's ``id`` is the provider's stable numeric ID and becomes the
canonical primary key of the matching catalog row.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class TeamRecord(BaseModel):
    """Team as reported by a provider feed."""
    model_config = ConfigDict(frozen=True)

    id: int
    key: str
    city: str = ""
    name: str = ""
    full_name: Optional[str] = None
    stadium_id: Optional[int] = None
    conference: Optional[str] = None
    division: Optional[str] = None
    global_team_id: Optional[int] = None
    bye_week: Optional[int] = None
    head_coach: Optional[str] = None
    primary_color: Optional[str] = None
    secondary_color: Optional[str] = None
    average_draft_position: Optional[float] = None


class PlayerRecord(BaseModel):
    """Player as reported by a provider feed."""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    short_name: Optional[str] = None
    team_key: Optional[str] = None
    position: Optional[str] = None
    position_category: Optional[str] = None
    fantasy_position: Optional[str] = None
    status: Optional[str] = None
    active: Optional[bool] = None  # explicit provider flag, when the feed has one
    number: Optional[int] = None
    height: Optional[str] = None
    weight: Optional[int] = None
    birth_date: Optional[datetime] = None
    college: Optional[str] = None
    experience: Optional[int] = None
    injury_status: Optional[str] = None
    injury_body_part: Optional[str] = None
    injury_start_date: Optional[datetime] = None
    injury_notes: Optional[str] = None
    average_draft_position: Optional[float] = None
    depth_order: Optional[int] = None
    global_player_id: Optional[int] = None
    photo_url: Optional[str] = None

    @property
    def is_active(self) -> bool:
        """Explicit provider flag if present, otherwise ``status == "Active"``."""
        if self.active is not None:
            return self.active
        return self.status == "Active"


class StadiumRecord(BaseModel):
    """Venue as reported by a provider feed."""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    city: str = ""
    state: Optional[str] = None
    country: str = ""
    capacity: Optional[int] = None
    playing_surface: Optional[str] = None
    geo_lat: Optional[float] = None
    geo_long: Optional[float] = None
    type: Optional[str] = None


class GameRecord(BaseModel):
    """Game / score as reported by a provider feed."""
    model_config = ConfigDict(frozen=True)

    id: int
    season: int
    season_type: Optional[str] = None
    status: Optional[str] = None
    date_time: Optional[datetime] = None
    home_team: Optional[str] = None
    away_team: Optional[str] = None
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    stadium_id: Optional[int] = None
    is_completed: bool = False
