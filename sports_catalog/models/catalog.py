"""
Canonical catalog models.

One set of tables for every sport, discriminated by ``sport_id``.

Identity rules:
- Team, Player and Stadium primary keys are assigned by the provider and are
  never generated locally, so the same provider ID always lands on the same row.
- Sport and alias rows use locally generated integer keys.

Referential rules (enforced by the database):
- teams.sport_id / players.sport_id   -> sports.id   ON DELETE RESTRICT
- teams.stadium_id                    -> stadiums.id ON DELETE SET NULL
- players.team_id                     -> teams.id    ON DELETE SET NULL
- team_aliases / player_aliases owner -> owner row   ON DELETE CASCADE

Teams and players are never deleted by a sync; ``active`` is the soft-delete
flag because other subsystems keep foreign keys to retired rows.
"""
from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Index, Integer, String, Text,
)
from sqlalchemy.orm import declarative_base, relationship

from sports_catalog.utils.timezone import utcnow

Base = declarative_base()


# =============================================================================
# ALIAS TYPES
# =============================================================================

class TeamAliasTypes:
    """Alias categories for teams."""
    NICKNAME = "Nickname"
    ABBREVIATION = "Abbreviation"
    CITY = "City"
    FORMER = "Former"

    ALL = (NICKNAME, ABBREVIATION, CITY, FORMER)


class PlayerAliasTypes:
    """Alias categories for players."""
    NICKNAME = "Nickname"
    SPELLING = "Spelling"
    FORMER = "Former"

    ALL = (NICKNAME, SPELLING, FORMER)


# =============================================================================
# SPORT REGISTRY
# =============================================================================

class Sport(Base):
    """Sport registry (NFL, NBA, ...). Seeded once; ``code`` is immutable once referenced."""
    __tablename__ = "sports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(10), nullable=False, unique=True)
    name = Column(String(100), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    has_teams = Column(Boolean, nullable=False, default=True)
    keywords = Column(String(500), nullable=True)  # comma separated free-text aliases
    created_date = Column(DateTime, nullable=False, default=utcnow)
    updated_date = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index('ix_sports_is_active', 'is_active'),
    )

    @property
    def keyword_list(self) -> list[str]:
        """Declared keywords, stripped, blanks dropped, in declaration order."""
        if not self.keywords:
            return []
        return [k.strip() for k in self.keywords.split(",") if k.strip()]

    def __repr__(self):
        return f"Sport(id={self.id}, code={self.code!r})"


# =============================================================================
# STADIUM
# =============================================================================

class Stadium(Base):
    """Venue where games are played."""
    __tablename__ = "stadiums"

    id = Column(Integer, primary_key=True, autoincrement=False)  # provider StadiumID
    name = Column(String(100), nullable=False)
    city = Column(String(50), nullable=False)
    state = Column(String(10), nullable=True)
    country = Column(String(10), nullable=False)
    capacity = Column(Integer, nullable=True)
    playing_surface = Column(String(50), nullable=True)
    geo_lat = Column(Float, nullable=True)
    geo_long = Column(Float, nullable=True)
    type = Column(String(50), nullable=True)  # Outdoor, Dome, RetractableDome
    created_date = Column(DateTime, nullable=False, default=utcnow)
    updated_date = Column(DateTime, nullable=False, default=utcnow)

    teams = relationship("Team", back_populates="stadium", passive_deletes=True)

    __table_args__ = (
        Index('ix_stadiums_name', 'name'),
        Index('ix_stadiums_city', 'city'),
    )

    def __repr__(self):
        return f"Stadium(id={self.id}, name={self.name!r})"


# =============================================================================
# TEAM
# =============================================================================

class Team(Base):
    """
    Team within a sport.

    ``key`` is the abbreviation (PHI, NE, KC). (sport_id, key) is unique per
    sport in practice but not enforced.
    """
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=False)  # provider TeamID
    sport_id = Column(Integer, ForeignKey("sports.id", ondelete="RESTRICT"), nullable=False)
    key = Column(String(10), nullable=False)
    city = Column(String(50), nullable=False)
    name = Column(String(50), nullable=False)  # Mascot (Eagles, Patriots)
    full_name = Column(String(100), nullable=True)
    stadium_id = Column(Integer, ForeignKey("stadiums.id", ondelete="SET NULL"), nullable=True)
    conference = Column(String(50), nullable=True)
    division = Column(String(50), nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    global_team_id = Column(Integer, nullable=True)
    bye_week = Column(Integer, nullable=True)
    head_coach = Column(String(100), nullable=True)
    primary_color = Column(String(10), nullable=True)
    secondary_color = Column(String(10), nullable=True)
    average_draft_position = Column(Float, nullable=True)

    created_date = Column(DateTime, nullable=False, default=utcnow)
    updated_date = Column(DateTime, nullable=False, default=utcnow)

    sport = relationship("Sport")
    stadium = relationship("Stadium", back_populates="teams")
    players = relationship("Player", back_populates="team", passive_deletes=True)
    aliases = relationship(
        "TeamAlias", back_populates="team", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        Index('ix_teams_sport_id', 'sport_id'),
        Index('ix_teams_sport_key', 'sport_id', 'key'),
        Index('ix_teams_global_team_id', 'global_team_id'),
        Index('ix_teams_stadium_id', 'stadium_id'),
    )

    def __repr__(self):
        return f"Team(id={self.id}, key={self.key!r}, sport_id={self.sport_id})"


# =============================================================================
# PLAYER
# =============================================================================

class Player(Base):
    """
    Player within a sport.

    ``team_key`` mirrors the provider's team abbreviation; ``team_id`` is the
    resolved foreign key and is nulled if the team row is ever deleted.
    """
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=False)  # provider PlayerID
    sport_id = Column(Integer, ForeignKey("sports.id", ondelete="RESTRICT"), nullable=False)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="SET NULL"), nullable=True)
    team_key = Column(String(50), nullable=True)

    # Basic info
    number = Column(Integer, nullable=True)
    first_name = Column(String(50), nullable=True)
    last_name = Column(String(50), nullable=True)
    name = Column(String(100), nullable=True)
    short_name = Column(String(50), nullable=True)
    position = Column(String(10), nullable=True)
    position_category = Column(String(10), nullable=True)  # OFF, DEF, ST
    fantasy_position = Column(String(10), nullable=True)
    status = Column(String(50), nullable=True)  # Active, Inactive, Practice Squad
    active = Column(Boolean, nullable=False, default=True)

    # Physical / personal
    height = Column(String(10), nullable=True)
    weight = Column(Integer, nullable=True)
    birth_date = Column(DateTime, nullable=True)
    college = Column(String(100), nullable=True)
    experience = Column(Integer, nullable=True)

    # Injury
    injury_status = Column(String(50), nullable=True)
    injury_body_part = Column(String(50), nullable=True)
    injury_start_date = Column(DateTime, nullable=True)
    injury_notes = Column(Text, nullable=True)

    # Ranking / depth
    average_draft_position = Column(Float, nullable=True)  # draft rank, lower is better
    depth_order = Column(Integer, nullable=True)

    global_player_id = Column(Integer, nullable=True)
    photo_url = Column(String(250), nullable=True)

    created_date = Column(DateTime, nullable=False, default=utcnow)
    updated_date = Column(DateTime, nullable=False, default=utcnow)

    sport = relationship("Sport")
    team = relationship("Team", back_populates="players")
    aliases = relationship(
        "PlayerAlias", back_populates="player", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        Index('ix_players_sport_id', 'sport_id'),
        Index('ix_players_team_id', 'team_id'),
        Index('ix_players_team_key', 'team_key'),
        Index('ix_players_name', 'name'),
        Index('ix_players_last_name', 'last_name'),
        Index('ix_players_position', 'position'),
        Index('ix_players_status', 'status'),
        Index('ix_players_global_player_id', 'global_player_id'),
        Index('ix_players_sport_last_name', 'sport_id', 'last_name'),
        Index('ix_players_sport_active', 'sport_id', 'active'),
        Index('ix_players_team_position', 'team_key', 'position'),
    )

    def __repr__(self):
        return f"Player(id={self.id}, name={self.name!r}, sport_id={self.sport_id})"


# =============================================================================
# ALIASES
# =============================================================================

class TeamAlias(Base):
    """Alternate name for a team. Alias strings are globally unique."""
    __tablename__ = "team_aliases"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    alias = Column(String(100), nullable=False, unique=True)
    alias_type = Column(String(20), nullable=False)
    is_primary = Column(Boolean, nullable=False, default=False)
    created_date = Column(DateTime, nullable=False, default=utcnow)

    team = relationship("Team", back_populates="aliases")

    __table_args__ = (
        Index('ix_team_aliases_team_id', 'team_id'),
    )


class PlayerAlias(Base):
    """Alternate name for a player. Uniqueness is enforced by the repository."""
    __tablename__ = "player_aliases"

    id = Column(Integer, primary_key=True, autoincrement=True)
    player_id = Column(Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False)
    alias = Column(String(100), nullable=False)
    alias_type = Column(String(20), nullable=False)
    created_date = Column(DateTime, nullable=False, default=utcnow)

    player = relationship("Player", back_populates="aliases")

    __table_args__ = (
        Index('ix_player_aliases_alias', 'alias'),
        Index('ix_player_aliases_player_id', 'player_id'),
    )
