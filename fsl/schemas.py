"""Pydantic schemas for persisted league records."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import POSITIONS, SQUAD_POSITIONS
from .utils import ensure_utc

STAT_COUNTERS = (
    'minutes_played',
    'goals',
    'assists',
    'yellow_cards',
    'red_cards',
    'saves',
    'penalty_saves',
    'penalty_misses',
    'own_goals',
    'goals_conceded',
    'bonus_points',
)


class Gameweek(BaseModel):
    """One gameweek and its time window."""

    number: int = Field(..., ge=1)
    name: str = ''
    deadline_time: datetime | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: str = Field(default='upcoming', pattern=r'^(upcoming|locked|active|finalized)$')
    is_current: bool = False
    is_next: bool = False
    is_finished: bool = False

    @field_validator('deadline_time', 'start_time', 'end_time')
    @classmethod
    def normalize_timezone(cls, v):
        """Store every timestamp as aware UTC."""
        return ensure_utc(v) if v is not None else None

    @model_validator(mode='after')
    def default_name(self):
        if not self.name:
            self.name = f'Gameweek {self.number}'
        return self

    @property
    def has_complete_window(self) -> bool:
        return None not in (self.deadline_time, self.start_time, self.end_time)

    class Config:
        extra = 'forbid'


class Match(BaseModel):
    """A real-world match tagged with the gameweek it belongs to."""

    match_id: str = Field(..., min_length=1)
    gameweek: int = Field(..., ge=1)
    home_team: str = ''
    away_team: str = ''
    home_score: int | None = None
    away_score: int | None = None
    match_date: datetime | None = None
    status: str = Field(default='scheduled', pattern=r'^(scheduled|live|completed|postponed)$')

    @field_validator('match_date')
    @classmethod
    def normalize_timezone(cls, v):
        return ensure_utc(v) if v is not None else None

    class Config:
        extra = 'forbid'


class Player(BaseModel):
    """A real player that can be drafted."""

    player_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    position: str = Field(..., pattern=r'^(GK|DEF|MID|FWD)$')
    club: str = ''
    price: float = Field(..., ge=0)

    class Config:
        extra = 'forbid'


class PlayerGameweekStat(BaseModel):
    """
    Raw match events for one player in one gameweek.

    Missing or null counters default to 0 and a missing clean sheet to False,
    so an absent stat row and an all-zero row score identically.
    """

    player_id: str = Field(..., min_length=1)
    gameweek: int = Field(..., ge=1)
    minutes_played: int = Field(default=0, ge=0)
    goals: int = Field(default=0, ge=0)
    assists: int = Field(default=0, ge=0)
    clean_sheet: bool = False
    yellow_cards: int = Field(default=0, ge=0)
    red_cards: int = Field(default=0, ge=0)
    saves: int = Field(default=0, ge=0)
    penalty_saves: int = Field(default=0, ge=0)
    penalty_misses: int = Field(default=0, ge=0)
    own_goals: int = Field(default=0, ge=0)
    goals_conceded: int = Field(default=0, ge=0)
    bonus_points: int = Field(default=0, ge=0)
    total_points: int = 0

    @field_validator(*STAT_COUNTERS, mode='before')
    @classmethod
    def none_as_zero(cls, v):
        return 0 if v is None else v

    @field_validator('clean_sheet', mode='before')
    @classmethod
    def none_as_false(cls, v):
        return False if v is None else v

    class Config:
        extra = 'forbid'


class League(BaseModel):
    """A league grouping fantasy teams for per-gameweek ranking."""

    league_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)

    class Config:
        extra = 'forbid'


class FantasyTeam(BaseModel):
    """A user's fantasy team and its running totals."""

    fantasy_team_id: str = Field(..., min_length=1)
    team_name: str = Field(..., min_length=1)
    league_id: str | None = None
    total_points: int = 0
    gameweek_points: int = 0
    rank: int | None = None
    budget_remaining: float = 0.0
    transfers_made_this_gw: int = Field(default=0, ge=0)
    transfers_banked: int = Field(default=0, ge=0, le=1)
    current_gameweek: int = Field(default=1, ge=1)

    class Config:
        extra = 'forbid'


class RosterSlot(BaseModel):
    """One of the 15 squad places of a fantasy team."""

    roster_id: str = Field(..., min_length=1)
    fantasy_team_id: str = Field(..., min_length=1)
    player_id: str = Field(..., min_length=1)
    squad_position: str
    is_starter: bool = False
    is_captain: bool = False
    is_vice_captain: bool = False
    purchase_price: float = Field(default=0.0, ge=0)
    gameweek_added: int | None = None

    @field_validator('squad_position')
    @classmethod
    def validate_squad_position(cls, v):
        if v not in SQUAD_POSITIONS:
            raise ValueError(f'Invalid squad position: {v}')
        return v

    @property
    def position(self) -> str:
        """Player position implied by the squad position (GK/DEF/MID/FWD)."""
        return SQUAD_POSITIONS[self.squad_position][0]

    class Config:
        extra = 'forbid'


class FantasyTeamGameweekPoints(BaseModel):
    """Ledger row: a team's score for one finalized gameweek."""

    fantasy_team_id: str = Field(..., min_length=1)
    gameweek: int = Field(..., ge=1)
    points: int = 0
    bench_points: int = 0
    rank_in_league: int | None = None

    class Config:
        extra = 'forbid'


class Transaction(BaseModel):
    """Squad change recorded in the transaction log."""

    transaction_id: str = Field(..., min_length=1)
    fantasy_team_id: str
    player_id: str
    transaction_type: str = Field(..., pattern=r'^(draft|transfer_in|transfer_out|captain_change)$')
    gameweek: int = Field(..., ge=1)
    price: float | None = None
    transfer_cost: int = 0
    created_at: datetime

    class Config:
        extra = 'forbid'


class LeagueDatabase(BaseModel):
    """Complete persisted state, one list per table."""

    gameweeks: list[Gameweek] = Field(default_factory=list)
    matches: list[Match] = Field(default_factory=list)
    players: list[Player] = Field(default_factory=list)
    stats: list[PlayerGameweekStat] = Field(default_factory=list)
    leagues: list[League] = Field(default_factory=list)
    teams: list[FantasyTeam] = Field(default_factory=list)
    roster_slots: list[RosterSlot] = Field(default_factory=list)
    ledger: list[FantasyTeamGameweekPoints] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)

    class Config:
        extra = 'forbid'


class LeagueConfig(BaseModel):
    """League configuration settings."""

    budget_limit: float = Field(..., gt=0)
    squad_size: int = Field(..., ge=11, le=20)
    squad_limits: dict[str, int]
    formations: list[str]
    base_transfers: int = Field(..., ge=0)
    max_transfers: int = Field(..., ge=0)
    max_banked_transfers: int = Field(..., ge=0)
    bonus_awards: list[int]
    deadline_offset_hours: int = Field(..., ge=0)
    gameweek_length_days: int = Field(..., ge=1)
    window_padding_days: int = Field(..., ge=0)

    @field_validator('squad_limits')
    @classmethod
    def validate_squad_limits(cls, v):
        """Ensure every position has a squad limit."""
        for pos in v:
            if pos not in POSITIONS:
                raise ValueError(f'Invalid position: {pos}')
        missing = set(POSITIONS) - set(v)
        if missing:
            raise ValueError(f'Missing squad limits for: {", ".join(sorted(missing))}')
        return v

    @field_validator('formations')
    @classmethod
    def validate_formations(cls, v):
        """Formations are DEF-MID-FWD strings whose counts add up to 10."""
        for formation in v:
            parts = formation.split('-')
            if len(parts) != 3 or not all(p.isdigit() for p in parts):
                raise ValueError(f'Invalid formation: {formation}')
            if sum(int(p) for p in parts) != 10:
                raise ValueError(f'Formation {formation} does not field 10 outfield players')
        return v

    class Config:
        extra = 'forbid'
