"""Computed result containers for the fantasy league core."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass
class PlayerScore:
    """Container for a player's gameweek score breakdown."""
    player_id: str
    position: str
    total_points: int = 0
    minutes_played: int = 0
    breakdown: Dict[str, int] = field(default_factory=dict)
    found_in_stats: bool = False

    @property
    def played(self) -> bool:
        return self.minutes_played > 0


@dataclass
class SlotContribution:
    """What one starting slot added to the team total."""
    roster_id: str
    player_id: str
    points: int = 0
    substitute_id: Optional[str] = None  # bench player whose score replaced the starter's
    is_captain: bool = False


@dataclass
class TeamGameweekScore:
    """A fantasy team's score for one gameweek."""
    fantasy_team_id: str
    gameweek: int
    total: int = 0
    bench_total: int = 0
    captain_bonus: int = 0
    vice_captain_used: bool = False
    contributions: List[SlotContribution] = field(default_factory=list)
    substitutions: List[Tuple[str, str]] = field(default_factory=list)  # (starter, substitute)
    player_scores: Dict[str, PlayerScore] = field(default_factory=dict)


@dataclass
class FinalizeResult:
    """Summary of a gameweek finalization."""
    gameweek: int
    team_points: Dict[str, int] = field(default_factory=dict)
    bonus_awarded: Dict[str, int] = field(default_factory=dict)
    first_finalization: bool = True
