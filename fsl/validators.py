"""Validation functions for rosters, gameweek flags and scoring results."""

from collections import Counter

from .config import get_budget_limit, get_formations, get_squad_limits, get_squad_size
from .constants import SQUAD_POSITIONS
from .models import PlayerScore
from .schemas import Gameweek, RosterSlot


def validate_roster(team_id: str, slots: list[RosterSlot], positions: dict[str, str]) -> list[str]:
    """
    Validate that a fantasy team's squad complies with league rules.

    Checks:
    - Squad size and players per position
    - Squad cost (sum of purchase prices) within the budget
    - Squad positions agree with the players' real positions
    - Exactly one starting GK and a configured formation for the other 10
    - At most one captain and one vice-captain, not the same player
    - No duplicate players

    Args:
        team_id: Fantasy team id, used in messages
        slots: The team's roster slots
        positions: Mapping of player_id -> position

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    squad_size = get_squad_size()
    if len(slots) != squad_size:
        errors.append(f'{team_id} has {len(slots)} players (needs {squad_size})')

    counts = Counter(slot.position for slot in slots)
    for pos, limit in get_squad_limits().items():
        if counts.get(pos, 0) != limit:
            errors.append(f'{team_id} has {counts.get(pos, 0)} {pos} players (needs {limit})')

    squad_cost = round(sum(slot.purchase_price for slot in slots), 1)
    budget = get_budget_limit()
    if squad_cost > budget:
        errors.append(f'{team_id} squad costs {squad_cost:.1f} (budget {budget:.1f})')

    for slot in slots:
        real_position = positions.get(slot.player_id)
        if real_position is None:
            errors.append(f'{team_id} has unknown player {slot.player_id}')
        elif real_position != slot.position:
            errors.append(
                f'{team_id} lists {real_position} {slot.player_id} as {slot.squad_position}'
            )
        if slot.is_starter != SQUAD_POSITIONS[slot.squad_position][1]:
            errors.append(
                f'{team_id} slot {slot.roster_id} starter flag disagrees with {slot.squad_position}'
            )

    starters = Counter(slot.position for slot in slots if slot.is_starter)
    if starters.get('GK', 0) != 1:
        errors.append(f'{team_id} starts {starters.get("GK", 0)} GK (needs exactly 1)')

    formation = (starters.get('DEF', 0), starters.get('MID', 0), starters.get('FWD', 0))
    if formation not in get_formations():
        errors.append(f'{team_id} starts an invalid formation {"-".join(str(n) for n in formation)}')

    captains = [slot for slot in slots if slot.is_captain]
    vice_captains = [slot for slot in slots if slot.is_vice_captain]
    if len(captains) > 1:
        errors.append(f'{team_id} has {len(captains)} captains (max 1)')
    if len(vice_captains) > 1:
        errors.append(f'{team_id} has {len(vice_captains)} vice-captains (max 1)')
    if any(slot.is_captain and slot.is_vice_captain for slot in slots):
        errors.append(f'{team_id} has the same player as captain and vice-captain')

    seen = set()
    duplicates = set()
    for slot in slots:
        if slot.player_id in seen:
            duplicates.add(slot.player_id)
        seen.add(slot.player_id)

    if duplicates:
        errors.append(f'{team_id} has duplicate players: {", ".join(sorted(duplicates))}')

    return errors


def validate_gameweek_flags(gameweeks: list[Gameweek]) -> list[str]:
    """
    Check the single-current/single-next invariant.

    Returns:
        List of problems (empty if consistent)
    """
    problems = []

    current = [gw.number for gw in gameweeks if gw.is_current]
    upcoming = [gw.number for gw in gameweeks if gw.is_next]

    if len(current) > 1:
        problems.append(f'Gameweeks {current} are all flagged current')
    if len(upcoming) > 1:
        problems.append(f'Gameweeks {upcoming} are all flagged next')
    if current and upcoming and upcoming[0] <= current[0]:
        problems.append(f'Next gameweek {upcoming[0]} is not after current gameweek {current[0]}')

    return problems


def validate_player_score(score: PlayerScore) -> list[str]:
    """
    Check that a player's score is reasonable and internally consistent.

    Sanity checks:
    - Total points never negative
    - Total points in reasonable range (up to 40)
    - No points without minutes unless bonus explains them

    Args:
        score: PlayerScore object to validate

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    if score.total_points < 0:
        warnings.append(f'{score.player_id} has negative score {score.total_points}')
    elif score.total_points > 40:
        warnings.append(
            f'{score.player_id} scored {score.total_points} pts (unusually high - check for scoring bug)'
        )

    if not score.played and score.total_points > score.breakdown.get('bonus', 0):
        warnings.append(f'{score.player_id} scored {score.total_points} pts without playing')

    return warnings


def validate_team_score(team_id: str, team_total: int, num_starters: int) -> list[str]:
    """
    Check that a team's total score is reasonable.

    Sanity checks:
    - No negative team totals
    - Team total in reasonable range (up to 250)
    - Average points per starter not impossibly high (>25)

    Args:
        team_id: Fantasy team id
        team_total: Gameweek points for the team
        num_starters: Number of starters contributing to score

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    if team_total < 0:
        warnings.append(f'{team_id} scored {team_total} pts (negative total - check for scoring bug)')
    elif team_total > 250:
        warnings.append(f'{team_id} scored {team_total} pts (unusually high - check for scoring bug)')

    if num_starters > 0:
        avg_per_starter = team_total / num_starters
        if avg_per_starter > 25:
            warnings.append(
                f'{team_id} averaged {avg_per_starter:.1f} pts/starter (unusually high - check for scoring bug)'
            )

    return warnings
