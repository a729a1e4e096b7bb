"""Player scoring rules for a single gameweek."""

from typing import Dict, Optional, Tuple

from .constants import (
    FULL_APPEARANCE_MINUTES,
    GOALS_CONCEDED_PER_PENALTY,
    POINTS_APPEARANCE_FULL,
    POINTS_APPEARANCE_SHORT,
    POINTS_ASSIST,
    POINTS_CLEAN_SHEET,
    POINTS_GOAL,
    POINTS_OWN_GOAL,
    POINTS_PENALTY_MISS,
    POINTS_PENALTY_SAVE,
    POINTS_RED_CARD,
    POINTS_YELLOW_CARD,
    POSITIONS,
    SAVES_PER_POINT,
)
from .models import PlayerScore
from .schemas import PlayerGameweekStat


def score_player(stat: PlayerGameweekStat, position: str) -> Tuple[int, Dict[str, int]]:
    """
    Score one player's gameweek.

    Scoring:
        - Appearance: 1 pt for 1-59 minutes, 2 pts for 60+
        - Goals: GK 10, DEF 6, MID 5, FWD 4 each
        - Assists: 3 pts each
        - Clean sheet (must have played): GK/DEF 4, MID 1
        - GK: 1 pt per 3 saves, 5 pts per penalty save, -1 per 2 goals conceded
        - DEF: -1 per 2 goals conceded
        - Penalty misses: -2 each
        - Yellow cards: -1 each, red cards: -3 each
        - Own goals: -2 each
        - Bonus points: added as recorded

    The sum is clamped to a minimum of 0. The breakdown holds the raw
    contributions, so it can sum below the returned total.

    Args:
        stat: Stat row for the player and gameweek
        position: GK, DEF, MID or FWD

    Returns:
        Tuple of (points, breakdown)
    """
    if position not in POSITIONS:
        raise ValueError(f'Invalid position: {position}')

    points = 0
    breakdown = {}

    minutes = stat.minutes_played
    if minutes >= FULL_APPEARANCE_MINUTES:
        appearance_pts = POINTS_APPEARANCE_FULL
    elif minutes > 0:
        appearance_pts = POINTS_APPEARANCE_SHORT
    else:
        appearance_pts = 0
    if appearance_pts:
        breakdown['appearance'] = appearance_pts
    points += appearance_pts

    goal_pts = POINTS_GOAL[position] * stat.goals
    if goal_pts:
        breakdown['goals'] = goal_pts
    points += goal_pts

    assist_pts = POINTS_ASSIST * stat.assists
    if assist_pts:
        breakdown['assists'] = assist_pts
    points += assist_pts

    if stat.clean_sheet and minutes > 0:
        clean_sheet_pts = POINTS_CLEAN_SHEET[position]
        if clean_sheet_pts:
            breakdown['clean_sheet'] = clean_sheet_pts
        points += clean_sheet_pts

    if position == 'GK':
        save_pts = stat.saves // SAVES_PER_POINT
        if save_pts:
            breakdown['saves'] = save_pts
        points += save_pts

        penalty_save_pts = POINTS_PENALTY_SAVE * stat.penalty_saves
        if penalty_save_pts:
            breakdown['penalty_saves'] = penalty_save_pts
        points += penalty_save_pts

    if position in ('GK', 'DEF'):
        conceded_pts = -(stat.goals_conceded // GOALS_CONCEDED_PER_PENALTY)
        if conceded_pts:
            breakdown['goals_conceded'] = conceded_pts
        points += conceded_pts

    penalty_miss_pts = POINTS_PENALTY_MISS * stat.penalty_misses
    if penalty_miss_pts:
        breakdown['penalty_misses'] = penalty_miss_pts
    points += penalty_miss_pts

    yellow_pts = POINTS_YELLOW_CARD * stat.yellow_cards
    if yellow_pts:
        breakdown['yellow_cards'] = yellow_pts
    points += yellow_pts

    red_pts = POINTS_RED_CARD * stat.red_cards
    if red_pts:
        breakdown['red_cards'] = red_pts
    points += red_pts

    own_goal_pts = POINTS_OWN_GOAL * stat.own_goals
    if own_goal_pts:
        breakdown['own_goals'] = own_goal_pts
    points += own_goal_pts

    if stat.bonus_points:
        breakdown['bonus'] = stat.bonus_points
    points += stat.bonus_points

    return max(points, 0), breakdown


def compute_player_points(stat: PlayerGameweekStat, position: str) -> int:
    """Gameweek points for one player (never negative)."""
    points, _ = score_player(stat, position)
    return points


def empty_stat(player_id: str, gameweek: int) -> PlayerGameweekStat:
    """Stat row used when a player has no recorded events for the gameweek."""
    return PlayerGameweekStat(player_id=player_id, gameweek=gameweek)


def build_player_score(
    player_id: str,
    position: str,
    gameweek: int,
    stat: Optional[PlayerGameweekStat],
) -> PlayerScore:
    """Score a player, treating a missing stat row as a zero-minute appearance."""
    result = PlayerScore(player_id=player_id, position=position)
    if stat is not None:
        result.found_in_stats = True
    else:
        stat = empty_stat(player_id, gameweek)
    result.minutes_played = stat.minutes_played
    result.total_points, result.breakdown = score_player(stat, position)
    return result


def assign_bonus_points(
    stats: list[PlayerGameweekStat],
    positions: dict[str, str],
    awards: list[int],
) -> dict[str, int]:
    """
    Hand out bonus points to the best performers of a gameweek.

    Every existing bonus is reset first, then players who featured
    (minutes > 0) are ranked by their pre-bonus points, highest first, and
    receive ``awards`` in order (e.g. 3/2/1). Ties go to the lowest player_id.
    Each stat's total_points is recomputed with the new bonus included.

    Args:
        stats: Stat rows for one gameweek (mutated in place)
        positions: Mapping of player_id -> position
        awards: Bonus values for first, second, third...

    Returns:
        Dict mapping player_id -> bonus awarded
    """
    for stat in stats:
        stat.bonus_points = 0

    featured = [
        (compute_player_points(stat, positions[stat.player_id]), stat)
        for stat in stats
        if stat.minutes_played > 0 and stat.player_id in positions
    ]
    featured.sort(key=lambda item: (-item[0], item[1].player_id))

    awarded = {}
    for bonus, (_, stat) in zip(awards, featured):
        stat.bonus_points = bonus
        awarded[stat.player_id] = bonus

    for stat in stats:
        position = positions.get(stat.player_id)
        if position is not None:
            stat.total_points = compute_player_points(stat, position)

    return awarded
