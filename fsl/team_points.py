"""Fantasy team gameweek points: auto-substitution and captaincy."""

import logging
from typing import Optional

from .constants import CAPTAIN_MULTIPLIER
from .errors import NotFoundError
from .models import PlayerScore, SlotContribution, TeamGameweekScore
from .schemas import PlayerGameweekStat, RosterSlot
from .scoring import build_player_score
from .store import LeagueStore
from .validators import validate_player_score

logger = logging.getLogger('fsl.team_points')


def _find_substitute(
    starter_position: str,
    bench: list[RosterSlot],
    positions: dict[str, str],
    scores: dict[str, PlayerScore],
    used: set[str],
) -> Optional[RosterSlot]:
    """First-listed unused bench player of the same position who played."""
    for slot in bench:
        if slot.roster_id in used:
            continue
        if positions.get(slot.player_id, slot.position) != starter_position:
            continue
        if scores[slot.player_id].played:
            return slot
    return None


def calculate_team_points(
    fantasy_team_id: str,
    gameweek: int,
    slots: list[RosterSlot],
    stats: dict[str, PlayerGameweekStat],
    positions: dict[str, str],
) -> TeamGameweekScore:
    """
    Score a fantasy team's gameweek.

    Rules:
        - Each starter contributes their own points if they played.
        - A starter with 0 minutes is replaced by the first bench player in
          roster order with the same position who played. A bench player can
          replace only one starter. Without a substitute the slot scores 0.
        - The captain's contribution (or their substitute's) counts twice.
        - If the captain neither played nor was substituted, a vice-captain
          with points > 0 adds their score once.
        - Unused bench players' points are reported as bench_total and are
          not part of the total.

    Args:
        fantasy_team_id: Team being scored
        gameweek: Gameweek number
        slots: Roster slots in listing order
        stats: Mapping of player_id -> stat row (missing means did not play)
        positions: Mapping of player_id -> position

    Returns:
        TeamGameweekScore with total, bench_total and per-slot contributions
    """
    result = TeamGameweekScore(fantasy_team_id=fantasy_team_id, gameweek=gameweek)

    for slot in slots:
        position = positions.get(slot.player_id, slot.position)
        result.player_scores[slot.player_id] = build_player_score(
            slot.player_id, position, gameweek, stats.get(slot.player_id)
        )
    scores = result.player_scores

    bench = [slot for slot in slots if not slot.is_starter]
    used: set[str] = set()
    captain_points = None

    for slot in slots:
        if not slot.is_starter:
            continue

        score = scores[slot.player_id]
        contribution = SlotContribution(
            roster_id=slot.roster_id, player_id=slot.player_id, is_captain=slot.is_captain
        )

        if score.played:
            contribution.points = score.total_points
        else:
            position = positions.get(slot.player_id, slot.position)
            substitute = _find_substitute(position, bench, positions, scores, used)
            if substitute is not None:
                used.add(substitute.roster_id)
                contribution.substitute_id = substitute.player_id
                contribution.points = scores[substitute.player_id].total_points
                result.substitutions.append((slot.player_id, substitute.player_id))

        if slot.is_captain and (score.played or contribution.substitute_id is not None):
            captain_points = contribution.points

        result.contributions.append(contribution)

    result.total = sum(c.points for c in result.contributions)

    has_captain = any(slot.is_captain for slot in slots)
    if captain_points is not None:
        result.captain_bonus = captain_points * (CAPTAIN_MULTIPLIER - 1)
    elif has_captain:
        vice = next((slot for slot in slots if slot.is_vice_captain), None)
        if vice is not None and scores[vice.player_id].total_points > 0:
            result.captain_bonus = scores[vice.player_id].total_points
            result.vice_captain_used = True

    result.total += result.captain_bonus
    result.bench_total = sum(
        scores[slot.player_id].total_points for slot in bench if slot.roster_id not in used
    )
    return result


def compute_team_gameweek_points(
    store: LeagueStore,
    fantasy_team_id: str,
    gameweek: int,
) -> TeamGameweekScore:
    """
    Score a stored fantasy team for a gameweek.

    Raises:
        NotFoundError: If the team, the gameweek or a rostered player is missing
    """
    store.get_team(fantasy_team_id)
    store.get_gameweek(gameweek)

    slots = store.roster_for_team(fantasy_team_id)
    positions = store.player_positions()
    for slot in slots:
        if slot.player_id not in positions:
            raise NotFoundError('Player', slot.player_id)

    stats = {stat.player_id: stat for stat in store.stats_for_gameweek(gameweek)}
    result = calculate_team_points(fantasy_team_id, gameweek, slots, stats, positions)
    for player_score in result.player_scores.values():
        for warning in validate_player_score(player_score):
            logger.warning(f'{fantasy_team_id} gameweek {gameweek}: {warning}')

    logger.debug(
        f'{fantasy_team_id} gameweek {gameweek}: {result.total} pts '
        f'(bench {result.bench_total}, captain bonus {result.captain_bonus}, '
        f'{len(result.substitutions)} auto-sub(s))'
    )
    return result
