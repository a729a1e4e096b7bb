"""Gameweek finalization: bonus, team points ledger, ranks and transfer rollover."""

import logging

from .config import get_bonus_awards, get_transfer_limits
from .errors import GameweekNotReadyError
from .models import FinalizeResult
from .scoring import assign_bonus_points
from .standings import ledger_total, rank_all_teams, rank_league
from .store import LeagueStore
from .team_points import compute_team_gameweek_points
from .validators import validate_team_score

logger = logging.getLogger('fsl.finalizer')


def check_gameweek_ready(store: LeagueStore, gameweek: int) -> None:
    """
    Refuse finalization while any match of the gameweek is not completed.

    Raises:
        NotFoundError: If the gameweek doesn't exist
        GameweekNotReadyError: If some matches are scheduled, live or postponed
    """
    store.get_gameweek(gameweek)
    matches = store.matches_for_gameweek(gameweek)
    pending = [m.match_id for m in matches if m.status != 'completed']
    if pending:
        raise GameweekNotReadyError(gameweek, pending)
    if not matches:
        logger.warning(f'Gameweek {gameweek} has no matches; finalizing with zero points')


def finalize_gameweek(
    store: LeagueStore,
    gameweek: int,
    award_bonus: bool = True,
) -> FinalizeResult:
    """
    Close out a gameweek.

    Steps, all in one store transaction:
        1. Optionally award bonus points (3/2/1) to the best performers
        2. Score every fantasy team, upsert its ledger row and recompute its
           total points from the ledger; on the first finalization also
           advance current_gameweek, reset transfers made and bank one transfer
        3. Rank teams within each league by the gameweek's points
        4. Rank all teams by total points
        5. Mark the gameweek finalized

    Running it again on a finalized gameweek recomputes the ledger and ranks
    (historical correction) without repeating the transfer rollover.

    Args:
        store: League store
        gameweek: Gameweek number
        award_bonus: Whether to (re)assign bonus points from this gameweek's stats

    Returns:
        FinalizeResult with each team's points

    Raises:
        NotFoundError: If the gameweek doesn't exist
        GameweekNotReadyError: If any match isn't completed (nothing is written)
        ConcurrencyConflict: If the gameweek is being finalized by another caller
    """
    with store.finalize_lock(gameweek):
        check_gameweek_ready(store, gameweek)

        with store.transaction():
            record = store.get_gameweek(gameweek)
            result = FinalizeResult(gameweek=gameweek, first_finalization=not record.is_finished)

            if award_bonus:
                result.bonus_awarded = assign_bonus_points(
                    store.stats_for_gameweek(gameweek),
                    store.player_positions(),
                    get_bonus_awards(),
                )
                logger.info(f'Gameweek {gameweek} bonus: {result.bonus_awarded}')

            _, _, max_banked = get_transfer_limits()
            teams = store.teams()
            for team in teams:
                score = compute_team_gameweek_points(store, team.fantasy_team_id, gameweek)
                for warning in validate_team_score(
                    team.fantasy_team_id, score.total, len(score.contributions)
                ):
                    logger.warning(warning)

                store.upsert_ledger_row(
                    team.fantasy_team_id, gameweek, score.total, score.bench_total
                )
                team.gameweek_points = score.total
                team.total_points = ledger_total(store, team.fantasy_team_id)

                if result.first_finalization:
                    team.current_gameweek = gameweek + 1
                    team.transfers_made_this_gw = 0
                    team.transfers_banked = min(team.transfers_banked + 1, max_banked)

                result.team_points[team.fantasy_team_id] = score.total

            league_ids = sorted({team.league_id for team in teams if team.league_id is not None})
            for league_id in league_ids:
                rank_league(store, league_id, gameweek)

            rank_all_teams(store)

            record.status = 'finalized'
            record.is_finished = True

    action = 'finalized' if result.first_finalization else 're-finalized'
    logger.info(f'Gameweek {gameweek} {action}: {len(result.team_points)} team(s) scored')
    return result
