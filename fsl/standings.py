"""League tables, global ranks and team points history.

Ties are broken by fantasy_team_id (lowest first) and ranks are sequential,
so two teams on the same points still get different ranks.
"""

from typing import Any

from .schemas import FantasyTeamGameweekPoints
from .store import LeagueStore


def rank_league(store: LeagueStore, league_id: str, gameweek: int) -> list[FantasyTeamGameweekPoints]:
    """
    Write rank_in_league for every member's ledger row of a gameweek.

    Returns:
        Ledger rows in rank order
    """
    members = {team.fantasy_team_id for team in store.teams_in_league(league_id)}
    rows = [row for row in store.ledger_for_gameweek(gameweek) if row.fantasy_team_id in members]
    rows.sort(key=lambda row: (-row.points, row.fantasy_team_id))

    with store.transaction():
        for rank, row in enumerate(rows, 1):
            row.rank_in_league = rank

    return rows


def rank_all_teams(store: LeagueStore) -> None:
    """Write every team's overall rank from its total points."""
    teams = sorted(store.teams(), key=lambda team: (-team.total_points, team.fantasy_team_id))
    with store.transaction():
        for rank, team in enumerate(teams, 1):
            team.rank = rank


def ledger_total(store: LeagueStore, fantasy_team_id: str) -> int:
    """Total points as the sum of the team's ledger rows."""
    return sum(row.points for row in store.ledger_for_team(fantasy_team_id))


def team_points_history(store: LeagueStore, fantasy_team_id: str) -> list[dict[str, Any]]:
    """
    Per-gameweek points of a team with a running total.

    Returns:
        List of {gameweek, points, bench_points, rank_in_league, running_total}
    """
    store.get_team(fantasy_team_id)

    history = []
    running_total = 0
    for row in store.ledger_for_team(fantasy_team_id):
        running_total += row.points
        history.append(
            {
                'gameweek': row.gameweek,
                'points': row.points,
                'bench_points': row.bench_points,
                'rank_in_league': row.rank_in_league,
                'running_total': running_total,
            }
        )
    return history


def league_table(store: LeagueStore, league_id: str, gameweek: int) -> list[dict[str, Any]]:
    """
    League standings for one finalized gameweek, in rank order.

    Returns:
        List of {rank, fantasy_team_id, team_name, points, total_points}
    """
    teams = {team.fantasy_team_id: team for team in store.teams_in_league(league_id)}
    rows = [
        row
        for row in store.ledger_for_gameweek(gameweek)
        if row.fantasy_team_id in teams and row.rank_in_league is not None
    ]
    rows.sort(key=lambda row: row.rank_in_league)

    return [
        {
            'rank': row.rank_in_league,
            'fantasy_team_id': row.fantasy_team_id,
            'team_name': teams[row.fantasy_team_id].team_name,
            'points': row.points,
            'total_points': teams[row.fantasy_team_id].total_points,
        }
        for row in rows
    ]
