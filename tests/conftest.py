"""Shared fixtures: an in-memory store and a squad factory."""

from datetime import datetime, timezone

import pytest

from fsl.schemas import (
    FantasyTeam,
    Gameweek,
    League,
    Match,
    Player,
    PlayerGameweekStat,
    RosterSlot,
)
from fsl.store import LeagueStore

# (player key, position, squad position) in listing order: 4-4-2 starters, then the bench
SQUAD_LAYOUT = [
    ('gk1', 'GK', 'starting_gk'),
    ('def1', 'DEF', 'starting_def'),
    ('def2', 'DEF', 'starting_def'),
    ('def3', 'DEF', 'starting_def'),
    ('def4', 'DEF', 'starting_def'),
    ('mid1', 'MID', 'starting_mid'),
    ('mid2', 'MID', 'starting_mid'),
    ('mid3', 'MID', 'starting_mid'),
    ('mid4', 'MID', 'starting_mid'),
    ('fwd1', 'FWD', 'starting_fwd'),
    ('fwd2', 'FWD', 'starting_fwd'),
    ('gk2', 'GK', 'backup_gk'),
    ('def5', 'DEF', 'bench_def'),
    ('mid5', 'MID', 'bench_mid'),
    ('fwd3', 'FWD', 'bench_fwd'),
]


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def build_slots(team_id: str, captain: str | None = 'fwd1', vice: str | None = 'mid1') -> list[RosterSlot]:
    """Roster slots for SQUAD_LAYOUT with player ids '<team>-<key>'."""
    slots = []
    for i, (key, _, squad_position) in enumerate(SQUAD_LAYOUT, 1):
        slots.append(
            RosterSlot(
                roster_id=f'{team_id}-r{i}',
                fantasy_team_id=team_id,
                player_id=f'{team_id}-{key}',
                squad_position=squad_position,
                is_starter=squad_position.startswith('starting'),
                is_captain=key == captain,
                is_vice_captain=key == vice,
                purchase_price=5.0,
            )
        )
    return slots


def build_positions(team_id: str) -> dict[str, str]:
    return {f'{team_id}-{key}': position for key, position, _ in SQUAD_LAYOUT}


@pytest.fixture
def store():
    """Empty in-memory league store."""
    return LeagueStore()


@pytest.fixture
def add_squad(store):
    """Factory adding a team with a full 15-player squad to the store."""

    def _add_squad(
        team_id: str,
        league_id: str = 'L1',
        captain: str | None = 'fwd1',
        vice: str | None = 'mid1',
        budget: float = 25.0,
        **team_fields,
    ) -> FantasyTeam:
        if store.find_league(league_id) is None:
            store.add_league(League(league_id=league_id, name=f'League {league_id}'))
        team = store.add_team(
            FantasyTeam(
                fantasy_team_id=team_id,
                team_name=f'Team {team_id}',
                league_id=league_id,
                budget_remaining=budget,
                **team_fields,
            )
        )
        for key, position, _ in SQUAD_LAYOUT:
            store.add_player(
                Player(player_id=f'{team_id}-{key}', name=f'{team_id} {key}', position=position, price=5.0)
            )
        for slot in build_slots(team_id, captain=captain, vice=vice):
            store.add_roster_slot(slot)
        return team

    return _add_squad


@pytest.fixture
def add_stat(store):
    """Factory upserting a stat row for (player, gameweek)."""

    def _add_stat(player_id: str, gameweek: int, **counters) -> PlayerGameweekStat:
        return store.upsert_stat(PlayerGameweekStat(player_id=player_id, gameweek=gameweek, **counters))

    return _add_stat


@pytest.fixture
def add_gameweek(store):
    """Factory adding a gameweek with completed (or given-status) matches."""

    def _add_gameweek(number: int, match_statuses=('completed', 'completed'), **fields) -> Gameweek:
        gameweek = store.upsert_gameweek(Gameweek(number=number, **fields))
        for i, status in enumerate(match_statuses, 1):
            store.upsert_match(
                Match(
                    match_id=f'gw{number}-m{i}',
                    gameweek=number,
                    home_team='Home',
                    away_team='Away',
                    match_date=utc(2025, 9, 13 + i, 15),
                    status=status,
                )
            )
        return gameweek

    return _add_gameweek
