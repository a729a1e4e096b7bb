"""Import of match results and player gameweek stats from CSV exports."""

import logging
from pathlib import Path
from typing import Optional

import polars as pl

from .errors import NotFoundError
from .schemas import STAT_COUNTERS, Match, PlayerGameweekStat
from .scoring import compute_player_points
from .store import LeagueStore

logger = logging.getLogger('fsl.stats_import')

MATCH_COLUMNS = (
    'match_id',
    'gameweek',
    'home_team',
    'away_team',
    'home_score',
    'away_score',
    'match_date',
    'status',
)


def _read_csv(path: str | Path, required: tuple[str, ...]) -> pl.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f'CSV file not found: {path}')

    logger.info(f'Loading {path}...')
    frame = pl.read_csv(path)

    missing = [col for col in required if col not in frame.columns]
    if missing:
        raise ValueError(f'{path} is missing column(s): {", ".join(missing)}')
    return frame


def load_player_stats_csv(path: str | Path, gameweek: Optional[int] = None) -> list[PlayerGameweekStat]:
    """
    Read player gameweek stats from a CSV file.

    Expected columns: player_id, gameweek and any of the stat counters
    (minutes_played, goals, assists, clean_sheet, ...). Empty cells count as 0.
    Unknown columns are ignored and total_points is always recomputed.

    Args:
        path: Path to CSV file
        gameweek: Only keep rows for this gameweek (optional)

    Returns:
        List of PlayerGameweekStat rows
    """
    frame = _read_csv(path, ('player_id', 'gameweek'))

    counters = [col for col in STAT_COUNTERS if col in frame.columns]
    columns = ['player_id', 'gameweek', *counters]
    if 'clean_sheet' in frame.columns:
        columns.append('clean_sheet')

    frame = frame.select(columns).with_columns(
        pl.col('player_id').cast(pl.Utf8),
        *(pl.col(col).fill_null(0) for col in counters),
    )
    if gameweek is not None:
        frame = frame.filter(pl.col('gameweek') == gameweek)

    return [PlayerGameweekStat(**row) for row in frame.iter_rows(named=True)]


def load_matches_csv(path: str | Path) -> list[Match]:
    """
    Read match results from a CSV file.

    Expected columns: match_id, gameweek and optionally home_team, away_team,
    home_score, away_score, match_date (ISO 8601) and status.
    """
    frame = _read_csv(path, ('match_id', 'gameweek'))
    columns = [col for col in MATCH_COLUMNS if col in frame.columns]

    frame = frame.select(columns).with_columns(pl.col('match_id').cast(pl.Utf8))
    for col in ('home_team', 'away_team'):
        if col in columns:
            frame = frame.with_columns(pl.col(col).cast(pl.Utf8).fill_null(''))
    if 'status' in columns:
        frame = frame.with_columns(pl.col('status').fill_null('scheduled'))

    return [Match(**row) for row in frame.iter_rows(named=True)]


def import_player_stats(store: LeagueStore, path: str | Path, gameweek: Optional[int] = None) -> int:
    """
    Upsert player stats from a CSV file, computing each row's total points.

    All rows are imported or none: an unknown player or a finalized gameweek
    aborts the whole import.

    Returns:
        Number of stat rows written
    """
    stats = load_player_stats_csv(path, gameweek)

    with store.transaction():
        for stat in stats:
            player = store.find_player(stat.player_id)
            if player is None:
                raise NotFoundError('Player', stat.player_id)
            stat.total_points = compute_player_points(stat, player.position)
            store.upsert_stat(stat)

    logger.info(f'Imported {len(stats)} player stat row(s) from {path}')
    return len(stats)


def import_matches(store: LeagueStore, path: str | Path) -> int:
    """Upsert matches from a CSV file. Returns the number of matches written."""
    matches = load_matches_csv(path)

    with store.transaction():
        for match in matches:
            store.upsert_match(match)

    logger.info(f'Imported {len(matches)} match(es) from {path}')
    return len(matches)
