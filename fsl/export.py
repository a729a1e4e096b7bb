"""Export of finalized gameweek standings to an Excel workbook."""

import logging
from pathlib import Path

import openpyxl

from .standings import league_table
from .store import LeagueStore

logger = logging.getLogger('fsl.export')

OVERALL_SHEET = 'Overall'
OVERALL_HEADERS = ('Rank', 'Team', 'League', 'GW Points', 'Bench', 'Total')
LEAGUE_HEADERS = ('Rank', 'Team', 'GW Points', 'Total')

# Excel rejects these in sheet titles
_INVALID_TITLE_CHARS = set('[]:*?/\\')


def _sheet_title(name: str, taken: set[str]) -> str:
    title = ''.join(ch for ch in name if ch not in _INVALID_TITLE_CHARS).strip()[:31] or 'League'
    base, n = title, 2
    while title in taken:
        suffix = f' ({n})'
        title = base[: 31 - len(suffix)] + suffix
        n += 1
    taken.add(title)
    return title


def export_gameweek_to_excel(store: LeagueStore, gameweek: int, output_path: str | Path) -> Path:
    """
    Write a gameweek's results to an .xlsx file.

    The first sheet lists every team by overall rank with its gameweek
    points, bench points and running total. Each league then gets a sheet
    with its table for the gameweek.

    Args:
        store: League store
        gameweek: Gameweek number (should be finalized)
        output_path: Destination .xlsx path

    Returns:
        Path of the written workbook

    Raises:
        NotFoundError: If the gameweek doesn't exist
    """
    record = store.get_gameweek(gameweek)
    if not record.is_finished:
        logger.warning(f'Exporting gameweek {gameweek} before it was finalized')

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    leagues = {league.league_id: league for league in store.db.leagues}
    ledger = {row.fantasy_team_id: row for row in store.ledger_for_gameweek(gameweek)}

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = OVERALL_SHEET
    ws.append([f'{record.name} ({record.status})'])
    ws.append(list(OVERALL_HEADERS))

    teams = sorted(
        store.teams(),
        key=lambda team: (team.rank if team.rank is not None else float('inf'), team.fantasy_team_id),
    )
    for team in teams:
        row = ledger.get(team.fantasy_team_id)
        league = leagues.get(team.league_id) if team.league_id else None
        ws.append(
            [
                team.rank,
                team.team_name,
                league.name if league else '',
                row.points if row else 0,
                row.bench_points if row else 0,
                team.total_points,
            ]
        )

    taken = {OVERALL_SHEET}
    for league in sorted(leagues.values(), key=lambda lg: lg.league_id):
        league_ws = wb.create_sheet(_sheet_title(league.name, taken))
        league_ws.append(list(LEAGUE_HEADERS))
        for entry in league_table(store, league.league_id, gameweek):
            league_ws.append(
                [entry['rank'], entry['team_name'], entry['points'], entry['total_points']]
            )

    wb.save(str(output_path))
    logger.info(f'Exported gameweek {gameweek} ({len(teams)} team(s)) to {output_path}')
    return output_path
