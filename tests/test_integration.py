"""Integration tests for end-to-end gameweek workflows."""

import openpyxl
import pytest

import gameweek_admin
from conftest import utc
from fsl.errors import NotFoundError, PreconditionError
from fsl.export import export_gameweek_to_excel
from fsl.finalizer import finalize_gameweek
from fsl.gameweeks import derive_gameweeks_from_matches, refresh_gameweek_status
from fsl.logging_config import setup_logging
from fsl.stats_import import import_matches, import_player_stats, load_player_stats_csv
from fsl.store import LeagueStore
from fsl.transfers import execute_transfer, transfers_remaining

MATCHES_CSV = """match_id,gameweek,home_team,away_team,home_score,away_score,match_date,status
gw3-m1,3,Arsenal,Chelsea,2,0,2025-09-14T15:00:00Z,completed
gw3-m2,3,Everton,Fulham,1,1,2025-09-15T19:30:00Z,completed
gw4-m1,4,Chelsea,Everton,,,2025-09-21T15:00:00Z,scheduled
"""

STATS_CSV = """player_id,gameweek,minutes_played,goals,assists,clean_sheet,saves,yellow_cards
A-fwd1,3,90,2,0,false,0,0
A-gk1,3,0,,,,,
A-gk2,3,90,0,0,true,1,0
B-mid1,3,75,0,1,false,0,1
A-mid1,4,90,1,0,false,0,0
"""


@pytest.fixture
def csv_dir(tmp_path):
    """Temporary directory with match and stat CSV exports."""
    (tmp_path / 'matches.csv').write_text(MATCHES_CSV)
    (tmp_path / 'stats.csv').write_text(STATS_CSV)
    return tmp_path


@pytest.fixture
def league(store, add_squad, csv_dir):
    """Two teams in one league with gameweek 3 results imported."""
    add_squad('A')
    add_squad('B', transfers_banked=1)
    import_matches(store, csv_dir / 'matches.csv')
    derive_gameweeks_from_matches(store)
    import_player_stats(store, csv_dir / 'stats.csv', gameweek=3)
    return store


class TestCsvImport:
    """Tests for importing matches and stats from CSV."""

    def test_matches_imported(self, league):
        """Test matches land in their gameweeks with parsed kickoff times."""
        matches = league.matches_for_gameweek(3)
        assert [m.match_id for m in matches] == ['gw3-m1', 'gw3-m2']
        assert matches[0].match_date == utc(2025, 9, 14, 15)
        assert league.matches_for_gameweek(4)[0].home_score is None

    def test_windows_derived_from_imported_matches(self, league):
        """Test gameweek 3 runs from the day before its first match to the day after its last."""
        gameweek = league.get_gameweek(3)
        assert gameweek.start_time == utc(2025, 9, 13)
        assert gameweek.end_time == utc(2025, 9, 16)

    def test_stats_imported_with_points(self, league):
        """Test stat rows are stored with computed total points."""
        assert league.find_stat('A-fwd1', 3).total_points == 10
        assert league.find_stat('A-gk2', 3).clean_sheet
        assert league.find_stat('A-gk1', 3).minutes_played == 0
        assert league.find_stat('B-mid1', 3).total_points == 2 + 3 - 1

    def test_gameweek_filter(self, league):
        """Test rows for other gameweeks are skipped."""
        assert league.find_stat('A-mid1', 4) is None

    def test_load_all_gameweeks(self, csv_dir):
        """Test loading without a filter returns every row."""
        assert len(load_player_stats_csv(csv_dir / 'stats.csv')) == 5

    def test_unknown_player_aborts_import(self, store, tmp_path):
        """Test an unknown player rejects the whole file."""
        path = tmp_path / 'stats.csv'
        path.write_text('player_id,gameweek,minutes_played\nghost,1,90\n')
        with pytest.raises(NotFoundError):
            import_player_stats(store, path)
        assert store.stats_for_gameweek(1) == []

    def test_missing_column(self, store, tmp_path):
        """Test a file without player_id is rejected."""
        path = tmp_path / 'stats.csv'
        path.write_text('gameweek,goals\n1,1\n')
        with pytest.raises(ValueError):
            import_player_stats(store, path)

    def test_finalized_gameweek_rejects_stats(self, league, csv_dir):
        """Test stats for a finalized gameweek can't be re-imported."""
        finalize_gameweek(league, 3, award_bonus=False)
        with pytest.raises(PreconditionError):
            import_player_stats(league, csv_dir / 'stats.csv', gameweek=3)


class TestGameweekLifecycle:
    """Tests for a full gameweek from import to export."""

    def test_end_to_end(self, league, tmp_path):
        """Test Team A scores 26 in gameweek 3 and the export shows it."""
        current, upcoming = refresh_gameweek_status(league, now=utc(2025, 9, 14, 18))
        assert (current.number, upcoming.number) == (3, 4)

        result = finalize_gameweek(league, 3, award_bonus=False)
        assert result.team_points == {'A': 26, 'B': 8}

        refresh_gameweek_status(league, now=utc(2025, 9, 17))
        assert league.get_gameweek(3).status == 'finalized'

        output = export_gameweek_to_excel(league, 3, tmp_path / 'exports' / 'gw3.xlsx')
        wb = openpyxl.load_workbook(output)
        assert wb.sheetnames == ['Overall', 'League L1']

        overall = wb['Overall']
        assert overall.cell(row=2, column=1).value == 'Rank'
        assert [overall.cell(row=3, column=c).value for c in (1, 2, 4, 6)] == [1, 'Team A', 26, 26]

        league_sheet = wb['League L1']
        assert [league_sheet.cell(row=r, column=2).value for r in (2, 3)] == ['Team A', 'Team B']

    def test_transfer_then_finalize(self, league):
        """Test Team B's transfer allowance before and after finalization."""
        assert transfers_remaining(league, 'B') == 2
        execute_transfer(league, 'B', 'B-fwd1', 'A-fwd1', 'B-r10', now=utc(2025, 9, 10))
        assert transfers_remaining(league, 'B') == 1

        finalize_gameweek(league, 3, award_bonus=False)

        team = league.get_team('B')
        assert team.current_gameweek == 4
        assert transfers_remaining(league, 'B') == 2
        assert team.total_points == 20 + 4


class TestCli:
    """Tests for the gameweek admin command line."""

    @pytest.fixture(autouse=True)
    def reset_logging(self):
        yield
        setup_logging(log_to_file=False, console_level=None)

    @pytest.fixture
    def store_path(self, league, tmp_path):
        path = tmp_path / 'league.json'
        league.path = path
        league.save()
        return path

    def run(self, store_path, tmp_path, *args):
        return gameweek_admin.main(['--store', str(store_path), '--log-dir', str(tmp_path / 'logs'), *args])

    def test_finalize_command(self, store_path, tmp_path, capsys):
        """Test finalize persists the results to the store file."""
        assert self.run(store_path, tmp_path, 'finalize', '3', '--no-bonus') == 0
        assert 'GAMEWEEK 3 FINALIZED' in capsys.readouterr().out
        assert LeagueStore.load(store_path).get_team('A').total_points == 26

    def test_finalize_not_ready(self, store_path, tmp_path):
        """Test finalizing a gameweek with scheduled matches exits with code 2."""
        assert self.run(store_path, tmp_path, 'finalize', '4') == gameweek_admin.EXIT_NOT_READY
        assert not LeagueStore.load(store_path).get_gameweek(4).is_finished

    def test_unknown_gameweek(self, store_path, tmp_path):
        """Test errors map to exit code 1."""
        assert self.run(store_path, tmp_path, 'set-status', '9', 'locked') == gameweek_admin.EXIT_ERROR

    def test_check_command(self, store_path, tmp_path, capsys):
        """Test valid squads pass the check."""
        assert self.run(store_path, tmp_path, 'check') == 0
        assert 'look valid' in capsys.readouterr().out

    def test_points_command(self, store_path, tmp_path, capsys):
        """Test the points breakdown is printed."""
        assert self.run(store_path, tmp_path, 'points', 'A', '3') == 0
        out = capsys.readouterr().out
        assert 'A gameweek 3: 26 pts' in out
        assert 'A-gk1 -> A-gk2: 6' in out
