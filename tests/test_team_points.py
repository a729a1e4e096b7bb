"""Tests for team gameweek points: auto-subs and captaincy."""

import pytest

from conftest import build_positions, build_slots
from fsl.errors import NotFoundError
from fsl.schemas import PlayerGameweekStat
from fsl.team_points import calculate_team_points, compute_team_gameweek_points

TEAM = 'A'


def stats_for(**rows) -> dict[str, PlayerGameweekStat]:
    """Build a stats map from key=counters pairs, e.g. fwd1={'minutes_played': 90}."""
    return {
        f'{TEAM}-{key}': PlayerGameweekStat(player_id=f'{TEAM}-{key}', gameweek=1, **counters)
        for key, counters in rows.items()
    }


def score(stats, captain='fwd1', vice='mid1'):
    return calculate_team_points(
        TEAM, 1, build_slots(TEAM, captain=captain, vice=vice), stats, build_positions(TEAM)
    )


class TestStarters:
    """Tests for starters' contributions."""

    def test_only_starters_count(self):
        """Test bench points are reported separately, not added to the total."""
        rows = {f'def{i}': {'minutes_played': 90} for i in range(1, 6)}
        result = score(stats_for(**rows), captain=None)
        assert result.substitutions == []
        assert result.total == 8
        assert result.bench_total == 2

    def test_empty_gameweek_scores_zero(self):
        """Test a team with no stats scores 0."""
        result = score({})
        assert result.total == 0
        assert result.bench_total == 0
        assert len(result.contributions) == 11


class TestAutoSubstitution:
    """Tests for replacing starters who did not play."""

    def test_goalkeeper_substituted(self):
        """Test a benched GK who played 90 with a clean sheet replaces the starting GK."""
        result = score(stats_for(gk2={'minutes_played': 90, 'saves': 1, 'clean_sheet': True}), captain=None)
        assert result.total == 6
        assert result.substitutions == [('A-gk1', 'A-gk2')]
        assert result.bench_total == 0

    def test_substitute_must_share_position(self):
        """Test a bench MID cannot replace a DEF."""
        rows = {f'mid{i}': {'minutes_played': 90} for i in range(1, 6)}
        result = score(stats_for(**rows), captain=None)
        assert result.substitutions == []
        assert result.total == 8
        assert result.bench_total == 2

    def test_bench_player_used_once(self):
        """Test one bench DEF replaces only the first absent DEF."""
        rows = {f'def{i}': {'minutes_played': 90} for i in (3, 4)}
        rows['def5'] = {'minutes_played': 90, 'goals': 1}
        result = score(stats_for(**rows), captain=None)
        assert result.substitutions == [('A-def1', 'A-def5')]
        assert result.total == 2 + 2 + 8

    def test_substitute_who_did_not_play_is_ignored(self):
        """Test a bench player with 0 minutes does not come on."""
        result = score(stats_for(gk2={'minutes_played': 0}), captain=None)
        assert result.substitutions == []

    def test_starter_who_played_is_not_replaced(self):
        """Test a starter with minutes but 0 points keeps their place."""
        result = score(
            stats_for(gk1={'minutes_played': 10, 'goals_conceded': 4}, gk2={'minutes_played': 90}),
            captain=None,
        )
        assert result.substitutions == []
        assert result.bench_total == 2


class TestCaptaincy:
    """Tests for captain doubling and vice-captain fallback."""

    def test_captain_doubled(self):
        """Test FWD captain with 2 goals in 90 minutes contributes 20."""
        result = score(stats_for(fwd1={'minutes_played': 90, 'goals': 2}))
        assert result.total == 20
        assert result.captain_bonus == 10
        assert not result.vice_captain_used

    def test_substituted_captain_doubles_substitute(self):
        """Test the captain's substitute gets the captain's multiplier."""
        result = score(stats_for(fwd3={'minutes_played': 90, 'goals': 1}), captain='fwd1', vice=None)
        assert result.substitutions == [('A-fwd1', 'A-fwd3')]
        assert result.total == 12

    def test_vice_captain_fallback(self):
        """Test the vice-captain's points are added once when the captain didn't play."""
        result = score(stats_for(mid1={'minutes_played': 90, 'goals': 1}))
        assert result.vice_captain_used
        assert result.total == 7 + 7

    def test_vice_captain_with_zero_points_not_used(self):
        """Test a vice-captain on 0 points gives no bonus."""
        result = score(stats_for(mid1={'minutes_played': 90, 'red_cards': 1}))
        assert not result.vice_captain_used
        assert result.captain_bonus == 0

    def test_no_captain_means_no_bonus(self):
        """Test without a captain nobody is doubled, vice included."""
        result = score(stats_for(mid1={'minutes_played': 90, 'goals': 1}), captain=None)
        assert result.total == 7
        assert not result.vice_captain_used

    def test_benched_captain_treated_as_not_playing(self):
        """Test a captain on the bench hands the bonus to the vice-captain."""
        result = score(
            stats_for(
                fwd1={'minutes_played': 90},
                fwd2={'minutes_played': 90},
                fwd3={'minutes_played': 90, 'goals': 3},
                mid1={'minutes_played': 90},
            ),
            captain='fwd3',
        )
        assert result.vice_captain_used
        assert result.total == 2 + 2 + 2 + 2
        assert result.bench_total == 14


class TestStoredTeam:
    """Tests for scoring a team held in the store."""

    def test_compute_from_store(self, store, add_squad, add_stat, add_gameweek):
        """Test stored roster and stats are combined."""
        add_gameweek(3)
        add_squad('A')
        add_stat('A-fwd1', 3, minutes_played=90, goals=2)
        result = compute_team_gameweek_points(store, 'A', 3)
        assert result.total == 20

    def test_unknown_team(self, store, add_gameweek):
        """Test scoring a missing team raises NotFoundError."""
        add_gameweek(1)
        with pytest.raises(NotFoundError):
            compute_team_gameweek_points(store, 'nope', 1)

    def test_unknown_gameweek(self, store, add_squad):
        """Test scoring a missing gameweek raises NotFoundError."""
        add_squad('A')
        with pytest.raises(NotFoundError):
            compute_team_gameweek_points(store, 'A', 9)
