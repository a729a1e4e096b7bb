"""Tests for league configuration loading."""

from fsl.config import (
    clear_config_cache,
    get_bonus_awards,
    get_budget_limit,
    get_config,
    get_formations,
    get_squad_limits,
    get_transfer_limits,
)


class TestLeagueConfig:
    """Tests for the bundled league_config.json."""

    def test_squad_rules(self):
        """Test budget and the 2/5/5/3 squad."""
        assert get_budget_limit() == 100.0
        assert get_squad_limits() == {'GK': 2, 'DEF': 5, 'MID': 5, 'FWD': 3}

    def test_formations(self):
        """Test formations are parsed into (DEF, MID, FWD) tuples."""
        formations = get_formations()
        assert (4, 4, 2) in formations
        assert (5, 4, 1) in formations
        assert len(formations) == 7

    def test_transfer_limits_and_bonus(self):
        """Test 1 free transfer per gameweek, 2 max, 1 bankable; bonus 3/2/1."""
        assert get_transfer_limits() == (1, 2, 1)
        assert get_bonus_awards() == [3, 2, 1]

    def test_config_cached(self):
        """Test config is loaded once until the cache is cleared."""
        first = get_config()
        assert get_config() is first
        clear_config_cache()
        assert get_config() is not first
