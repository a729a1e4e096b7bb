"""League configuration management."""

from functools import lru_cache
from pathlib import Path

from .schemas import LeagueConfig
from .utils import load_json


@lru_cache(maxsize=1)
def get_config() -> LeagueConfig:
    """
    Load league configuration from data/league_config.json.

    Configuration is cached after first load for performance.

    Returns:
        LeagueConfig object with validated settings

    Raises:
        FileNotFoundError: If league_config.json doesn't exist
        ValueError: If config file has invalid structure

    Example:
        from fsl.config import get_config
        config = get_config()
        print(f"Budget: {config.budget_limit}")
    """
    config_path = Path(__file__).parent.parent / 'data' / 'league_config.json'
    return load_json(config_path, schema=LeagueConfig)


def get_budget_limit() -> float:
    """Get the squad budget from config."""
    return get_config().budget_limit


def get_squad_size() -> int:
    """Get the number of players in a full squad."""
    return get_config().squad_size


def get_squad_limits() -> dict[str, int]:
    """Get the number of squad players per position."""
    return get_config().squad_limits


def get_formations() -> list[tuple[int, int, int]]:
    """Get allowed formations as (defenders, midfielders, forwards) tuples."""
    return [
        tuple(int(n) for n in formation.split('-'))  # type: ignore[misc]
        for formation in get_config().formations
    ]


def get_transfer_limits() -> tuple[int, int, int]:
    """Get (base transfers per gameweek, max available, max banked)."""
    config = get_config()
    return config.base_transfers, config.max_transfers, config.max_banked_transfers


def get_bonus_awards() -> list[int]:
    """Get bonus points handed to the top performers, best first."""
    return get_config().bonus_awards


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime
    and you need to reload it.
    """
    get_config.cache_clear()
