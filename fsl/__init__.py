from .errors import (
    FantasyLeagueError,
    PreconditionError,
    GameweekNotReadyError,
    TransferError,
    NotFoundError,
    ConcurrencyConflict,
    ConsistencyDefect,
)
from .models import PlayerScore, TeamGameweekScore, FinalizeResult
from .store import LeagueStore
from .scoring import score_player, compute_player_points, assign_bonus_points
from .gameweeks import (
    derive_gameweeks_from_matches,
    set_gameweek_window,
    refresh_gameweek_status,
    set_gameweek_status,
    get_current_gameweek,
    get_next_gameweek,
)
from .team_points import calculate_team_points, compute_team_gameweek_points
from .finalizer import finalize_gameweek
from .standings import league_table, team_points_history
from .transfers import transfers_allowed, transfers_remaining, execute_transfer
from .stats_import import import_player_stats, import_matches
from .export import export_gameweek_to_excel

__all__ = [
    # Errors
    'FantasyLeagueError',
    'PreconditionError',
    'GameweekNotReadyError',
    'TransferError',
    'NotFoundError',
    'ConcurrencyConflict',
    'ConsistencyDefect',
    # Models
    'PlayerScore',
    'TeamGameweekScore',
    'FinalizeResult',
    # Storage
    'LeagueStore',
    # Scoring
    'score_player',
    'compute_player_points',
    'assign_bonus_points',
    # Gameweek calendar
    'derive_gameweeks_from_matches',
    'set_gameweek_window',
    'refresh_gameweek_status',
    'set_gameweek_status',
    'get_current_gameweek',
    'get_next_gameweek',
    # Team points and finalization
    'calculate_team_points',
    'compute_team_gameweek_points',
    'finalize_gameweek',
    'league_table',
    'team_points_history',
    # Transfers
    'transfers_allowed',
    'transfers_remaining',
    'execute_transfer',
    # Import / export
    'import_player_stats',
    'import_matches',
    'export_gameweek_to_excel',
]
