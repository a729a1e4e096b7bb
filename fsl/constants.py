"""Constants and mappings for the fantasy league core."""

POSITIONS = ('GK', 'DEF', 'MID', 'FWD')

# Squad position -> (player position, is starting slot)
SQUAD_POSITIONS = {
    'starting_gk': ('GK', True),
    'backup_gk': ('GK', False),
    'starting_def': ('DEF', True),
    'bench_def': ('DEF', False),
    'starting_mid': ('MID', True),
    'bench_mid': ('MID', False),
    'starting_fwd': ('FWD', True),
    'bench_fwd': ('FWD', False),
}

GAMEWEEK_STATUSES = ('upcoming', 'locked', 'active', 'finalized')

# Appearance
POINTS_APPEARANCE_SHORT = 1  # 1-59 minutes
POINTS_APPEARANCE_FULL = 2  # 60+ minutes
FULL_APPEARANCE_MINUTES = 60

# Goals by position
POINTS_GOAL = {
    'GK': 10,
    'DEF': 6,
    'MID': 5,
    'FWD': 4,
}

POINTS_ASSIST = 3

# Clean sheet by position (requires minutes > 0)
POINTS_CLEAN_SHEET = {
    'GK': 4,
    'DEF': 4,
    'MID': 1,
    'FWD': 0,
}

SAVES_PER_POINT = 3
POINTS_PENALTY_SAVE = 5
GOALS_CONCEDED_PER_PENALTY = 2  # GK and DEF lose 1 point per 2 conceded

POINTS_PENALTY_MISS = -2
POINTS_YELLOW_CARD = -1
POINTS_RED_CARD = -3
POINTS_OWN_GOAL = -2

CAPTAIN_MULTIPLIER = 2
