"""Error taxonomy for the fantasy league core."""


class FantasyLeagueError(Exception):
    """Base class for all errors raised by the core."""

    retryable = False


class PreconditionError(FantasyLeagueError):
    """An action was rejected before any mutation took place."""


class GameweekNotReadyError(PreconditionError):
    """Finalization requested while some matches are not completed."""

    def __init__(self, gameweek: int, pending_matches: list[str]):
        self.gameweek = gameweek
        self.pending_matches = pending_matches
        super().__init__(
            f'Cannot finalize gameweek {gameweek}. '
            f'Not all matches are completed ({len(pending_matches)} pending).'
        )


class TransferError(PreconditionError):
    """A transfer was rejected.

    ``reason`` is a short machine-readable code such as ``deadline_passed``,
    ``no_transfers_remaining`` or ``insufficient_budget``.
    """

    def __init__(self, reason: str, message: str):
        self.reason = reason
        super().__init__(message)


class NotFoundError(FantasyLeagueError):
    """A referenced gameweek, player, team or roster slot does not exist."""

    def __init__(self, kind: str, key):
        self.kind = kind
        self.key = key
        super().__init__(f'{kind} {key} not found')


class ConcurrencyConflict(FantasyLeagueError):
    """Another caller holds the lock for this operation."""

    retryable = True


class ConsistencyDefect(FantasyLeagueError):
    """Internal invariant violation, e.g. two gameweeks flagged current."""
