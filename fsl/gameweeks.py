"""Gameweek calendar: windows, status transitions and current/next flags.

All current/next flag changes go through ``refresh_gameweek_status``; nothing
else in the package writes ``is_current`` or ``is_next``.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from .config import get_config
from .constants import GAMEWEEK_STATUSES
from .errors import ConsistencyDefect, PreconditionError
from .schemas import Gameweek
from .store import LeagueStore
from .utils import ensure_utc, utc_now
from .validators import validate_gameweek_flags

logger = logging.getLogger('fsl.gameweeks')


def _midnight(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def derive_window(
    number: int,
    match_dates: list[datetime],
    today: date,
) -> tuple[datetime, datetime, datetime]:
    """
    Compute (deadline, start, end) for a gameweek.

    With match dates the window runs from the day before the first match to
    the day after the last one. Without any, gameweeks fall back to a fixed
    cadence starting today: gameweek N starts (N-1) * 7 days from now.

    Args:
        number: Gameweek number
        match_dates: Kickoff times of the gameweek's matches (may be empty)
        today: Reference date for the fallback cadence

    Returns:
        Tuple of (deadline_time, start_time, end_time)
    """
    config = get_config()
    padding = timedelta(days=config.window_padding_days)

    if match_dates:
        days = [ensure_utc(d).date() for d in match_dates]
        start = _midnight(min(days)) - padding
        end = _midnight(max(days)) + padding
    else:
        length = timedelta(days=config.gameweek_length_days)
        start = _midnight(today) + (number - 1) * length
        end = start + length

    deadline = start - timedelta(hours=config.deadline_offset_hours)
    return deadline, start, end


def derive_gameweeks_from_matches(
    store: LeagueStore,
    today: Optional[date] = None,
    overwrite: bool = False,
) -> list[Gameweek]:
    """
    Create gameweeks for every gameweek number found in the match store.

    Existing gameweeks keep their window once it is complete, unless
    ``overwrite`` is set (admin override). Status and flags of existing
    gameweeks are never touched here.

    Returns:
        Gameweeks that were created or had their window changed
    """
    today = today or utc_now().date()
    numbers = sorted({m.gameweek for m in store.db.matches})
    changed = []

    with store.transaction():
        for number in numbers:
            dates = [
                m.match_date for m in store.matches_for_gameweek(number) if m.match_date is not None
            ]
            deadline, start, end = derive_window(number, dates, today)

            gameweek = store.find_gameweek(number)
            if gameweek is None:
                gameweek = Gameweek(
                    number=number, deadline_time=deadline, start_time=start, end_time=end
                )
                store.upsert_gameweek(gameweek)
            elif gameweek.has_complete_window and not overwrite:
                continue
            else:
                gameweek.deadline_time = deadline
                gameweek.start_time = start
                gameweek.end_time = end
            changed.append(gameweek)

    logger.info(f'Derived {len(changed)} gameweek window(s) from {len(numbers)} gameweek(s) of matches')
    return changed


def set_gameweek_window(
    store: LeagueStore,
    number: int,
    start_time: datetime,
    end_time: datetime,
    deadline_time: Optional[datetime] = None,
) -> Gameweek:
    """Admin override of one gameweek window, creating the gameweek if needed."""
    start_time = ensure_utc(start_time)
    end_time = ensure_utc(end_time)
    if deadline_time is None:
        deadline_time = start_time - timedelta(hours=get_config().deadline_offset_hours)
    deadline_time = ensure_utc(deadline_time)

    if end_time < start_time:
        raise ValueError(f'Gameweek {number} ends before it starts')
    if deadline_time > start_time:
        raise ValueError(f'Gameweek {number} deadline is after its start')

    with store.transaction():
        gameweek = store.find_gameweek(number)
        if gameweek is None:
            gameweek = store.upsert_gameweek(Gameweek(number=number))
        gameweek.deadline_time = deadline_time
        gameweek.start_time = start_time
        gameweek.end_time = end_time

    logger.info(f'Gameweek {number} window set to {start_time.isoformat()} - {end_time.isoformat()}')
    return gameweek


def status_at(gameweek: Gameweek, now: datetime) -> str:
    """Time-based status of a gameweek with a complete window."""
    if now < gameweek.deadline_time:
        return 'upcoming'
    if now < gameweek.start_time:
        return 'locked'
    if now <= gameweek.end_time:
        return 'active'
    return 'finalized'


def check_gameweek_flags(gameweeks: list[Gameweek]) -> None:
    """Raise ConsistencyDefect unless at most one gameweek is current and one is next."""
    problems = validate_gameweek_flags(gameweeks)
    if problems:
        for problem in problems:
            logger.error(problem)
        raise ConsistencyDefect('; '.join(problems))


def refresh_gameweek_status(
    store: LeagueStore,
    now: Optional[datetime] = None,
) -> tuple[Optional[Gameweek], Optional[Gameweek]]:
    """
    Recompute current/next flags and time-based statuses.

    Current is the lowest-numbered gameweek live at ``now``; if none is live,
    the lowest-numbered gameweek that hasn't started yet. Next is the
    lowest-numbered gameweek after current. Statuses follow the window
    (upcoming, locked, active, finalized) except that a gameweek closed by the
    finalizer stays finalized. Calling it twice with the same ``now`` gives
    the same result.

    Returns:
        Tuple of (current, next) gameweeks, either may be None
    """
    now = ensure_utc(now or utc_now())

    with store.transaction():
        gameweeks = store.gameweeks()
        for gameweek in gameweeks:
            gameweek.is_current = False
            gameweek.is_next = False

        timed = [gw for gw in gameweeks if gw.start_time is not None and gw.end_time is not None]
        current = next((gw for gw in timed if gw.start_time <= now <= gw.end_time), None)
        if current is None:
            current = next((gw for gw in timed if gw.start_time > now), None)

        next_gameweek = None
        if current is not None:
            current.is_current = True
            next_gameweek = next((gw for gw in gameweeks if gw.number > current.number), None)
            if next_gameweek is not None:
                next_gameweek.is_next = True

        for gameweek in gameweeks:
            if gameweek.is_finished:
                gameweek.status = 'finalized'
            elif gameweek.has_complete_window:
                gameweek.status = status_at(gameweek, now)

        check_gameweek_flags(gameweeks)

    logger.info(
        f'Gameweek status refreshed at {now.isoformat()}: '
        f'current={current.number if current else None}, '
        f'next={next_gameweek.number if next_gameweek else None}'
    )
    return current, next_gameweek


def set_gameweek_status(store: LeagueStore, number: int, status: str) -> Gameweek:
    """
    Admin override of a gameweek's status.

    Flags are left alone; they belong to ``refresh_gameweek_status``. Setting
    'finalized' here does not close the gameweek: only ``finalize_gameweek``
    computes points and makes the status terminal.

    Raises:
        ValueError: If status is not a known gameweek status
        NotFoundError: If the gameweek doesn't exist
        PreconditionError: If a finalized gameweek would be reopened
    """
    if status not in GAMEWEEK_STATUSES:
        raise ValueError(f'Invalid gameweek status: {status}')

    with store.transaction():
        gameweek = store.get_gameweek(number)
        if gameweek.is_finished and status != 'finalized':
            raise PreconditionError(f'Gameweek {number} has been finalized and cannot be reopened')
        gameweek.status = status

    logger.info(f'Gameweek {number} status set to {status}')
    return gameweek


def get_current_gameweek(store: LeagueStore, now: Optional[datetime] = None) -> Optional[Gameweek]:
    """Gameweek flagged current, repairing inconsistent flags first."""
    _repair_flags(store, now)
    return next((gw for gw in store.gameweeks() if gw.is_current), None)


def get_next_gameweek(store: LeagueStore, now: Optional[datetime] = None) -> Optional[Gameweek]:
    """Gameweek flagged next, repairing inconsistent flags first."""
    _repair_flags(store, now)
    return next((gw for gw in store.gameweeks() if gw.is_next), None)


def _repair_flags(store: LeagueStore, now: Optional[datetime]) -> None:
    problems = validate_gameweek_flags(store.gameweeks())
    if problems:
        for problem in problems:
            logger.error(f'Inconsistent gameweek flags, refreshing: {problem}')
        refresh_gameweek_status(store, now)
