"""Persisted league state with transactional updates.

The whole league lives in one JSON document validated by ``LeagueDatabase``.
Mutations go through ``LeagueStore.transaction()``: the state is snapshotted on
entry, restored if the block raises, and written to disk once on success.
"""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .errors import ConcurrencyConflict, NotFoundError, PreconditionError
from .schemas import (
    FantasyTeam,
    FantasyTeamGameweekPoints,
    Gameweek,
    League,
    LeagueDatabase,
    Match,
    Player,
    PlayerGameweekStat,
    RosterSlot,
    Transaction,
)
from .utils import load_json, save_json

logger = logging.getLogger('fsl.store')


class LeagueStore:
    """
    Gameweeks, matches, players, stats, teams, rosters and the points ledger.

    Args:
        db: Initial state (default: empty)
        path: JSON file to persist to; None keeps the store in memory
    """

    def __init__(self, db: Optional[LeagueDatabase] = None, path: Optional[Path] = None):
        self.db = db if db is not None else LeagueDatabase()
        self.path = Path(path) if path is not None else None
        self._lock = threading.RLock()
        self._depth = 0
        self._named_locks: dict[str, threading.Lock] = {}
        self._named_locks_guard = threading.Lock()

    @classmethod
    def load(cls, path: Path | str) -> 'LeagueStore':
        """Open a store file, starting empty if it doesn't exist yet."""
        path = Path(path)
        if not path.exists():
            logger.info(f'No store at {path}, starting empty')
            return cls(path=path)
        return cls(load_json(path, schema=LeagueDatabase), path=path)

    def save(self) -> None:
        if self.path is not None:
            save_json(self.path, self.db)

    @contextmanager
    def transaction(self) -> Iterator[LeagueDatabase]:
        """
        Run a block of mutations all-or-nothing.

        Nested transactions join the outermost one; only the outermost
        commit writes to disk.
        """
        with self._lock:
            outermost = self._depth == 0
            snapshot = self._snapshot() if outermost else None
            self._depth += 1
            try:
                yield self.db
                if outermost:
                    self.save()
            except BaseException:
                if outermost:
                    logger.warning('Transaction failed, rolling back')
                    self._restore(snapshot)
                raise
            finally:
                self._depth -= 1

    def _snapshot(self) -> tuple[dict[str, list], list[tuple]]:
        tables = {name: list(getattr(self.db, name)) for name in LeagueDatabase.model_fields}
        records = [(record, record.model_copy(deep=True)) for rows in tables.values() for record in rows]
        return tables, records

    def _restore(self, snapshot: tuple[dict[str, list], list[tuple]]) -> None:
        """Put every table and record back in place; objects held by callers stay attached."""
        tables, records = snapshot
        for record, saved in records:
            record.__dict__.update(saved.__dict__)
            object.__setattr__(record, '__pydantic_fields_set__', set(saved.__pydantic_fields_set__))
        for name, rows in tables.items():
            setattr(self.db, name, rows)

    def _named_lock(self, key: str) -> threading.Lock:
        with self._named_locks_guard:
            lock = self._named_locks.get(key)
            if lock is None:
                lock = self._named_locks[key] = threading.Lock()
            return lock

    @contextmanager
    def finalize_lock(self, gameweek: int) -> Iterator[None]:
        """Exclusive finalize access to a gameweek; fails fast if already held."""
        lock = self._named_lock(f'finalize:{gameweek}')
        if not lock.acquire(blocking=False):
            raise ConcurrencyConflict(f'Gameweek {gameweek} is already being finalized')
        try:
            yield
        finally:
            lock.release()

    @contextmanager
    def team_lock(self, fantasy_team_id: str) -> Iterator[None]:
        """Serialize squad changes for one team."""
        lock = self._named_lock(f'team:{fantasy_team_id}')
        with lock:
            yield

    # Gameweeks

    def gameweeks(self) -> list[Gameweek]:
        return sorted(self.db.gameweeks, key=lambda gw: gw.number)

    def find_gameweek(self, number: int) -> Optional[Gameweek]:
        return next((gw for gw in self.db.gameweeks if gw.number == number), None)

    def get_gameweek(self, number: int) -> Gameweek:
        gameweek = self.find_gameweek(number)
        if gameweek is None:
            raise NotFoundError('Gameweek', number)
        return gameweek

    def upsert_gameweek(self, gameweek: Gameweek) -> Gameweek:
        with self.transaction():
            existing = self.find_gameweek(gameweek.number)
            if existing is not None:
                self.db.gameweeks.remove(existing)
            self.db.gameweeks.append(gameweek)
        return gameweek

    # Matches

    def matches_for_gameweek(self, gameweek: int) -> list[Match]:
        return [m for m in self.db.matches if m.gameweek == gameweek]

    def upsert_match(self, match: Match) -> Match:
        with self.transaction():
            self.db.matches = [m for m in self.db.matches if m.match_id != match.match_id]
            self.db.matches.append(match)
        return match

    # Players and stats

    def find_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.db.players if p.player_id == player_id), None)

    def get_player(self, player_id: str) -> Player:
        player = self.find_player(player_id)
        if player is None:
            raise NotFoundError('Player', player_id)
        return player

    def add_player(self, player: Player) -> Player:
        with self.transaction():
            if self.find_player(player.player_id) is not None:
                raise PreconditionError(f'Player {player.player_id} already exists')
            self.db.players.append(player)
        return player

    def player_positions(self) -> dict[str, str]:
        return {p.player_id: p.position for p in self.db.players}

    def find_stat(self, player_id: str, gameweek: int) -> Optional[PlayerGameweekStat]:
        return next(
            (s for s in self.db.stats if s.player_id == player_id and s.gameweek == gameweek),
            None,
        )

    def stats_for_gameweek(self, gameweek: int) -> list[PlayerGameweekStat]:
        return [s for s in self.db.stats if s.gameweek == gameweek]

    def upsert_stat(self, stat: PlayerGameweekStat) -> PlayerGameweekStat:
        """Insert or overwrite the stat row for (player, gameweek)."""
        gameweek = self.find_gameweek(stat.gameweek)
        if gameweek is not None and gameweek.is_finished:
            raise PreconditionError(
                f'Gameweek {stat.gameweek} is finalized; stats for {stat.player_id} are locked'
            )
        with self.transaction():
            existing = self.find_stat(stat.player_id, stat.gameweek)
            if existing is not None:
                self.db.stats.remove(existing)
            self.db.stats.append(stat)
        return stat

    # Leagues, teams and rosters

    def find_league(self, league_id: str) -> Optional[League]:
        return next((lg for lg in self.db.leagues if lg.league_id == league_id), None)

    def add_league(self, league: League) -> League:
        with self.transaction():
            if self.find_league(league.league_id) is not None:
                raise PreconditionError(f'League {league.league_id} already exists')
            self.db.leagues.append(league)
        return league

    def teams(self) -> list[FantasyTeam]:
        return sorted(self.db.teams, key=lambda t: t.fantasy_team_id)

    def teams_in_league(self, league_id: str) -> list[FantasyTeam]:
        return [t for t in self.teams() if t.league_id == league_id]

    def find_team(self, fantasy_team_id: str) -> Optional[FantasyTeam]:
        return next((t for t in self.db.teams if t.fantasy_team_id == fantasy_team_id), None)

    def get_team(self, fantasy_team_id: str) -> FantasyTeam:
        team = self.find_team(fantasy_team_id)
        if team is None:
            raise NotFoundError('Fantasy team', fantasy_team_id)
        return team

    def add_team(self, team: FantasyTeam) -> FantasyTeam:
        with self.transaction():
            if self.find_team(team.fantasy_team_id) is not None:
                raise PreconditionError(f'Fantasy team {team.fantasy_team_id} already exists')
            if team.league_id is not None and self.find_league(team.league_id) is None:
                raise NotFoundError('League', team.league_id)
            self.db.teams.append(team)
        return team

    def roster_for_team(self, fantasy_team_id: str) -> list[RosterSlot]:
        """Roster slots in listing order."""
        return [s for s in self.db.roster_slots if s.fantasy_team_id == fantasy_team_id]

    def get_roster_slot(self, roster_id: str) -> RosterSlot:
        slot = next((s for s in self.db.roster_slots if s.roster_id == roster_id), None)
        if slot is None:
            raise NotFoundError('Roster slot', roster_id)
        return slot

    def add_roster_slot(self, slot: RosterSlot) -> RosterSlot:
        with self.transaction():
            self.get_team(slot.fantasy_team_id)
            if any(s.roster_id == slot.roster_id for s in self.db.roster_slots):
                raise PreconditionError(f'Roster slot {slot.roster_id} already exists')
            if any(s.player_id == slot.player_id for s in self.roster_for_team(slot.fantasy_team_id)):
                raise PreconditionError(
                    f'Player {slot.player_id} is already in team {slot.fantasy_team_id}'
                )
            self.db.roster_slots.append(slot)
        return slot

    # Ledger and transactions

    def find_ledger_row(self, fantasy_team_id: str, gameweek: int) -> Optional[FantasyTeamGameweekPoints]:
        return next(
            (
                row
                for row in self.db.ledger
                if row.fantasy_team_id == fantasy_team_id and row.gameweek == gameweek
            ),
            None,
        )

    def upsert_ledger_row(
        self, fantasy_team_id: str, gameweek: int, points: int, bench_points: int = 0
    ) -> FantasyTeamGameweekPoints:
        """Insert the (team, gameweek) row or overwrite its points."""
        with self.transaction():
            row = self.find_ledger_row(fantasy_team_id, gameweek)
            if row is None:
                row = FantasyTeamGameweekPoints(
                    fantasy_team_id=fantasy_team_id,
                    gameweek=gameweek,
                    points=points,
                    bench_points=bench_points,
                )
                self.db.ledger.append(row)
            else:
                row.points = points
                row.bench_points = bench_points
        return row

    def ledger_for_team(self, fantasy_team_id: str) -> list[FantasyTeamGameweekPoints]:
        rows = [row for row in self.db.ledger if row.fantasy_team_id == fantasy_team_id]
        return sorted(rows, key=lambda row: row.gameweek)

    def ledger_for_gameweek(self, gameweek: int) -> list[FantasyTeamGameweekPoints]:
        return [row for row in self.db.ledger if row.gameweek == gameweek]

    def add_transaction(self, transaction: Transaction) -> Transaction:
        with self.transaction():
            self.db.transactions.append(transaction)
        return transaction

    def transactions_for_team(self, fantasy_team_id: str) -> list[Transaction]:
        return [t for t in self.db.transactions if t.fantasy_team_id == fantasy_team_id]
