#!/usr/bin/env python3
"""
Fantasy League Gameweek Admin CLI

Maintains the gameweek calendar, imports results and closes out gameweeks
against a JSON league store.

Usage:
    python gameweek_admin.py import-matches data/matches.csv
    python gameweek_admin.py derive
    python gameweek_admin.py refresh
    python gameweek_admin.py import-stats data/stats_gw3.csv --gameweek 3
    python gameweek_admin.py finalize 3
    python gameweek_admin.py export 3 --output exports/gameweek_3.xlsx
    python gameweek_admin.py check
"""

import argparse
import logging
import sys
from pathlib import Path

from fsl import (
    ConcurrencyConflict,
    FantasyLeagueError,
    GameweekNotReadyError,
    LeagueStore,
    compute_team_gameweek_points,
    derive_gameweeks_from_matches,
    export_gameweek_to_excel,
    finalize_gameweek,
    import_matches,
    import_player_stats,
    refresh_gameweek_status,
    set_gameweek_status,
)
from fsl.logging_config import setup_logging
from fsl.validators import validate_gameweek_flags, validate_roster

EXIT_ERROR = 1
EXIT_NOT_READY = 2
EXIT_CONFLICT = 3


def cmd_derive(store: LeagueStore, args) -> None:
    changed = derive_gameweeks_from_matches(store, overwrite=args.overwrite)
    print(f"Derived windows for {len(changed)} gameweek(s)")
    for gameweek in changed:
        print(f"  {gameweek.name}: {gameweek.start_time} -> {gameweek.end_time} (deadline {gameweek.deadline_time})")


def cmd_refresh(store: LeagueStore, args) -> None:
    current, next_gameweek = refresh_gameweek_status(store)
    print(f"Current: {current.name if current else '-'}")
    print(f"Next:    {next_gameweek.name if next_gameweek else '-'}")


def cmd_set_status(store: LeagueStore, args) -> None:
    gameweek = set_gameweek_status(store, args.gameweek, args.status)
    print(f"{gameweek.name} is now {gameweek.status}")


def cmd_finalize(store: LeagueStore, args) -> None:
    result = finalize_gameweek(store, args.gameweek, award_bonus=not args.no_bonus)

    print("\n" + "=" * 60)
    print(f"GAMEWEEK {args.gameweek} {'FINALIZED' if result.first_finalization else 'RE-FINALIZED'}")
    print("=" * 60)
    teams = {team.fantasy_team_id: team for team in store.teams()}
    ranked = sorted(result.team_points.items(), key=lambda item: (-item[1], item[0]))
    for rank, (team_id, points) in enumerate(ranked, 1):
        team = teams[team_id]
        print(f"  {rank}. {team.team_name}: {points} pts (total {team.total_points})")


def cmd_points(store: LeagueStore, args) -> None:
    score = compute_team_gameweek_points(store, args.team, args.gameweek)
    print(f"{args.team} gameweek {args.gameweek}: {score.total} pts (bench {score.bench_total})")
    for contribution in score.contributions:
        label = contribution.player_id
        if contribution.substitute_id:
            label += f" -> {contribution.substitute_id}"
        if contribution.is_captain:
            label += " (C)"
        print(f"  {label}: {contribution.points}")
    if score.vice_captain_used:
        print(f"  Vice-captain bonus: {score.captain_bonus}")


def cmd_import_stats(store: LeagueStore, args) -> None:
    count = import_player_stats(store, args.csv, gameweek=args.gameweek)
    print(f"Imported {count} stat row(s)")


def cmd_import_matches(store: LeagueStore, args) -> None:
    count = import_matches(store, args.csv)
    print(f"Imported {count} match(es)")


def cmd_export(store: LeagueStore, args) -> None:
    output = args.output or f"exports/gameweek_{args.gameweek}.xlsx"
    path = export_gameweek_to_excel(store, args.gameweek, output)
    print(f"Exported to {path}")


def cmd_check(store: LeagueStore, args) -> int:
    positions = store.player_positions()
    problems = validate_gameweek_flags(store.gameweeks())
    for team in store.teams():
        slots = store.roster_for_team(team.fantasy_team_id)
        problems.extend(validate_roster(team.fantasy_team_id, slots, positions))

    if not problems:
        print(f"✓ {len(store.teams())} squad(s) and {len(store.gameweeks())} gameweek(s) look valid")
        return 0

    print(f"❌ {len(problems)} problem(s) found:")
    for problem in problems:
        print(f"  - {problem}")
    return EXIT_ERROR


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fantasy league gameweek administration")
    parser.add_argument(
        "--store", "-s",
        default="data/league.json",
        help="Path to the league store JSON file",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for log files (default: ./logs)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    derive = sub.add_parser("derive", help="Derive gameweek windows from match dates")
    derive.add_argument("--overwrite", action="store_true", help="Replace windows that are already set")
    derive.set_defaults(func=cmd_derive)

    refresh = sub.add_parser("refresh", help="Recompute current/next gameweek and statuses")
    refresh.set_defaults(func=cmd_refresh)

    set_status = sub.add_parser("set-status", help="Override a gameweek's status")
    set_status.add_argument("gameweek", type=int)
    set_status.add_argument("status", choices=["upcoming", "locked", "active", "finalized"])
    set_status.set_defaults(func=cmd_set_status)

    finalize = sub.add_parser("finalize", help="Finalize a gameweek")
    finalize.add_argument("gameweek", type=int)
    finalize.add_argument("--no-bonus", action="store_true", help="Keep existing bonus points")
    finalize.set_defaults(func=cmd_finalize)

    points = sub.add_parser("points", help="Show a team's points for a gameweek")
    points.add_argument("team", help="Fantasy team id")
    points.add_argument("gameweek", type=int)
    points.set_defaults(func=cmd_points)

    stats = sub.add_parser("import-stats", help="Import player stats from CSV")
    stats.add_argument("csv", type=Path)
    stats.add_argument("--gameweek", "-w", type=int, default=None, help="Only import this gameweek's rows")
    stats.set_defaults(func=cmd_import_stats)

    matches = sub.add_parser("import-matches", help="Import matches from CSV")
    matches.add_argument("csv", type=Path)
    matches.set_defaults(func=cmd_import_matches)

    export = sub.add_parser("export", help="Export gameweek standings to Excel")
    export.add_argument("gameweek", type=int)
    export.add_argument("--output", "-o", default=None, help="Output .xlsx path")
    export.set_defaults(func=cmd_export)

    check = sub.add_parser("check", help="Validate squads and gameweek flags")
    check.set_defaults(func=cmd_check)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    log_dir = Path(args.log_dir) if args.log_dir else None
    logger = setup_logging(
        log_dir=log_dir,
        level=level,
        command=args.command,
        console_level=level if args.verbose else logging.WARNING,
    )

    store = LeagueStore.load(args.store)
    try:
        code = args.func(store, args)
    except GameweekNotReadyError as e:
        print(f"❌ {e}")
        return EXIT_NOT_READY
    except ConcurrencyConflict as e:
        print(f"⚠️  {e} (try again)")
        return EXIT_CONFLICT
    except (FantasyLeagueError, ValueError, FileNotFoundError) as e:
        logger.error(str(e))
        print(f"❌ {e}")
        return EXIT_ERROR
    return code or 0


if __name__ == "__main__":
    sys.exit(main())
