"""Command line entry point: manage profiles and take snapshots."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from .app import LootHoundApp
from .cache import queries
from .errors import PersistenceError, TransportError, ValidationError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="loothound", description="Stash snapshot tracker")
    parser.add_argument("--config-dir", type=Path, default=None, help="Directory holding settings.yaml")
    parser.add_argument("--db", default=None, help="Override the snapshot database path")

    commands = parser.add_subparsers(dest="command", required=True)

    profiles = commands.add_parser("profiles", help="Manage profiles")
    profile_commands = profiles.add_subparsers(dest="profiles_command", required=True)
    profile_commands.add_parser("list", help="List profiles")
    add = profile_commands.add_parser("add", help="Create a profile")
    add.add_argument("name")
    add.add_argument("--stash", action="append", default=[], help="Stash tab id to track (repeatable)")
    add.add_argument("--league", default=None)

    snapshot = commands.add_parser("snapshot", help="Take a snapshot of a profile")
    snapshot.add_argument("profile_id", type=int)

    stats = commands.add_parser("stats", help="Show snapshot statistics for a profile")
    stats.add_argument("profile_id", type=int)
    stats.add_argument("--total", type=float, default=0.0, help="Net worth to display")

    return parser


async def run(args: argparse.Namespace) -> int:
    overrides = {"storage": {"db_path": args.db}} if args.db else None
    app = LootHoundApp.from_config_dir(args.config_dir, overrides)

    async with app:
        session = app.session

        if args.command == "profiles" and args.profiles_command == "list":
            for profile in await session.profiles():
                print(f"{profile.id}\t{profile.name}\t{','.join(profile.stashes)}")

        elif args.command == "profiles" and args.profiles_command == "add":
            payload = {"name": args.name, "stashes": args.stash, "league": args.league}
            profile_id = await queries.add_profile(app.cache, app.gateway, payload)
            print(profile_id)

        elif args.command == "snapshot":
            await session.select_profile(args.profile_id)
            result = await session.take_snapshot()
            print(f"snapshot {result.snapshot_id}: {len(result.items)} items")
            for failure in result.failures:
                print(f"failed stash {failure.container_id}: {failure.error}", file=sys.stderr)
            if not result.ok:
                return 2

        elif args.command == "stats":
            await session.select_profile(args.profile_id)
            for card in await session.stats(args.total):
                trend = "" if card.diff is None else f"\t{card.diff}% {card.trend.value}"
                print(f"{card.title}\t{card.value}{trend}")

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except (ValidationError, PersistenceError, TransportError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
