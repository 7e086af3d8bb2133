"""Run a battle from the command line.

Usage:
    transformer-battle --autobot "Optimus Prime" --decepticon Megatron
    transformer-battle --base-url http://localhost:5173 --delay 0 --seed 7
    transformer-battle --list
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from transformer_battle.battle.models import RoundSnapshot
from transformer_battle.config import BattleSettings
from transformer_battle.content.loader import fetch_rosters, load_bundled_rosters
from transformer_battle.errors import StalemateError, UnknownCombatantError
from transformer_battle.render import format_combatant, format_results, format_roster
from transformer_battle.session import BattleSession
from transformer_battle.store.roster import RosterStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="transformer-battle",
        description="Simulate a battle between an Autobot and a Decepticon",
    )
    parser.add_argument("--autobot", help="Autobot id or name (default: first in roster)")
    parser.add_argument("--decepticon", help="Decepticon id or name (default: first in roster)")
    parser.add_argument("--base-url", help="Fetch rosters from this origin instead of the bundled data")
    parser.add_argument("--data-dir", type=Path, help="Directory holding autobots.json and decepticons.json")
    parser.add_argument("--seed", type=int, help="RNG seed for a reproducible battle")
    parser.add_argument("--delay", type=float, help="Seconds between rounds")
    parser.add_argument("--max-rounds", type=int, help="Give up after this many rounds")
    parser.add_argument("--list", action="store_true", help="List both rosters and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def load_settings(args: argparse.Namespace) -> BattleSettings:
    overrides = {
        "base_url": args.base_url,
        "seed": args.seed,
        "round_delay": args.delay,
        "max_rounds": args.max_rounds,
    }
    updates = {k: v for k, v in overrides.items() if v is not None}
    return BattleSettings(**updates)


def load_roster(args: argparse.Namespace, settings: BattleSettings) -> RosterStore:
    if args.base_url:
        return fetch_rosters(settings.base_url, timeout=settings.request_timeout)
    return load_bundled_rosters(args.data_dir)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        print(f"error: invalid setting {field}: {error['msg']}", file=sys.stderr)
        return 2

    roster = load_roster(args, settings)
    logger.info("Loaded %d Autobots and %d Decepticons", len(roster.autobots), len(roster.decepticons))

    if args.list:
        print("Autobots:")
        print(format_roster(roster.autobots))
        print("Decepticons:")
        print(format_roster(roster.decepticons))
        return 0

    if not roster.autobots or not roster.decepticons:
        print("error: both rosters need at least one combatant", file=sys.stderr)
        return 2

    session = BattleSession(roster, settings=settings)
    try:
        session.select(args.autobot or roster.autobots[0].id)
        session.select(args.decepticon or roster.decepticons[0].id)
    except UnknownCombatantError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print(f"Autobot:    {format_combatant(session.autobot)}")
    print(f"Decepticon: {format_combatant(session.decepticon)}")
    print()

    printed = 0

    def show(snapshot: RoundSnapshot) -> None:
        nonlocal printed
        for line in snapshot.logs[printed:]:
            print(line)
        printed = len(snapshot.logs)

    try:
        asyncio.run(session.start(on_round=show))
    except StalemateError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print()
    print("Results:")
    print(format_results(session.recorder.results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
