#!/usr/bin/env python3
"""Headless racing day on a virtual clock.

Plays a complete day with the human seat rolling as soon as it may and
every market running its full window, then prints the final standings.
Useful for checking rule changes end to end without a UI.

Usage:
    python -m src.simulate --mode half
    python -m src.simulate --mode full --players 8 --seed 42 --verbose
"""

import argparse
import logging
import random
import sys

from src.config.settings import configure_logging, get_settings
from src.engine.base import DayMode, Phase
from src.realtime.events import EventPayload, GameEvent
from src.realtime.scheduler import ManualScheduler
from src.realtime.session import create_session

logger = logging.getLogger(__name__)

STEP = 0.1


def run_day(
    mode: DayMode,
    players: int | None = None,
    seed: int | None = None,
    verbose: bool = False,
    max_seconds: float = 3600.0,
) -> dict:
    """Play one day to completion.

    Args:
        mode: Half or full day
        players: Seats including the human (settings default when None)
        seed: Seed for the deck, dice and AI choices
        verbose: Print each race result as it happens
        max_seconds: Virtual-time budget before giving up

    Returns:
        Dict with the final snapshot and the virtual time taken
    """
    scheduler = ManualScheduler()
    session = create_session(scheduler=scheduler, rng=random.Random(seed))

    def on_race_finished(payload: EventPayload) -> None:
        if verbose:
            data = payload.data
            print(
                f"Race {data['race_number']}: horse {data['winner_label']} wins, "
                f"pot {data['pot']}{' (unclaimed)' if data['carryover'] else ''}"
            )

    session.events.subscribe(on_race_finished, events=[GameEvent.RACE_FINISHED])
    session.start_session(mode, num_players=players)

    elapsed = 0.0
    while session.phase is not Phase.DAY_COMPLETE:
        if elapsed >= max_seconds:
            raise RuntimeError(f"Day did not finish within {max_seconds} virtual seconds")
        if session.phase is Phase.FINISHED:
            session.advance_to_next_race()
            continue
        if session.can_roll:
            session.roll_dice()
            continue
        scheduler.advance(STEP)
        elapsed += STEP

    logger.info("Simulated %s day in %.1f virtual seconds", mode.value, elapsed)
    return {"snapshot": session.snapshot(), "elapsed": elapsed}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Simulate one Stable Stakes racing day")
    parser.add_argument("--mode", choices=[m.value for m in DayMode], default=DayMode.HALF.value)
    parser.add_argument("--players", type=int, default=None, help="Seats including the human (4-12)")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    configure_logging(get_settings())
    result = run_day(DayMode(args.mode), args.players, args.seed, args.verbose)
    snapshot = result["snapshot"]

    print("\n=== Final Standings ===")
    for row in snapshot.standings:
        status = " (eliminated)" if row.eliminated else ""
        print(f"{row.rank:>3}. {row.name:<10} ${row.balance:.2f}{status}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
