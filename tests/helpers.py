"""
Stable Stakes - Test Helpers

Deterministic doubles and builders shared by test modules.
"""

import random
from decimal import Decimal
from typing import Sequence

from src.engine.base import Card, DiceRoll, Listing, Player, Suit
from src.engine.policy import ActorPolicy
from src.realtime.scheduler import ManualScheduler
from src.realtime.session import GameSession


def dice_for(total: int) -> DiceRoll:
    """A pair of dice showing the given total (2-12)."""
    die1 = min(6, total - 1)
    return DiceRoll(die1=die1, die2=total - die1)


class ScriptedDice:
    """Returns dice totals from a script; repeats the last total when exhausted."""

    def __init__(self, totals: Sequence[int]) -> None:
        self.totals = list(totals)
        self.rolled: list[int] = []

    def __call__(self) -> DiceRoll:
        index = min(len(self.rolled), len(self.totals) - 1)
        total = self.totals[index]
        self.rolled.append(total)
        return dice_for(total)


class ScriptedPolicy(ActorPolicy):
    """Deterministic AI policy: fixed listing count, always first choice."""

    def __init__(self, listings_per_seat: int = 0, buy: bool = False, interval: float = 1.0) -> None:
        self.listings_per_seat = listings_per_seat
        self.buy = buy
        self.interval = interval

    def choose_listings(self, hand: Sequence[Card]) -> list[Card]:
        return list(hand[:self.listings_per_seat])

    def skip_purchase_tick(self) -> bool:
        return not self.buy

    def choose_buyer(self, candidates: Sequence[Player]) -> Player:
        return candidates[0]

    def choose_listing(self, listings: Sequence[Listing]) -> Listing:
        return listings[0]

    def purchase_interval(self) -> float:
        return self.interval


def make_player(
    player_id: int,
    balance: int | str | Decimal = 150,
    cards: Sequence[Card] = (),
    **kwargs,
) -> Player:
    """Build a seat with sensible defaults."""
    return Player(
        id=player_id,
        name=f"Player {player_id}",
        balance=Decimal(balance),
        cards=tuple(cards),
        **kwargs,
    )


def card(value: int, suit: Suit = Suit.SPADES) -> Card:
    return Card(value=value, suit=suit)


def make_session(
    scheduler: ManualScheduler,
    totals: Sequence[int],
    policy: ActorPolicy | None = None,
    **kwargs,
) -> tuple[GameSession, ScriptedDice]:
    """Session with a virtual clock, scripted dice and a seeded deck."""
    dice = ScriptedDice(totals)
    session = GameSession(
        scheduler=scheduler,
        policy=policy or ScriptedPolicy(),
        rng=random.Random(1234),
        dice=dice,
        **kwargs,
    )
    return session, dice


def drive(
    session: GameSession,
    scheduler: ManualScheduler,
    until,
    max_seconds: float = 600.0,
    human_rolls: bool = True,
) -> bool:
    """Step the virtual clock, rolling for the human whenever allowed."""
    elapsed = 0.0
    while not until():
        if elapsed >= max_seconds:
            return False
        if human_rolls and session.can_roll:
            session.roll_dice()
            continue
        scheduler.advance(0.1)
        elapsed += 0.1
    return True
