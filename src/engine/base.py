"""
Stable Stakes - Game Engine Base Classes

This module defines the foundational data structures, enums and rule
constants used throughout the game engine. Value objects are immutable
(frozen dataclasses); engines return updated copies instead of mutating.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Sequence


HORSE_NUMBERS: tuple[int, ...] = tuple(range(2, 13))

# Peg holes per lane, symmetric around 7
PEG_COUNTS: dict[int, int] = {
    2: 2, 3: 3, 4: 4, 5: 5, 6: 6, 7: 7, 8: 6, 9: 5, 10: 4, 11: 3, 12: 2,
}

HORSE_LABELS: dict[int, str] = {
    **{n: str(n) for n in range(2, 11)},
    11: "Jack",
    12: "Queen",
}

SCRATCH_PENALTIES: dict[int, Decimal] = {
    1: Decimal(5),
    2: Decimal(10),
    3: Decimal(15),
    4: Decimal(20),
}
SCRATCHES_PER_RACE = 4

# Advances beyond the last peg needed to win (0 = landing on the last peg wins)
FINISH_EXTRA_ADVANCE = 0

HUMAN_PLAYER_ID = 1
STARTING_BALANCE = Decimal(150)
MIN_PLAYERS = 4
MAX_PLAYERS = 12

# Market rules
MARKET_PRICE = Decimal(30)
MARKET_BUY_CAP = 2
MARKET_SELL_CAP = 2
AI_DOUBLE_LISTING_CHANCE = 0.35
AI_PURCHASE_SKIP_CHANCE = 0.65
AI_PURCHASE_JITTER = (1.0, 4.5)

# Timing (seconds); sequencing only, not gameplay rules
MARKET_DURATION = 35.0
MARKET_OPEN_DELAY = 1.5
AI_PURCHASE_INITIAL_DELAY = 13.5
RESULTS_DELAY = 1.5
ROLL_LOCK = 0.8
AI_ROLL_DELAY = 0.8
AI_ROLL_DELAY_AFTER_HUMAN = 1.5


class Suit(Enum):
    """Card suits."""
    SPADES = "♠"
    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"


class DayMode(Enum):
    """Length of a racing day."""
    HALF = "half"
    FULL = "full"

    @property
    def total_races(self) -> int:
        return 4 if self is DayMode.HALF else 8

    @property
    def bailout_amount(self) -> Decimal:
        return Decimal(100) if self is DayMode.HALF else Decimal(200)


class Phase(Enum):
    """Session phases."""
    NOT_STARTED = "not_started"
    SCRATCH = "scratch"
    TRADE = "trade"
    RACE = "race"
    FINISHED = "finished"
    DAY_COMPLETE = "day_complete"


def peg_count(number: int) -> int:
    """Peg holes in a horse's lane."""
    if number not in PEG_COUNTS:
        raise ValueError(f"No horse numbered {number}. Must be between 2 and 12.")
    return PEG_COUNTS[number]


def finish_threshold(number: int) -> int:
    """Advances a horse needs to win."""
    return peg_count(number) + FINISH_EXTRA_ADVANCE


def scratch_penalty(step: int | None) -> Decimal:
    """Penalty for a scratch step; undefined steps charge nothing."""
    if step is None:
        return Decimal(0)
    return SCRATCH_PENALTIES.get(step, Decimal(0))


def horse_label(number: int) -> str:
    if number not in HORSE_LABELS:
        raise ValueError(f"No horse numbered {number}. Must be between 2 and 12.")
    return HORSE_LABELS[number]


@dataclass(frozen=True)
class Card:
    """
    A playing card tied to a horse number.

    Attributes:
        value: Horse number (2-12)
        suit: One of the four suits
    """
    value: int
    suit: Suit

    def __post_init__(self) -> None:
        if self.value not in PEG_COUNTS:
            raise ValueError(f"Invalid card value {self.value}. Must be between 2 and 12.")

    @property
    def label(self) -> str:
        return HORSE_LABELS[self.value]

    def __str__(self) -> str:
        return f"{self.label}{self.suit.value}"


@dataclass(frozen=True)
class DiceRoll:
    """
    Immutable pair of six-sided dice.

    Attributes:
        die1: First die (1-6)
        die2: Second die (1-6)
    """
    die1: int
    die2: int

    def __post_init__(self) -> None:
        for value in (self.die1, self.die2):
            if not (1 <= value <= 6):
                raise ValueError(f"Invalid die value {value}. Must be between 1 and 6.")

    @property
    def total(self) -> int:
        return self.die1 + self.die2

    @classmethod
    def from_sequence(cls, values: Sequence[int]) -> "DiceRoll":
        """Create a DiceRoll from any two-item sequence."""
        if len(values) != 2:
            raise ValueError(f"Exactly 2 dice required, got {len(values)}.")
        return cls(die1=values[0], die2=values[1])


@dataclass(frozen=True)
class Horse:
    """
    A horse's progress within a race.

    Attributes:
        number: Horse number (2-12)
        position: Peg advances so far
        scratched: Whether the horse was scratched this race
        scratch_step: Order in which it was scratched (1-4)
    """
    number: int
    position: int = 0
    scratched: bool = False
    scratch_step: int | None = None

    def __post_init__(self) -> None:
        if self.number not in PEG_COUNTS:
            raise ValueError(f"Invalid horse number {self.number}. Must be between 2 and 12.")
        if self.position < 0:
            raise ValueError(f"Horse position cannot be negative, got {self.position}.")

    @property
    def threshold(self) -> int:
        return finish_threshold(self.number)

    @property
    def has_finished(self) -> bool:
        return self.position >= self.threshold


@dataclass(frozen=True)
class Player:
    """
    A seat at the table.

    Attributes:
        id: Seat number (1 is the human)
        name: Display name
        balance: Current money; may be negative until bailout resolves
        cards: Cards in hand
        eliminated: Out for the rest of the day
        bailout_used: Whether the one bailout per day is spent
    """
    id: int
    name: str
    balance: Decimal = STARTING_BALANCE
    cards: tuple[Card, ...] = field(default_factory=tuple)
    eliminated: bool = False
    bailout_used: bool = False

    @property
    def is_human(self) -> bool:
        return self.id == HUMAN_PLAYER_ID

    @property
    def is_active(self) -> bool:
        return not self.eliminated

    def count_value(self, value: int) -> int:
        """Number of held cards for a horse number."""
        return sum(1 for card in self.cards if card.value == value)


@dataclass(frozen=True)
class Listing:
    """A card withdrawn from a hand and offered on the market."""
    id: int
    card: Card
    seller_id: int


@dataclass(frozen=True)
class DayConfig:
    """
    Configuration for a racing day.

    Attributes:
        mode: Half day (4 races) or full day (8 races)
        num_players: Seats at the table including the human (4-12)
    """
    mode: DayMode
    num_players: int = 6

    def __post_init__(self) -> None:
        if not MIN_PLAYERS <= self.num_players <= MAX_PLAYERS:
            raise ValueError(
                f"Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}."
            )

    @property
    def total_races(self) -> int:
        return self.mode.total_races

    @property
    def bailout_amount(self) -> Decimal:
        return self.mode.bailout_amount
