"""
Stable Stakes - Race Engine

Roll resolution for one race. The dice total picks a horse (2-12).

Scratch phase:
    - Unscratched horse: scratched with the next step (1-4); every seat
      pays the step penalty per card of that number and forfeits them
    - Already scratched: the roller alone pays that horse's step penalty

Race phase:
    - Scratched horse: the roller pays its step penalty
    - Live horse: advances one peg; reaching the finish threshold wins
      and the pot is paid out to holders of that number

All methods are stateless class methods operating on immutable data.
"""

import random
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Callable, ClassVar, Sequence

from src.engine.base import (
    HORSE_NUMBERS,
    SCRATCH_PENALTIES,
    SCRATCHES_PER_RACE,
    Card,
    DiceRoll,
    Horse,
    Phase,
    Player,
    scratch_penalty,
)
from src.engine.deck import DeckEngine
from src.engine.ledger import EconomyLedger, PayoutResult, SolvencyResult
from src.engine.validators import validate_horse_number


class RollKind(Enum):
    """What a roll did."""
    SCRATCHED = "scratched"
    SCRATCH_PENALTY = "scratch_penalty"
    ADVANCED = "advanced"
    WON = "won"


@dataclass(frozen=True)
class RaceState:
    """
    Complete state of one race.

    Attributes:
        horses: Horses 2-12 in number order
        players: Seats with this race's hands
        pot: Shared pot
        scratch_history: Scratched horse numbers in scratch order
        forfeited: Cards removed by scratches
        discarded: Cards removed from eliminated hands
        winner: Winning horse number once finished
    """
    horses: tuple[Horse, ...]
    players: tuple[Player, ...]
    pot: Decimal = Decimal(0)
    scratch_history: tuple[int, ...] = field(default_factory=tuple)
    forfeited: int = 0
    discarded: int = 0
    winner: int | None = None

    def horse(self, number: int) -> Horse:
        validate_horse_number(number)
        return self.horses[number - HORSE_NUMBERS[0]]

    @property
    def scratches_complete(self) -> bool:
        return len(self.scratch_history) >= SCRATCHES_PER_RACE

    @property
    def cards_in_hands(self) -> int:
        return sum(len(p.cards) for p in self.players)


@dataclass(frozen=True)
class RollOutcome:
    """
    Result of resolving one roll.

    Attributes:
        state: Race state after the roll
        roll: The dice
        roller_id: Seat that rolled
        kind: What happened
        horse: Horse number selected by the dice
        penalty: Step penalty involved (per card for a scratch)
        charges: Money taken from each seat
        forfeited: Cards forfeited by this roll
        payout: Payout result when the roll won the race
        solvency: Bailouts and eliminations caused by the roll
    """
    state: RaceState
    roll: DiceRoll
    roller_id: int
    kind: RollKind
    horse: int
    penalty: Decimal = Decimal(0)
    charges: dict[int, Decimal] = field(default_factory=dict)
    forfeited: int = 0
    payout: PayoutResult | None = None
    solvency: SolvencyResult | None = None

    @property
    def finished(self) -> bool:
        return self.kind is RollKind.WON


class RaceEngine:
    """
    Stateless engine for scratch and race rolls.

    State is passed in and returned, never stored.
    """

    NUM_DICE = 2
    PENALTIES: ClassVar[dict[int, Decimal]] = SCRATCH_PENALTIES

    @classmethod
    def roll_dice(cls, rng: random.Random | None = None) -> DiceRoll:
        """Roll two D6."""
        rand = rng or random
        return DiceRoll(die1=rand.randint(1, 6), die2=rand.randint(1, 6))

    @classmethod
    def initial_horses(cls) -> tuple[Horse, ...]:
        return tuple(Horse(number=n) for n in HORSE_NUMBERS)

    @classmethod
    def start_race(
        cls,
        players: Sequence[Player],
        deck: Sequence[Card],
        pot: Decimal = Decimal(0),
    ) -> RaceState:
        """
        Reset the horses and deal a shuffled deck to the active seats.

        Eliminated seats receive nothing and do not count toward the
        round-robin.
        """
        active = [p for p in players if p.is_active]
        hands = DeckEngine.deal(deck, len(active)) if active else []
        hand_by_id = {p.id: hand for p, hand in zip(active, hands)}
        dealt = tuple(replace(p, cards=hand_by_id.get(p.id, ())) for p in players)
        return RaceState(horses=cls.initial_horses(), players=dealt, pot=pot)

    @classmethod
    def resolve_roll(
        cls,
        state: RaceState,
        phase: Phase,
        roller_id: int,
        roll: DiceRoll,
        bailout_amount: Decimal,
    ) -> RollOutcome:
        """
        Resolve a roll for the current phase.

        Raises:
            ValueError: If the phase does not accept rolls
        """
        handler = _ROLL_HANDLERS.get(phase)
        if handler is None:
            raise ValueError(f"Phase {phase.name} does not accept rolls.")
        return handler(state, roller_id, roll, bailout_amount)

    @classmethod
    def _penalize_roller(
        cls,
        state: RaceState,
        roller_id: int,
        roll: DiceRoll,
        horse: Horse,
        bailout_amount: Decimal,
    ) -> RollOutcome:
        penalty = scratch_penalty(horse.scratch_step)
        charged = EconomyLedger.charge_one(state.players, state.pot, roller_id, penalty)
        solvency = EconomyLedger.apply_bailout_and_elimination(charged.players, bailout_amount)
        new_state = replace(
            state,
            players=solvency.players,
            pot=charged.pot,
            discarded=state.discarded + solvency.discarded,
        )
        return RollOutcome(
            state=new_state,
            roll=roll,
            roller_id=roller_id,
            kind=RollKind.SCRATCH_PENALTY,
            horse=horse.number,
            penalty=penalty,
            charges=charged.charges,
            solvency=solvency,
        )

    @classmethod
    def _resolve_scratch(
        cls,
        state: RaceState,
        roller_id: int,
        roll: DiceRoll,
        bailout_amount: Decimal,
    ) -> RollOutcome:
        horse = state.horse(roll.total)
        if horse.scratched:
            return cls._penalize_roller(state, roller_id, roll, horse, bailout_amount)

        step = len(state.scratch_history) + 1
        if step not in cls.PENALTIES:
            raise ValueError(f"No scratch penalty defined for step {step}.")
        penalty = cls.PENALTIES[step]

        charged = EconomyLedger.charge_all(
            state.players, state.pot, penalty, lambda p: p.count_value(horse.number)
        )
        players, forfeited = EconomyLedger.forfeit_cards(charged.players, horse.number)
        solvency = EconomyLedger.apply_bailout_and_elimination(players, bailout_amount)

        horses = tuple(
            replace(h, scratched=True, scratch_step=step) if h.number == horse.number else h
            for h in state.horses
        )
        new_state = replace(
            state,
            horses=horses,
            players=solvency.players,
            pot=charged.pot,
            scratch_history=state.scratch_history + (horse.number,),
            forfeited=state.forfeited + forfeited,
            discarded=state.discarded + solvency.discarded,
        )
        return RollOutcome(
            state=new_state,
            roll=roll,
            roller_id=roller_id,
            kind=RollKind.SCRATCHED,
            horse=horse.number,
            penalty=penalty,
            charges=charged.charges,
            forfeited=forfeited,
            solvency=solvency,
        )

    @classmethod
    def _resolve_race(
        cls,
        state: RaceState,
        roller_id: int,
        roll: DiceRoll,
        bailout_amount: Decimal,
    ) -> RollOutcome:
        horse = state.horse(roll.total)
        if horse.scratched:
            return cls._penalize_roller(state, roller_id, roll, horse, bailout_amount)

        moved = replace(horse, position=min(horse.threshold, horse.position + 1))
        horses = tuple(moved if h.number == moved.number else h for h in state.horses)
        new_state = replace(state, horses=horses)

        if not moved.has_finished:
            return RollOutcome(
                state=new_state,
                roll=roll,
                roller_id=roller_id,
                kind=RollKind.ADVANCED,
                horse=moved.number,
            )

        payout = EconomyLedger.payout(new_state.players, new_state.pot, moved.number)
        solvency = EconomyLedger.apply_bailout_and_elimination(payout.players, bailout_amount)
        new_state = replace(
            new_state,
            players=solvency.players,
            pot=payout.pot,
            winner=moved.number,
            discarded=new_state.discarded + solvency.discarded,
        )
        return RollOutcome(
            state=new_state,
            roll=roll,
            roller_id=roller_id,
            kind=RollKind.WON,
            horse=moved.number,
            payout=payout,
            solvency=solvency,
        )


# Phase dispatch; phases without an entry do not accept rolls
_ROLL_HANDLERS: dict[Phase, Callable[..., RollOutcome]] = {
    Phase.SCRATCH: RaceEngine._resolve_scratch,
    Phase.RACE: RaceEngine._resolve_race,
}
