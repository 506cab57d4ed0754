"""
Stable Stakes - Economy Ledger

Money and card accounting between player balances and the shared pot.
Every operation takes the whole seat list and returns a new one, so a
caller either installs the complete result or nothing at all.

Rules:
    - Penalties move money from balances into the pot
    - Payout splits the pot evenly per winning card, or carries it over
      when nobody holds the winner
    - A seat at or below zero gets one bailout per day; at or below zero
      afterwards it is eliminated and loses its cards and balance
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Callable, Sequence

from src.engine.base import Player
from src.engine.validators import validate_amount, validate_pot


@dataclass(frozen=True)
class ChargeResult:
    """
    Outcome of a penalty charge.

    Attributes:
        players: Updated seats
        pot: Updated pot
        charges: Amount taken from each charged seat
    """
    players: tuple[Player, ...]
    pot: Decimal
    charges: dict[int, Decimal] = field(default_factory=dict)

    @property
    def total(self) -> Decimal:
        return sum(self.charges.values(), Decimal(0))


@dataclass(frozen=True)
class PayoutResult:
    """
    Outcome of paying the pot to holders of the winning horse.

    Attributes:
        players: Updated seats
        pot: Pot after payout (0 unless nobody held the winner)
        carryover: True when nobody held a winning card
        per_card: Amount paid per winning card
        payouts: Amount credited to each holder
        winning_cards: Winning cards held by each seat
    """
    players: tuple[Player, ...]
    pot: Decimal
    carryover: bool
    per_card: Decimal = Decimal(0)
    payouts: dict[int, Decimal] = field(default_factory=dict)
    winning_cards: dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True)
class BailoutNotice:
    """One-time bailout granted to a seat."""
    player_id: int
    player_name: str
    amount: Decimal
    is_human: bool


@dataclass(frozen=True)
class SolvencyResult:
    """
    Outcome of a bailout/elimination sweep.

    Attributes:
        players: Updated seats
        bailouts: Bailouts granted during this sweep
        eliminated: Seats eliminated during this sweep
        discarded: Cards taken out of play from eliminated hands
    """
    players: tuple[Player, ...]
    bailouts: tuple[BailoutNotice, ...] = ()
    eliminated: tuple[int, ...] = ()
    discarded: int = 0


class EconomyLedger:
    """
    Stateless ledger operations.

    All methods are class methods operating on immutable seats.
    """

    @classmethod
    def charge_all(
        cls,
        players: Sequence[Player],
        pot: Decimal,
        amount: Decimal,
        match_count: Callable[[Player], int],
    ) -> ChargeResult:
        """
        Charge every active seat amount x its match count.

        Args:
            players: Current seats
            pot: Current pot
            amount: Penalty per match
            match_count: Number of matches for a seat (0 = not charged)

        Returns:
            ChargeResult with balances reduced and the pot increased
        """
        amount = validate_amount(amount)
        validate_pot(pot)

        updated: list[Player] = []
        charges: dict[int, Decimal] = {}
        for player in players:
            matches = match_count(player) if player.is_active else 0
            if matches <= 0 or amount == 0:
                updated.append(player)
                continue
            owed = amount * matches
            charges[player.id] = owed
            updated.append(replace(player, balance=player.balance - owed))

        total = sum(charges.values(), Decimal(0))
        return ChargeResult(players=tuple(updated), pot=pot + total, charges=charges)

    @classmethod
    def charge_one(
        cls,
        players: Sequence[Player],
        pot: Decimal,
        player_id: int,
        amount: Decimal,
    ) -> ChargeResult:
        """Charge a single seat and add the amount to the pot."""
        return cls.charge_all(
            players,
            pot,
            amount,
            lambda p: 1 if p.id == player_id else 0,
        )

    @classmethod
    def forfeit_cards(
        cls,
        players: Sequence[Player],
        value: int,
    ) -> tuple[tuple[Player, ...], int]:
        """
        Remove every card of a horse number from all hands.

        Returns:
            Tuple of (updated seats, number of cards removed)
        """
        removed = 0
        updated: list[Player] = []
        for player in players:
            count = player.count_value(value)
            if count == 0:
                updated.append(player)
                continue
            removed += count
            kept = tuple(card for card in player.cards if card.value != value)
            updated.append(replace(player, cards=kept))
        return tuple(updated), removed

    @classmethod
    def payout(
        cls,
        players: Sequence[Player],
        pot: Decimal,
        winning_value: int,
    ) -> PayoutResult:
        """
        Split the pot evenly across every held card of the winning horse.

        Args:
            players: Current seats
            pot: Pot to distribute
            winning_value: Winning horse number

        Returns:
            PayoutResult; carryover=True leaves seats and pot untouched

        Raises:
            ValueError: If the pot is negative
        """
        validate_pot(pot)

        winning_cards = {
            p.id: p.count_value(winning_value)
            for p in players
            if p.is_active and p.count_value(winning_value) > 0
        }
        total_cards = sum(winning_cards.values())

        if total_cards == 0:
            return PayoutResult(players=tuple(players), pot=pot, carryover=True)

        per_card = pot / total_cards
        payouts = {pid: per_card * count for pid, count in winning_cards.items()}
        updated = tuple(
            replace(p, balance=p.balance + payouts[p.id]) if p.id in payouts else p
            for p in players
        )
        return PayoutResult(
            players=updated,
            pot=Decimal(0),
            carryover=False,
            per_card=per_card,
            payouts=payouts,
            winning_cards=winning_cards,
        )

    @classmethod
    def apply_bailout_and_elimination(
        cls,
        players: Sequence[Player],
        bailout_amount: Decimal,
    ) -> SolvencyResult:
        """
        Resolve non-positive balances.

        A seat at or below zero that has not used its bailout receives
        bailout_amount. A seat still at or below zero afterwards is
        eliminated: balance and cards go to zero.

        Args:
            players: Current seats
            bailout_amount: 100 for a half day, 200 for a full day

        Returns:
            SolvencyResult with bailouts and eliminations of this sweep
        """
        bailout_amount = validate_amount(bailout_amount, allow_zero=False)

        updated: list[Player] = []
        bailouts: list[BailoutNotice] = []
        eliminated: list[int] = []
        discarded = 0

        for player in players:
            if player.eliminated or player.balance > 0:
                updated.append(player)
                continue

            if not player.bailout_used:
                player = replace(
                    player,
                    balance=player.balance + bailout_amount,
                    bailout_used=True,
                )
                bailouts.append(BailoutNotice(
                    player_id=player.id,
                    player_name=player.name,
                    amount=bailout_amount,
                    is_human=player.is_human,
                ))

            if player.balance <= 0:
                discarded += len(player.cards)
                eliminated.append(player.id)
                player = replace(player, balance=Decimal(0), cards=(), eliminated=True)

            updated.append(player)

        return SolvencyResult(
            players=tuple(updated),
            bailouts=tuple(bailouts),
            eliminated=tuple(eliminated),
            discarded=discarded,
        )

    @classmethod
    def transfer(
        cls,
        players: Sequence[Player],
        from_id: int,
        to_id: int,
        amount: Decimal,
    ) -> tuple[Player, ...]:
        """Move money between two seats; the pot is not involved."""
        amount = validate_amount(amount)
        updated = []
        for p in players:
            if p.id == from_id:
                p = replace(p, balance=p.balance - amount)
            elif p.id == to_id:
                p = replace(p, balance=p.balance + amount)
            updated.append(p)
        return tuple(updated)
