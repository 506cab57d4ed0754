"""
Stable Stakes - Deck & Dealing

Builds the fixed 44-card deck (11 horse numbers x 4 suits), shuffles it
and deals it round-robin to the seats still in the day.
"""

import random
from typing import Sequence

from src.engine.base import HORSE_NUMBERS, Card, Suit


class DeckEngine:
    """Stateless deck helpers."""

    DECK_SIZE = len(HORSE_NUMBERS) * len(Suit)

    @classmethod
    def new_deck(cls) -> list[Card]:
        """Return the deck in canonical order (by value, then suit)."""
        return [Card(value=number, suit=suit) for number in HORSE_NUMBERS for suit in Suit]

    @classmethod
    def shuffle(cls, deck: Sequence[Card], rng: random.Random | None = None) -> list[Card]:
        """
        Fisher-Yates shuffle into a new list.

        Args:
            deck: Cards to shuffle (left untouched)
            rng: Random source (module-level random if omitted)

        Returns:
            Uniformly permuted copy of the deck
        """
        rand = rng or random
        cards = list(deck)
        for i in range(len(cards) - 1, 0, -1):
            j = rand.randint(0, i)
            cards[i], cards[j] = cards[j], cards[i]
        return cards

    @classmethod
    def deal(cls, deck: Sequence[Card], n: int) -> list[tuple[Card, ...]]:
        """
        Partition a deck round-robin across n hands.

        Hand i receives deck positions i, i+n, i+2n, ...; when the deck
        size is not a multiple of n the first hands get one extra card.

        Raises:
            ValueError: If n is not positive
        """
        if n <= 0:
            raise ValueError(f"Cannot deal to {n} players.")
        return [tuple(deck[i::n]) for i in range(n)]
