"""
Stable Stakes - Actor Policy

Decision-making for AI seats during the market. The session asks the
policy every time a choice involves chance, so tests can swap in a
deterministic policy without touching the rules.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Sequence

from src.engine.base import (
    AI_DOUBLE_LISTING_CHANCE,
    AI_PURCHASE_JITTER,
    AI_PURCHASE_SKIP_CHANCE,
    Card,
    Listing,
    Player,
)


class ActorPolicy(ABC):
    """
    Abstract base class for AI market behaviour.

    Implementations pick which cards to list, whether to buy on a
    market tick, who buys, and what they buy.
    """

    @abstractmethod
    def choose_listings(self, hand: Sequence[Card]) -> list[Card]:
        """
        Pick cards to list when the market opens.

        Args:
            hand: The seat's current hand (more than one card)

        Returns:
            Cards to list; at least one card must stay in hand
        """

    @abstractmethod
    def skip_purchase_tick(self) -> bool:
        """Whether this market tick makes no purchase attempt."""

    @abstractmethod
    def choose_buyer(self, candidates: Sequence[Player]) -> Player:
        """Pick the buying seat among eligible AI seats."""

    @abstractmethod
    def choose_listing(self, listings: Sequence[Listing]) -> Listing:
        """Pick the listing to buy among eligible listings."""

    @abstractmethod
    def purchase_interval(self) -> float:
        """Seconds until the next purchase tick."""


class RandomPolicy(ActorPolicy):
    """Uniformly random choices with the table's fixed probabilities."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def choose_listings(self, hand: Sequence[Card]) -> list[Card]:
        if len(hand) <= 1:
            return []
        count = 2 if self._rng.random() < AI_DOUBLE_LISTING_CHANCE else 1
        count = min(count, len(hand) - 1)
        return self._rng.sample(list(hand), count)

    def skip_purchase_tick(self) -> bool:
        return self._rng.random() < AI_PURCHASE_SKIP_CHANCE

    def choose_buyer(self, candidates: Sequence[Player]) -> Player:
        return self._rng.choice(list(candidates))

    def choose_listing(self, listings: Sequence[Listing]) -> Listing:
        return self._rng.choice(list(listings))

    def purchase_interval(self) -> float:
        low, high = AI_PURCHASE_JITTER
        return self._rng.uniform(low, high)
