"""
Stable Stakes - Actor Policy Tests
"""

import random

from src.engine.policy import RandomPolicy
from tests.helpers import card


class TestRandomPolicy:
    def test_never_lists_last_card(self):
        policy = RandomPolicy(random.Random(1))
        assert policy.choose_listings([card(5)]) == []
        for _ in range(100):
            assert len(policy.choose_listings([card(5), card(6)])) == 1

    def test_lists_one_or_two(self):
        policy = RandomPolicy(random.Random(2))
        hand = [card(n) for n in range(2, 9)]
        counts = [len(policy.choose_listings(hand)) for _ in range(2000)]
        assert set(counts) == {1, 2}
        share = counts.count(2) / len(counts)
        assert 0.30 < share < 0.40

    def test_listed_cards_come_from_hand(self):
        policy = RandomPolicy(random.Random(3))
        hand = [card(n) for n in range(2, 6)]
        for _ in range(50):
            assert set(policy.choose_listings(hand)) <= set(hand)

    def test_skip_rate(self):
        policy = RandomPolicy(random.Random(4))
        skips = sum(policy.skip_purchase_tick() for _ in range(4000))
        assert 0.60 < skips / 4000 < 0.70

    def test_purchase_interval_in_jitter_range(self):
        policy = RandomPolicy(random.Random(5))
        for _ in range(200):
            assert 1.0 <= policy.purchase_interval() <= 4.5
