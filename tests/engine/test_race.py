"""
Stable Stakes - Race Engine Tests

Scratch and race roll resolution, win detection and payout.
"""

import random
from dataclasses import replace
from decimal import Decimal

import pytest
from src.engine.base import DiceRoll, Phase, Suit
from src.engine.deck import DeckEngine
from src.engine.race import RaceEngine, RaceState, RollKind
from tests.helpers import card, dice_for, make_player

BAILOUT = Decimal(100)


def _state(players=None, **kwargs) -> RaceState:
    if players is None:
        players = (
            make_player(1, cards=[card(7), card(7, Suit.HEARTS), card(5)]),
            make_player(2, cards=[card(7, Suit.CLUBS), card(9)]),
            make_player(3, cards=[card(3)]),
        )
    return RaceState(horses=RaceEngine.initial_horses(), players=tuple(players), **kwargs)


def _scratch(state, total, roller=1):
    return RaceEngine.resolve_roll(state, Phase.SCRATCH, roller, dice_for(total), BAILOUT)


def _race(state, total, roller=1):
    return RaceEngine.resolve_roll(state, Phase.RACE, roller, dice_for(total), BAILOUT)


class TestRollDice:
    def test_two_dice_in_range(self):
        rng = random.Random(5)
        for _ in range(200):
            roll = RaceEngine.roll_dice(rng)
            assert isinstance(roll, DiceRoll)
            assert 2 <= roll.total <= 12

    def test_all_totals_appear(self):
        rng = random.Random(11)
        totals = {RaceEngine.roll_dice(rng).total for _ in range(2000)}
        assert totals == set(range(2, 13))


class TestStartRace:
    def test_deals_only_to_active(self):
        players = (
            make_player(1),
            make_player(2, balance=0, eliminated=True),
            make_player(3),
            make_player(4),
            make_player(5),
        )
        state = RaceEngine.start_race(players, DeckEngine.new_deck())
        assert state.players[1].cards == ()
        assert [len(p.cards) for p in state.players if p.is_active] == [11, 11, 11, 11]
        assert state.cards_in_hands == 44

    def test_resets_horses(self):
        state = RaceEngine.start_race((make_player(1),), DeckEngine.new_deck(), pot=Decimal(12))
        assert all(h.position == 0 and not h.scratched for h in state.horses)
        assert state.pot == Decimal(12)
        assert state.scratch_history == ()


class TestScratchPhase:
    def test_first_scratch_charges_holders(self):
        outcome = _scratch(_state(), 7)
        assert outcome.kind is RollKind.SCRATCHED
        assert outcome.penalty == Decimal(5)
        players = outcome.state.players
        assert players[0].balance == Decimal(140)
        assert players[1].balance == Decimal(145)
        assert players[2].balance == Decimal(150)
        assert outcome.state.pot == Decimal(15)

    def test_scratched_cards_forfeited(self):
        outcome = _scratch(_state(), 7)
        assert outcome.forfeited == 3
        assert all(p.count_value(7) == 0 for p in outcome.state.players)
        assert outcome.state.forfeited == 3

    def test_horse_marked_with_step(self):
        outcome = _scratch(_state(), 7)
        horse = outcome.state.horse(7)
        assert horse.scratched
        assert horse.scratch_step == 1
        assert outcome.state.scratch_history == (7,)

    def test_steps_follow_roll_order(self):
        state = _state()
        for total in (9, 3, 12, 5):
            state = _scratch(state, total).state
        steps = {n: state.horse(n).scratch_step for n in (9, 3, 12, 5)}
        assert steps == {9: 1, 3: 2, 12: 3, 5: 4}
        assert state.scratches_complete

    def test_rising_penalty(self):
        state = _scratch(_state(), 2).state
        outcome = _scratch(state, 9)
        assert outcome.penalty == Decimal(10)
        assert outcome.state.players[1].balance == Decimal(140)

    def test_repeat_scratched_horse_charges_roller_only(self):
        state = _scratch(_state(), 9).state
        state = _scratch(state, 4).state
        outcome = _scratch(state, 9, roller=3)
        assert outcome.kind is RollKind.SCRATCH_PENALTY
        assert outcome.penalty == Decimal(5)
        assert outcome.charges == {3: Decimal(5)}
        assert outcome.state.scratch_history == (9, 4)
        assert outcome.state.pot == state.pot + Decimal(5)

    def test_scratch_bailout(self):
        players = (make_player(1, balance=5, cards=[card(7), card(7, Suit.HEARTS)]),)
        outcome = _scratch(_state(players), 7)
        p = outcome.state.players[0]
        assert p.balance == Decimal(95)
        assert p.bailout_used
        assert outcome.solvency.bailouts[0].player_id == 1

    def test_scratch_elimination_discards_hand(self):
        players = (
            make_player(2, balance=5, cards=[card(7), card(8)], bailout_used=True),
            make_player(3),
        )
        outcome = _scratch(_state(players), 7)
        p = outcome.state.players[0]
        assert p.eliminated
        assert p.cards == ()
        assert outcome.state.discarded == 1
        assert outcome.state.forfeited == 1

    def test_race_phase_rejects_finished(self):
        with pytest.raises(ValueError, match="does not accept rolls"):
            RaceEngine.resolve_roll(_state(), Phase.FINISHED, 1, dice_for(7), BAILOUT)


class TestRacePhase:
    def test_live_horse_advances(self):
        outcome = _race(_state(), 6)
        assert outcome.kind is RollKind.ADVANCED
        assert outcome.state.horse(6).position == 1

    def test_scratched_horse_penalizes_roller(self):
        state = _state()
        for total in (2, 3, 4, 5):
            state = _scratch(state, total).state
        outcome = _race(state, 4, roller=2)
        assert outcome.kind is RollKind.SCRATCH_PENALTY
        assert outcome.penalty == Decimal(15)
        assert outcome.state.horse(4).position == 0
        assert outcome.state.players[1].balance == Decimal(135)

    def test_seven_needs_seven_advances(self):
        state = _state(pot=Decimal(60))
        for _ in range(6):
            outcome = _race(state, 7)
            assert outcome.kind is RollKind.ADVANCED
            state = outcome.state
        outcome = _race(state, 7)
        assert outcome.kind is RollKind.WON
        assert outcome.state.winner == 7
        assert outcome.state.horse(7).position == 7

    def test_win_pays_out_per_card(self):
        state = _state(pot=Decimal(60))
        state = replace(state, horses=tuple(
            replace(h, position=6) if h.number == 7 else h for h in state.horses
        ))
        outcome = _race(state, 7)
        assert outcome.finished
        assert outcome.payout.per_card == Decimal(20)
        assert outcome.state.pot == 0
        assert outcome.state.players[0].balance == Decimal(190)
        assert outcome.state.players[1].balance == Decimal(170)
        assert outcome.state.players[2].balance == Decimal(150)

    def test_win_without_holders_carries_over(self):
        state = _state(pot=Decimal(25))
        for _ in range(2):
            outcome = _race(state, 12)
            state = outcome.state
        assert outcome.finished
        assert outcome.payout.carryover
        assert outcome.state.pot == Decimal(25)

    def test_two_peg_horse(self):
        state = _race(_state(), 2).state
        assert _race(state, 2).finished

    def test_pot_never_negative(self):
        state = _state()
        for total in (2, 3, 4, 5):
            state = _scratch(state, total).state
            assert state.pot >= 0
        for total in (6, 7, 8, 2, 3, 9):
            state = _race(state, total).state
            assert state.pot >= 0
