"""
Stable Stakes - Game Session

Owns one racing day and coordinates it: phase transitions, turn order,
the human/AI roll scheduler, the market window and day-end standings.

Phases per race:
    SCRATCH -> TRADE (market) -> RACE -> FINISHED -> SCRATCH (next race)
                                                  -> DAY_COMPLETE

Every mutation runs under one re-entrant lock and installs a complete
new engine state, so observers never see a half-applied roll or trade.
Timer callbacks capture the session generation when scheduled and are
dropped if a reset or new day has happened since.
"""

from __future__ import annotations

import logging
import random
import threading
import uuid
from collections import deque
from dataclasses import dataclass, field
from dataclasses import replace as dc_replace
from decimal import Decimal
from typing import Any, Callable

from src.config.settings import Settings, get_settings
from src.database import get_stats_store
from src.database.stats import StatsStore
from src.engine.base import (
    AI_PURCHASE_INITIAL_DELAY,
    AI_ROLL_DELAY,
    AI_ROLL_DELAY_AFTER_HUMAN,
    HUMAN_PLAYER_ID,
    MARKET_DURATION,
    MARKET_OPEN_DELAY,
    RESULTS_DELAY,
    ROLL_LOCK,
    Card,
    DayConfig,
    DayMode,
    DiceRoll,
    Horse,
    Listing,
    Phase,
    Player,
    horse_label,
)
from src.engine.deck import DeckEngine
from src.engine.ledger import BailoutNotice, EconomyLedger, SolvencyResult
from src.engine.market import MarketEngine, MarketState, Trade
from src.engine.policy import ActorPolicy, RandomPolicy
from src.engine.race import RaceEngine, RaceState, RollKind, RollOutcome
from src.engine.standings import Standing, StandingsEngine
from src.engine.validators import validate_player_count
from src.realtime.events import EventPayload, GameEvent
from src.realtime.scheduler import Scheduler, ThreadingScheduler, TimerHandle
from src.realtime.subscriptions import EventBus

logger = logging.getLogger(__name__)

LOG_LIMIT = 30

_ROLLABLE_PHASES = (Phase.SCRATCH, Phase.RACE)


def _money(amount: Decimal) -> str:
    return f"${amount:.2f}"


@dataclass(frozen=True)
class RaceSummary:
    """Result of a finished race."""
    race_number: int
    winner: int
    pot: Decimal
    carryover: bool
    per_card: Decimal = Decimal(0)
    payouts: dict[int, Decimal] = field(default_factory=dict)
    unclaimed_pot: Decimal = Decimal(0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "race_number": self.race_number,
            "winner": self.winner,
            "winner_label": horse_label(self.winner),
            "pot": str(self.pot),
            "carryover": self.carryover,
            "per_card": str(self.per_card),
            "payouts": {pid: str(amount) for pid, amount in self.payouts.items()},
            "unclaimed_pot": str(self.unclaimed_pot),
        }


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session for rendering and persistence."""
    session_id: str | None
    mode: DayMode | None
    race_number: int
    total_races: int
    phase: Phase
    current_player_id: int | None
    pot: Decimal
    horses: tuple[Horse, ...]
    players: tuple[Player, ...]
    scratch_history: tuple[int, ...]
    dice: DiceRoll | None
    listings: tuple[Listing, ...]
    market_seconds_remaining: float | None
    roll_in_flight: bool
    log: tuple[str, ...]
    cards_forfeited: int = 0
    cards_discarded: int = 0
    last_summary: RaceSummary | None = None
    standings: tuple[Standing, ...] = ()
    bailout_notice: BailoutNotice | None = None

    @property
    def cards_in_circulation(self) -> int:
        return sum(len(p.cards) for p in self.players) + len(self.listings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "mode": self.mode.value if self.mode else None,
            "race_number": self.race_number,
            "total_races": self.total_races,
            "phase": self.phase.value,
            "current_player_id": self.current_player_id,
            "pot": str(self.pot),
            "horses": [
                {
                    "number": h.number,
                    "position": h.position,
                    "scratched": h.scratched,
                    "scratch_step": h.scratch_step,
                }
                for h in self.horses
            ],
            "players": [
                {
                    "id": p.id,
                    "name": p.name,
                    "balance": str(p.balance),
                    "cards": [str(c) for c in p.cards],
                    "eliminated": p.eliminated,
                }
                for p in self.players
            ],
            "scratch_history": list(self.scratch_history),
            "dice": (
                {"die1": self.dice.die1, "die2": self.dice.die2, "total": self.dice.total}
                if self.dice else None
            ),
            "listings": [
                {"id": lst.id, "card": str(lst.card), "seller_id": lst.seller_id}
                for lst in self.listings
            ],
            "market_seconds_remaining": self.market_seconds_remaining,
            "roll_in_flight": self.roll_in_flight,
            "cards_forfeited": self.cards_forfeited,
            "cards_discarded": self.cards_discarded,
            "log": list(self.log),
            "last_summary": self.last_summary.to_dict() if self.last_summary else None,
            "standings": [row.to_dict() for row in self.standings],
            "bailout_notice": (
                {"player_id": self.bailout_notice.player_id, "amount": str(self.bailout_notice.amount)}
                if self.bailout_notice else None
            ),
        }


class GameSession:
    """
    Single owner of a racing day's mutable state.

    Commands return a result (or True) when accepted and None (or False)
    when rejected; a rejected command never changes state.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler | None = None,
        policy: ActorPolicy | None = None,
        rng: random.Random | None = None,
        dice: Callable[[], DiceRoll] | None = None,
        stats_store: StatsStore | None = None,
        events: EventBus | None = None,
        default_players: int = 6,
    ) -> None:
        self._lock = threading.RLock()
        self._scheduler = scheduler or ThreadingScheduler()
        self._rng = rng or random.Random()
        self._policy = policy or RandomPolicy(self._rng)
        self._dice = dice or (lambda: RaceEngine.roll_dice(self._rng))
        self._stats_store = stats_store
        self.events = events or EventBus()
        self._default_players = validate_player_count(default_players)

        self._generation = 0
        self._timers: dict[str, TimerHandle] = {}
        self._install_blank_state()

    # -- State -----------------------------------------------------------

    def _install_blank_state(self) -> None:
        self._session_id: str | None = None
        self._config: DayConfig | None = None
        self._phase = Phase.NOT_STARTED
        self._race_number = 0
        self._race: RaceState | None = None
        self._market: MarketState | None = None
        self._market_open = False
        self._market_closes_at: float | None = None
        self._next_listing_id = 1
        self._current_index = 0
        self._last_roll: DiceRoll | None = None
        self._roll_in_flight = False
        self._last_roller_human = False
        self._log: deque[str] = deque(maxlen=LOG_LIMIT)
        self._last_summary: RaceSummary | None = None
        self._standings: tuple[Standing, ...] = ()
        self._stats_recorded = False
        self._bailout_notice: BailoutNotice | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def players(self) -> tuple[Player, ...]:
        return self._race.players if self._race else ()

    @property
    def current_player(self) -> Player | None:
        players = self.players
        if not players or self._phase in (Phase.NOT_STARTED, Phase.DAY_COMPLETE):
            return None
        return players[self._current_index]

    @property
    def is_human_turn(self) -> bool:
        current = self.current_player
        return (
            current is not None
            and current.is_human
            and current.is_active
            and self._phase in _ROLLABLE_PHASES
        )

    @property
    def can_roll(self) -> bool:
        return self.is_human_turn and not self._roll_in_flight

    def snapshot(self) -> SessionSnapshot:
        """Consistent read-only copy of the session."""
        with self._lock:
            race = self._race
            current = self.current_player
            remaining = None
            if self._market_open and self._market_closes_at is not None:
                remaining = max(0.0, self._market_closes_at - self._scheduler.now())
            return SessionSnapshot(
                session_id=self._session_id,
                mode=self._config.mode if self._config else None,
                race_number=self._race_number,
                total_races=self._config.total_races if self._config else 0,
                phase=self._phase,
                current_player_id=current.id if current else None,
                pot=race.pot if race else Decimal(0),
                horses=race.horses if race else (),
                players=race.players if race else (),
                scratch_history=race.scratch_history if race else (),
                dice=self._last_roll,
                listings=self._market.listings if self._market else (),
                market_seconds_remaining=remaining,
                roll_in_flight=self._roll_in_flight,
                log=tuple(self._log),
                cards_forfeited=race.forfeited if race else 0,
                cards_discarded=race.discarded if race else 0,
                last_summary=self._last_summary,
                standings=self._standings,
                bailout_notice=self._bailout_notice,
            )

    # -- Lifecycle -------------------------------------------------------

    def start_session(self, mode: DayMode | str, num_players: int | None = None) -> SessionSnapshot:
        """Start a new racing day, superseding any running one."""
        config = DayConfig(mode=DayMode(mode), num_players=num_players or self._default_players)
        with self._lock:
            self._cancel_all_timers()
            self._generation += 1
            self._install_blank_state()
            self._session_id = str(uuid.uuid4())
            self._config = config

            players = tuple(
                Player(id=i, name=f"Player {i}") for i in range(1, config.num_players + 1)
            )
            self._race_number = 1
            self._race = RaceEngine.start_race(players, self._shuffled_deck())
            self._current_index = 0
            self._phase = Phase.SCRATCH

            logger.info(
                "Session %s started: %s day, %d players",
                self._session_id, config.mode.value, config.num_players,
            )
            self._add_log(
                f"Race 1 has begun. {self.current_player.name} starts the scratch phase."
            )
            self._publish(GameEvent.SESSION_STARTED, data={
                "mode": config.mode.value,
                "num_players": config.num_players,
                "total_races": config.total_races,
            })
            self._arm_next_turn()
            return self.snapshot()

    def reset_session(self) -> None:
        """Cancel every timer and drop the current day."""
        with self._lock:
            old_id = self._session_id
            self._cancel_all_timers()
            self._generation += 1
            self._install_blank_state()
            logger.info("Session %s reset", old_id)
            if old_id is not None:
                self.events.publish(EventPayload(event=GameEvent.SESSION_RESET, session_id=old_id))

    def acknowledge_bailout(self) -> None:
        """Clear the one-time human bailout notification."""
        with self._lock:
            self._bailout_notice = None

    # -- Rolling ---------------------------------------------------------

    def roll_dice(self) -> RollOutcome | None:
        """Human roll; ignored unless it is the human's turn and no roll is in flight."""
        with self._lock:
            if not self.can_roll:
                logger.debug("Roll rejected in phase %s", self._phase.name)
                return None
            return self._perform_roll()

    def _auto_roll(self) -> None:
        current = self.current_player
        if (
            self._phase not in _ROLLABLE_PHASES
            or self._roll_in_flight
            or current is None
            or current.is_human
            or current.eliminated
        ):
            return
        self._perform_roll()

    def _perform_roll(self) -> RollOutcome:
        roller = self.current_player
        roll = self._dice()
        phase = self._phase
        outcome = RaceEngine.resolve_roll(
            self._race, phase, roller.id, roll, self._config.bailout_amount
        )
        self._race = outcome.state
        self._last_roll = roll
        self._roll_in_flight = True
        self._last_roller_human = roller.is_human
        self._cancel_timer("auto_roll")

        self._publish(GameEvent.DICE_ROLLED, player_id=roller.id, data={
            "die1": roll.die1, "die2": roll.die2, "total": roll.total, "phase": phase.value,
        })
        self._log_outcome(roller, outcome)
        self._report_solvency(outcome.solvency)

        if outcome.finished:
            self._set_phase(Phase.FINISHED)
            self._finish_race(outcome)
        else:
            if phase is Phase.SCRATCH and self._race.scratches_complete:
                self._begin_trade()
            self._advance_turn()
            self._schedule("roll_lock", ROLL_LOCK, self._release_roll_lock)

        if self._phase not in (Phase.FINISHED, Phase.DAY_COMPLETE) and not self._active_players():
            self._complete_day()
        return outcome

    def _release_roll_lock(self) -> None:
        self._roll_in_flight = False
        self._arm_next_turn()

    def _arm_next_turn(self) -> None:
        """Arm exactly one AI auto-roll when an AI seat is up."""
        self._cancel_timer("auto_roll")
        if self._phase not in _ROLLABLE_PHASES or self._roll_in_flight:
            return
        self._ensure_active_roller()
        current = self.current_player
        if current is None or current.is_human or current.eliminated:
            return
        delay = AI_ROLL_DELAY_AFTER_HUMAN if self._last_roller_human else AI_ROLL_DELAY
        self._schedule("auto_roll", delay, self._auto_roll)

    def _active_players(self) -> list[Player]:
        return [p for p in self.players if p.is_active]

    def _advance_turn(self) -> None:
        players = self.players
        n = len(players)
        for step in range(1, n + 1):
            index = (self._current_index + step) % n
            if players[index].is_active:
                self._current_index = index
                self._publish(GameEvent.TURN_ADVANCED, player_id=players[index].id)
                return

    def _ensure_active_roller(self) -> None:
        current = self.current_player
        if current is not None and current.eliminated:
            self._advance_turn()

    # -- Market ----------------------------------------------------------

    def _begin_trade(self) -> None:
        self._set_phase(Phase.TRADE)
        self._add_log("All scratches complete! The market opens shortly.")
        self._schedule("market_open", MARKET_OPEN_DELAY, self._open_market)

    def _open_market(self) -> None:
        result = MarketEngine.open(self.players, self._policy, self._next_listing_id)
        self._race = dc_replace(self._race, players=result.players)
        self._market = result.market
        self._next_listing_id = result.market.next_listing_id
        self._market_open = True
        self._market_closes_at = self._scheduler.now() + MARKET_DURATION

        self._schedule("market_close", MARKET_DURATION, self._close_market)
        self._schedule("ai_purchase", AI_PURCHASE_INITIAL_DELAY, self._ai_purchase_tick)

        logger.info("Market opened with %d AI listings", len(result.market.listings))
        self._add_log(f"The market is open for {int(MARKET_DURATION)} seconds.")
        self._publish(GameEvent.MARKET_OPENED, data={
            "listings": [lst.id for lst in result.market.listings],
            "duration": MARKET_DURATION,
        })

    def list_card(self, card: Card) -> Listing | None:
        """Human lists a card from their hand."""
        with self._lock:
            if not self._market_open:
                return None
            result = MarketEngine.list_card(self.players, self._market, HUMAN_PLAYER_ID, card)
            if result is None:
                logger.debug("Listing of %s rejected", card)
                return None
            self._install_market(result.players, result.market)
            self._next_listing_id = result.market.next_listing_id
            self._add_log(f"Player 1 listed {card} for {_money(MarketEngine.PRICE)}.")
            self._publish(GameEvent.CARD_LISTED, player_id=HUMAN_PLAYER_ID, data={
                "listing_id": result.listing.id, "card": str(card),
            })
            return result.listing

    def cancel_listing(self, listing_id: int) -> bool:
        """Human withdraws one of their unsold listings."""
        with self._lock:
            if not self._market_open:
                return False
            result = MarketEngine.cancel_listing(
                self.players, self._market, listing_id, requester_id=HUMAN_PLAYER_ID
            )
            if result is None:
                return False
            self._install_market(result.players, result.market)
            self._publish(GameEvent.LISTING_CANCELLED, player_id=HUMAN_PLAYER_ID, data={
                "listing_id": listing_id,
            })
            return True

    def buy_listing(self, listing_id: int) -> Trade | None:
        """Human buys a listing."""
        with self._lock:
            if not self._market_open:
                return None
            return self._buy(HUMAN_PLAYER_ID, listing_id)

    def _buy(self, buyer_id: int, listing_id: int) -> Trade | None:
        result = MarketEngine.buy_listing(self.players, self._market, buyer_id, listing_id)
        if result is None:
            logger.debug("Purchase of listing %s by %s rejected", listing_id, buyer_id)
            return None
        self._install_market(result.players, result.market)
        trade = result.trade
        names = {p.id: p.name for p in self.players}
        self._add_log(
            f"{names[trade.buyer_id]} bought {trade.card} from "
            f"{names[trade.seller_id]} for {_money(trade.price)}."
        )
        self._publish(GameEvent.CARD_SOLD, player_id=buyer_id, data={
            "listing_id": trade.listing_id,
            "card": str(trade.card),
            "seller_id": trade.seller_id,
            "price": str(trade.price),
        })
        self._apply_solvency()
        return trade

    def _ai_purchase_tick(self) -> None:
        if not self._market_open:
            return
        if not self._policy.skip_purchase_tick():
            buyers = MarketEngine.eligible_ai_buyers(self.players, self._market)
            if buyers:
                buyer = self._policy.choose_buyer(buyers)
                options = MarketEngine.eligible_listings(self.players, self._market, buyer.id)
                if options:
                    self._buy(buyer.id, self._policy.choose_listing(options).id)
        if self._market_open:
            self._schedule("ai_purchase", self._policy.purchase_interval(), self._ai_purchase_tick)

    def close_market_early(self) -> bool:
        """Human starts the race before the market timer runs out."""
        with self._lock:
            if self._phase is not Phase.TRADE:
                return False
            self._close_market()
            return True

    def _close_market(self) -> None:
        for name in ("market_open", "market_close", "ai_purchase"):
            self._cancel_timer(name)

        returned = 0
        if self._market is not None:
            players, returned = MarketEngine.close(self.players, self._market)
            self._race = dc_replace(self._race, players=players)
        self._market = None
        self._market_open = False
        self._market_closes_at = None

        logger.info("Market closed, %d unsold cards returned", returned)
        self._publish(GameEvent.MARKET_CLOSED, data={"returned": returned})
        self._set_phase(Phase.RACE)
        self._add_log("The market is closed. The race is on!")
        self._arm_next_turn()

    def _install_market(self, players: tuple[Player, ...], market: MarketState) -> None:
        self._race = dc_replace(self._race, players=players)
        self._market = market

    def _apply_solvency(self) -> None:
        solvency = EconomyLedger.apply_bailout_and_elimination(
            self.players, self._config.bailout_amount
        )
        discarded = solvency.discarded
        if solvency.eliminated and self._market is not None:
            self._market, dropped = MarketEngine.discard_listings(self._market, solvency.eliminated)
            discarded += dropped
        self._race = dc_replace(
            self._race,
            players=solvency.players,
            discarded=self._race.discarded + discarded,
        )
        self._report_solvency(solvency)
        if not self._active_players():
            self._complete_day()

    # -- Race end --------------------------------------------------------

    def _finish_race(self, outcome: RollOutcome) -> None:
        payout = outcome.payout
        summary = RaceSummary(
            race_number=self._race_number,
            winner=outcome.horse,
            pot=outcome.state.pot if payout.carryover else sum(payout.payouts.values(), Decimal(0)),
            carryover=payout.carryover,
            per_card=payout.per_card,
            payouts=payout.payouts,
            unclaimed_pot=payout.pot if payout.carryover else Decimal(0),
        )
        self._last_summary = summary
        self._roll_in_flight = False
        self._cancel_timer("roll_lock")

        logger.info(
            "Race %d won by horse %d (carryover=%s)",
            self._race_number, outcome.horse, payout.carryover,
        )
        self._publish(GameEvent.RACE_FINISHED, data=summary.to_dict())

        if self._race_number >= self._config.total_races:
            self._complete_day()
        else:
            self._schedule("results", RESULTS_DELAY, self._show_results)

    def _show_results(self) -> None:
        if self._last_summary is not None:
            self._publish(GameEvent.RACE_SUMMARY, data=self._last_summary.to_dict())

    def advance_to_next_race(self) -> bool:
        """Deal the next race once the current one has finished."""
        with self._lock:
            if self._phase is not Phase.FINISHED:
                return False
            if self._race_number >= self._config.total_races:
                return False
            self._cancel_all_timers()

            active = self._active_players()
            if not active:
                self._complete_day()
                return False

            self._race_number += 1
            self._race = RaceEngine.start_race(self.players, self._shuffled_deck())
            self._market = None
            self._last_roll = None
            self._roll_in_flight = False
            self._last_roller_human = False

            starter = active[(self._race_number - 1) % len(active)]
            self._current_index = next(
                i for i, p in enumerate(self.players) if p.id == starter.id
            )
            self._set_phase(Phase.SCRATCH)
            self._add_log(
                f"Race {self._race_number} has begun. {starter.name} starts the scratch phase."
            )
            self._arm_next_turn()
            return True

    def _complete_day(self) -> None:
        self._cancel_all_timers()
        self._roll_in_flight = False
        self._market_open = False
        self._set_phase(Phase.DAY_COMPLETE)
        self._standings = StandingsEngine.compute(self.players)
        self._record_stats()

        unclaimed = self._race.pot if self._race else Decimal(0)
        logger.info("Day complete for session %s", self._session_id)
        self._add_log("Day complete! Reset to start over.")
        self._publish(GameEvent.DAY_COMPLETE, data={
            "standings": [row.to_dict() for row in self._standings],
            "unclaimed_pot": str(unclaimed),
        })

    def _record_stats(self) -> None:
        if self._stats_recorded:
            return
        self._stats_recorded = True
        if self._stats_store is None:
            return
        human = StandingsEngine.find(self._standings, HUMAN_PLAYER_ID)
        if human is None:
            return
        try:
            self._stats_store.record_day(
                self._config.mode.value,
                won=StandingsEngine.human_won(self._standings),
                final_balance=human.balance,
            )
        except Exception:
            logger.exception("Failed to record day stats for session %s", self._session_id)

    # -- Helpers ---------------------------------------------------------

    def _shuffled_deck(self) -> list[Card]:
        return DeckEngine.shuffle(DeckEngine.new_deck(), self._rng)

    def _set_phase(self, phase: Phase) -> None:
        if phase is self._phase:
            return
        previous = self._phase
        self._phase = phase
        self._publish(GameEvent.PHASE_CHANGED, data={
            "from": previous.value, "to": phase.value,
        })

    def _report_solvency(self, solvency: SolvencyResult | None) -> None:
        if solvency is None:
            return
        for notice in solvency.bailouts:
            if notice.is_human:
                self._bailout_notice = notice
            self._add_log(f"{notice.player_name} received a {_money(notice.amount)} bailout.")
            self._publish(GameEvent.BAILOUT, player_id=notice.player_id, data={
                "amount": str(notice.amount), "is_human": notice.is_human,
            })
        for player_id in solvency.eliminated:
            logger.info("Player %d eliminated", player_id)
            self._add_log(f"Player {player_id} is out of money and eliminated.")
            self._publish(GameEvent.PLAYER_ELIMINATED, player_id=player_id)

    def _log_outcome(self, roller: Player, outcome: RollOutcome) -> None:
        label = horse_label(outcome.horse)
        if outcome.kind is RollKind.SCRATCHED:
            self._add_log(
                f"{roller.name} scratched horse {label}. "
                f"Everyone paid {_money(outcome.penalty)} per card."
            )
            self._publish(GameEvent.HORSE_SCRATCHED, player_id=roller.id, data={
                "horse": outcome.horse,
                "step": len(outcome.state.scratch_history),
                "penalty": str(outcome.penalty),
                "forfeited": outcome.forfeited,
            })
        elif outcome.kind is RollKind.SCRATCH_PENALTY:
            if outcome.penalty > 0:
                self._add_log(
                    f"{roller.name} hit scratched horse {label} and paid {_money(outcome.penalty)}."
                )
            else:
                self._add_log(f"{roller.name} hit scratched horse {label} with no penalty.")
        elif outcome.kind is RollKind.ADVANCED:
            position = outcome.state.horse(outcome.horse).position
            self._add_log(f"{roller.name} advanced horse {label} to space {position}.")
            self._publish(GameEvent.HORSE_ADVANCED, player_id=roller.id, data={
                "horse": outcome.horse, "position": position,
            })
        else:
            self._add_log(f"Horse {label} crosses the finish line!")
            payout = outcome.payout
            if payout.carryover:
                self._add_log("No one held the winning horse. The pot goes unclaimed.")
            names = {p.id: p.name for p in outcome.state.players}
            for pid, amount in payout.payouts.items():
                cards = payout.winning_cards[pid]
                self._add_log(
                    f"{names[pid]} collected {_money(amount)} with {cards} "
                    f"card{'s' if cards > 1 else ''}."
                )

    def _add_log(self, entry: str) -> None:
        self._log.appendleft(entry)
        logger.debug(entry)

    def _publish(
        self,
        event: GameEvent,
        player_id: int | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        self.events.publish(EventPayload(
            event=event,
            session_id=self._session_id or "",
            player_id=player_id,
            data=data or {},
        ))

    # -- Timers ----------------------------------------------------------

    def _schedule(self, name: str, delay: float, action: Callable[[], None]) -> None:
        """Arm a named timer, replacing any pending timer of that name."""
        self._cancel_timer(name)
        generation = self._generation
        slot: dict[str, TimerHandle] = {}

        def fire() -> None:
            with self._lock:
                if generation != self._generation or self._timers.get(name) is not slot.get("handle"):
                    logger.debug("Discarding stale %s timer", name)
                    return
                del self._timers[name]
                action()

        slot["handle"] = self._scheduler.call_later(delay, fire)
        self._timers[name] = slot["handle"]

    def _cancel_timer(self, name: str) -> None:
        handle = self._timers.pop(name, None)
        if handle is not None:
            handle.cancel()

    def _cancel_all_timers(self) -> None:
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()

    @property
    def pending_timers(self) -> tuple[str, ...]:
        """Names of armed timers."""
        with self._lock:
            return tuple(self._timers)


def create_session(settings: Settings | None = None, **kwargs: Any) -> GameSession:
    """Build a session wired to the configured stats backend."""
    settings = settings or get_settings()
    kwargs.setdefault("stats_store", get_stats_store(settings))
    kwargs.setdefault("default_players", settings.default_player_count)
    return GameSession(**kwargs)
