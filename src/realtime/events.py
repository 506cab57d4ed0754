"""
Stable Stakes - Session Event Definitions

Event types and payloads published by a game session to UI and
persistence subscribers.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class GameEvent(Enum):
    """Events that can occur during a racing day."""

    SESSION_STARTED = auto()
    SESSION_RESET = auto()
    PHASE_CHANGED = auto()
    DICE_ROLLED = auto()
    TURN_ADVANCED = auto()
    HORSE_SCRATCHED = auto()
    HORSE_ADVANCED = auto()
    MARKET_OPENED = auto()
    CARD_LISTED = auto()
    LISTING_CANCELLED = auto()
    CARD_SOLD = auto()
    MARKET_CLOSED = auto()
    BAILOUT = auto()
    PLAYER_ELIMINATED = auto()
    RACE_FINISHED = auto()
    RACE_SUMMARY = auto()
    DAY_COMPLETE = auto()


# Events a results screen needs; everything else is play-by-play
LIFECYCLE_EVENTS: frozenset[GameEvent] = frozenset({
    GameEvent.SESSION_STARTED,
    GameEvent.SESSION_RESET,
    GameEvent.RACE_FINISHED,
    GameEvent.RACE_SUMMARY,
    GameEvent.DAY_COMPLETE,
})


@dataclass
class EventPayload:
    """Wrapper for session event data."""

    event: GameEvent
    session_id: str
    player_id: int | None = None
    data: dict[str, Any] = field(default_factory=dict)


def is_lifecycle_event(event: GameEvent) -> bool:
    """Whether an event marks a session/race/day boundary."""
    return event in LIFECYCLE_EVENTS
