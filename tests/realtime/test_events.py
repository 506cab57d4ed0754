"""Tests for src/realtime/events.py — event types and payloads."""

from src.realtime.events import LIFECYCLE_EVENTS, EventPayload, GameEvent, is_lifecycle_event


# ── GameEvent enum ──────────────────────────────────────────────────────

class TestGameEvent:
    def test_core_events_defined(self):
        names = {e.name for e in GameEvent}
        assert {
            "SESSION_STARTED", "DICE_ROLLED", "HORSE_SCRATCHED", "MARKET_OPENED",
            "CARD_SOLD", "MARKET_CLOSED", "RACE_FINISHED", "DAY_COMPLETE",
        } <= names

    def test_events_are_unique(self):
        values = [e.value for e in GameEvent]
        assert len(values) == len(set(values))


# ── EventPayload ────────────────────────────────────────────────────────

class TestEventPayload:
    def test_defaults(self):
        payload = EventPayload(event=GameEvent.DICE_ROLLED, session_id="s-1")
        assert payload.player_id is None
        assert payload.data == {}

    def test_data_not_shared(self):
        a = EventPayload(event=GameEvent.DICE_ROLLED, session_id="a")
        b = EventPayload(event=GameEvent.DICE_ROLLED, session_id="b")
        a.data["total"] = 7
        assert b.data == {}


# ── Classification ──────────────────────────────────────────────────────

class TestLifecycle:
    def test_boundaries_are_lifecycle(self):
        assert is_lifecycle_event(GameEvent.RACE_FINISHED)
        assert is_lifecycle_event(GameEvent.DAY_COMPLETE)

    def test_play_by_play_is_not(self):
        assert not is_lifecycle_event(GameEvent.DICE_ROLLED)
        assert not is_lifecycle_event(GameEvent.CARD_LISTED)

    def test_lifecycle_subset_of_events(self):
        assert LIFECYCLE_EVENTS <= set(GameEvent)
