"""Tests for src/realtime/subscriptions.py — in-process event bus."""

from unittest.mock import MagicMock

from src.realtime.events import EventPayload, GameEvent
from src.realtime.subscriptions import EventBus


def _payload(event=GameEvent.DICE_ROLLED):
    return EventPayload(event=event, session_id="s-1", data={"total": 7})


class TestEventBus:
    def test_subscribe_returns_distinct_ids(self):
        bus = EventBus()
        first = bus.subscribe(lambda p: None)
        second = bus.subscribe(lambda p: None)
        assert first != second
        assert set(bus.active_subscriptions) == {first, second}

    def test_publish_reaches_all_subscribers(self):
        bus = EventBus()
        a, b = MagicMock(), MagicMock()
        bus.subscribe(a)
        bus.subscribe(b)
        payload = _payload()
        bus.publish(payload)
        a.assert_called_once_with(payload)
        b.assert_called_once_with(payload)

    def test_event_filter(self):
        bus = EventBus()
        callback = MagicMock()
        bus.subscribe(callback, events=[GameEvent.DAY_COMPLETE])
        bus.publish(_payload(GameEvent.DICE_ROLLED))
        callback.assert_not_called()
        bus.publish(_payload(GameEvent.DAY_COMPLETE))
        callback.assert_called_once()

    def test_unsubscribe(self):
        bus = EventBus()
        callback = MagicMock()
        sub_id = bus.subscribe(callback)
        assert bus.unsubscribe(sub_id)
        assert not bus.unsubscribe(sub_id)
        bus.publish(_payload())
        callback.assert_not_called()

    def test_unsubscribe_all(self):
        bus = EventBus()
        bus.subscribe(lambda p: None)
        bus.subscribe(lambda p: None)
        bus.unsubscribe_all()
        assert bus.active_subscriptions == []

    def test_failing_subscriber_is_isolated(self, caplog):
        bus = EventBus()
        after = MagicMock()
        bus.subscribe(MagicMock(side_effect=RuntimeError("boom")))
        bus.subscribe(after)
        bus.publish(_payload())
        after.assert_called_once()
        assert "failed handling DICE_ROLLED" in caplog.text
