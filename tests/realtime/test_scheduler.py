"""Tests for src/realtime/scheduler.py — virtual and wall-clock timers."""

import threading
from unittest.mock import MagicMock

from src.realtime.scheduler import ManualScheduler, ThreadingScheduler


class TestManualScheduler:
    def test_nothing_fires_until_advanced(self):
        sched = ManualScheduler()
        callback = MagicMock()
        sched.call_later(1.0, callback)
        callback.assert_not_called()
        assert sched.pending == 1

    def test_fires_when_due(self):
        sched = ManualScheduler()
        callback = MagicMock()
        sched.call_later(1.0, callback)
        assert sched.advance(0.5) == 0
        assert sched.advance(0.5) == 1
        callback.assert_called_once()
        assert sched.now() == 1.0

    def test_same_instant_keeps_schedule_order(self):
        sched = ManualScheduler()
        order = []
        sched.call_later(1.0, lambda: order.append("a"))
        sched.call_later(1.0, lambda: order.append("b"))
        sched.call_later(0.5, lambda: order.append("c"))
        sched.advance(2.0)
        assert order == ["c", "a", "b"]

    def test_callbacks_see_their_due_time(self):
        sched = ManualScheduler()
        seen = []
        sched.call_later(1.5, lambda: seen.append(sched.now()))
        sched.advance(10.0)
        assert seen == [1.5]

    def test_chained_callback_within_window(self):
        sched = ManualScheduler()
        callback = MagicMock()
        sched.call_later(1.0, lambda: sched.call_later(1.0, callback))
        sched.advance(3.0)
        callback.assert_called_once()

    def test_cancel(self):
        sched = ManualScheduler()
        callback = MagicMock()
        handle = sched.call_later(1.0, callback)
        handle.cancel()
        sched.advance(5.0)
        callback.assert_not_called()
        assert sched.pending == 0

    def test_cancel_all(self):
        sched = ManualScheduler()
        callback = MagicMock()
        sched.call_later(1.0, callback)
        sched.call_later(2.0, callback)
        sched.cancel_all()
        sched.advance(5.0)
        callback.assert_not_called()
        assert sched.next_due is None

    def test_run_until(self):
        sched = ManualScheduler()
        flag = []
        sched.call_later(2.0, lambda: flag.append(True))
        assert sched.run_until(lambda: bool(flag), max_seconds=5.0)
        assert not sched.run_until(lambda: False, max_seconds=1.0)


class TestThreadingScheduler:
    def test_fires_callback(self):
        sched = ThreadingScheduler()
        done = threading.Event()
        sched.call_later(0.01, done.set)
        assert done.wait(2.0)

    def test_cancel_all_prevents_fire(self):
        sched = ThreadingScheduler()
        done = threading.Event()
        sched.call_later(0.2, done.set)
        sched.cancel_all()
        assert not done.wait(0.4)
        assert sched.pending == 0

    def test_failing_callback_is_logged(self, caplog):
        sched = ThreadingScheduler()
        done = threading.Event()

        def boom():
            done.set()
            raise RuntimeError("boom")

        sched.call_later(0.01, boom)
        assert done.wait(2.0)
        sched.call_later(0.05, lambda: None)
        threading.Event().wait(0.2)
        assert "Scheduled callback failed" in caplog.text
