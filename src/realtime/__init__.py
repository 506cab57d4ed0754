"""
Stable Stakes Session Coordination.

Turn scheduling, timers and event publishing for a racing day.
"""

from src.realtime.events import EventPayload, GameEvent
from src.realtime.scheduler import ManualScheduler, Scheduler, ThreadingScheduler
from src.realtime.session import GameSession, RaceSummary, SessionSnapshot, create_session
from src.realtime.subscriptions import EventBus

__all__ = [
    "EventBus",
    "EventPayload",
    "GameEvent",
    "GameSession",
    "ManualScheduler",
    "RaceSummary",
    "Scheduler",
    "SessionSnapshot",
    "ThreadingScheduler",
    "create_session",
]
