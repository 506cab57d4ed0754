"""
Stable Stakes - Day Stats Stores

Cross-session aggregates for the human seat, kept separately for half
and full days: days played, day wins and best final balance. Session
state itself is never persisted.
"""

from __future__ import annotations

import logging
import threading
import time
from decimal import Decimal
from typing import Protocol

from httpx import RemoteProtocolError
from supabase import Client

from src.database.models import DayStats

logger = logging.getLogger(__name__)


class StatsStore(Protocol):
    """Anything that can load and record day stats."""

    def get(self, mode: str) -> DayStats: ...

    def record_day(self, mode: str, *, won: bool, final_balance: Decimal) -> DayStats: ...


class InMemoryStatsStore:
    """Process-local stats, lost on exit."""

    def __init__(self) -> None:
        self._rows: dict[str, DayStats] = {}
        self._lock = threading.Lock()

    def get(self, mode: str) -> DayStats:
        with self._lock:
            return self._rows.get(mode) or DayStats(mode=mode)

    def record_day(self, mode: str, *, won: bool, final_balance: Decimal) -> DayStats:
        with self._lock:
            current = self._rows.get(mode) or DayStats(mode=mode)
            updated = current.record(won, final_balance)
            self._rows[mode] = updated
            return updated


class SupabaseStatsStore:
    """Manages the `day_stats` table in Supabase."""

    def __init__(self, client: Client, retries: int = 2) -> None:
        self.client = client
        self.table = client.table("day_stats")
        self.retries = retries

    def _retry(self, fn, *args, **kwargs):
        """Call *fn* with simple retry on transient connection errors."""
        for attempt in range(self.retries + 1):
            try:
                return fn(*args, **kwargs)
            except (RemoteProtocolError, ConnectionError, OSError):
                if attempt == self.retries:
                    raise
                logger.warning("Stats request failed, retrying (%d/%d)", attempt + 1, self.retries)
                time.sleep(0.3)

    def get(self, mode: str) -> DayStats:
        """Get stats for a day mode (empty stats if none recorded)."""
        data = self._retry(
            lambda: self.table.select("*").eq("mode", mode).execute()
        )
        if data.data:
            return DayStats.model_validate(data.data[0])
        return DayStats(mode=mode)

    def record_day(self, mode: str, *, won: bool, final_balance: Decimal) -> DayStats:
        """Fold one finished day into the stored row."""
        updated = self.get(mode).record(won, final_balance)
        payload = updated.model_dump(mode="json")
        data = self._retry(
            lambda: self.table.upsert(payload, on_conflict="mode").execute()
        )
        logger.info("Recorded %s day (won=%s)", mode, won)
        if data.data:
            return DayStats.model_validate(data.data[0])
        return updated
