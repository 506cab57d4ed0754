"""
Stable Stakes Database Layer.

Persistence of cross-session day stats, in memory or in Supabase.
"""

from src.config.settings import Settings
from src.database.models import DayStats
from src.database.stats import InMemoryStatsStore, StatsStore, SupabaseStatsStore


def get_stats_store(settings: Settings) -> StatsStore:
    """Build the stats backend named by settings.stats_backend."""
    if settings.stats_backend == "supabase":
        from src.database.client import get_supabase_client

        return SupabaseStatsStore(get_supabase_client(settings))
    return InMemoryStatsStore()


__all__ = [
    "DayStats",
    "InMemoryStatsStore",
    "StatsStore",
    "SupabaseStatsStore",
    "get_stats_store",
]
