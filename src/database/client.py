"""
Stable Stakes - Supabase Client

Cached factory for the Supabase client backing the stats store.
"""

from functools import lru_cache

from supabase import Client, create_client

from src.config.settings import Settings, get_settings


@lru_cache(maxsize=4)
def _client_for(url: str, key: str) -> Client:
    return create_client(url, key)


def get_supabase_client(settings: Settings | None = None) -> Client:
    """
    Create (once per URL/key pair) and return a Supabase client.

    Raises:
        ValueError: If the URL or anon key is not configured
    """
    settings = settings or get_settings()
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set for the supabase backend.")
    return _client_for(settings.supabase_url, settings.supabase_anon_key)
