"""
Incredicer - Supabase Client

Thread-safe singleton factory for the Supabase client used by cloud saves.
"""

from functools import lru_cache

from supabase import Client, create_client

from src.config.settings import Settings


def get_supabase_client(settings: Settings) -> Client:
    """Supabase client for the configured project."""
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise ValueError("Supabase URL and anon key must be configured for cloud saves.")
    return _cached_client(settings.supabase_url, settings.supabase_anon_key)


@lru_cache(maxsize=1)
def _cached_client(url: str, key: str) -> Client:
    return create_client(url, key)
