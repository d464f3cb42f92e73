"""
Electro Core - Supabase Client.

Provides configured Supabase clients for database and auth operations.
"""

from functools import lru_cache

from supabase import Client, create_client

from electro.config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    """
    Get configured Supabase client.

    Uses service role key for server-side operations.
    Cached to reuse the same client instance.
    """
    settings = get_settings()
    return create_client(
        supabase_url=settings.supabase.url,
        supabase_key=settings.supabase.service_role_key,
    )


def create_session_client() -> Client:
    """
    Create a Supabase client bound to the anonymous key.

    Auth state (the signed-in session) lives inside the client, so every
    logical user session gets its own instance. Never cached.
    """
    settings = get_settings()
    return create_client(
        supabase_url=settings.supabase.url,
        supabase_key=settings.supabase.anon_key,
    )
