"""Supabase client shared by the persistence modules."""

from functools import lru_cache

from supabase import Client, create_client

from fulqrun.core.config import get_settings


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Service-role Supabase client, created once per process.

    Raises:
        RuntimeError: If credentials are missing or the client cannot be created
    """
    settings = get_settings()
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Supabase is not configured: set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY")

    try:
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    except Exception as e:
        raise RuntimeError(f"Failed to initialize Supabase client: {e}") from e
