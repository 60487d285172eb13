import logging
from typing import Optional

from supabase import create_client, Client

from config import settings

logger = logging.getLogger(__name__)

_client: Optional[Client] = None


def create_supabase_client(url: Optional[str] = None, key: Optional[str] = None) -> Client:
    """
    Build a new Supabase client.

    Falls back to SUPABASE_URL / SUPABASE_SERVICE_KEY from settings and raises
    a clear error if either is missing.
    """
    url = url or settings.SUPABASE_URL
    key = key or settings.SUPABASE_KEY

    if not url or not key:
        raise RuntimeError(
            "Missing Supabase credentials. "
            "Set SUPABASE_URL and SUPABASE_SERVICE_KEY before starting the application."
        )

    return create_client(url, key)


def get_supabase() -> Client:
    """
    FastAPI dependency returning the process-wide client, created on first use.
    Tests replace it through app.dependency_overrides.
    """
    global _client
    if _client is None:
        logger.info("Creating Supabase client for %s", settings.SUPABASE_URL)
        _client = create_supabase_client()
    return _client
