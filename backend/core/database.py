"""
core/database.py
────────────────
Supabase client factory with a module-level singleton.

The client is created once per process (using ``functools.lru_cache``)
and reused by every history lookup.  All database interaction must go
through ``get_supabase_client()``; never call ``create_client`` elsewhere.

Usage
-----
    from core.database import get_supabase_client

    client = get_supabase_client()
"""

import logging
from functools import lru_cache

from supabase import Client, create_client

from core.config import get_settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """
    Return the process-wide Supabase client singleton.

    The client is initialised lazily on first call and reused for all
    subsequent calls in the same process.

    Returns:
        Authenticated Supabase ``Client`` ready for table queries.

    Raises:
        ValueError: If ``SUPABASE_URL`` or ``SUPABASE_KEY`` is not configured.
    """
    settings = get_settings()
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_KEY must be set to read price history"
        )
    client = create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)
    logger.info("Supabase client initialised (url=%s)", settings.SUPABASE_URL)
    return client
