"""
Supabase client for landing page rows and asset storage.

One client is shared per process. Missing or unusable credentials raise
DatabaseConfigError, which the API maps to 503 and the CLI and UI report
as a setup problem.
"""

import logging
from typing import Optional

from supabase import create_client, Client

from .config import Config

logger = logging.getLogger(__name__)

_supabase_client: Optional[Client] = None


class DatabaseConfigError(RuntimeError):
    """Supabase is not configured, or the client could not be created."""
    pass


def get_supabase_client() -> Client:
    """
    Get or create the shared Supabase client.

    Raises:
        DatabaseConfigError: SUPABASE_URL / SUPABASE_SERVICE_KEY are missing
            or rejected by the client library
    """
    global _supabase_client

    if _supabase_client is None:
        try:
            Config.validate()
        except ValueError as e:
            raise DatabaseConfigError(str(e)) from e

        try:
            _supabase_client = create_client(Config.SUPABASE_URL, Config.SUPABASE_SERVICE_KEY)
        except Exception as e:
            logger.error(f"Could not create Supabase client: {e}")
            raise DatabaseConfigError(f"Could not create Supabase client: {e}") from e

        logger.debug("Supabase client created")

    return _supabase_client


def reset_supabase_client():
    """Drop the shared client so the next call builds a new one."""
    global _supabase_client
    _supabase_client = None
