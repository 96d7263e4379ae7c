"""
Supabase access for the catalog.

Only used when CATALOG_SOURCE=supabase; the JSON source needs no client.
The client is created lazily and shared by every SupabaseCatalogSource.
"""

from functools import lru_cache

from supabase import Client, create_client

from config.settings import Settings, get_settings
from core.logging import get_logger

logger = get_logger(__name__)


class SupabaseClientError(Exception):
    """Supabase credentials missing or client creation failed."""


def supabase_configured(settings: Settings) -> bool:
    return bool(settings.supabase_url and settings.supabase_service_key)


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """
    Shared Supabase client built from SUPABASE_URL / SUPABASE_SERVICE_KEY.

    Raises:
        SupabaseClientError: If either credential is unset or the client
            cannot be created.
    """
    settings = get_settings()
    if not supabase_configured(settings):
        raise SupabaseClientError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set to read the catalog from Supabase")

    try:
        client = create_client(settings.supabase_url, settings.supabase_service_key)
    except Exception as e:
        raise SupabaseClientError(f"Failed to create Supabase client: {e}") from e

    logger.info("Supabase client created", url=settings.supabase_url)
    return client

