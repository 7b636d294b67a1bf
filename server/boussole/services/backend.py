"""Supabase data-backend client accessor."""

import logging
from functools import lru_cache
from typing import Optional

from supabase import Client, create_client

from ..config import Settings, get_settings
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


def backend_configured(settings: Optional[Settings] = None) -> bool:
    settings = settings or get_settings()
    return bool(settings.supabase_url and settings.supabase_anon_key)


@lru_cache()
def _client_for(url: str, anon_key: str) -> Client:
    return create_client(url, anon_key)


def get_backend_client(settings: Optional[Settings] = None) -> Client:
    """Get the Supabase client for the resolved URL and anonymous key.

    One client is kept per credential pair. Missing credentials are
    reported and raise :class:`ConfigurationError`.
    """
    settings = settings or get_settings()
    if not backend_configured(settings):
        logger.warning("supabase_credentials_missing")
        raise ConfigurationError(
            "Supabase credentials missing. Set VITE_SUPABASE_URL and VITE_SUPABASE_ANON_KEY."
        )
    return _client_for(settings.supabase_url, settings.supabase_anon_key)
