"""Configuration settings for the Boussole AI service."""

import os
import logging
from pathlib import Path
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import dotenv_values
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"


def _find_env_file() -> str:
    """Find .env file - check current dir, then parent (project root)."""
    current = Path.cwd()

    # Check current directory
    if (current / ".env").exists():
        return str(current / ".env")

    # Check parent directory (when running from server/)
    if (current.parent / ".env").exists():
        return str(current.parent / ".env")

    # Check two levels up (when running from server/boussole/)
    if (current.parent.parent / ".env").exists():
        return str(current.parent.parent / ".env")

    # Default to current directory
    return ".env"


def resolve_env(key: str, env_file: Optional[str] = None) -> str:
    """Look up ``key`` in the dotenv file, then in the process environment.

    Returns the first non-empty value, or an empty string when neither
    source has one. Never raises: a source that cannot be read is treated
    as if the key were absent.
    """
    path = env_file or _find_env_file()
    try:
        if Path(path).is_file():
            value = dotenv_values(path).get(key) or ""
            if value:
                return value
    except Exception as e:
        logger.debug("env_file_unreadable", extra={"path": path, "err": str(e)})

    try:
        return os.environ.get(key) or ""
    except Exception as e:
        logger.debug("process_env_unreadable", extra={"key": key, "err": str(e)})

    return ""


def resolve_first(*keys: str, env_file: Optional[str] = None) -> str:
    """Return the first non-empty value among several keys."""
    for key in keys:
        value = resolve_env(key, env_file=env_file)
        if value:
            return value
    return ""


@dataclass(frozen=True)
class AIConfig:
    """Explicit generative-service configuration passed to each generator."""
    api_key: str = ""
    model: str = DEFAULT_MODEL

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server settings
    port: int = 3457
    host: str = "0.0.0.0"
    debug: bool = False

    # Generative service (resolved from VITE_API_KEY / API_KEY if unset)
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_MODEL

    # Data backend (resolved from VITE_SUPABASE_* if unset)
    supabase_url: str = ""
    supabase_anon_key: str = ""

    # Insight cache
    insight_cache_ttl: int = 3600  # 1 hour, in seconds
    cache_db_path: str = str(Path.home() / ".boussole" / "ai_cache.db")

    class Config:
        env_file = _find_env_file()
        env_file_encoding = "utf-8"
        extra = "ignore"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.gemini_api_key:
            self.gemini_api_key = resolve_first("VITE_API_KEY", "API_KEY")
        if not self.supabase_url:
            self.supabase_url = resolve_env("VITE_SUPABASE_URL")
        if not self.supabase_anon_key:
            self.supabase_anon_key = resolve_env("VITE_SUPABASE_ANON_KEY")

    @property
    def cache_ttl_ms(self) -> int:
        """Cache TTL in epoch milliseconds, as stored in entries."""
        return self.insight_cache_ttl * 1000

    def ai_config(self) -> AIConfig:
        """Build the configuration handed to generators and chat."""
        return AIConfig(api_key=self.gemini_api_key, model=self.gemini_model)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
