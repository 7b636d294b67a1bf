"""FastAPI dependencies wiring settings into the insight services."""

from fastapi import Depends

from .config import AIConfig, get_settings
from .services.cache import InsightCache, get_insight_cache
from .services.gemini import GenerativeClient


def get_ai_config() -> AIConfig:
    return get_settings().ai_config()


def get_cache() -> InsightCache:
    return get_insight_cache()


def get_generative_client(config: AIConfig = Depends(get_ai_config)) -> GenerativeClient:
    # The underlying model is only built on first use.
    return GenerativeClient(config)
