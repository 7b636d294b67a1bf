"""Services for the Boussole AI insights server."""

from .cache import InsightCache, get_insight_cache
from .gemini import GenerativeClient, open_chat_stream
from .storage import MemoryStorage, SQLiteStorage

__all__ = [
    "InsightCache",
    "get_insight_cache",
    "GenerativeClient",
    "open_chat_stream",
    "MemoryStorage",
    "SQLiteStorage",
]
