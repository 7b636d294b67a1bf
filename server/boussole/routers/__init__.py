"""API Routers for the Boussole AI service."""

from .health import router as health_router
from .insights import router as insights_router
from .chat import router as chat_router

__all__ = [
    "health_router",
    "insights_router",
    "chat_router",
]
