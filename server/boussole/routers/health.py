"""Health check endpoint."""

import platform
import sys
from fastapi import APIRouter

from .. import __version__
from ..config import get_settings
from ..services.backend import backend_configured

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Health check and configuration status."""
    settings = get_settings()

    return {
        "status": "ok",
        "version": __version__,
        "aiConfigured": settings.ai_config().enabled,
        "backendConfigured": backend_configured(settings),
        "model": settings.gemini_model,
        "platform": platform.system().lower(),
        "pythonVersion": sys.version,
    }
