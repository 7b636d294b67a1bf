"""Boussole AI FastAPI Application Entry Point."""

import logging
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import get_settings
from .routers import (
    health_router,
    insights_router,
    chat_router,
)

logger = logging.getLogger(__name__)

_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class KeyValueFormatter(logging.Formatter):
    """Formatter that appends the record's ``extra`` fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}
        if extras:
            line += " " + " ".join(f"{k}={v!r}" for k, v in sorted(extras.items()))
        return line


def configure_logging(debug: bool = False) -> None:
    """Install a root handler that prints events with their extra fields."""
    handler = logging.StreamHandler()
    handler.setFormatter(KeyValueFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, handlers=[handler])


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Boussole AI",
        description="AI business insights and assistant chat for Boussole stores",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # CORS middleware (the Vite frontend runs on another origin)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers with /api prefix
    app.include_router(health_router, prefix="/api")
    app.include_router(insights_router, prefix="/api")
    app.include_router(chat_router, prefix="/api")

    return app


app = create_app()


def run():
    """Run the server."""
    settings = get_settings()
    configure_logging(settings.debug)
    if not settings.ai_config().enabled:
        logger.warning("gemini_api_key_missing")
    logger.info("boussole_starting", extra={"host": settings.host, "port": settings.port})
    uvicorn.run(
        "boussole.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
