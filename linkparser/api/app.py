"""FastAPI application factory.

Lifespan
--------
On startup the app configures logging.  On shutdown it closes the shared
HTTP client used by the fetcher.

Routers
-------
    /links     — fetch a page and list its links
    /extract   — list links in posted HTML
    /health    — liveness probe
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from linkparser import __version__
from linkparser.api.routers import links as links_router
from linkparser.logging_setup import configure_logging
from linkparser.scraper.fetcher import close_client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging on startup and release the HTTP client on shutdown."""
    configure_logging()
    try:
        yield
    finally:
        close_client()


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="HTML Link Parser API",
        description=(
            "Fetches a single HTML page and returns the absolute http/https "
            "links found in its anchors, de-duplicated in document order."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(links_router.router, tags=["links"])

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


# Module-level instance used by uvicorn:
#   uvicorn linkparser.api.app:app --reload
app = create_app()
