from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    sessions: int


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Release the enrichment worker pool on shutdown."""
    from app.services.enrichment_service import get_enrichment_service

    logging.getLogger(__name__).info("Cargo analytics API started")
    try:
        yield
    finally:
        if get_enrichment_service.cache_info().currsize:
            get_enrichment_service().shutdown()
            logging.getLogger(__name__).info("Enrichment worker pool shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    from app.config import load_env_files

    load_env_files()
    _configure_logging()

    application = FastAPI(
        title="Cargo Insurance Analytics API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import analytics_router, enrichment_router, sessions_router

    application.include_router(sessions_router)
    application.include_router(analytics_router)
    application.include_router(enrichment_router)

    @application.get("/health")
    def healthcheck() -> HealthResponse:
        from app.services.analytics_session import get_session_store

        return HealthResponse(status="ok", sessions=len(get_session_store()))

    return application


app = create_app()
