"""FastAPI application entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vidsum.config import Settings, settings as default_settings
from vidsum.logging_config import configure_logging
from vidsum.routers.jobs import router as jobs_router
from vidsum.services.content_generator import ContentGenerator
from vidsum.services.orchestrator import ProcessingOrchestrator
from vidsum.storage.job_store import build_job_store

logger = structlog.get_logger(__name__)

SERVICE_NAME = "Video Summarizer API"
VERSION = "1.0.0"


def create_app(
    settings: Optional[Settings] = None,
    generator: Optional[ContentGenerator] = None,
) -> FastAPI:
    """Build the application; the job store and orchestrator are created on startup."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = build_job_store(settings)
        app.state.orchestrator = ProcessingOrchestrator.from_settings(store, settings, generator)
        logger.info("service_started", store=type(store).__name__)
        try:
            yield
        finally:
            await app.state.orchestrator.close()
            logger.info("service_stopped")

    app = FastAPI(
        title=SERVICE_NAME,
        description=(
            "Simulated AI video summarization backend. Submit a video, then poll the job "
            "until it completes with a transcription, key frames and a summary."
        ),
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS: allow all in development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(jobs_router)

    @app.get("/health", tags=["system"])
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": VERSION,
        }

    @app.get("/", tags=["system"])
    async def root():
        return {
            "message": SERVICE_NAME,
            "docs": "/docs",
            "health": "/health",
        }

    return app


configure_logging(default_settings.log_level, default_settings.log_json)

app = create_app()
