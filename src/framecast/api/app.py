"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from framecast import __version__
from framecast.api.middleware import (
    UploadSizeLimitMiddleware,
    framecast_error_handler,
    request_validation_handler,
    unhandled_error_handler,
)
from framecast.api.routes import upload
from framecast.config import Settings, get_settings
from framecast.models.errors import FramecastError
from framecast.pipeline.manager import CompositingPipeline
from framecast.uploads.validators import size_limit_message

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    pipeline: CompositingPipeline | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    pipeline = pipeline or CompositingPipeline(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        pipeline.store.sweep_expired(settings.scratch_file_ttl_seconds)
        for path in pipeline.resolver.missing_assets():
            logger.warning("Configured asset is missing: %s", path)
        logger.info(
            "Framecast ready (audio mode %s, %d transcode slots)",
            settings.audio_mode,
            settings.max_concurrent_jobs,
        )
        yield

    app = FastAPI(
        title="Framecast",
        description="Frame overlay and soundtrack compositing for uploaded videos",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.pipeline = pipeline

    app.add_middleware(
        UploadSizeLimitMiddleware,
        max_body_bytes=settings.upload_max_bytes + settings.multipart_overhead_bytes,
        message=size_limit_message(settings.upload_max_bytes),
    )
    # CORS outermost so rejections still carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Content-Disposition"],
        max_age=86400,
    )

    # Error handlers
    app.add_exception_handler(FramecastError, framecast_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Routes
    app.include_router(upload.router)
    app.include_router(upload.blob_router)

    @app.get("/")
    async def welcome():
        return {"message": "Welcome to the Framecast API"}

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app
