"""Dependency injection providers for FastAPI."""

from fastapi import Request

from framecast.config import Settings
from framecast.pipeline.manager import CompositingPipeline


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pipeline(request: Request) -> CompositingPipeline:
    return request.app.state.pipeline
