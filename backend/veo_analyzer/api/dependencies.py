from __future__ import annotations
from functools import lru_cache

from fastapi import HTTPException
from starlette import status

from veo_analyzer.core.config import get_settings
from veo_analyzer.core.exceptions import (
    AnalysisInProgressError,
    AnalyzerError,
    InvalidTransitionError,
    SessionNotFoundError,
)
from veo_analyzer.services.gemini import AnalysisClient
from veo_analyzer.services.media import VideoStore
from veo_analyzer.services.registry import SessionRegistry
from veo_analyzer.services.session import Session


def build_registry() -> SessionRegistry:
    settings = get_settings()
    store = VideoStore(settings.UPLOAD_DIR, settings.upload_url)
    client = AnalysisClient(api_key=settings.GEMINI_API_KEY, model_name=settings.GEMINI_MODEL_VISION)
    return SessionRegistry(lambda: Session(client=client, store=store))


@lru_cache
def get_registry() -> SessionRegistry:
    return build_registry()


def to_http_error(e: AnalyzerError) -> HTTPException:
    if isinstance(e, SessionNotFoundError):
        return HTTPException(status.HTTP_404_NOT_FOUND, e.message)
    if isinstance(e, (AnalysisInProgressError, InvalidTransitionError)):
        return HTTPException(status.HTTP_409_CONFLICT, e.message)
    return HTTPException(status.HTTP_400_BAD_REQUEST, e.message)
