"""
FastAPI dependencies shared by the routers.

The Gemini client is built lazily on first use and cached, so the app can
start (and serve /health) without credentials; requests that need the
model fail fast with MissingCredential instead.
"""

from functools import lru_cache

from fastapi import Depends

from fitting_room.config import Settings, get_settings
from fitting_room.services.gemini import GeminiClient
from fitting_room.services.orchestrator import GenerationOrchestrator
from fitting_room.services.session import SessionStore, session_store
from fitting_room.services.storage import LocalStorage, storage
from fitting_room.services.video import VideoRequestHandler


@lru_cache()
def get_gemini_client() -> GeminiClient:
    return GeminiClient.from_settings(get_settings())


def get_session_store() -> SessionStore:
    return session_store


def get_storage() -> LocalStorage:
    return storage


def get_orchestrator(
    client: GeminiClient = Depends(get_gemini_client),
    settings: Settings = Depends(get_settings),
) -> GenerationOrchestrator:
    return GenerationOrchestrator(client, policy=settings.view_failure_policy)


def get_video_handler(
    client: GeminiClient = Depends(get_gemini_client),
    media_storage: LocalStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> VideoRequestHandler:
    return VideoRequestHandler(
        client,
        storage=media_storage,
        poll_interval=settings.video_poll_interval,
        timeout_seconds=settings.video_timeout_seconds,
        aspect_ratio=settings.video_aspect_ratio,
    )
