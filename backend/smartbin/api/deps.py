"""Common dependency functions for API routes."""

from fastapi import Depends

from smartbin.core.config import Settings, get_settings
from smartbin.services.classifier import ClassifierBackend, build_classifier
from smartbin.services.gemini_client import GeminiClient
from smartbin.services.history_store import HistoryStore


def get_app_settings() -> Settings:
    return get_settings()


def get_classifier(settings: Settings = Depends(get_app_settings)) -> ClassifierBackend:
    return build_classifier(settings)


def get_gemini_client(settings: Settings = Depends(get_app_settings)) -> GeminiClient:
    return GeminiClient(
        settings.gemini_api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout=settings.request_timeout,
    )


_stores: dict[str, HistoryStore] = {}


def get_history_store(settings: Settings = Depends(get_app_settings)) -> HistoryStore:
    # One store per file so every request shares the same lock.
    store = _stores.get(settings.history_path)
    if store is None:
        store = _stores.setdefault(settings.history_path, HistoryStore(settings.history_path))
    return store
