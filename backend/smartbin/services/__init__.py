"""Service layer for the application."""

from smartbin.services.advice_formatter import AdviceBlock, format_advice
from smartbin.services.classifier import (
    ClassificationResult,
    ClassifierBackend,
    ClassifierConfigurationError,
    ClassifierError,
    FallbackClassifier,
    ModelNotFoundError,
    build_classifier,
)
from smartbin.services.history_store import ClassificationRecord, HistoryStore, HistoryStoreError

__all__ = [
    "AdviceBlock",
    "ClassificationRecord",
    "ClassificationResult",
    "ClassifierBackend",
    "ClassifierConfigurationError",
    "ClassifierError",
    "FallbackClassifier",
    "HistoryStore",
    "HistoryStoreError",
    "ModelNotFoundError",
    "build_classifier",
    "format_advice",
]
