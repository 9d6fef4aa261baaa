"""Classifier backends and the fallback chain used by the classify endpoint."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from smartbin.core.config import Settings
from smartbin.services.gemini_client import GeminiClient, GeminiError
from smartbin.services.huggingface_client import HuggingFaceClient, HuggingFaceError
from smartbin.services.ollama_client import OllamaClient, OllamaError

logger = logging.getLogger(__name__)


class ClassifierError(RuntimeError):
    """Base class for classification failures."""


class ClassifierConfigurationError(ClassifierError):
    """Raised when a backend cannot run because it is not configured."""


class ModelNotFoundError(ClassifierError):
    """Raised when the requested model does not exist on the backend."""


class ClassifierHTTPError(ClassifierError):
    """Raised when the backend answered with an error or could not be reached."""


@dataclass
class ClassificationResult:
    """Normalized output of a single classification call."""

    text: str
    model: str
    label: Optional[str] = None
    confidence: Optional[float] = None


def _translate_error(exc: GeminiError | OllamaError | HuggingFaceError) -> ClassifierError:
    if exc.status_code == 404:
        return ModelNotFoundError(str(exc))
    return ClassifierHTTPError(str(exc))


class ClassifierBackend(ABC):
    name: str = "backend"

    @abstractmethod
    def classify(self, image: bytes, mime_type: str = "image/jpeg") -> ClassificationResult:
        """Classify ``image`` and return the normalized result."""


class GeminiBackend(ClassifierBackend):
    def __init__(self, client: GeminiClient, prompt: str) -> None:
        self._client = client
        self._prompt = prompt
        self.name = f"Gemini({client.model})"

    def classify(self, image: bytes, mime_type: str = "image/jpeg") -> ClassificationResult:
        if not self._client.configured:
            raise ClassifierConfigurationError("Missing Gemini API key (SMARTBIN_GEMINI_API_KEY)")
        try:
            response = self._client.describe_image(self._prompt, image, mime_type)
        except GeminiError as exc:
            raise _translate_error(exc) from exc
        return ClassificationResult(text=response.text, model=self.name)


class OllamaBackend(ClassifierBackend):
    def __init__(self, client: OllamaClient, model: str, prompt: str) -> None:
        self._client = client
        self._model = model
        self._prompt = prompt
        self.name = f"Ollama({model})"

    def classify(self, image: bytes, mime_type: str = "image/jpeg") -> ClassificationResult:
        try:
            response = self._client.describe_image(self._model, self._prompt, image)
        except OllamaError as exc:
            raise _translate_error(exc) from exc
        return ClassificationResult(text=response.response, model=self.name)


class HuggingFaceBackend(ClassifierBackend):
    def __init__(self, client: HuggingFaceClient, model: str) -> None:
        self._client = client
        self._model = model
        self.name = f"HuggingFace({model})"

    def classify(self, image: bytes, mime_type: str = "image/jpeg") -> ClassificationResult:
        try:
            scores = self._client.classify_image(self._model, image, mime_type)
        except HuggingFaceError as exc:
            raise _translate_error(exc) from exc
        if not scores:
            raise ClassifierHTTPError(f"{self.name} returned no labels")
        best = scores[0]
        return ClassificationResult(
            text=best.label,
            label=best.label,
            confidence=round(min(max(best.score, 0.0), 1.0) * 100, 2),
            model=self.name,
        )


class FallbackClassifier(ClassifierBackend):
    """Try backends in order, moving on only when a model is not found."""

    name = "fallback"

    def __init__(self, backends: Sequence[ClassifierBackend]) -> None:
        if not backends:
            raise ClassifierConfigurationError("No classifier backends configured")
        self.backends: List[ClassifierBackend] = list(backends)

    def classify(self, image: bytes, mime_type: str = "image/jpeg") -> ClassificationResult:
        tried: List[str] = []
        for backend in self.backends:
            tried.append(backend.name)
            try:
                result = backend.classify(image, mime_type)
            except ModelNotFoundError as exc:
                logger.warning("Backend %s has no such model, trying next: %s", backend.name, exc)
                continue
            logger.info("Image classified by %s", backend.name)
            return result
        raise ModelNotFoundError(f"No candidate model available (tried: {', '.join(tried)})")


def build_classifier(settings: Settings) -> FallbackClassifier:
    """Build the backend chain described by ``settings.classifier_backends``."""

    backends: List[ClassifierBackend] = []
    for name in settings.classifier_backends:
        if name == "gemini":
            client = GeminiClient(
                settings.gemini_api_key,
                model=settings.gemini_model,
                base_url=settings.gemini_base_url,
                timeout=settings.request_timeout,
            )
            backends.append(GeminiBackend(client, settings.classify_prompt))
        elif name == "ollama":
            ollama = OllamaClient(base_url=settings.ollama_base_url, timeout=settings.request_timeout)
            backends.append(OllamaBackend(ollama, settings.ollama_model, settings.classify_prompt))
        elif name == "huggingface":
            hf = HuggingFaceClient(
                settings.huggingface_api_token,
                base_url=settings.huggingface_base_url,
                timeout=settings.request_timeout,
            )
            backends.extend(HuggingFaceBackend(hf, model) for model in settings.huggingface_models)
        else:
            raise ClassifierConfigurationError(f"Unknown classifier backend: {name!r}")
    return FallbackClassifier(backends)
