"""Shared fixtures for API tests."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from smartbin.api.deps import get_app_settings, get_classifier, get_history_store
from smartbin.core.config import Settings
from smartbin.main import app
from smartbin.services.classifier import ClassificationResult, ClassifierBackend
from smartbin.services.history_store import HistoryStore


class StubClassifier(ClassifierBackend):
    """Classifier stub returning a canned result or raising a canned error."""

    name = "Stub(model)"

    def __init__(self, result: Optional[ClassificationResult] = None, error: Optional[Exception] = None) -> None:
        self.result = result or ClassificationResult(
            text="Plastic bottle\nRecycling:\n1. Rinse it\n2. Recycle it",
            model=self.name,
        )
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def classify(self, image: bytes, mime_type: str = "image/jpeg") -> ClassificationResult:
        self.calls.append({"image": image, "mime_type": mime_type})
        if self.error is not None:
            raise self.error
        return self.result


class FakeResponse:
    """Minimal stand-in for :class:`requests.Response`."""

    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text
        self.headers = {"Content-Type": "application/json"}

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON")
        return self._payload


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        history_path=str(tmp_path / "history.jsonl"),
        gemini_api_key="test-key",
        max_upload_bytes=1024,
    )


@pytest.fixture
def stub_classifier() -> StubClassifier:
    return StubClassifier()


@pytest.fixture
def history_store(settings: Settings) -> HistoryStore:
    return HistoryStore(settings.history_path)


@pytest.fixture
def client(settings: Settings, stub_classifier: StubClassifier, history_store: HistoryStore):
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_classifier] = lambda: stub_classifier
    app.dependency_overrides[get_history_store] = lambda: history_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
