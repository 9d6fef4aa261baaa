"""Unit tests for the classifier backends and the fallback chain."""

from __future__ import annotations

import json

import pytest

from conftest import FakeResponse, StubClassifier
from smartbin.core.config import Settings
from smartbin.services import gemini_client, huggingface_client, ollama_client
from smartbin.services.classifier import (
    ClassificationResult,
    ClassifierConfigurationError,
    ClassifierHTTPError,
    FallbackClassifier,
    GeminiBackend,
    HuggingFaceBackend,
    ModelNotFoundError,
    OllamaBackend,
    build_classifier,
)
from smartbin.services.gemini_client import GeminiClient
from smartbin.services.huggingface_client import HuggingFaceClient
from smartbin.services.ollama_client import OllamaClient


def test_fallback_moves_on_when_model_is_not_found() -> None:
    missing = StubClassifier(error=ModelNotFoundError("404"))
    working = StubClassifier(result=ClassificationResult(text="glass", model="second"))

    result = FallbackClassifier([missing, working]).classify(b"img", "image/png")

    assert result.model == "second"
    assert len(missing.calls) == 1
    assert working.calls == [{"image": b"img", "mime_type": "image/png"}]


def test_fallback_stops_on_other_errors() -> None:
    failing = StubClassifier(error=ClassifierHTTPError("500"))
    never = StubClassifier()

    with pytest.raises(ClassifierHTTPError):
        FallbackClassifier([failing, never]).classify(b"img")
    assert never.calls == []


def test_fallback_reports_when_every_model_is_missing() -> None:
    chain = FallbackClassifier([StubClassifier(error=ModelNotFoundError("a")), StubClassifier(error=ModelNotFoundError("b"))])

    with pytest.raises(ModelNotFoundError, match="tried"):
        chain.classify(b"img")


def test_empty_chain_is_a_configuration_error() -> None:
    with pytest.raises(ClassifierConfigurationError):
        FallbackClassifier([])


def test_build_classifier_expands_huggingface_models() -> None:
    settings = Settings(
        classifier_backends=["huggingface", "gemini", "ollama"],
        huggingface_models=["a/one", "b/two"],
        gemini_model="gemini-x",
        ollama_model="llava",
    )

    chain = build_classifier(settings)

    assert [backend.name for backend in chain.backends] == [
        "HuggingFace(a/one)",
        "HuggingFace(b/two)",
        "Gemini(gemini-x)",
        "Ollama(llava)",
    ]


def test_gemini_backend_requires_api_key() -> None:
    backend = GeminiBackend(GeminiClient(None), prompt="what is it?")

    with pytest.raises(ClassifierConfigurationError):
        backend.classify(b"img")


def test_gemini_backend_sends_inline_image(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = {}

    def fake_post(url, **kwargs):
        captured["url"] = url
        captured.update(kwargs)
        return FakeResponse(payload={"candidates": [{"content": {"parts": [{"text": "A can."}, {"text": "Recycle it."}]}}]})

    monkeypatch.setattr(gemini_client.requests, "post", fake_post)
    backend = GeminiBackend(GeminiClient("key", model="gemini-2.5-flash"), prompt="what is it?")

    result = backend.classify(b"\x00\x01", "image/png")

    assert result.text == "A can.\nRecycle it."
    assert result.model == "Gemini(gemini-2.5-flash)"
    assert result.confidence is None
    assert captured["url"].endswith("/models/gemini-2.5-flash:generateContent")
    assert captured["params"] == {"key": "key"}
    parts = captured["json"]["contents"][0]["parts"]
    assert parts[0]["inline_data"] == {"mime_type": "image/png", "data": "AAE="}
    assert parts[1] == {"text": "what is it?"}


def test_gemini_404_is_model_not_found(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gemini_client.requests, "post", lambda url, **kwargs: FakeResponse(404, text="not found"))
    backend = GeminiBackend(GeminiClient("key"), prompt="p")

    with pytest.raises(ModelNotFoundError):
        backend.classify(b"img")


def test_gemini_text_extraction_falls_back_to_json() -> None:
    assert GeminiClient.extract_text({"promptFeedback": {"blockReason": "SAFETY"}}) == (
        '{"promptFeedback": {"blockReason": "SAFETY"}}'
    )


def test_huggingface_backend_returns_top_label(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = {}

    def fake_post(url, **kwargs):
        captured["url"] = url
        captured.update(kwargs)
        return FakeResponse(payload=[{"label": "cardboard", "score": 0.1}, {"label": "plastic", "score": 0.875}])

    monkeypatch.setattr(huggingface_client.requests, "post", fake_post)
    backend = HuggingFaceBackend(HuggingFaceClient("token", base_url="https://hf.test"), "org/model")

    result = backend.classify(b"img", "image/jpeg")

    assert result.label == "plastic"
    assert result.text == "plastic"
    assert result.confidence == 87.5
    assert result.model == "HuggingFace(org/model)"
    assert captured["url"] == "https://hf.test/models/org/model"
    assert captured["data"] == b"img"
    assert captured["headers"]["Authorization"] == "Bearer token"


def test_huggingface_chain_falls_back_on_missing_model(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_post(url, **kwargs):
        if url.endswith("/missing"):
            return FakeResponse(404, text="Model not found")
        return FakeResponse(payload=[[{"label": "glass", "score": 0.5}]])

    monkeypatch.setattr(huggingface_client.requests, "post", fake_post)
    hf = HuggingFaceClient(base_url="https://hf.test")
    chain = FallbackClassifier([HuggingFaceBackend(hf, "missing"), HuggingFaceBackend(hf, "present")])

    result = chain.classify(b"img")

    assert result.label == "glass"
    assert result.model == "HuggingFace(present)"


def test_huggingface_server_error_is_not_retried(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(huggingface_client.requests, "post", lambda url, **kwargs: FakeResponse(503, text="loading"))
    hf = HuggingFaceClient(base_url="https://hf.test")

    with pytest.raises(ClassifierHTTPError):
        FallbackClassifier([HuggingFaceBackend(hf, "a"), HuggingFaceBackend(hf, "b")]).classify(b"img")


def test_ollama_backend_sends_base64_image(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = {}

    def fake_post(url, **kwargs):
        captured["url"] = url
        captured.update(kwargs)
        return FakeResponse(payload={"message": {"role": "assistant", "content": " A banana peel. "}})

    monkeypatch.setattr(ollama_client.requests, "post", fake_post)
    backend = OllamaBackend(OllamaClient("http://ollama.test/"), "llava", "what is it?")

    result = backend.classify(b"\x00\x01")

    assert result.text == "A banana peel."
    assert result.model == "Ollama(llava)"
    assert captured["url"] == "http://ollama.test/api/chat"
    message = captured["json"]["messages"][0]
    assert message["images"] == ["AAE="]
    assert message["content"] == "what is it?"


def test_huggingface_non_json_body_is_a_classifier_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(huggingface_client.requests, "post", lambda url, **kwargs: FakeResponse(200, text="<html>"))
    backend = HuggingFaceBackend(HuggingFaceClient(base_url="https://hf.test"), "org/model")

    with pytest.raises(ClassifierHTTPError, match="non-JSON"):
        backend.classify(b"img")


def test_huggingface_skips_labels_without_numeric_score(monkeypatch: pytest.MonkeyPatch) -> None:
    payload = [{"label": "x", "score": None}, {"label": "y", "score": "high"}, {"label": "paper", "score": 0.25}]
    monkeypatch.setattr(huggingface_client.requests, "post", lambda url, **kwargs: FakeResponse(payload=payload))
    backend = HuggingFaceBackend(HuggingFaceClient(base_url="https://hf.test"), "org/model")

    result = backend.classify(b"img")

    assert result.label == "paper"
    assert result.confidence == 25.0


def test_huggingface_only_unscored_labels_is_an_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        huggingface_client.requests, "post", lambda url, **kwargs: FakeResponse(payload=[{"label": "x", "score": None}])
    )
    backend = HuggingFaceBackend(HuggingFaceClient(base_url="https://hf.test"), "org/model")

    with pytest.raises(ClassifierHTTPError, match="no labels"):
        backend.classify(b"img")


def test_huggingface_confidence_is_clamped_to_percent_range(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        huggingface_client.requests, "post", lambda url, **kwargs: FakeResponse(payload=[{"label": "can", "score": 1.7}])
    )
    backend = HuggingFaceBackend(HuggingFaceClient(base_url="https://hf.test"), "org/model")

    assert backend.classify(b"img").confidence == 100.0


def test_ollama_non_json_body_is_a_classifier_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(ollama_client.requests, "post", lambda url, **kwargs: FakeResponse(200, text="oops"))
    backend = OllamaBackend(OllamaClient("http://ollama.test"), "llava", "what is it?")

    with pytest.raises(ClassifierHTTPError, match="non-JSON"):
        backend.classify(b"img")


@pytest.mark.parametrize(
    "payload",
    [
        {"candidates": [{"content": None, "finishReason": "SAFETY"}]},
        {"candidates": [{"content": {"parts": None}}]},
        {"candidates": {"unexpected": True}},
    ],
)
def test_gemini_text_extraction_handles_missing_content(payload) -> None:
    text = GeminiClient.extract_text(payload)

    assert text.startswith("{")
    assert text == json.dumps(payload, ensure_ascii=False)
