"""Client wrapper around the Ollama REST API for vision models."""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class OllamaError(RuntimeError):
    """Raised when the Ollama API returns an unexpected response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class OllamaResponse:
    """Structured response from the Ollama API."""

    model: str
    response: str
    raw: Dict[str, Any]


class OllamaClient:
    """Synchronous HTTP client for Ollama interactions."""

    def __init__(self, base_url: str = "http://localhost:11434", timeout: float = 120.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # ---------------------------------------------------------------------
    # Helper HTTP methods
    # ---------------------------------------------------------------------
    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = requests.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:  # pragma: no cover
            raise OllamaError(f"Failed to connect to Ollama at {url}: {exc}") from exc
        if response.status_code != 200:
            raise OllamaError(
                f"Ollama POST {url} failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        content_type = response.headers.get("Content-Type", "application/json")
        if "json" not in content_type:
            raise OllamaError(f"Unexpected content type from Ollama: {content_type}")
        try:
            return response.json()
        except ValueError as exc:
            raise OllamaError(f"Ollama returned a non-JSON response from {url}") from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def describe_image(self, model: str, prompt: str, image: bytes) -> OllamaResponse:
        """Ask a vision model about ``image`` using the chat API."""

        messages: List[Dict[str, Any]] = [
            {
                "role": "user",
                "content": prompt,
                "images": [base64.b64encode(image).decode("ascii")],
            }
        ]
        payload: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "stream": False,
            "options": {"temperature": 0.2},
        }
        logger.debug("Sending image of %s bytes to Ollama model '%s'", len(image), model)
        data = self._post("/api/chat", payload)
        return OllamaResponse(model=model, response=self._extract_response_text(data), raw=data)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _extract_response_text(data: Dict[str, Any]) -> str:
        """Extract plain text from an Ollama chat response."""

        message = data.get("message") if isinstance(data, dict) else None
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content.strip()
        if isinstance(data, dict) and data.get("response") is not None:
            return str(data["response"]).strip()
        return json.dumps(data, ensure_ascii=False)
