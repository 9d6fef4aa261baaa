"""Client wrapper around the Gemini ``generateContent`` REST API."""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class GeminiError(RuntimeError):
    """Raised when the Gemini API call fails or returns an unexpected payload."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class GeminiResponse:
    model: str
    text: str
    raw: Dict[str, Any]


class GeminiClient:
    """Synchronous HTTP client for the Gemini API."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 120.0,
    ) -> None:
        self.api_key = api_key or ""
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _post(self, parts: List[Dict[str, Any]]) -> Dict[str, Any]:
        if not self.configured:
            raise GeminiError("Missing Gemini API key")
        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = {"contents": [{"parts": parts}]}
        try:
            response = requests.post(
                url,
                params={"key": self.api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:  # pragma: no cover - network errors are rare
            raise GeminiError(f"Failed to connect to Gemini: {exc}") from exc
        if response.status_code != 200:
            raise GeminiError(
                f"Gemini model '{self.model}' failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise GeminiError("Gemini returned a non-JSON response") from exc

    def generate_text(self, prompt: str) -> GeminiResponse:
        """Send a text-only prompt."""

        data = self._post([{"text": prompt}])
        return GeminiResponse(model=self.model, text=self.extract_text(data), raw=data)

    def describe_image(self, prompt: str, image: bytes, mime_type: str = "image/jpeg") -> GeminiResponse:
        """Send an inline base64 image followed by ``prompt``."""

        parts = [
            {
                "inline_data": {
                    "mime_type": mime_type or "image/jpeg",
                    "data": base64.b64encode(image).decode("ascii"),
                }
            },
            {"text": prompt},
        ]
        logger.debug("Sending image of %s bytes to Gemini model '%s'", len(image), self.model)
        data = self._post(parts)
        return GeminiResponse(model=self.model, text=self.extract_text(data), raw=data)

    @staticmethod
    def extract_text(data: Any) -> str:
        """Join the text parts of the first candidate.

        Payloads without candidate parts are serialised and truncated so that
        the caller still has something to show.
        """

        if isinstance(data, dict):
            candidates = data.get("candidates") or []
            candidate = candidates[0] if isinstance(candidates, list) and candidates else None
            content = candidate.get("content") if isinstance(candidate, dict) else None
            parts = content.get("parts") if isinstance(content, dict) else None
            if isinstance(parts, list):
                return "\n".join(str(part.get("text") or "") for part in parts if isinstance(part, dict)).strip()
        if isinstance(data, str):
            return data
        return json.dumps(data, ensure_ascii=False)[:2000]
