"""Client for the hosted Hugging Face image-classification inference API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import requests

logger = logging.getLogger(__name__)


class HuggingFaceError(RuntimeError):
    """Raised when the inference API rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class LabelScore:
    label: str
    score: float


class HuggingFaceClient:
    def __init__(
        self,
        api_token: Optional[str] = None,
        *,
        base_url: str = "https://api-inference.huggingface.co",
        timeout: float = 120.0,
    ) -> None:
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def classify_image(self, model: str, image: bytes, mime_type: str = "image/jpeg") -> List[LabelScore]:
        """Return label/score pairs for ``image`` sorted by descending score."""

        url = f"{self.base_url}/models/{model}"
        headers = {"Content-Type": mime_type or "application/octet-stream"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        try:
            response = requests.post(url, data=image, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:  # pragma: no cover - network errors are rare
            raise HuggingFaceError(f"Failed to connect to Hugging Face at {url}: {exc}") from exc
        if response.status_code != 200:
            raise HuggingFaceError(
                f"Hugging Face model '{model}' failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise HuggingFaceError(f"Hugging Face model '{model}' returned a non-JSON response") from exc
        return self._parse_scores(data)

    @staticmethod
    def _parse_scores(data: Any) -> List[LabelScore]:
        if isinstance(data, dict) and data.get("error"):
            raise HuggingFaceError(str(data["error"]))
        # Some models wrap the predictions in an extra list.
        if isinstance(data, list) and data and isinstance(data[0], list):
            data = data[0]
        if not isinstance(data, list):
            raise HuggingFaceError(f"Unexpected inference payload: {data!r}")
        scores: List[LabelScore] = []
        for item in data:
            if not isinstance(item, dict) or not item.get("label"):
                continue
            score = item.get("score", 0.0)
            if isinstance(score, bool) or not isinstance(score, (int, float)):
                logger.warning("Skipping label %r with non-numeric score %r", item["label"], score)
                continue
            scores.append(LabelScore(label=str(item["label"]), score=float(score)))
        return sorted(scores, key=lambda item: item.score, reverse=True)
