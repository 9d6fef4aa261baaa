"""Append-only JSON Lines storage for classification records."""

from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class HistoryStoreError(RuntimeError):
    """Raised when the history file cannot be read or written."""


def _new_id() -> str:
    return uuid.uuid4().hex


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ClassificationRecord(BaseModel):
    id: str = Field(default_factory=_new_id, description="Unique record identifier")
    timestamp: str = Field(default_factory=_utc_now, description="ISO-8601 time of the scan")
    original_name: str = Field(..., description="Name of the uploaded file")
    label_text: str = Field(default="", description="Free-text or label output of the model")
    label: Optional[str] = Field(default=None, description="Discrete label, if the model produced one")
    confidence: Optional[float] = Field(default=None, ge=0, le=100, description="Confidence in percent")
    used_model: str = Field(..., description="Identifier of the model that produced the result")


class HistoryStore:
    """Process-wide history of scans backed by a JSON Lines file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, record: ClassificationRecord) -> None:
        line = record.model_dump_json()
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as handle:
                    handle.write(line + "\n")
            except OSError as exc:
                raise HistoryStoreError(f"Failed to write history to {self.path}: {exc}") from exc
        logger.debug("Stored record %s in %s", record.id, self.path)

    def list_all(self) -> List[ClassificationRecord]:
        """Return every stored record, oldest first."""

        with self._lock:
            if not self.path.exists():
                return []
            try:
                lines = self.path.read_text(encoding="utf-8").splitlines()
            except OSError as exc:
                raise HistoryStoreError(f"Failed to read history from {self.path}: {exc}") from exc

        records: List[ClassificationRecord] = []
        for number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                records.append(ClassificationRecord.model_validate(json.loads(line)))
            except (json.JSONDecodeError, ValidationError) as exc:
                logger.warning("Skipping corrupt history line %s in %s: %s", number, self.path, exc)
        return records

    def list_recent(self, limit: int) -> List[ClassificationRecord]:
        """Return up to ``limit`` records, newest first."""

        if limit <= 0:
            return []
        return list(reversed(self.list_all()[-limit:]))
