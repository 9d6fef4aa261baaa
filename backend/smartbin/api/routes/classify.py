"""Endpoints for classifying uploaded waste photos and reading scan history."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from smartbin.api.deps import get_app_settings, get_classifier, get_history_store
from smartbin.core.config import Settings
from smartbin.schemas.classification import ClassifyResponse
from smartbin.services.advice_formatter import format_advice
from smartbin.services.classifier import (
    ClassifierBackend,
    ClassifierConfigurationError,
    ClassifierError,
)
from smartbin.services.history_store import ClassificationRecord, HistoryStore, HistoryStoreError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["classification"])


@router.post("/classify", response_model=ClassifyResponse)
def classify(
    image: Optional[UploadFile] = File(default=None),
    settings: Settings = Depends(get_app_settings),
    classifier: ClassifierBackend = Depends(get_classifier),
    store: HistoryStore = Depends(get_history_store),
) -> ClassifyResponse:
    """Classify an uploaded image and store the result in the history."""

    if image is None:
        raise HTTPException(status_code=400, detail="No file uploaded (field name = image)")
    mime_type = image.content_type or "application/octet-stream"
    if not mime_type.startswith("image/"):
        raise HTTPException(status_code=415, detail=f"Unsupported content type: {mime_type}")

    payload = image.file.read(settings.max_upload_bytes + 1)
    if not payload:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(payload) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Uploaded file is too large")

    logger.info(
        "Classify request: filename=%s content_type=%s size=%s",
        image.filename,
        mime_type,
        len(payload),
    )

    try:
        result = classifier.classify(payload, mime_type)
    except ClassifierConfigurationError as exc:
        logger.error("Classifier is not configured: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except ClassifierError as exc:
        logger.error("Classification failed: %s", exc)
        raise HTTPException(status_code=502, detail="Classification request failed") from exc

    record = ClassificationRecord(
        original_name=image.filename or "upload.jpg",
        label_text=result.text,
        label=result.label,
        confidence=result.confidence,
        used_model=result.model,
    )
    try:
        store.append(record)
    except HistoryStoreError as exc:
        logger.error("Failed to persist record %s: %s", record.id, exc)

    return ClassifyResponse(record=record, advice_html=format_advice(record.label_text))


@router.get("/history", response_model=List[ClassificationRecord])
def history(
    limit: Optional[int] = Query(default=None, ge=1, description="Return only the newest records"),
    store: HistoryStore = Depends(get_history_store),
) -> List[ClassificationRecord]:
    """Return the stored scans, oldest first, or the newest ``limit`` records.

    Records use snake_case keys (``original_name``, ``label_text``,
    ``used_model``) and carry no server-side ``filename``; clients written
    against the camelCase ``originalName``/``labelText``/``usedModel`` shape
    must read the new keys.
    """

    try:
        if limit is None:
            return store.list_all()
        return store.list_recent(limit)
    except HistoryStoreError as exc:
        logger.error("Failed to read history: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to read history") from exc
