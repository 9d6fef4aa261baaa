"""Schemas for classification and history endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from smartbin.services.history_store import ClassificationRecord


class ClassifyResponse(BaseModel):
    success: bool = Field(default=True, description="Whether the classification succeeded")
    record: ClassificationRecord = Field(..., description="Stored classification record")
    advice_html: str = Field(..., description="Record text rendered as display-ready HTML")
