"""Schemas for the ask and advice formatting endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class AskRequest(BaseModel):
    question: Optional[str] = Field(default=None, description="Question for the model")
    input: Optional[str] = Field(default=None, description="Alternative field carrying the question")

    @property
    def prompt(self) -> str:
        return (self.question or self.input or "").strip()


class AskResponse(BaseModel):
    answer: str


class FormatAdviceRequest(BaseModel):
    text: Optional[str] = Field(default=None, description="Raw advice text to render")


class FormatAdviceResponse(BaseModel):
    html: str
