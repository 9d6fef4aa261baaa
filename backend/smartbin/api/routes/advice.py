"""Render raw advice text as HTML."""

from fastapi import APIRouter

from smartbin.schemas.advice import FormatAdviceRequest, FormatAdviceResponse
from smartbin.services.advice_formatter import format_advice

router = APIRouter(prefix="/advice", tags=["advice"])


@router.post("/format", response_model=FormatAdviceResponse)
def format_advice_text(payload: FormatAdviceRequest) -> FormatAdviceResponse:
    return FormatAdviceResponse(html=format_advice(payload.text))
