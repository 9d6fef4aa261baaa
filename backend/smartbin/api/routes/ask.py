"""Free-form questions answered by the Gemini text model."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from smartbin.api.deps import get_gemini_client
from smartbin.schemas.advice import AskRequest, AskResponse
from smartbin.services.gemini_client import GeminiClient, GeminiError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ask"])


@router.post("/ask", response_model=AskResponse)
def ask(payload: AskRequest, client: GeminiClient = Depends(get_gemini_client)) -> AskResponse:
    prompt = payload.prompt
    if not prompt:
        raise HTTPException(status_code=400, detail="No question provided")
    try:
        response = client.generate_text(prompt)
    except GeminiError as exc:
        logger.error("Ask request failed: %s", exc)
        raise HTTPException(status_code=502, detail="AI request failed") from exc
    return AskResponse(answer=response.text or "No answer")
