"""Health check endpoints."""

from fastapi import APIRouter, Depends

from smartbin.api.deps import get_classifier
from smartbin.services.classifier import ClassifierBackend, FallbackClassifier

router = APIRouter()


@router.get("/health", tags=["system"])
def healthcheck(classifier: ClassifierBackend = Depends(get_classifier)) -> dict[str, object]:
    """Simple readiness probe listing the configured classifier chain."""

    if isinstance(classifier, FallbackClassifier):
        backends = [backend.name for backend in classifier.backends]
    else:
        backends = [classifier.name]
    return {"status": "ok", "backends": backends}
