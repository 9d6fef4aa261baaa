from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smartbin.api.routes import advice, ask, classify, health
from smartbin.core.config import get_settings

logger = logging.getLogger("smartbin.backend")
logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    for router in (health.router, classify.router, ask.router, advice.router):
        app.include_router(router, prefix="/api")
    logger.info(
        "Starting %s (%s) with classifier backends: %s",
        settings.app_name,
        settings.environment,
        ", ".join(settings.classifier_backends),
    )
    return app


app = create_app()

__all__ = ["app", "create_app"]
