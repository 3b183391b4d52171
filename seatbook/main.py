from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from seatbook.api.router import api_router
from seatbook.core.config import get_settings
from seatbook.core.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting %s (%s)", get_settings().app_name, get_settings().environment)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable. Please try again."})

    @app.get("/health")
    def health():
        return {"ok": True}

    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()
