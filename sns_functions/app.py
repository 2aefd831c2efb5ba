from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from sns_functions.api.responses import json_response
from sns_functions.api.routes import router
from sns_functions.config import Settings, get_settings
from sns_functions.errors import FunctionError
from sns_functions.models.db import init_db

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    app_settings = settings or get_settings()
    app = FastAPI(
        title=app_settings.app_name,
        description="Push fan-out, notification triggers and Naver login functions for the community app",
        version="0.1.0",
        debug=app_settings.app_debug,
    )
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    @app.on_event("startup")
    def startup_event() -> None:
        missing = app.state.settings.missing_required()
        if missing:
            raise RuntimeError(f"Missing required configuration: {', '.join(missing)}")

        max_attempts = 5
        delay_seconds = 2
        last_error: Exception | None = None

        for attempt in range(1, max_attempts + 1):
            try:
                init_db()
                logger.info("Database initialization completed", extra={"attempt": attempt})
                return
            except SQLAlchemyError as exc:
                last_error = exc
                logger.exception(
                    "Database initialization failed",
                    extra={"attempt": attempt, "max_attempts": max_attempts},
                )
                if attempt < max_attempts:
                    time.sleep(delay_seconds)

        raise RuntimeError("Database initialization failed after retries") from last_error

    @app.exception_handler(FunctionError)
    async def function_error_handler(_request: Request, exc: FunctionError):
        return json_response(exc.to_body(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_request: Request, exc: RequestValidationError):
        return json_response(
            {"error": "Invalid request body", "details": str(exc.errors())},
            status_code=400,
        )

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    app.include_router(router)
    return app


app = create_app()
