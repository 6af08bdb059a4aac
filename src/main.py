"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 3000
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.om_common.database import engine
from src.om_common.datetime_utils import utc_now
from src.om_common.errors import AppError, InternalError
from src.om_common.response import json_envelope
from src.om_gateway.middleware.request_log import RequestLogMiddleware, request_id_of
from src.om_order.api.router import router as order_router
from src.om_order.application.schemas import format_validation_errors

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("om.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB connection. Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("%s started (environment=%s)", settings.APP_NAME, settings.ENVIRONMENT)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error(
            "[%d] %s %s %s details=%s",
            exc.http_status, request.method, request.url.path, exc.message, exc.details,
            exc_info=exc,
        )
    else:
        logger.warning("[%d] %s %s %s", exc.http_status, request.method, request.url.path, exc.message)

    data = None
    if exc.details is not None and not settings.is_production:
        data = {"code": exc.code, "details": exc.details}
    return json_envelope(exc.http_status, exc.message, data, request_id=request_id_of(request))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    message = format_validation_errors(exc.errors())
    logger.warning("[400] %s %s %s", request.method, request.url.path, message)
    return json_envelope(400, message, request_id=request_id_of(request))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("[500] %s %s unhandled", request.method, request.url.path, exc_info=exc)
    err = InternalError()
    return json_envelope(
        err.http_status, err.message, {"code": err.code}, request_id=request_id_of(request)
    )


app.include_router(order_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "OK", "timestamp": utc_now().isoformat(), "version": "0.1.0"}
