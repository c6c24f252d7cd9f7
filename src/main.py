"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.sc_common.database import engine, ping_database
from src.sc_common.errors import AppError
from src.sc_common.redis_client import close_redis, get_redis
from src.sc_common.response import error_response
from src.sc_community.api.router import router as community_router
from src.sc_gateway.middleware.request_log import RequestLogMiddleware, get_request_id
from src.sc_geo.api.router import router as geo_router
from src.sc_geo.domain.regions import get_region_table
from src.sc_inquiry.api.router import router as inquiry_router
from src.sc_marketplace.api.router import router as marketplace_router
from src.sc_notification.api.router import router as notification_router
from src.sc_studio.api.router import router as studio_router
from src.sc_validation.router import router as validation_router

logger = logging.getLogger("sc.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: logging, region table, DB + Redis connections. Shutdown: dispose."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # A broken region table must stop the process, not surface per request
    table = get_region_table()
    logger.info("Loaded %d regions", len(table))

    await ping_database()
    await get_redis()
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.data)
    resp.request_id = get_request_id(request)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(geo_router, prefix="/api/v1")
app.include_router(validation_router, prefix="/api/v1")
app.include_router(marketplace_router, prefix="/api/v1")
app.include_router(inquiry_router, prefix="/api/v1")
app.include_router(community_router, prefix="/api/v1")
app.include_router(studio_router, prefix="/api/v1")
app.include_router(notification_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
