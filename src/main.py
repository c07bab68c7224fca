"""FastAPI application entry point.

Run with: uvicorn src.main:app --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from config.settings import settings
from src.cs_common.errors import AppError
from src.cs_common.redis_client import close_redis
from src.cs_gateway.middleware.request_log import RequestLogMiddleware
from src.cs_supply.api.dependencies import rpc_client
from src.cs_supply.api.router import (
    DEBUG_PATH,
    JSON_FORMATS,
    SUPPLY_PATHS,
    method_not_allowed_response,
)
from src.cs_supply.api.router import router as supply_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Shutdown: close the shared RPC HTTP client and the Redis pool, if opened."""
    yield
    await rpc_client.aclose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content={"error": exc.message, "code": exc.code},
    )


@app.exception_handler(StarletteHTTPException)
async def supply_http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Methods the router never registered still get the supply endpoints' 405 body."""
    path = request.url.path
    if exc.status_code == 405 and (path in SUPPLY_PATHS or path == DEBUG_PATH):
        as_json = path == DEBUG_PATH or request.query_params.get("format") in JSON_FORMATS
        return method_not_allowed_response(as_json)
    return await http_exception_handler(request, exc)


app.include_router(supply_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
