# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
FastAPI application factory.

Responsibilities
----------------
* Instantiate the FastAPI app.
* Register CORS and request-logging middleware.
* Translate every error into the standard failure envelope.
* Mount the auth and components routers.
* Serve uploaded component images from /uploads.
* Expose a /health endpoint for container liveness checks.

CORS policy
-----------
Origins listed in ``settings.cors_allow_origins`` are allowed, and so is any
https:// origin.  Every other plain-http origin gets no CORS headers, so the
browser blocks it.  Credentials (the Authorization header) are allowed.
"""

import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from auth.router import router as auth_router
from components.router import router as components_router
from core.config import settings
from core.errors import AppError
from core.logger import logger
from core.responses import error_response
from core.storage import UPLOAD_URL_PREFIX, upload_root

app = FastAPI(title="Component Tracker", version="1.0.0")

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_origin_regex=r"https://.*",
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Bodies (passwords, tokens) are never echoed – only the URL and metadata.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            client_ip,
            response.status_code,
            elapsed_ms,
        )
        return response


app.add_middleware(_RequestLogMiddleware)


# ---------------------------------------------------------------------------
# Error envelopes
# ---------------------------------------------------------------------------


@app.exception_handler(AppError)
async def _app_error(request: Request, exc: AppError):
    return error_response(exc.message, exc.status_code, exc.errors)


@app.exception_handler(RequestValidationError)
async def _request_validation_error(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        # drop the leading "body" / "path" / "query" segment
        loc = ".".join(str(p) for p in err["loc"][1:]) or str(err["loc"][0])
        errors.append(f"{loc}: {err['msg']}")
    return error_response("Validation failed", 400, errors)


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException):
    return error_response(str(exc.detail), exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def _unhandled_error(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return error_response("Internal server error", 500)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(auth_router)
app.include_router(components_router)


@app.on_event("startup")
async def _on_startup():
    logger.info("Component Tracker service starting up")


@app.on_event("shutdown")
async def _on_shutdown():
    logger.info("Component Tracker service shutting down")


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------


@app.get("/health")
def health():
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Static files – uploaded images
# ---------------------------------------------------------------------------
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=str(upload_root())), name="uploads")
