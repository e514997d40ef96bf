"""FastAPI application: wiring, lifespan and the HTTP error boundary."""
from __future__ import annotations

import asyncio
import time
import traceback
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .database import Database
from .errors import SignupError
from .logging_config import install_process_hooks, logger, setup_logging
from .routes import beta_signups, competition_signups, competition_submissions, goalpost_beta, health
from .services.emailer import EmailNotifier
from .services.notifications import drain_notifications
from .utils.rate_limiter import build_admission_gate, run_sweeper

settings = get_settings()
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    current = get_settings()
    install_process_hooks(asyncio.get_running_loop())
    if not current.database_url:
        logger.critical("app.start_failed", reason="DATABASE_URL is not set")
        raise RuntimeError("DATABASE_URL is not set. Please configure it in your environment.")

    database = Database(current.database_url, pool_size=current.database_pool_size)
    await database.connect()
    gate = build_admission_gate(current)
    app.state.db = database
    app.state.admission_gate = gate
    app.state.notifier = EmailNotifier(current)
    sweeper = asyncio.create_task(run_sweeper(gate, current.rate_limit_sweep_interval_seconds), name="ratelimit-sweep")
    logger.info("app.start", environment=current.environment, port=current.port)
    try:
        yield
    finally:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper
        await drain_notifications()
        await gate.close()
        await database.dispose()
        logger.info("app.stop")


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.allowed_origin == "*" else settings.cors_origins,
    allow_credentials=settings.allowed_origin != "*",
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    if get_settings().environment != "test":
        logger.info(
            "http.request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
    return response


@app.exception_handler(SignupError)
async def signup_error_handler(request: Request, exc: SignupError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
    logger.info("request.invalid", path=request.url.path, fields=fields)
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid payload", "error_code": "VALIDATION_ERROR", "fields": fields},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        content = {"error": "Not Found", "path": request.url.path, "method": request.method}
    else:
        content = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "request.unhandled",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    content: dict[str, object] = {"error": "Internal server error", "error_code": "INTERNAL_ERROR"}
    if not get_settings().is_production:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=content)


app.include_router(health.router)
app.include_router(beta_signups.router)
app.include_router(competition_signups.router)
app.include_router(competition_submissions.router)
app.include_router(goalpost_beta.router)
