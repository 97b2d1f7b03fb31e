import logging
import time

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError

from .config import settings
from .infrastructure import db
from .infrastructure.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_endpoint,
)
from .infrastructure.ratelimit import limiter
from .infrastructure.uploads import get_uploads_dir
from .interfaces.http.routers import account as account_router
from .interfaces.http.routers import answers as answers_router
from .interfaces.http.routers import lessons as lessons_router
from .interfaces.http.routers import modules as modules_router
from .interfaces.http.routers import progress as progress_router
from .interfaces.http.routers import tasks as tasks_router

VERSION = "0.1.0"

# Structured JSON logging
log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(log_level),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

app = FastAPI(
    title="Learning Service",
    version=VERSION,
    docs_url="/api/v1/docs" if settings.app.docs else None,
    redoc_url=None,
    openapi_url="/api-doc/openapi.json" if settings.app.docs else None,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("integrity_error", path=request.url.path, error=str(exc.orig))
    return JSONResponse(status_code=409, content={"detail": "Conflict with existing data"})


# Request metrics and access log
@app.middleware("http")
async def observe_requests(request: Request, call_next):
    start_time = time.time()
    method = request.method
    path = request.url.path

    response = await call_next(request)

    if response.headers.get("content-type", "").startswith("application/json"):
        response.headers["content-type"] = "application/json; charset=utf-8"

    duration = time.time() - start_time
    status_code = response.status_code
    route = request.scope.get("route")
    endpoint = getattr(route, "path", path)
    http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

    logger.info(
        "http_request",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=round(duration * 1000, 2)
    )

    return response


@app.on_event("startup")
def on_startup():
    logger.info("Starting learning service", version=VERSION, bindto=settings.host.bindto)
    db.init_db()
    logger.info("Database connection established")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    return metrics_endpoint()


app.include_router(account_router.router)
app.include_router(modules_router.router)
app.include_router(lessons_router.router)
app.include_router(tasks_router.router)
app.include_router(answers_router.router)
app.include_router(progress_router.router)
app.mount("/uploads", StaticFiles(directory=get_uploads_dir(), check_dir=False), name="uploads")


def run() -> None:
    import uvicorn

    uvicorn.run(
        "learning_service.main:app",
        host=settings.host.bind_host,
        port=settings.host.bind_port,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
