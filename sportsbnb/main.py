"""
Main FastAPI application
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import time
from prometheus_client import make_asgi_app
import uuid

from sportsbnb.config import settings
from sportsbnb.core.database import init_db, close_db
from sportsbnb.core.exceptions import SportsbnbException
from sportsbnb.core.logging import setup_logging
from sportsbnb.core.metrics import REQUEST_COUNT, REQUEST_DURATION
from sportsbnb.core.redis import init_redis, close_redis
from sportsbnb.api.v1.api import api_router
from sportsbnb.services.storage_service import storage_service

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    await init_db()
    logger.info("Database connection established")

    await init_redis()
    logger.info("Redis connection established")

    storage_service.ensure_buckets()
    logger.info(f"Storage buckets ready under {storage_service.root}")

    yield

    logger.info("Shutting down application")
    await close_db()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    description="Sports venue booking and pickup games",
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def track_requests(request: Request, call_next):
    """
    Track request metrics and add request ID
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    # Label by route template so path parameters do not explode cardinality
    route = request.scope.get("route")
    endpoint = getattr(route, "path", request.url.path)
    REQUEST_COUNT.labels(
        method=request.method,
        endpoint=endpoint,
        status=response.status_code
    ).inc()
    REQUEST_DURATION.labels(
        method=request.method,
        endpoint=endpoint
    ).observe(duration)

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Process-Time"] = str(duration)
    return response


def _error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {
                "code": code,
                "message": message,
                "details": details or {}
            }
        }
    )


# Exception handlers
@app.exception_handler(SportsbnbException)
async def sportsbnb_exception_handler(request: Request, exc: SportsbnbException):
    log = logger.warning if exc.status_code >= 500 else logger.info
    log(
        f"{exc.code}: {exc.message}",
        extra={"request_id": getattr(request.state, "request_id", None), "path": request.url.path}
    )
    return _error_response(exc.status_code, **exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        fields[".".join(loc) or "request"] = error.get("msg", "Invalid value")
    return _error_response(422, "VALIDATION_ERROR", "Please fix the highlighted fields", {"fields": fields})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return _error_response(404, "NOT_FOUND", "The requested resource was not found")
    if exc.status_code == 401:
        return _error_response(401, "AUTH_ERROR", str(exc.detail))
    return _error_response(exc.status_code, "HTTP_ERROR", str(exc.detail))


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc):
    logger.error(f"Internal server error: {exc}", exc_info=True)
    return _error_response(500, "INTERNAL_ERROR", "An internal server error occurred")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.APP_ENV,
        "api_docs": "/docs" if settings.DEBUG else None
    }


app.include_router(api_router, prefix=settings.API_PREFIX)

# Uploaded venue images and avatars
app.mount("/storage", StaticFiles(directory=settings.STORAGE_ROOT, check_dir=False), name="storage")

# Mount Prometheus metrics endpoint
if settings.PROMETHEUS_ENABLED:
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "sportsbnb.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
