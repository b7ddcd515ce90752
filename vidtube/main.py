"""VidTube API - FastAPI application."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from vidtube.api.v1.api import api_router
from vidtube.core.config import settings
from vidtube.core.exceptions import ApiError
from vidtube.db.session import engine
from vidtube.schemas.common import ErrorResponse

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


async def ping_database() -> bool:
    """Run a trivial query against the configured database."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (OSError, SQLAlchemyError):
        logger.exception("Database ping failed")
        return False
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    if await ping_database():
        logger.info("Database reachable")
    logger.info("%s serving /api/v1 (docs at /docs)", settings.APP_NAME)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str, errors: list | None = None) -> JSONResponse:
    body = ErrorResponse(status_code=status_code, message=message, errors=errors or [])
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


@app.exception_handler(ApiError)
async def handle_api_error(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message, exc.errors)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    errors = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    ]
    return error_response(400, errors[0] if errors else "Invalid request", errors)


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")


app.include_router(api_router, prefix="/api")

# Serve media stored by the local storage backend
uploads_dir = Path(settings.UPLOAD_DIR).resolve()
uploads_dir.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(uploads_dir)), name="uploads")


@app.get("/", tags=["service"])
async def index():
    return {"name": settings.APP_NAME, "status": "ok", "api": "/api/v1", "docs": "/docs"}


@app.get("/health", tags=["service"])
async def health():
    return {"status": "ok"}


@app.get("/ready", tags=["service"])
async def ready():
    """Readiness probe: 503 envelope while the database is unreachable."""
    if not await ping_database():
        return error_response(503, "Database unavailable")
    return {"status": "ok", "database": "connected"}
