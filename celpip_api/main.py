from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging
import traceback
from celpip_api.core.config import settings
from celpip_api.core.database import init_db
from celpip_api.core.exceptions import (
    CelpipException,
    ValidationError,
    NotFoundError,
    ConflictError,
    AuthenticationError,
    CollaboratorError,
)

# Import models to register them with SQLModel
from celpip_api.models import models  # noqa: F401

# Import API router
from celpip_api.api.v1 import api_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

APP_TITLE = "CELPIP Practice API"
APP_VERSION = "1.0.0"

# Checked in order; StoreError and any other CelpipException fall through to 500
EXCEPTION_STATUS_CODES = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (CollaboratorError, status.HTTP_502_BAD_GATEWAY),
)

app = FastAPI(title=APP_TITLE, version=APP_VERSION)


def status_code_for(exc: CelpipException) -> int:
    for exc_type, status_code in EXCEPTION_STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors without the non-serializable ``ctx`` exception objects."""
    return [{k: v for k, v in error.items() if k != "ctx"} for error in exc.errors()]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log request validation errors. Bodies can carry base64 media and are not logged."""
    errors = jsonable_errors(exc)
    logger.error(
        f"Validation error on {request.method} {request.url.path}: "
        f"{[(error.get('loc'), error.get('msg')) for error in errors]}"
    )
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": errors})


@app.exception_handler(CelpipException)
async def celpip_exception_handler(request: Request, exc: CelpipException):
    """Map application exceptions to HTTP status codes."""
    status_code = status_code_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(f"{type(exc).__name__} on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "type": type(exc).__name__},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Last-resort handler; details are only exposed in development."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)

    content = {
        "detail": "An internal server error occurred. Please try again later.",
        "type": "InternalServerError",
    }
    if settings.is_development:
        content = {
            "detail": str(exc),
            "type": type(exc).__name__,
            "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        }
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Create missing tables. Schema changes go through Alembic."""
    init_db()
    logger.info(f"{APP_TITLE} started (environment: {settings.environment})")


@app.get("/")
async def root():
    return {
        "message": APP_TITLE,
        "version": APP_VERSION,
        "status": "running",
        "api": settings.api_v1_prefix,
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


app.include_router(api_router, prefix=settings.api_v1_prefix)
