import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

# Import models so every table is registered with Base before create_all
from . import models  # noqa: F401
from .config import (
    ALLOWED_ORIGINS,
    API_COPYRIGHT,
    API_NAME,
    API_VERSION,
    IS_DEVELOPMENT,
    SECURITY_HEADERS_ENABLED,
)
from .constants import Message
from .database import Base, engine
from .domain.accounts import router as accounts_router
from .domain.addresses import router as addresses_router
from .domain.assignments import router as assignments_router
from .domain.auth import router as auth_router
from .domain.patients import router as patients_router
from .domain.visits import router as visits_router
from .security_headers import SecurityHeadersMiddleware
from .shared.responses import error_response, success_response

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

BODYLESS_METHODS = {"GET", "HEAD", "OPTIONS"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("Application shutting down...")


app = FastAPI(title=API_NAME, version=API_VERSION, lifespan=lifespan)


# ============================================================================
# ERROR HANDLERS
# ============================================================================


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.detail, exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report the first validation problem as a readable 400 message"""
    errors = exc.errors()
    logger.warning(f"Validation error for {request.url.path}: {errors}")
    return error_response(validation_message(errors), 400)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"❌ {request.method} {request.url.path} - Unhandled error: {exc}", exc_info=exc)
    message = f"{Message.INTERNAL_ERROR}: {exc}" if IS_DEVELOPMENT else Message.INTERNAL_ERROR
    return error_response(message, 500)


def validation_message(errors: list) -> str:
    if not errors:
        return "Invalid request"

    error = errors[0]
    names = [part for part in error.get("loc", ()) if isinstance(part, str) and part != "body"]
    field = names[-1] if names else None

    if error.get("type") == "missing":
        return f"{field} is required" if field else "Request body is required"
    if error.get("type") == "json_invalid":
        return "Invalid JSON body"

    message = error.get("msg", "Invalid request")
    if message.startswith("Value error, "):
        return message[len("Value error, "):]
    return f"{field}: {message}" if field else message


# ============================================================================
# MIDDLEWARE (last added runs first)
# ============================================================================


@app.middleware("http")
async def require_json_content_type(request: Request, call_next):
    """Every request that may carry a body must declare it as JSON"""
    if request.method not in BODYLESS_METHODS:
        content_type = request.headers.get("content-type")
        if not content_type:
            return error_response(Message.CONTENT_TYPE_REQUIRED, 415)
        if content_type.split(";")[0].strip().lower() != "application/json":
            logger.warning(f"⚠️ Rejected {request.method} {request.url.path} with Content-Type {content_type}")
            return error_response(Message.CONTENT_TYPE_JSON, 415)
    return await call_next(request)


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/docs", "/openapi.json", "/redoc"])
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH", "HEAD"],
    allow_headers=[
        "Origin",
        "X-Requested-With",
        "Content-Type",
        "Accept",
        "Authorization",
        "Cache-Control",
        "Pragma",
    ],
    max_age=86400,
)

# Routes
app.include_router(auth_router)
app.include_router(accounts_router)
app.include_router(patients_router)
app.include_router(addresses_router)
app.include_router(visits_router)
app.include_router(assignments_router)


@app.get("/")
def root():
    return success_response(
        {
            "name": API_NAME,
            "version": API_VERSION,
            "copyright": f"{API_COPYRIGHT}{datetime.now().year}",
            "message": "rest api is online",
        }
    )
