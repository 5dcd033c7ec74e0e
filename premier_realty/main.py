import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import all models to ensure they're registered with SQLAlchemy Base
from . import (
    models,  # noqa: F401
    models_google_calendar,  # noqa: F401
)
from .database import Base, engine
from .domain.blog.router import admin_router as admin_blog_router
from .domain.blog.router import router as blog_router
from .domain.hero_slides.router import admin_router as admin_hero_slides_router
from .domain.hero_slides.router import router as hero_slides_router
from .domain.properties.router import admin_router as admin_properties_router
from .domain.properties.router import router as properties_router
from .domain.reservations.router import admin_router as admin_reservations_router
from .domain.reservations.router import router as reservations_router
from .i18n import LocaleMiddleware
from .i18n import router as locales_router
from .routes.admin import router as admin_router
from .routes.contact import router as contact_router
from .routes.cron import router as cron_router
from .routes.google_calendar import router as google_calendar_router
from .routes.images import router as images_router
from .routes.site_content import router as site_content_router
from .security_headers import SecurityHeadersMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"


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

    try:
        from .rate_limiter import get_redis_client

        get_redis_client()  # Connection test
        logger.info("Redis connection established")
    except Exception as e:
        logger.warning(f"Redis connection failed - rate-limited endpoints will answer 503 until it is back: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Premier Realty API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Convert 422 validation errors from HTTPBearer to 401 authentication errors
    when the issue is with the Authorization header
    """
    for error in exc.errors():
        if error.get("loc") and "authorization" in str(error.get("loc")).lower():
            logger.warning(
                f"Authentication failed for {request.url.path}: Missing or invalid Authorization header"
            )
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Not authenticated. Please provide a valid Bearer token in the Authorization header."
                },
            )

    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors with the raw exception objects in ctx rendered as text"""
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        errors.append(error)
    return errors


@app.middleware("http")
async def log_requests(request: Request, call_next):
    try:
        response = await call_next(request)
        return response
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(
        SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"]
    )
    logger.info("Security headers enabled")
else:
    logger.warning("Security headers DISABLED - only use in development!")


# CORS Configuration
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:3000",
).split(",")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Outermost, so the locale prefix is stripped before anything routes on the path
app.add_middleware(LocaleMiddleware)

# Routes
app.include_router(locales_router)
app.include_router(reservations_router)
app.include_router(admin_reservations_router)
app.include_router(google_calendar_router)
app.include_router(cron_router)
app.include_router(contact_router)
app.include_router(blog_router)
app.include_router(admin_blog_router)
app.include_router(properties_router)
app.include_router(admin_properties_router)
app.include_router(hero_slides_router)
app.include_router(admin_hero_slides_router)
app.include_router(site_content_router)
app.include_router(images_router)
app.include_router(admin_router)


@app.get("/")
def root():
    return {"message": "Premier Realty API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
