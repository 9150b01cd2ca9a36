import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.exceptions import IdentityError, Unauthenticated
from app.routers import health, auth, students

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _scheduler_enabled() -> bool:
    # Only start the scheduler in production or if explicitly enabled
    # This prevents duplicate schedulers during development with --reload
    return settings.environment == "production" or os.getenv("ENABLE_SCHEDULER", "").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Student Management API in {settings.environment} mode")
    if _scheduler_enabled():
        from app.scheduler import start_scheduler
        start_scheduler()
    yield
    if _scheduler_enabled():
        from app.scheduler import shutdown_scheduler
        shutdown_scheduler()
    logger.info("Student Management API stopped")


app = FastAPI(
    title="Student Management API",
    description="Accounts, student records, email verification and password reset",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    return response


# Include routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(students.router, prefix="/api/students", tags=["students"])


@app.get("/")
def root():
    return {"message": "Student Management System API", "version": app.version}


# Error handlers
@app.exception_handler(IdentityError)
async def identity_error_handler(request: Request, exc: IdentityError):
    """Render domain errors with their status code and a stable error code."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.error_code},
        headers=headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Log unexpected exceptions and answer with a generic 500."""
    logger.exception(
        "Unhandled exception: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )
