"""
Noise Report Hub - FastAPI Application Entry Point

Backend for a mobile noise-complaint app: citizens submit audio/video
evidence with a reason and their location; admins browse the reports.

DESIGN PRINCIPLES:
- A report is written once and never edited
- Validation errors (400) and storage errors (503) are always distinguishable
- No background retries; the client decides whether to resubmit
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import NoiseReportError, StorageError
from app.core.settings import settings
from app.config.firebase import initialize_firestore
from app.routes import auth, health, reports, user

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Noise complaint reports with audio/video evidence and geolocation",
    debug=settings.DEBUG
)


@app.exception_handler(NoiseReportError)
async def noise_report_error_handler(request: Request, exc: NoiseReportError):
    """Domain errors become {"success": false, "message": ...} with their status code."""
    if isinstance(exc, StorageError):
        logger.error(f"{request.method} {request.url.path} - storage failure: {exc.detail or exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} - {exc.status_code}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message}
    )


# Pydantic validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed query/body parameters are client errors like any other ValidationError."""
    errors = exc.errors()
    logger.info(f"{request.method} {request.url.path} - request validation failed: {errors}")

    first = errors[0] if errors else {}
    field = ".".join(str(loc) for loc in first.get("loc", ()) if loc not in ("body", "query"))
    message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "Invalid request")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": message, "detail": jsonable_errors(errors)}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)}
    )


# Global exception handler to catch ALL other exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"}
    )


def jsonable_errors(errors):
    # ctx may hold exception objects that JSONResponse cannot encode
    return [{k: v for k, v in error.items() if k in ("loc", "msg", "type")} for error in errors]


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.
    Currently: Firestore connection
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        initialize_firestore()
    except Exception as e:
        logger.warning(f"Firestore initialization failed: {e}")
        logger.warning("The app will start but database operations will fail with 503.")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Cleanup on application shutdown.
    """
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(reports.router)
app.include_router(auth.router)
app.include_router(user.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "reports": "/reports/get-report"
    }
