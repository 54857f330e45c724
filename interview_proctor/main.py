"""
Interview Proctor Service - FastAPI Application
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import logging
import time

from .config import settings
from .api import router as proctor_router
from .engine import ProctoringEngine
from .utils.logging_config import setup_logging


setup_logging(
    service_name="interview-proctor",
    level=settings.LOG_LEVEL,
    log_to_file=settings.LOG_TO_FILE,
    log_dir=settings.LOG_DIR
)
logger = logging.getLogger(__name__)


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Live interview proctoring: violation events, integrity score and session reports",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)

# One engine per application, one session at a time
app.state.engine = ProctoringEngine.from_settings(settings)


# ============================================================================
# Request Logging Middleware
# ============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests with timing."""
    start = time.time()
    path = request.url.path

    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"RequestError on {request.method} {path}: {e}")
        raise

    duration_ms = int((time.time() - start) * 1000)
    if path not in ["/health", "/favicon.ico"]:
        logger.info(f"{request.method} {path} -> {response.status_code} in {duration_ms}ms")
    return response


# CORS middleware - the monitoring UI runs on another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # Must be False when using wildcard origin
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(proctor_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": "1.0.0"
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": settings.APP_NAME,
        "docs": "/docs" if settings.DEBUG else "Disabled in production"
    }
