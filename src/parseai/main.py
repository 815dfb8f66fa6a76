"""
Parse AI - Main Application.

FastAPI application exposing the document & conversation pipeline with
feature flags. Stateless: callers own persistence and broadcasting.
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from uuid import UUID, uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from parseai import __version__
from parseai.config import get_settings
from parseai.exceptions import ParseAIException
from parseai.modules.analysis.engine import get_engine
from parseai.observability import get_metrics_store
from parseai.schemas import HealthResponse

# Import module routers
from parseai.modules.analysis.router import router as analysis_router
from parseai.modules.charts.router import router as charts_router
from parseai.modules.documents.router import router as documents_router
from parseai.modules.web.router import router as web_router

# Configure standard logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("parseai")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    logging.getLogger("parseai").setLevel(settings.app_log_level.upper())
    engine = get_engine()
    logger.info(
        f"Starting Parse AI v{__version__} "
        f"[env={settings.app_env}] "
        f"[model={'live' if engine.is_configured else 'heuristic'}] "
        f"[features={settings.features.to_dict()}]"
    )
    yield
    logger.info("Shutting down Parse AI")


# Create FastAPI application
app = FastAPI(
    title="Parse AI API",
    description="Document parsing, URL extraction, conversational analysis and chart inference.",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Middleware
# =============================================================================


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to all requests."""
    request_id = request.headers.get("X-Request-ID") or str(uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.info(f"[{request_id}] {request.method} {request.url.path}")

    response = await call_next(request)

    logger.info(f"[{request_id}] {request.method} {request.url.path} -> {response.status_code}")

    return response


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(ParseAIException)
async def parseai_exception_handler(request: Request, exc: ParseAIException):
    """Handle Parse AI custom exceptions."""
    request_id_str = getattr(request.state, "request_id", None)
    request_id = None
    if request_id_str:
        try:
            request_id = UUID(request_id_str)
        except (ValueError, TypeError):
            pass

    logger.warning(f"ParseAIException: {exc.code} - {exc.message}")
    get_metrics_store().record_error(exc.code)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "details": exc.details,
                "request_id": str(request_id) if request_id else None,
            }
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    request_id_str = getattr(request.state, "request_id", None)

    logger.error(f"Unhandled exception on {request.url.path}")
    logger.error(f"Exception type: {type(exc).__name__}")
    logger.error(f"Exception message: {str(exc)}")
    logger.error(f"Traceback:\n{traceback.format_exc()}")

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": str(exc) if get_settings().app_debug else "An unexpected error occurred",
                "request_id": request_id_str,
            }
        },
    )


# =============================================================================
# Health & Metrics
# =============================================================================


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        version=__version__,
        features=settings.features.to_dict(),
        app_env=settings.app_env,
        is_production=settings.is_production,
        model_configured=get_engine().is_configured,
    )


@app.get("/metrics", tags=["health"])
async def metrics():
    """In-process pipeline metrics."""
    return get_metrics_store().get_summary()


# =============================================================================
# Register Module Routers
# =============================================================================

app.include_router(documents_router)
app.include_router(web_router)
app.include_router(analysis_router)
app.include_router(charts_router)


# =============================================================================
# Root Endpoint
# =============================================================================


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint redirect to docs."""
    return {"message": "Welcome to Parse AI API", "docs": "/docs"}
