"""
Warehouse Terminal — Main Application

FastAPI application entry point. Exposes the terminal operations (scan,
confirm, sales, pallets) to the UI as a local JSON API.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import structlog
from datetime import datetime, timezone

from config import settings, active_code_length_table
from services.backend_service import get_backend_service, close_backend_service

logging.basicConfig(format="%(message)s", level=settings.log_level)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Log backend and code format configuration
    Shutdown: Close the backend transport
    """
    # Startup
    table = active_code_length_table()
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug,
        backend="simulated" if settings.use_simulated_backend else settings.api_base_url,
        code_format=table.version,
        box_length=table.box_length,
        pallet_lengths=list(table.pallet_lengths),
    )

    yield

    # Shutdown
    await close_backend_service()
    logger.info("application_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="Warehouse Terminal",
    description="Scan, move and dispatch boxes and pallets from a warehouse terminal",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns:
        Terminal status and backend reachability
    """
    backend = await get_backend_service().health_check()

    return {
        "status": "healthy" if backend.ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "backend": backend.model_dump(mode="json", exclude={"details"}),
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Warehouse Terminal API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "scan": "/api/scan",
            "locations": "/api/locations/{entity_type}",
            "codes": "/api/codes/classify",
            "sales": "/api/sales",
            "pallets": "/api/pallets",
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "Ocurrió un error inesperado",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes.scan import router as scan_router
from routes.codes import router as codes_router
from routes.sales import router as sales_router
from routes.pallets import router as pallets_router

app.include_router(scan_router)  # Prefix already in router
app.include_router(codes_router)  # Prefix already in router
app.include_router(sales_router)  # Prefix already in router
app.include_router(pallets_router)  # Prefix already in router


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
