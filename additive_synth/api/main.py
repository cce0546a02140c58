"""
Main FastAPI application for the additive synthesizer.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from additive_synth.api.routes import export, harmonics, health, playback
from additive_synth.api.state import shutdown_engine
from additive_synth.core.config import settings
from additive_synth.core.exceptions import SynthError
from additive_synth.core.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        env=settings.env
    )

    yield

    logger.info("application_shutting_down")
    shutdown_engine()


# Create FastAPI application
app = FastAPI(
    title="Additive Synthesizer API",
    description="Compose harmonic partials, audition them live and export WAV",
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(SynthError)
async def synth_error_handler(request, exc: SynthError) -> JSONResponse:
    """Handle synthesizer errors."""
    logger.error(
        "synth_error",
        error_code=exc.code,
        message=exc.message,
        path=request.url.path
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message
            }
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors."""
    logger.exception(
        "unexpected_error",
        error_type=type(exc).__name__,
        path=request.url.path
    )

    message = str(exc) if settings.is_development else "An unexpected error occurred"
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": message
            }
        }
    )


# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(harmonics.router, prefix="/api/v1", tags=["harmonics"])
app.include_router(playback.router, prefix="/api/v1", tags=["playback"])
app.include_router(export.router, prefix="/api/v1", tags=["export"])


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "environment": settings.env,
        "docs": "/docs",
        "api": {
            "health": "/api/v1/health",
            "harmonics": "/api/v1/harmonics",
            "graph": "/api/v1/harmonics/graph",
            "settings": "/api/v1/settings",
            "playback": "/api/v1/playback",
            "export": "/api/v1/export"
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "additive_synth.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower()
    )
