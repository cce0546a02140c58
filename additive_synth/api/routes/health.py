"""
Health check endpoints.
"""

from fastapi import APIRouter

from additive_synth.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    System health check endpoint.

    Returns system status and basic diagnostics.
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.env,
        "audio_output_enabled": settings.audio_output_enabled,
    }
