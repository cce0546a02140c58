"""
Playback and audio settings API endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from additive_synth.api.state import get_engine
from additive_synth.audio.engine import SynthEngine

router = APIRouter()


class SettingsUpdate(BaseModel):
    """Partial audio settings update, limited to the editor's ranges."""
    fundamental_frequency: Optional[float] = Field(None, ge=20.0, le=2000.0)
    duration: Optional[float] = Field(None, ge=0.1, le=10.0)
    master_volume: Optional[float] = Field(None, ge=0.0, le=1.0)

    model_config = {
        "json_schema_extra": {
            "example": {"fundamental_frequency": 110.0, "master_volume": 0.5}
        }
    }


def _settings_payload(engine: SynthEngine) -> dict:
    audio_settings = engine.audio_settings
    return {
        "fundamental_frequency": audio_settings.fundamental_frequency,
        "duration": audio_settings.duration,
        "master_volume": audio_settings.master_volume,
    }


@router.get("/settings")
async def get_settings(engine: SynthEngine = Depends(get_engine)):
    """Get the current audio settings."""
    return _settings_payload(engine)


@router.put("/settings")
async def update_settings(
    update: SettingsUpdate,
    engine: SynthEngine = Depends(get_engine)
):
    """Update any subset of fundamental frequency, duration and master volume."""
    engine.update_settings(**update.model_dump(exclude_none=True))
    return _settings_payload(engine)


@router.get("/playback")
async def get_playback(engine: SynthEngine = Depends(get_engine)):
    """Get playback state and the live voices."""
    return engine.get_configuration()


@router.post("/playback/start")
async def start_playback(engine: SynthEngine = Depends(get_engine)):
    """Start real-time playback of the active harmonics."""
    engine.play()
    return {"is_playing": engine.is_playing}


@router.post("/playback/stop")
async def stop_playback(engine: SynthEngine = Depends(get_engine)):
    """Stop real-time playback."""
    engine.stop()
    return {"is_playing": engine.is_playing}
