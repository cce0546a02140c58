"""
Harmonic editing API endpoints.
"""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from additive_synth.api.state import get_engine
from additive_synth.audio.engine import SynthEngine
from additive_synth.audio.harmonics import MAX_HARMONIC_ID, MIN_HARMONIC_ID, Harmonic

router = APIRouter()


# Request/Response models
class HarmonicOut(BaseModel):
    """Active harmonic."""
    id: int
    amplitude: float
    is_locked: bool
    is_muted: bool
    is_soloed: bool

    @classmethod
    def from_harmonic(cls, harmonic: Harmonic) -> "HarmonicOut":
        return cls(
            id=harmonic.id,
            amplitude=harmonic.amplitude,
            is_locked=harmonic.is_locked,
            is_muted=harmonic.is_muted,
            is_soloed=harmonic.is_soloed,
        )


class HarmonicCreate(BaseModel):
    """New harmonic."""
    id: int = Field(..., ge=MIN_HARMONIC_ID, le=MAX_HARMONIC_ID)
    amplitude: float = Field(1.0, ge=0.0, le=1.0)

    model_config = {
        "json_schema_extra": {
            "example": {"id": 3, "amplitude": 0.5}
        }
    }


class AmplitudeUpdate(BaseModel):
    """Amplitude write; values outside [0, 1] are clamped."""
    amplitude: float


class GraphPointOut(BaseModel):
    """Display record for one slot."""
    id: int
    name: str
    amplitude: float
    original_amplitude: float
    is_muted: bool
    is_locked: bool
    is_soloed: bool
    is_active: bool


def _harmonic_list(harmonics: List[Harmonic]) -> dict:
    return {"harmonics": [HarmonicOut.from_harmonic(h) for h in harmonics]}


@router.get("/harmonics")
async def list_harmonics(engine: SynthEngine = Depends(get_engine)):
    """Get the active harmonics ordered by id."""
    return _harmonic_list(engine.bank.active())


@router.get("/harmonics/graph")
async def get_graph(engine: SynthEngine = Depends(get_engine)):
    """Get one display point per harmonic slot with audible amplitudes."""
    return {
        "points": [GraphPointOut(**vars(point)) for point in engine.graph_points()],
        "has_audible": engine.bank.has_audible(),
    }


@router.post("/harmonics", status_code=201)
async def add_harmonic(
    harmonic: HarmonicCreate,
    engine: SynthEngine = Depends(get_engine)
):
    """
    Add a harmonic.

    Adding an id that is already active leaves the set unchanged.
    """
    created = engine.add_harmonic(harmonic.id, harmonic.amplitude)
    return {
        "created": created,
        "harmonic": HarmonicOut.from_harmonic(engine.bank.get(harmonic.id)),
    }


@router.delete("/harmonics/{harmonic_id}")
async def remove_harmonic(
    harmonic_id: int,
    engine: SynthEngine = Depends(get_engine)
):
    """Remove a harmonic from the active set."""
    removed = engine.remove_harmonic(harmonic_id)
    return {"success": removed, "id": harmonic_id}


@router.put("/harmonics/{harmonic_id}/amplitude")
async def update_amplitude(
    harmonic_id: int,
    update: AmplitudeUpdate,
    engine: SynthEngine = Depends(get_engine)
):
    """
    Write a harmonic's amplitude.

    Absent harmonics are activated when the amplitude exceeds the
    activation threshold. Locked harmonics reject the write.
    """
    harmonic: Optional[Harmonic] = engine.set_amplitude(harmonic_id, update.amplitude)
    return {
        "active": harmonic is not None,
        "harmonic": HarmonicOut.from_harmonic(engine.bank.get(harmonic_id)),
    }


@router.put("/harmonics/{harmonic_id}/mute")
async def set_mute(
    harmonic_id: int,
    enabled: bool,
    engine: SynthEngine = Depends(get_engine)
):
    """Mute or unmute a harmonic."""
    return HarmonicOut.from_harmonic(engine.set_muted(harmonic_id, enabled))


@router.put("/harmonics/{harmonic_id}/solo")
async def set_solo(
    harmonic_id: int,
    enabled: bool,
    engine: SynthEngine = Depends(get_engine)
):
    """Solo or unsolo a harmonic."""
    return HarmonicOut.from_harmonic(engine.set_soloed(harmonic_id, enabled))


@router.put("/harmonics/{harmonic_id}/lock")
async def set_lock(
    harmonic_id: int,
    enabled: bool,
    engine: SynthEngine = Depends(get_engine)
):
    """Lock or unlock a harmonic's amplitude."""
    return HarmonicOut.from_harmonic(engine.set_locked(harmonic_id, enabled))


_TOGGLES = {
    "mute": SynthEngine.toggle_mute,
    "solo": SynthEngine.toggle_solo,
    "lock": SynthEngine.toggle_lock,
}


@router.post("/harmonics/{harmonic_id}/{flag}/toggle")
async def toggle_flag(
    harmonic_id: int,
    flag: Literal["mute", "solo", "lock"],
    engine: SynthEngine = Depends(get_engine)
):
    """Flip a harmonic's mute, solo or lock flag."""
    return HarmonicOut.from_harmonic(_TOGGLES[flag](engine, harmonic_id))


@router.post("/harmonics/randomize")
async def randomize_harmonics(engine: SynthEngine = Depends(get_engine)):
    """Randomize every unlocked harmonic."""
    return _harmonic_list(engine.randomize())


@router.post("/harmonics/clear")
async def clear_harmonics(engine: SynthEngine = Depends(get_engine)):
    """Remove every unlocked harmonic."""
    return _harmonic_list(engine.clear_all())
