"""
WAV export API endpoint.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from additive_synth.api.state import get_engine
from additive_synth.audio.engine import SynthEngine
from additive_synth.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/export")
def export_wav(engine: SynthEngine = Depends(get_engine)):
    """
    Render the current sound and return it as a WAV download.

    Declared sync so the render runs in the threadpool.
    """
    result = engine.export()

    logger.info("export_served", filename=result.filename, bytes=len(result.data))

    return Response(
        content=result.data,
        media_type=result.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )
