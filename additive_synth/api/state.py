"""
Process-wide engine instance shared by the API routes.
"""

import threading
from typing import Optional

from additive_synth.audio.engine import SynthEngine
from additive_synth.core.logging import get_logger

logger = get_logger(__name__)

_engine: Optional[SynthEngine] = None
_engine_lock = threading.Lock()


def get_engine() -> SynthEngine:
    """
    Get the shared engine, creating it on first use.
    Used as a FastAPI dependency; override it in tests.
    """
    global _engine
    with _engine_lock:
        if _engine is None:
            _engine = SynthEngine()
            logger.info("engine_created")
        return _engine


def shutdown_engine() -> None:
    """Dispose the shared engine if one was created."""
    global _engine
    with _engine_lock:
        if _engine is not None:
            _engine.dispose()
            _engine = None
            logger.info("engine_shut_down")
