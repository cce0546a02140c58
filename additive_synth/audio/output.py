"""
Audio device output for the live graph.
"""

from typing import Callable, Optional

import numpy as np

from additive_synth.core.config import settings
from additive_synth.core.exceptions import AudioDeviceError
from additive_synth.core.logging import get_logger

logger = get_logger(__name__)


def default_output_sample_rate(device: Optional[str] = None) -> int:
    """Native sample rate of the output device."""
    import sounddevice as sd

    try:
        info = sd.query_devices(device, kind='output')
    except Exception as e:
        raise AudioDeviceError(f"Could not query output device: {e}") from e

    return int(info['default_samplerate'])


class AudioOutput:
    """
    Mono output stream that pulls blocks from a render callback.

    The callback runs on the sounddevice thread.
    """

    def __init__(
        self,
        sample_rate: int,
        blocksize: int = settings.live_blocksize,
        device: Optional[str] = settings.output_device
    ):
        """
        Initialize audio output.

        Args:
            sample_rate: Stream sample rate in Hz
            blocksize: Frames per callback
            device: Output device name or None for the system default
        """
        self.sample_rate = sample_rate
        self.blocksize = blocksize
        self.device = device
        self.stream = None
        self._render: Optional[Callable[[int], np.ndarray]] = None

    @property
    def active(self) -> bool:
        return self.stream is not None and self.stream.active

    def start(self, render: Callable[[int], np.ndarray]) -> None:
        """
        Open and start the stream.

        Args:
            render: Called with a frame count, returns that many mono samples

        Raises:
            AudioDeviceError: If the device cannot be opened
        """
        import sounddevice as sd

        self._render = render
        try:
            self.stream = sd.OutputStream(
                samplerate=self.sample_rate,
                blocksize=self.blocksize,
                device=self.device,
                channels=1,
                dtype='float32',
                callback=self._callback,
            )
            self.stream.start()
        except Exception as e:
            self.stream = None
            logger.error("audio_output_failed", sample_rate=self.sample_rate, error=str(e))
            raise AudioDeviceError(f"Failed to start audio output: {e}") from e

        logger.info(
            "audio_output_started",
            sample_rate=self.sample_rate,
            blocksize=self.blocksize,
            device=self.device
        )

    def _callback(self, outdata: np.ndarray, frames: int, time_info, status) -> None:
        """Audio callback for sounddevice."""
        if status:
            logger.warning("audio_output_status", status=str(status))

        outdata[:, 0] = self._render(frames)

    def close(self) -> None:
        """Stop and close the stream."""
        if self.stream is None:
            return

        self.stream.stop()
        self.stream.close()
        self.stream = None
        logger.info("audio_output_closed")
