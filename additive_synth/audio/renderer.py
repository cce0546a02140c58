"""
Offline additive renderer.

Turns a harmonic set and audio settings into a finite mono sample buffer.
The output is a pure function of the inputs.
"""

import math
from typing import Iterable

import numpy as np
from numpy.typing import NDArray

from additive_synth.audio.harmonics import AudioSettings, Harmonic
from additive_synth.audio.resolver import contributing_harmonics
from additive_synth.core.exceptions import InvalidParameterError
from additive_synth.core.logging import get_logger

logger = get_logger(__name__)

FADE_TIME = 0.005  # seconds at each end
MIN_FADED_DURATION_MS = 10.0  # shorter renders get no envelope
NORMALIZE_CEILING = 0.98


def frame_count(duration: float, sample_rate: int) -> int:
    """Number of frames in a render of the given duration."""
    return int(math.floor(sample_rate * duration))


def fade_envelope(num_frames: int, sample_rate: int, duration: float) -> NDArray[np.float64]:
    """
    Build the linear fade-in/fade-out envelope.

    The head ramps 0 -> 1 over ``floor(sample_rate * 0.005)`` frames and the
    tail ramps down to exactly 0 on the last frame. If the two overlap the
    head wins. Durations of 10 ms or less get a flat envelope.

    Args:
        num_frames: Buffer length
        sample_rate: Sample rate in Hz
        duration: Render duration in seconds

    Returns:
        Envelope of length ``num_frames``
    """
    envelope = np.ones(num_frames)
    fade_samples = int(math.floor(sample_rate * FADE_TIME))

    if duration * 1000 <= MIN_FADED_DURATION_MS or fade_samples <= 0:
        return envelope

    index = np.arange(num_frames, dtype=np.float64)

    tail = index >= num_frames - fade_samples
    envelope[tail] = (num_frames - 1 - index[tail]) / fade_samples

    head = index < fade_samples
    envelope[head] = index[head] / fade_samples

    return envelope


def normalize_peak(samples: NDArray[np.float64], ceiling: float = NORMALIZE_CEILING) -> NDArray[np.float64]:
    """Scale the buffer down so its peak does not exceed ``ceiling``."""
    if samples.size == 0:
        return samples

    peak = float(np.max(np.abs(samples)))
    if peak > ceiling:
        samples *= ceiling / peak
        logger.debug("render_normalized", peak=peak, gain=ceiling / peak)

    return samples


def render(
    harmonics: Iterable[Harmonic],
    settings: AudioSettings,
    sample_rate: int
) -> NDArray[np.float64]:
    """
    Render a harmonic set to a mono buffer.

    Args:
        harmonics: Active harmonic set
        settings: Fundamental, duration and master volume
        sample_rate: Output sample rate in Hz

    Returns:
        float64 samples of length ``floor(sample_rate * duration)``

    Raises:
        InvalidParameterError: If the render would contain no frames
    """
    if sample_rate <= 0:
        raise InvalidParameterError(f"sample_rate must be positive, got {sample_rate}")

    num_frames = frame_count(settings.duration, sample_rate)
    if num_frames <= 0:
        raise InvalidParameterError(
            f"Render of {settings.duration}s at {sample_rate}Hz contains no frames"
        )

    contributing = contributing_harmonics(harmonics)
    output = np.zeros(num_frames)

    if contributing:
        t = np.arange(num_frames, dtype=np.float64) / sample_rate
        for harmonic in contributing:
            frequency = harmonic.frequency(settings.fundamental_frequency)
            output += harmonic.amplitude * np.sin(2 * np.pi * frequency * t)

    output *= fade_envelope(num_frames, sample_rate, settings.duration)
    output *= settings.master_volume
    output = normalize_peak(output)

    logger.info(
        "offline_render_complete",
        frames=num_frames,
        sample_rate=sample_rate,
        harmonics=[h.id for h in contributing],
        peak=float(np.max(np.abs(output))),
    )

    return output
