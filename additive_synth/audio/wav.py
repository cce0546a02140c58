"""
Canonical RIFF/WAVE encoding for mono 16-bit PCM.
"""

import struct
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike

from additive_synth.core.exceptions import InvalidParameterError

WAV_MIME_TYPE = "audio/wav"

HEADER_SIZE = 44
NUM_CHANNELS = 1
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
PCM_FORMAT = 1

# RIFF header, fmt chunk and data chunk header in one little-endian layout
_HEADER = struct.Struct('<4sI4s4sIHHIIHH4sI')


@dataclass(frozen=True)
class WavHeader:
    """Decoded fields of a canonical 44-byte WAV header."""
    channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_length: int

    @property
    def num_frames(self) -> int:
        return self.data_length // self.block_align


def float_to_pcm16(samples: ArrayLike) -> np.ndarray:
    """
    Convert float samples to little-endian int16.

    Samples are clamped to [-1, 1]; negatives scale by 0x8000, the rest by
    0x7FFF, and the result is truncated toward zero.
    """
    clamped = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    scaled = np.where(clamped < 0, clamped * 0x8000, clamped * 0x7FFF)
    return np.trunc(scaled).astype('<i2')


def encode_wav(samples: ArrayLike, sample_rate: int) -> bytes:
    """
    Encode mono float samples as a WAV file.

    Args:
        samples: Float samples in [-1, 1]; out-of-range values are clamped
        sample_rate: Sample rate in Hz

    Returns:
        ``44 + 2 * len(samples)`` bytes
    """
    pcm = float_to_pcm16(samples)
    data_length = pcm.size * BYTES_PER_SAMPLE
    block_align = NUM_CHANNELS * BYTES_PER_SAMPLE

    header = _HEADER.pack(
        b'RIFF',
        HEADER_SIZE - 8 + data_length,
        b'WAVE',
        b'fmt ',
        16,  # fmt chunk size
        PCM_FORMAT,
        NUM_CHANNELS,
        sample_rate,
        sample_rate * block_align,
        block_align,
        BITS_PER_SAMPLE,
        b'data',
        data_length,
    )

    return header + pcm.tobytes()


def parse_wav_header(data: bytes) -> WavHeader:
    """
    Decode the header written by :func:`encode_wav`.

    Raises:
        InvalidParameterError: If the bytes are not a canonical PCM WAV header
    """
    if len(data) < HEADER_SIZE:
        raise InvalidParameterError(f"WAV data too short: {len(data)} bytes")

    (riff, _riff_size, wave, fmt, fmt_size, audio_format, channels, sample_rate,
     byte_rate, block_align, bits_per_sample, data_id, data_length) = _HEADER.unpack_from(data)

    if riff != b'RIFF' or wave != b'WAVE' or fmt != b'fmt ' or data_id != b'data':
        raise InvalidParameterError("Not a canonical RIFF/WAVE header")
    if fmt_size != 16 or audio_format != PCM_FORMAT:
        raise InvalidParameterError(f"Unsupported WAV format {audio_format}")

    return WavHeader(
        channels=channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits_per_sample,
        data_length=data_length,
    )
