"""
Harmonic and audio settings records.

A harmonic is one sinusoidal partial at an integer multiple of the
fundamental frequency. Records are immutable and handed to the engine
by value; use ``dataclasses.replace`` to derive a modified copy.
"""

import math
from dataclasses import dataclass

from additive_synth.core.exceptions import InvalidParameterError

MIN_HARMONIC_ID = 1
MAX_HARMONIC_ID = 32


def clamp_amplitude(amplitude: float) -> float:
    """Clamp an amplitude into [0, 1], rejecting NaN and infinities."""
    amplitude = float(amplitude)
    if not math.isfinite(amplitude):
        raise InvalidParameterError(f"Amplitude must be finite, got {amplitude}")
    return min(1.0, max(0.0, amplitude))


def validate_harmonic_id(harmonic_id: int) -> int:
    """Reject ids outside [1, 32]."""
    if isinstance(harmonic_id, bool) or int(harmonic_id) != harmonic_id:
        raise InvalidParameterError(f"Harmonic id must be an integer, got {harmonic_id!r}")
    harmonic_id = int(harmonic_id)
    if not MIN_HARMONIC_ID <= harmonic_id <= MAX_HARMONIC_ID:
        raise InvalidParameterError(
            f"Harmonic id must be between {MIN_HARMONIC_ID} and {MAX_HARMONIC_ID}, got {harmonic_id}"
        )
    return harmonic_id


@dataclass(frozen=True, eq=False)
class Harmonic:
    """
    One sinusoidal partial.

    ``id`` doubles as the frequency multiplier. Amplitudes outside [0, 1]
    are clamped. Equality and hashing are by ``id`` only.
    """
    id: int
    amplitude: float = 1.0
    is_locked: bool = False
    is_muted: bool = False
    is_soloed: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'id', validate_harmonic_id(self.id))
        object.__setattr__(self, 'amplitude', clamp_amplitude(self.amplitude))

    @classmethod
    def inactive(cls, harmonic_id: int) -> "Harmonic":
        """Default record for a slot absent from the active set."""
        return cls(id=harmonic_id, amplitude=0.0)

    def frequency(self, fundamental_frequency: float) -> float:
        """Oscillation frequency in Hz for the given fundamental."""
        return fundamental_frequency * self.id

    def __eq__(self, other):
        if not isinstance(other, Harmonic):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)


@dataclass(frozen=True)
class AudioSettings:
    """Global parameters shared by all harmonics."""
    fundamental_frequency: float = 220.0  # Hz
    duration: float = 2.0  # seconds, offline rendering only
    master_volume: float = 0.75  # linear, applied after mixing

    def __post_init__(self):
        for name in ('fundamental_frequency', 'duration', 'master_volume'):
            value = float(getattr(self, name))
            if not math.isfinite(value):
                raise InvalidParameterError(f"{name} must be finite, got {value}")
            object.__setattr__(self, name, value)

        if self.fundamental_frequency <= 0:
            raise InvalidParameterError(
                f"fundamental_frequency must be positive, got {self.fundamental_frequency}"
            )
        if self.duration <= 0:
            raise InvalidParameterError(f"duration must be positive, got {self.duration}")
        if not 0.0 <= self.master_volume <= 1.0:
            raise InvalidParameterError(
                f"master_volume must be between 0 and 1, got {self.master_volume}"
            )
