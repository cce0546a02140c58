"""
Custom exceptions for the additive synthesizer.
"""


class SynthError(Exception):
    """Base exception for all synthesizer errors."""

    status_code = 400

    def __init__(self, message: str, code: str = "SYNTH_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class InvalidParameterError(SynthError):
    """Harmonic id, amplitude or audio setting out of range."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="INVALID_PARAMETER")


class EmptyActiveSetError(SynthError):
    """Playback requested with no active harmonics."""

    status_code = 409

    def __init__(self, message: str = "Add or activate some harmonics before playing") -> None:
        super().__init__(message, code="EMPTY_ACTIVE_SET")


class NoAudibleSignalError(SynthError):
    """Export requested while every harmonic resolves to silence."""

    status_code = 409

    def __init__(
        self,
        message: str = "No audible sound to export; adjust amplitudes or mute/solo states"
    ) -> None:
        super().__init__(message, code="NO_AUDIBLE_SIGNAL")


class ConcurrentExportError(SynthError):
    """Export requested while playback is active."""

    status_code = 409

    def __init__(self, message: str = "Stop playback before exporting") -> None:
        super().__init__(message, code="CONCURRENT_EXPORT_CONFLICT")


class HarmonicNotFoundError(SynthError):
    """Harmonic is not in the active set."""

    status_code = 404

    def __init__(self, harmonic_id: int) -> None:
        self.harmonic_id = harmonic_id
        super().__init__(f"Harmonic {harmonic_id} is not active", code="HARMONIC_NOT_FOUND")


class HarmonicLockedError(SynthError):
    """Amplitude write refused because the harmonic is locked."""

    status_code = 409

    def __init__(self, harmonic_id: int) -> None:
        self.harmonic_id = harmonic_id
        super().__init__(f"Harmonic {harmonic_id} is locked", code="HARMONIC_LOCKED")


class AudioDeviceError(SynthError):
    """Audio output device could not be opened."""

    status_code = 503

    def __init__(self, message: str) -> None:
        super().__init__(message, code="AUDIO_DEVICE_ERROR")
