"""
Main synthesis engine.

Ties the harmonic bank, the live graph and the offline export path
together. Every edit goes through the engine so the live graph is
reconciled against the new harmonic set immediately.
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np

from additive_synth.audio.bank import GraphPoint, HarmonicBank
from additive_synth.audio.harmonics import AudioSettings, Harmonic
from additive_synth.audio.live_graph import LiveGraph
from additive_synth.audio.output import AudioOutput, default_output_sample_rate
from additive_synth.audio.renderer import render
from additive_synth.audio.resolver import is_audible
from additive_synth.audio.wav import WAV_MIME_TYPE, encode_wav
from additive_synth.core.config import settings as app_settings
from additive_synth.core.exceptions import ConcurrentExportError, NoAudibleSignalError
from additive_synth.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ExportResult:
    """Encoded WAV file ready to hand to a save/download collaborator."""
    data: bytes
    filename: str
    mime_type: str
    num_frames: int
    sample_rate: int


class SynthEngine:
    """
    Additive synthesis engine.

    Coordinates harmonic editing, real-time playback and offline export.
    """

    def __init__(
        self,
        audio_settings: Optional[AudioSettings] = None,
        bank: Optional[HarmonicBank] = None,
        sample_rate: Optional[int] = None,
        export_sample_rate: int = app_settings.export_sample_rate,
        enable_output: Optional[bool] = None
    ):
        """
        Initialize synthesis engine.

        Args:
            audio_settings: Initial fundamental, duration and master volume
            bank: Harmonic bank (defaults to harmonic 1 at full amplitude)
            sample_rate: Live sample rate in Hz; defaults to the configured
                rate, then the output device's native rate
            export_sample_rate: Sample rate for offline export in Hz
            enable_output: Open the audio device (defaults to configuration)
        """
        self.audio_settings = audio_settings or AudioSettings(
            fundamental_frequency=app_settings.default_fundamental_frequency,
            duration=app_settings.default_duration,
            master_volume=app_settings.default_master_volume,
        )
        self.bank = bank if bank is not None else HarmonicBank()
        self.export_sample_rate = export_sample_rate

        if enable_output is None:
            enable_output = app_settings.audio_output_enabled

        sample_rate = sample_rate or app_settings.live_sample_rate
        if sample_rate is None:
            sample_rate = default_output_sample_rate(app_settings.output_device) if enable_output else 44100

        self.graph = LiveGraph(
            sample_rate=sample_rate,
            fundamental_frequency=self.audio_settings.fundamental_frequency,
            master_volume=self.audio_settings.master_volume,
        )
        self.graph.open(AudioOutput(sample_rate) if enable_output else None)
        self._sync()

        logger.info(
            "synth_engine_initialized",
            sample_rate=sample_rate,
            export_sample_rate=export_sample_rate,
            output=enable_output
        )

    @property
    def is_playing(self) -> bool:
        return self.graph.is_playing

    def _sync(self) -> None:
        """Reconcile the live graph with the current harmonic set."""
        self.graph.reconcile(self.bank.active(), self.graph.is_playing)

    # ------------------------------------------------------------------
    # Transport

    def play(self) -> None:
        """
        Start real-time playback.

        Raises:
            EmptyActiveSetError: If no harmonics are active
        """
        if self.is_playing:
            logger.warning("playback_already_started")
            return
        self.graph.start(self.bank.active())

    def stop(self) -> None:
        """Stop real-time playback."""
        self.graph.stop()

    def dispose(self) -> None:
        """Release the live graph and the audio device."""
        self.graph.dispose()

    # ------------------------------------------------------------------
    # Harmonic edits

    def add_harmonic(self, harmonic_id: int, amplitude: float = 1.0) -> bool:
        added = self.bank.add(harmonic_id, amplitude)
        if added:
            self._sync()
        return added

    def remove_harmonic(self, harmonic_id: int) -> bool:
        removed = self.bank.remove(harmonic_id)
        if removed:
            self._sync()
        return removed

    def set_amplitude(self, harmonic_id: int, amplitude: float) -> Optional[Harmonic]:
        harmonic = self.bank.set_amplitude(harmonic_id, amplitude)
        if harmonic is not None:
            self._sync()
        return harmonic

    def set_muted(self, harmonic_id: int, muted: bool) -> Harmonic:
        harmonic = self.bank.set_muted(harmonic_id, muted)
        self._sync()
        return harmonic

    def set_soloed(self, harmonic_id: int, soloed: bool) -> Harmonic:
        harmonic = self.bank.set_soloed(harmonic_id, soloed)
        self._sync()
        return harmonic

    def set_locked(self, harmonic_id: int, locked: bool) -> Harmonic:
        # Lock does not affect sound, nothing to reconcile
        return self.bank.set_locked(harmonic_id, locked)

    def toggle_mute(self, harmonic_id: int) -> Harmonic:
        harmonic = self.bank.toggle_mute(harmonic_id)
        self._sync()
        return harmonic

    def toggle_solo(self, harmonic_id: int) -> Harmonic:
        harmonic = self.bank.toggle_solo(harmonic_id)
        self._sync()
        return harmonic

    def toggle_lock(self, harmonic_id: int) -> Harmonic:
        return self.bank.toggle_lock(harmonic_id)

    def randomize(self, rng: Optional[np.random.Generator] = None) -> List[Harmonic]:
        harmonics = self.bank.randomize(rng)
        self._sync()
        return harmonics

    def clear_all(self) -> List[Harmonic]:
        harmonics = self.bank.clear_all()
        self._sync()
        return harmonics

    def graph_points(self) -> List[GraphPoint]:
        return self.bank.graph_points()

    # ------------------------------------------------------------------
    # Settings

    def update_settings(
        self,
        fundamental_frequency: Optional[float] = None,
        duration: Optional[float] = None,
        master_volume: Optional[float] = None
    ) -> AudioSettings:
        """
        Apply a partial settings update.

        The new record is validated before anything changes; frequency and
        volume changes glide on the live graph.
        """
        changes = {
            name: value for name, value in (
                ('fundamental_frequency', fundamental_frequency),
                ('duration', duration),
                ('master_volume', master_volume),
            ) if value is not None
        }
        updated = replace(self.audio_settings, **changes)
        previous, self.audio_settings = self.audio_settings, updated

        if updated.fundamental_frequency != previous.fundamental_frequency:
            self.graph.set_fundamental_frequency(updated.fundamental_frequency)
        if updated.master_volume != previous.master_volume:
            self.graph.set_master_volume(updated.master_volume)

        logger.info("audio_settings_updated", **changes)
        return updated

    # ------------------------------------------------------------------
    # Export

    def export(self) -> ExportResult:
        """
        Render the current harmonic set and encode it as WAV.

        Raises:
            ConcurrentExportError: If playback is active
            NoAudibleSignalError: If every harmonic resolves to silence
        """
        if self.is_playing:
            raise ConcurrentExportError()

        harmonics = self.bank.active()
        if not is_audible(harmonics):
            raise NoAudibleSignalError()

        samples = render(harmonics, self.audio_settings, self.export_sample_rate)
        data = encode_wav(samples, self.export_sample_rate)

        logger.info(
            "export_complete",
            frames=len(samples),
            bytes=len(data),
            sample_rate=self.export_sample_rate
        )

        return ExportResult(
            data=data,
            filename=app_settings.export_filename,
            mime_type=WAV_MIME_TYPE,
            num_frames=len(samples),
            sample_rate=self.export_sample_rate,
        )

    def export_to_file(self, filename: Union[str, Path]) -> ExportResult:
        """
        Export and write the WAV file to disk.

        Args:
            filename: Output path
        """
        result = self.export()
        Path(filename).write_bytes(result.data)
        logger.info("audio_rendered_to_file", filename=str(filename), frames=result.num_frames)
        return result

    def get_configuration(self) -> Dict:
        """
        Get current engine configuration.

        Returns:
            Configuration dictionary
        """
        return {
            'sample_rate': self.graph.sample_rate,
            'export_sample_rate': self.export_sample_rate,
            'is_playing': self.is_playing,
            'fundamental_frequency': self.audio_settings.fundamental_frequency,
            'duration': self.audio_settings.duration,
            'master_volume': self.audio_settings.master_volume,
            'harmonics': [h.id for h in self.bank.active()],
            'voices': self.graph.snapshot(),
        }
