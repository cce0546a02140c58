"""
Real-time oscillator graph.

Keeps one oscillator + gain voice per harmonic id, reconciled against the
active harmonic set on every change. All parameter changes are linear ramps
scheduled on the graph's own audio clock, which only advances when the
output device pulls a block through :meth:`LiveGraph.render`.
"""

import math
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional

import numpy as np
from numpy.typing import NDArray

from additive_synth.audio.automation import AutomatedParam
from additive_synth.audio.harmonics import Harmonic
from additive_synth.audio.resolver import effective_amplitudes
from additive_synth.core.config import settings
from additive_synth.core.exceptions import (
    AudioDeviceError,
    EmptyActiveSetError,
    InvalidParameterError,
)
from additive_synth.core.logging import get_logger

logger = get_logger(__name__)

TWO_PI = 2 * np.pi


class VoiceState(str, Enum):
    LIVE = "live"
    FADING = "fading"


class GraphState(str, Enum):
    CLOSED = "closed"
    STOPPED = "stopped"
    PLAYING = "playing"
    DISPOSED = "disposed"


@dataclass
class Voice:
    """
    Sine oscillator feeding a gain stage, owned by the graph.

    A fading voice is torn down once the clock reaches ``teardown_at``.
    """
    harmonic_id: int
    frequency: AutomatedParam
    gain: AutomatedParam
    phase: float = 0.0
    state: VoiceState = VoiceState.LIVE
    teardown_at: Optional[float] = None
    running: bool = field(default=True)
    connected: bool = field(default=True)

    def render(self, t0: float, num_frames: int, sample_rate: int) -> NDArray[np.float64]:
        """Render one block with per-sample frequency and gain."""
        increments = TWO_PI * self.frequency.values(t0, num_frames, sample_rate) / sample_rate
        phases = self.phase + np.cumsum(increments) - increments
        self.phase = float((self.phase + increments.sum()) % TWO_PI)

        return np.sin(phases) * self.gain.values(t0, num_frames, sample_rate)

    def stop(self) -> None:
        """Stop the oscillator and detach it from the master bus."""
        self.running = False
        self.connected = False


class LiveGraph:
    """
    Live additive synthesis graph.

    Lifecycle is ``open`` -> any number of ``reconcile``/``start``/``stop``
    calls -> ``dispose``. Host-side calls and the audio callback share a
    re-entrant lock; the callback holds it only for one block.
    """

    def __init__(
        self,
        sample_rate: int,
        fundamental_frequency: float = settings.default_fundamental_frequency,
        master_volume: float = settings.default_master_volume,
        ramp_time: float = settings.ramp_time,
        teardown_delay: float = settings.teardown_delay
    ):
        """
        Initialize live graph.

        Args:
            sample_rate: Sample rate of the output device in Hz
            fundamental_frequency: Initial fundamental in Hz
            master_volume: Initial master gain (0-1)
            ramp_time: Length of every parameter ramp in seconds
            teardown_delay: Delay between fade-out start and voice release;
                never shorter than ``ramp_time``
        """
        if sample_rate <= 0:
            raise InvalidParameterError(f"sample_rate must be positive, got {sample_rate}")

        self.sample_rate = int(sample_rate)
        self.fundamental_frequency = float(fundamental_frequency)
        self.master_volume = float(master_volume)
        self.ramp_time = float(ramp_time)
        self.teardown_delay = max(float(teardown_delay), self.ramp_time)

        self.voices: Dict[int, Voice] = {}
        self.master_gain: Optional[AutomatedParam] = None
        self.state = GraphState.CLOSED
        self.output = None

        self._frames_rendered = 0
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Clock

    @property
    def current_time(self) -> float:
        """Audio clock in seconds."""
        return self._frames_rendered / self.sample_rate

    @property
    def is_playing(self) -> bool:
        return self.state is GraphState.PLAYING

    # ------------------------------------------------------------------
    # Lifecycle

    def open(self, output=None) -> None:
        """
        Create the master bus and start the output device, if any.

        Args:
            output: Object with ``start(render_callback)``, ``close()`` and
                an ``active`` flag, typically an :class:`AudioOutput`
        """
        with self._lock:
            if self.state is not GraphState.CLOSED:
                return

            self.master_gain = AutomatedParam(self.master_volume)
            self.state = GraphState.STOPPED

        if output is not None:
            output.start(self.render)
            self.output = output

        logger.info(
            "live_graph_opened",
            sample_rate=self.sample_rate,
            master_volume=self.master_volume,
            output=output is not None
        )

    def dispose(self) -> None:
        """
        Fade everything out, wait for the ramp to finish, then release all voices.

        Safe to call repeatedly and when nothing is live.
        """
        with self._lock:
            if self.state in (GraphState.CLOSED, GraphState.DISPOSED):
                self.state = GraphState.DISPOSED
                return

            now = self.current_time
            for voice in self.voices.values():
                voice.gain.linear_ramp_to(0.0, now, self.ramp_time)
            deadline = now + self.ramp_time
            had_voices = bool(self.voices)

        if had_voices:
            self._wait_for_clock(deadline)

        with self._lock:
            for voice in self.voices.values():
                voice.stop()
            released = sorted(self.voices)
            self.voices.clear()
            self.state = GraphState.DISPOSED

        if self.output is not None:
            self.output.close()
            self.output = None

        logger.info("live_graph_disposed", released=released)

    def _wait_for_clock(self, deadline: float) -> None:
        """Block until the audio clock reaches ``deadline``."""
        if self.output is not None and self.output.active:
            timeout = time.monotonic() + (deadline - self.current_time) + 1.0
            while self.current_time < deadline:
                if time.monotonic() > timeout:
                    logger.warning("clock_wait_timeout", deadline=deadline, clock=self.current_time)
                    break
                time.sleep(self.ramp_time / 2)
        else:
            # No device is pulling audio, so advance the clock ourselves
            remaining = deadline - self.current_time
            if remaining > 0:
                self.render(int(np.ceil(remaining * self.sample_rate)))

    def _require_open(self) -> None:
        if self.state in (GraphState.CLOSED, GraphState.DISPOSED):
            raise AudioDeviceError(f"Live graph is {self.state.value}")

    # ------------------------------------------------------------------
    # Transport

    def start(self, harmonics: Iterable[Harmonic]) -> None:
        """
        Begin playback of the given harmonic set.

        Raises:
            EmptyActiveSetError: If the set is empty; nothing is changed
        """
        harmonics = list(harmonics)
        with self._lock:
            self._require_open()
            if not harmonics:
                raise EmptyActiveSetError()

            self.state = GraphState.PLAYING
            self.master_gain.linear_ramp_to(self.master_volume, self.current_time, self.ramp_time)
            self.reconcile(harmonics, True)

        logger.info("playback_started", harmonics=[h.id for h in harmonics])

    def stop(self) -> None:
        """Ramp every voice to silence. Voices stay allocated."""
        with self._lock:
            if self.state is not GraphState.PLAYING:
                return

            now = self.current_time
            for voice in self.voices.values():
                voice.gain.linear_ramp_to(0.0, now, self.ramp_time)
            self.state = GraphState.STOPPED

        logger.info("playback_stopped")

    # ------------------------------------------------------------------
    # Reconciliation

    def reconcile(self, harmonics: Iterable[Harmonic], is_playing: bool) -> None:
        """
        Bring the graph in line with the active harmonic set.

        Missing voices are created, present voices ramp to their resolved
        gain (or to 0 when not playing), and voices whose harmonic left the
        set fade out and are scheduled for teardown.

        Args:
            harmonics: Current active set, by value
            is_playing: Whether targets should be audible
        """
        harmonics = list(harmonics)
        targets = effective_amplitudes(harmonics)

        with self._lock:
            self._require_open()
            now = self.current_time
            self._reap(now)

            for harmonic in harmonics:
                voice = self.voices.get(harmonic.id)
                if voice is None:
                    voice = self._create_voice(harmonic.id)
                elif voice.state is VoiceState.FADING:
                    voice.state = VoiceState.LIVE
                    voice.teardown_at = None
                    logger.debug("voice_revived", harmonic_id=harmonic.id)

                target = targets[harmonic.id] if is_playing else 0.0
                voice.gain.linear_ramp_to(target, now, self.ramp_time)

            wanted = set(targets)
            for harmonic_id, voice in self.voices.items():
                if harmonic_id not in wanted and voice.state is VoiceState.LIVE:
                    self._begin_fade_out(voice, now)

    def _create_voice(self, harmonic_id: int) -> Voice:
        frequency = self.fundamental_frequency * harmonic_id
        voice = Voice(
            harmonic_id=harmonic_id,
            frequency=AutomatedParam(frequency),
            gain=AutomatedParam(0.0),
        )
        self.voices[harmonic_id] = voice

        logger.info("voice_created", harmonic_id=harmonic_id, frequency=frequency)
        return voice

    def _begin_fade_out(self, voice: Voice, now: float) -> None:
        voice.gain.linear_ramp_to(0.0, now, self.ramp_time)
        voice.state = VoiceState.FADING
        voice.teardown_at = now + self.teardown_delay

        logger.info("voice_fading", harmonic_id=voice.harmonic_id, teardown_at=voice.teardown_at)

    def _reap(self, now: float) -> List[int]:
        """Release fading voices whose deadline has passed."""
        expired = [
            harmonic_id for harmonic_id, voice in self.voices.items()
            if voice.state is VoiceState.FADING and now >= voice.teardown_at
        ]
        for harmonic_id in expired:
            self.voices.pop(harmonic_id).stop()
            logger.debug("voice_released", harmonic_id=harmonic_id, clock=now)
        return expired

    # ------------------------------------------------------------------
    # Global parameters

    def set_fundamental_frequency(self, hz: float) -> None:
        """Glide every oscillator to ``hz * id``."""
        if not math.isfinite(hz) or hz <= 0:
            raise InvalidParameterError(f"fundamental_frequency must be a positive finite number, got {hz}")

        with self._lock:
            self.fundamental_frequency = float(hz)
            now = self.current_time
            for harmonic_id, voice in self.voices.items():
                voice.frequency.linear_ramp_to(hz * harmonic_id, now, self.ramp_time)

        logger.info("fundamental_frequency_changed", frequency=hz)

    def set_master_volume(self, volume: float) -> None:
        """Ramp the master bus to ``volume``."""
        if not 0.0 <= volume <= 1.0:
            raise InvalidParameterError(f"master_volume must be between 0 and 1, got {volume}")

        with self._lock:
            self.master_volume = float(volume)
            if self.master_gain is not None:
                self.master_gain.linear_ramp_to(volume, self.current_time, self.ramp_time)

        logger.info("master_volume_changed", volume=volume)

    # ------------------------------------------------------------------
    # Audio callback

    def render(self, num_frames: int) -> NDArray[np.float64]:
        """
        Produce the next block of output and advance the clock.

        Args:
            num_frames: Block length in samples

        Returns:
            Mono float64 block
        """
        with self._lock:
            t0 = self.current_time
            self._reap(t0)

            block = np.zeros(num_frames)
            for voice in self.voices.values():
                block += voice.render(t0, num_frames, self.sample_rate)

            if self.master_gain is not None:
                block *= self.master_gain.values(t0, num_frames, self.sample_rate)

            self._frames_rendered += num_frames

            now = self.current_time
            for voice in self.voices.values():
                voice.gain.settle(now)
                voice.frequency.settle(now)
            if self.master_gain is not None:
                self.master_gain.settle(now)

        return block

    # ------------------------------------------------------------------
    # Introspection

    def snapshot(self) -> List[Dict]:
        """Describe every voice currently in the graph."""
        with self._lock:
            now = self.current_time
            return [
                {
                    'id': harmonic_id,
                    'state': voice.state.value,
                    'frequency': voice.frequency.value_at(now),
                    'gain': voice.gain.value_at(now),
                    'target_gain': voice.gain.target(),
                    'teardown_at': voice.teardown_at,
                }
                for harmonic_id, voice in sorted(self.voices.items())
            ]
