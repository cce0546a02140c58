"""
Audio engine for the additive synthesizer.

Provides the harmonic model, mute/solo resolution, offline rendering,
WAV encoding and the real-time oscillator graph.
"""

from additive_synth.audio.harmonics import AudioSettings, Harmonic
from additive_synth.audio.bank import GraphPoint, HarmonicBank
from additive_synth.audio.resolver import (
    contributing_harmonics,
    effective_amplitude,
    effective_amplitudes,
    has_active_solo,
    is_audible,
)
from additive_synth.audio.renderer import render
from additive_synth.audio.wav import encode_wav, parse_wav_header
from additive_synth.audio.live_graph import LiveGraph
from additive_synth.audio.engine import ExportResult, SynthEngine

__all__ = [
    'AudioSettings',
    'Harmonic',
    'GraphPoint',
    'HarmonicBank',
    'contributing_harmonics',
    'effective_amplitude',
    'effective_amplitudes',
    'has_active_solo',
    'is_audible',
    'render',
    'encode_wav',
    'parse_wav_header',
    'LiveGraph',
    'ExportResult',
    'SynthEngine',
]
