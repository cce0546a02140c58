"""
Mute/solo resolution.

Every consumer of audible amplitude (live gain targets, graph display,
export eligibility, offline rendering) goes through this module so the
rule is applied identically everywhere.
"""

from typing import Dict, Iterable, List

from additive_synth.audio.harmonics import Harmonic


def has_active_solo(harmonics: Iterable[Harmonic]) -> bool:
    """
    Check whether solo priority is in effect.

    A harmonic only counts toward solo if it is soloed, unmuted and has a
    positive amplitude.
    """
    return any(h.amplitude > 0 and h.is_soloed and not h.is_muted for h in harmonics)


def _resolve(harmonic: Harmonic, has_solo: bool) -> float:
    if harmonic.is_muted:
        return 0.0
    if has_solo and not harmonic.is_soloed:
        return 0.0
    return harmonic.amplitude


def effective_amplitude(harmonic: Harmonic, harmonics: Iterable[Harmonic]) -> float:
    """
    Get the audible amplitude of a harmonic within its active set.

    Args:
        harmonic: Harmonic to resolve
        harmonics: Full active set the harmonic belongs to

    Returns:
        0.0 if muted or suppressed by another harmonic's solo,
        otherwise the harmonic's own amplitude
    """
    return _resolve(harmonic, has_active_solo(harmonics))


def effective_amplitudes(harmonics: Iterable[Harmonic]) -> Dict[int, float]:
    """Resolve every harmonic of a set at once, keyed by id."""
    harmonics = list(harmonics)
    has_solo = has_active_solo(harmonics)
    return {h.id: _resolve(h, has_solo) for h in harmonics}


def contributing_harmonics(harmonics: Iterable[Harmonic]) -> List[Harmonic]:
    """Harmonics with a positive effective amplitude, ordered by id."""
    harmonics = list(harmonics)
    has_solo = has_active_solo(harmonics)
    contributing = [h for h in harmonics if _resolve(h, has_solo) > 0]
    return sorted(contributing, key=lambda h: h.id)


def is_audible(harmonics: Iterable[Harmonic]) -> bool:
    """True if at least one harmonic would produce sound."""
    return any(amp > 0 for amp in effective_amplitudes(harmonics).values())
