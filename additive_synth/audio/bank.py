"""
Editable harmonic bank.

Owns the sparse active set and exposes it as a total mapping over all
harmonic slots. Locked harmonics never have their amplitude changed, by
direct writes or by bulk operations.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional

import numpy as np

from additive_synth.audio.harmonics import (
    MAX_HARMONIC_ID,
    MIN_HARMONIC_ID,
    Harmonic,
    clamp_amplitude,
    validate_harmonic_id,
)
from additive_synth.audio.resolver import effective_amplitudes, is_audible
from additive_synth.core.config import settings
from additive_synth.core.exceptions import HarmonicLockedError, HarmonicNotFoundError
from additive_synth.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class GraphPoint:
    """Display record for one harmonic slot."""
    id: int
    name: str
    amplitude: float  # effective
    original_amplitude: float
    is_muted: bool
    is_locked: bool
    is_soloed: bool
    is_active: bool


class HarmonicBank:
    """
    Active harmonic set keyed by id.

    Starts with harmonic 1 at full amplitude.
    """

    def __init__(self, activation_threshold: float = settings.activation_threshold):
        self.activation_threshold = activation_threshold
        self._active: Dict[int, Harmonic] = {1: Harmonic(id=1, amplitude=1.0)}

    def __len__(self) -> int:
        return len(self._active)

    def __contains__(self, harmonic_id: int) -> bool:
        return harmonic_id in self._active

    def active(self) -> List[Harmonic]:
        """Active harmonics ordered by id."""
        return [self._active[i] for i in sorted(self._active)]

    def get(self, harmonic_id: int) -> Harmonic:
        """Harmonic for any slot; absent slots yield the inactive default."""
        harmonic_id = validate_harmonic_id(harmonic_id)
        return self._active.get(harmonic_id) or Harmonic.inactive(harmonic_id)

    def all_slots(self) -> List[Harmonic]:
        return [self.get(i) for i in range(MIN_HARMONIC_ID, MAX_HARMONIC_ID + 1)]

    def _require(self, harmonic_id: int) -> Harmonic:
        harmonic_id = validate_harmonic_id(harmonic_id)
        harmonic = self._active.get(harmonic_id)
        if harmonic is None:
            raise HarmonicNotFoundError(harmonic_id)
        return harmonic

    # ------------------------------------------------------------------
    # Per-harmonic edits

    def add(self, harmonic_id: int, amplitude: float = 1.0) -> bool:
        """
        Add a harmonic with default flags.

        Returns:
            False if the id was already active (the set is unchanged)
        """
        harmonic = Harmonic(id=harmonic_id, amplitude=amplitude)
        if harmonic.id in self._active:
            logger.warning("harmonic_already_exists", harmonic_id=harmonic.id)
            return False

        self._active[harmonic.id] = harmonic
        logger.info("harmonic_added", harmonic_id=harmonic.id, amplitude=harmonic.amplitude)
        return True

    def remove(self, harmonic_id: int) -> bool:
        harmonic_id = validate_harmonic_id(harmonic_id)
        removed = self._active.pop(harmonic_id, None) is not None
        if removed:
            logger.info("harmonic_removed", harmonic_id=harmonic_id)
        return removed

    def set_amplitude(self, harmonic_id: int, amplitude: float) -> Optional[Harmonic]:
        """
        Write an amplitude, activating absent harmonics above the threshold.

        Args:
            harmonic_id: Harmonic slot
            amplitude: New amplitude, clamped into [0, 1]

        Returns:
            The updated harmonic, or None if an absent slot stayed inactive

        Raises:
            HarmonicLockedError: If the harmonic is locked
        """
        harmonic_id = validate_harmonic_id(harmonic_id)
        amplitude = clamp_amplitude(amplitude)
        existing = self._active.get(harmonic_id)

        if existing is not None:
            if existing.is_locked:
                raise HarmonicLockedError(harmonic_id)
            updated = replace(existing, amplitude=amplitude)
        elif amplitude > self.activation_threshold:
            updated = Harmonic(id=harmonic_id, amplitude=amplitude)
            logger.info("harmonic_activated", harmonic_id=harmonic_id, amplitude=amplitude)
        else:
            return None

        self._active[harmonic_id] = updated
        return updated

    def set_muted(self, harmonic_id: int, muted: bool) -> Harmonic:
        return self._set_flag(harmonic_id, is_muted=bool(muted))

    def set_soloed(self, harmonic_id: int, soloed: bool) -> Harmonic:
        return self._set_flag(harmonic_id, is_soloed=bool(soloed))

    def set_locked(self, harmonic_id: int, locked: bool) -> Harmonic:
        return self._set_flag(harmonic_id, is_locked=bool(locked))

    def toggle_mute(self, harmonic_id: int) -> Harmonic:
        return self.set_muted(harmonic_id, not self._require(harmonic_id).is_muted)

    def toggle_solo(self, harmonic_id: int) -> Harmonic:
        return self.set_soloed(harmonic_id, not self._require(harmonic_id).is_soloed)

    def toggle_lock(self, harmonic_id: int) -> Harmonic:
        return self.set_locked(harmonic_id, not self._require(harmonic_id).is_locked)

    def _set_flag(self, harmonic_id: int, **flag) -> Harmonic:
        updated = replace(self._require(harmonic_id), **flag)
        self._active[updated.id] = updated
        logger.info("harmonic_flag_changed", harmonic_id=updated.id, **flag)
        return updated

    # ------------------------------------------------------------------
    # Bulk edits

    def randomize(self, rng: Optional[np.random.Generator] = None) -> List[Harmonic]:
        """
        Draw fresh random amplitudes for every unlocked slot.

        Locked harmonics are kept as they are. Previously active harmonics
        keep their mute flag; solo is cleared. Slots that draw an amplitude
        at or below the activation threshold end up inactive.
        """
        rng = rng if rng is not None else np.random.default_rng()
        result: Dict[int, Harmonic] = {}

        for harmonic_id in range(MIN_HARMONIC_ID, MAX_HARMONIC_ID + 1):
            existing = self._active.get(harmonic_id)
            if existing is not None and existing.is_locked:
                result[harmonic_id] = existing
                continue

            amplitude = float(rng.random())
            if amplitude > self.activation_threshold:
                result[harmonic_id] = Harmonic(
                    id=harmonic_id,
                    amplitude=amplitude,
                    is_muted=existing.is_muted if existing is not None else False,
                )

        self._active = result
        logger.info("harmonics_randomized", active=sorted(result))
        return self.active()

    def clear_all(self) -> List[Harmonic]:
        """Remove every harmonic that is not locked."""
        self._active = {i: h for i, h in self._active.items() if h.is_locked}
        logger.info("harmonics_cleared", kept=sorted(self._active))
        return self.active()

    # ------------------------------------------------------------------
    # Views

    def graph_points(self) -> List[GraphPoint]:
        """One display record per slot, with solo/mute-resolved amplitudes."""
        effective = effective_amplitudes(self._active.values())
        points = []
        for harmonic in self.all_slots():
            points.append(GraphPoint(
                id=harmonic.id,
                name=f"H{harmonic.id}",
                amplitude=effective.get(harmonic.id, 0.0),
                original_amplitude=harmonic.amplitude,
                is_muted=harmonic.is_muted,
                is_locked=harmonic.is_locked,
                is_soloed=harmonic.is_soloed,
                is_active=harmonic.id in self._active,
            ))
        return points

    def has_audible(self) -> bool:
        return is_audible(self._active.values())
