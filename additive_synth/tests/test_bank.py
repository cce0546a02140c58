"""
Tests for the editable harmonic bank.
"""

import numpy as np
import pytest

from additive_synth.audio.bank import HarmonicBank
from additive_synth.core.exceptions import (
    HarmonicLockedError,
    HarmonicNotFoundError,
    InvalidParameterError,
)


class FixedRandom:
    """Stands in for a numpy Generator, always drawing the same value."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


@pytest.fixture
def bank():
    return HarmonicBank()


class TestHarmonicBank:
    """Test per-harmonic edits."""

    def test_initial_state(self, bank):
        """Test the bank starts with harmonic 1 at full amplitude."""
        active = bank.active()

        assert [h.id for h in active] == [1]
        assert active[0].amplitude == 1.0

    def test_get_is_total(self, bank):
        """Test absent slots resolve to the inactive default."""
        harmonic = bank.get(17)

        assert harmonic.id == 17
        assert harmonic.amplitude == 0.0
        assert 17 not in bank
        assert len(bank.all_slots()) == 32

    def test_add_is_idempotent(self, bank):
        """Test adding an existing id changes nothing."""
        assert bank.add(4, 0.5) is True
        assert bank.add(4, 0.9) is False

        assert bank.get(4).amplitude == 0.5
        assert [h.id for h in bank.active()] == [1, 4]

    def test_active_sorted(self, bank):
        """Test the active list is ordered by id regardless of insertion order."""
        bank.add(9)
        bank.add(3)

        assert [h.id for h in bank.active()] == [1, 3, 9]

    def test_remove(self, bank):
        """Test removing harmonics."""
        bank.add(2)

        assert bank.remove(2) is True
        assert bank.remove(2) is False
        assert 2 not in bank

    @pytest.mark.parametrize("harmonic_id", [0, 33])
    def test_invalid_ids(self, bank, harmonic_id):
        """Test ids outside 1-32 are rejected everywhere."""
        with pytest.raises(InvalidParameterError):
            bank.add(harmonic_id)
        with pytest.raises(InvalidParameterError):
            bank.set_amplitude(harmonic_id, 0.5)

    def test_set_amplitude_clamps(self, bank):
        """Test amplitude writes are clamped into [0, 1]."""
        assert bank.set_amplitude(1, 1.4).amplitude == 1.0
        assert bank.set_amplitude(1, -2.0).amplitude == 0.0
        assert 1 in bank

    def test_activation_threshold(self, bank):
        """Test writes to absent slots only activate above the threshold."""
        assert bank.set_amplitude(6, 0.004) is None
        assert 6 not in bank

        harmonic = bank.set_amplitude(6, 0.3)
        assert harmonic.amplitude == 0.3
        assert 6 in bank

    def test_lock_blocks_amplitude_writes(self, bank):
        """Test locked harmonics refuse amplitude changes."""
        bank.set_locked(1, True)

        with pytest.raises(HarmonicLockedError):
            bank.set_amplitude(1, 0.2)
        assert bank.get(1).amplitude == 1.0

        bank.set_locked(1, False)
        assert bank.set_amplitude(1, 0.2).amplitude == 0.2

    def test_flags(self, bank):
        """Test setting and toggling mute, solo and lock."""
        assert bank.set_muted(1, True).is_muted
        assert not bank.toggle_mute(1).is_muted
        assert bank.toggle_solo(1).is_soloed
        assert bank.toggle_lock(1).is_locked
        assert bank.get(1).amplitude == 1.0

    def test_flags_on_absent_harmonic(self, bank):
        """Test flag changes on absent harmonics are reported."""
        with pytest.raises(HarmonicNotFoundError):
            bank.set_muted(5, True)
        with pytest.raises(HarmonicNotFoundError):
            bank.toggle_solo(5)


class TestBulkOperations:
    """Test randomize and clear all."""

    def test_randomize_preserves_locked(self, bank):
        """Test locked harmonics survive randomize untouched."""
        bank.set_amplitude(1, 0.42)
        bank.set_locked(1, True)

        bank.randomize(np.random.default_rng(7))

        locked = bank.get(1)
        assert locked.amplitude == 0.42
        assert locked.is_locked
        for harmonic in bank.active():
            assert harmonic.amplitude > bank.activation_threshold or harmonic.is_locked

    def test_randomize_keeps_mute_and_clears_solo(self, bank):
        """Test randomize keeps mute flags but resets solo."""
        bank.add(2)
        bank.set_muted(2, True)
        bank.set_soloed(1, True)

        active = bank.randomize(FixedRandom(0.5))

        assert len(active) == 32
        assert bank.get(2).is_muted
        assert not any(h.is_soloed for h in active)
        assert all(h.amplitude == 0.5 for h in active)

    def test_randomize_below_threshold_deactivates(self, bank):
        """Test slots drawing a tiny amplitude become inactive."""
        bank.add(3)
        bank.set_locked(3, True)

        active = bank.randomize(FixedRandom(0.001))

        assert [h.id for h in active] == [3]

    def test_clear_all_keeps_locked(self, bank):
        """Test clear all removes only unlocked harmonics."""
        bank.add(2)
        bank.add(5)
        bank.set_locked(5, True)

        active = bank.clear_all()

        assert [h.id for h in active] == [5]


class TestGraphPoints:
    """Test display records."""

    def test_points_cover_all_slots(self, bank):
        """Test one point per slot with effective amplitudes."""
        bank.add(2, 0.5)
        bank.set_soloed(2, True)

        points = bank.graph_points()

        assert len(points) == 32
        assert points[0].name == "H1"
        assert points[0].amplitude == 0.0
        assert points[0].original_amplitude == 1.0
        assert points[1].amplitude == 0.5
        assert points[1].is_soloed
        assert not points[4].is_active
        assert points[4].amplitude == 0.0

    def test_has_audible(self, bank):
        """Test audibility follows mute state."""
        assert bank.has_audible()

        bank.set_muted(1, True)
        assert not bank.has_audible()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
