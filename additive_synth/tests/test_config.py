"""
Tests for environment-driven settings.
"""

import pytest

from additive_synth.audio.bank import HarmonicBank
from additive_synth.audio.harmonics import MAX_HARMONIC_ID
from additive_synth.core.config import Settings


class TestSettings:
    """Test settings loading."""

    def test_defaults(self, monkeypatch):
        """Test defaults used by the synthesis engine."""
        monkeypatch.delenv("ACTIVATION_THRESHOLD", raising=False)
        config = Settings(_env_file=None)

        assert config.activation_threshold == 0.005
        assert config.default_fundamental_frequency == 220.0
        assert config.ramp_time == 0.01
        assert config.export_filename == "additive_synth_output.wav"

    def test_environment_override(self, monkeypatch):
        """Test environment values reach the components that read them."""
        monkeypatch.setenv("ACTIVATION_THRESHOLD", "0.2")
        monkeypatch.setenv("EXPORT_SAMPLE_RATE", "22050")

        config = Settings(_env_file=None)
        bank = HarmonicBank(activation_threshold=config.activation_threshold)

        assert config.export_sample_rate == 22050
        assert bank.set_amplitude(5, 0.15) is None
        assert bank.set_amplitude(5, 0.25).amplitude == 0.25

    def test_slot_count_is_fixed(self, monkeypatch):
        """Test the harmonic slot count is not a setting."""
        monkeypatch.setenv("MAX_HARMONICS", "8")

        config = Settings(_env_file=None)

        assert "max_harmonics" not in Settings.model_fields
        assert not hasattr(config, "max_harmonics")
        assert len(HarmonicBank().all_slots()) == MAX_HARMONIC_ID == 32


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
