"""
Tests for the HTTP API.
"""

import pytest
from fastapi.testclient import TestClient

from additive_synth.api.main import app
from additive_synth.api.state import get_engine
from additive_synth.audio.engine import SynthEngine
from additive_synth.audio.harmonics import AudioSettings


@pytest.fixture
def engine():
    engine = SynthEngine(
        audio_settings=AudioSettings(duration=0.25),
        sample_rate=8000,
        export_sample_rate=8000,
        enable_output=False
    )
    yield engine
    engine.dispose()


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHarmonicRoutes:
    """Test harmonic editing endpoints."""

    def test_health(self, client):
        """Test health endpoint."""
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_list_harmonics(self, client):
        """Test listing the initial set."""
        response = client.get("/api/v1/harmonics")

        assert response.status_code == 200
        harmonics = response.json()["harmonics"]
        assert [h["id"] for h in harmonics] == [1]
        assert harmonics[0]["amplitude"] == 1.0

    def test_add_harmonic(self, client):
        """Test adding a harmonic and re-adding the same id."""
        response = client.post("/api/v1/harmonics", json={"id": 3, "amplitude": 0.5})
        assert response.status_code == 201
        assert response.json()["created"] is True

        response = client.post("/api/v1/harmonics", json={"id": 3, "amplitude": 0.9})
        assert response.json()["created"] is False
        assert response.json()["harmonic"]["amplitude"] == 0.5

    def test_add_invalid_id(self, client):
        """Test request validation rejects out-of-range ids."""
        response = client.post("/api/v1/harmonics", json={"id": 40})

        assert response.status_code == 422

    def test_amplitude_activation(self, client):
        """Test amplitude writes activate absent harmonics above the threshold."""
        response = client.put("/api/v1/harmonics/6/amplitude", json={"amplitude": 0.001})
        assert response.json()["active"] is False

        response = client.put("/api/v1/harmonics/6/amplitude", json={"amplitude": 0.7})
        assert response.json()["active"] is True
        assert response.json()["harmonic"]["amplitude"] == 0.7

    def test_amplitude_invalid_slot(self, client):
        """Test slot ids outside 1-32 are reported as invalid parameters."""
        response = client.put("/api/v1/harmonics/0/amplitude", json={"amplitude": 0.5})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_PARAMETER"

    def test_locked_amplitude(self, client):
        """Test locked harmonics reject amplitude writes."""
        client.put("/api/v1/harmonics/1/lock", params={"enabled": True})

        response = client.put("/api/v1/harmonics/1/amplitude", json={"amplitude": 0.2})

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "HARMONIC_LOCKED"

    def test_flag_on_absent_harmonic(self, client):
        """Test flag changes on absent harmonics return 404."""
        response = client.put("/api/v1/harmonics/7/mute", params={"enabled": True})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "HARMONIC_NOT_FOUND"

    def test_graph(self, client):
        """Test graph points reflect solo resolution."""
        client.post("/api/v1/harmonics", json={"id": 2, "amplitude": 0.5})
        client.put("/api/v1/harmonics/2/solo", params={"enabled": True})

        body = client.get("/api/v1/harmonics/graph").json()

        assert len(body["points"]) == 32
        assert body["points"][0]["amplitude"] == 0.0
        assert body["points"][0]["original_amplitude"] == 1.0
        assert body["points"][1]["amplitude"] == 0.5
        assert body["has_audible"] is True

    def test_toggle_flags(self, client):
        """Test toggle endpoints flip flags and reject unknown flags."""
        response = client.post("/api/v1/harmonics/1/mute/toggle")
        assert response.status_code == 200
        assert response.json()["is_muted"] is True

        response = client.post("/api/v1/harmonics/1/mute/toggle")
        assert response.json()["is_muted"] is False

        assert client.post("/api/v1/harmonics/1/lock/toggle").json()["is_locked"] is True
        assert client.post("/api/v1/harmonics/1/volume/toggle").status_code == 422
        assert client.post("/api/v1/harmonics/9/solo/toggle").status_code == 404

    def test_clear_and_remove(self, client):
        """Test clear keeps locked harmonics and delete removes one."""
        client.post("/api/v1/harmonics", json={"id": 4})
        client.put("/api/v1/harmonics/4/lock", params={"enabled": True})

        body = client.post("/api/v1/harmonics/clear").json()
        assert [h["id"] for h in body["harmonics"]] == [4]

        assert client.delete("/api/v1/harmonics/4").json()["success"] is True
        assert client.get("/api/v1/harmonics").json()["harmonics"] == []

    def test_randomize(self, client):
        """Test randomize returns an active set within range."""
        body = client.post("/api/v1/harmonics/randomize").json()

        for harmonic in body["harmonics"]:
            assert 0.0 < harmonic["amplitude"] <= 1.0
            assert not harmonic["is_soloed"]


class TestPlaybackRoutes:
    """Test settings, playback and export endpoints."""

    def test_settings(self, client):
        """Test partial settings updates within editor ranges."""
        response = client.put("/api/v1/settings", json={"fundamental_frequency": 110.0})
        assert response.status_code == 200
        assert response.json()["fundamental_frequency"] == 110.0
        assert response.json()["duration"] == 0.25

        response = client.put("/api/v1/settings", json={"fundamental_frequency": 5000.0})
        assert response.status_code == 422

    def test_start_stop(self, client):
        """Test playback transport."""
        assert client.post("/api/v1/playback/start").json()["is_playing"] is True
        assert client.get("/api/v1/playback").json()["is_playing"] is True
        assert client.post("/api/v1/playback/stop").json()["is_playing"] is False

    def test_start_empty(self, client):
        """Test starting with no harmonics returns a conflict."""
        client.post("/api/v1/harmonics/clear")

        response = client.post("/api/v1/playback/start")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "EMPTY_ACTIVE_SET"

    def test_export(self, client):
        """Test export returns a WAV download."""
        response = client.post("/api/v1/export")

        assert response.status_code == 200
        assert response.headers["content-type"] == "audio/wav"
        assert 'filename="additive_synth_output.wav"' in response.headers["content-disposition"]
        assert len(response.content) == 44 + 2 * 2000
        assert response.content[:4] == b'RIFF'

    def test_export_while_playing(self, client):
        """Test export during playback is refused."""
        client.post("/api/v1/playback/start")

        response = client.post("/api/v1/export")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CONCURRENT_EXPORT_CONFLICT"

    def test_export_silent(self, client):
        """Test export with nothing audible is refused."""
        client.put("/api/v1/harmonics/1/mute", params={"enabled": True})

        response = client.post("/api/v1/export")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "NO_AUDIBLE_SIGNAL"


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
