"""
Configuration management for the additive synthesizer.
Loads settings from environment variables.
"""

from typing import List, Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "additive-synth"
    app_version: str = "0.1.0"
    env: Literal["development", "staging", "production"] = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_allow_origins: List[str] = ["*"]
    cors_allow_credentials: bool = False

    # Harmonics
    activation_threshold: float = 0.005  # min amplitude to activate an absent harmonic

    # Default audio settings
    default_fundamental_frequency: float = 220.0  # Hz
    default_duration: float = 2.0  # seconds
    default_master_volume: float = 0.75

    # Offline export
    export_sample_rate: int = 44100
    export_filename: str = "additive_synth_output.wav"

    # Real-time playback
    ramp_time: float = 0.01  # seconds
    teardown_delay: float = 0.05  # seconds, must exceed ramp_time
    live_sample_rate: Optional[int] = None  # None = device default
    live_blocksize: int = 512
    audio_output_enabled: bool = True
    output_device: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "json"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env == "development"


# Global settings instance
settings = Settings()
