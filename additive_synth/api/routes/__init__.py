"""
API route modules.
"""

from additive_synth.api.routes import export, harmonics, health, playback

__all__ = ["export", "harmonics", "health", "playback"]
