"""
Additive synthesizer: compose up to 32 harmonic partials, audition them
live and export the result as WAV.
"""

__version__ = "0.1.0"
