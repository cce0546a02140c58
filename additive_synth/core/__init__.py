"""
Configuration, errors and logging shared across the synthesizer.
"""
