"""
HTTP interface for the additive synthesizer.
"""
