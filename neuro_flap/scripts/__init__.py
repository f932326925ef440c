"""
Command-line entry points for neuro-flap.
"""
