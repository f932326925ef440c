"""
neuro_flap/exceptions.py

Error types for precondition violations.

Every error here signals a caller or configuration bug. None of them is
transient, so none of them should be retried.
"""


class NeuroFlapError(ValueError):
    """Base class for all neuro_flap errors."""


class ShapeMismatchError(NeuroFlapError):
    """Two networks (or a network and its parameters) disagree on shape."""


class InputSizeMismatchError(NeuroFlapError):
    """A vector does not have the length the operation requires."""


class InvalidConfigError(NeuroFlapError):
    """A configuration value or combination of values cannot be honored."""


class EmptyPopulationError(NeuroFlapError):
    """A generation was requested from an empty population."""


class UnsetFitnessError(NeuroFlapError):
    """A network was ranked or weighted before it received a fitness."""


class NonFiniteValueError(NeuroFlapError):
    """A numeric input is NaN or infinite."""
