"""
Core components of the neuro-flap system.

- network: The GeneticNetwork - one agent's feed-forward controller
- math_ops: Numeric primitives (matrix ops, sigmoid, sampling)
"""

from .network import GeneticNetwork, validate_signature

__all__ = ["GeneticNetwork", "validate_signature"]
