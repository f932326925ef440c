"""
neuro_flap/evolution/

Generational reproduction for populations of GeneticNetworks.

One round:
- Evaluate every network in the simulation (external)
- Assign fitness (external)
- Select, cross over and mutate (here)

Policies:
- pairs: rank-ordered pairing, the default
- weighted: fitness-proportional selection with a per-individual quota
"""

from .reproduction import reproduce
from .generation import (
    GenerationConfig,
    ReproductionMethod,
    make_new_generation,
    rank_by_fitness,
)
from .runner import EvolutionRunner, RunConfig, evaluate_population

__all__ = [
    "reproduce",
    "GenerationConfig",
    "ReproductionMethod",
    "make_new_generation",
    "rank_by_fitness",
    "EvolutionRunner",
    "RunConfig",
    "evaluate_population",
]
