"""
evolution/generation.py

Generation manager: turns one scored population into the next.

Selection policies form a closed set (ReproductionMethod). Each policy is a
pure function (population, config, rng) -> population; the manager keeps no
state between calls and no network survives into the next generation.

Policies:
- PAIRS: rank by fitness, pair off neighbours in rank order, each pair
  breeds children_per_pair children. This is the policy in use.
- WEIGHTED: legacy fitness-proportional selection with a per-individual
  selection cap. Kept for completeness; it learns noticeably worse.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence
import logging
import math

import numpy as np

from neuro_flap.core.math_ops import weighted_index_sample
from neuro_flap.core.network import GeneticNetwork
from neuro_flap.exceptions import (
    EmptyPopulationError,
    InvalidConfigError,
    ShapeMismatchError,
    UnsetFitnessError,
)
from .reproduction import check_mutation_params, reproduce

logger = logging.getLogger(__name__)


class ReproductionMethod(str, Enum):
    """Selection policy used to pick parents."""
    PAIRS = "pairs"
    WEIGHTED = "weighted"


def _is_int(value: Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


# Accepted spellings for GenerationConfig.from_dict
_CONFIG_ALIASES = {
    "reproductionMethod": "reproduction_method",
    "reproductionMutationRate": "reproduction_mutation_rate",
    "reproductionMutationStdDev": "reproduction_mutation_std_dev",
    "weightedMaxQuota": "weighted_max_quota",
    "childrenPerPair": "children_per_pair",
}


@dataclass
class GenerationConfig:
    """Configuration for producing the next generation."""
    reproduction_method: ReproductionMethod = ReproductionMethod.PAIRS
    reproduction_mutation_rate: float = 0.0
    reproduction_mutation_std_dev: float = 1.0

    # Max times one individual may be drawn as a parent (weighted only)
    weighted_max_quota: Optional[int] = 4

    # Children bred by each ranked pair (pairs only)
    children_per_pair: int = 2

    def __post_init__(self):
        try:
            self.reproduction_method = ReproductionMethod(self.reproduction_method)
        except ValueError:
            raise InvalidConfigError(
                f"Unknown reproduction method {self.reproduction_method!r}; "
                f"expected one of {[m.value for m in ReproductionMethod]}"
            ) from None

    def validate(self) -> "GenerationConfig":
        check_mutation_params(
            self.reproduction_mutation_rate, self.reproduction_mutation_std_dev
        )
        quota = self.weighted_max_quota
        if quota is not None and (not _is_int(quota) or quota < 1):
            raise InvalidConfigError(
                f"weighted_max_quota must be an integer >= 1 or None, got {self.weighted_max_quota}"
            )
        if not _is_int(self.children_per_pair) or self.children_per_pair < 1:
            raise InvalidConfigError(
                f"children_per_pair must be an integer >= 1, got {self.children_per_pair}"
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["reproduction_method"] = self.reproduction_method.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerationConfig":
        """Build from snake_case or camelCase keys. Unknown keys are rejected."""
        fields = set(cls.__dataclass_fields__)
        kwargs = {}
        for key, value in (data or {}).items():
            name = _CONFIG_ALIASES.get(key, key)
            if name not in fields:
                raise InvalidConfigError(f"Unknown generation config key {key!r}")
            kwargs[name] = value
        return cls(**kwargs)


def _check_fitness(population: Sequence[GeneticNetwork]) -> None:
    for i, net in enumerate(population):
        if net.fitness is None:
            raise UnsetFitnessError(f"Network at index {i} has no fitness assigned")
        if math.isnan(net.fitness):
            raise UnsetFitnessError(f"Network at index {i} has NaN fitness")


def rank_by_fitness(population: Sequence[GeneticNetwork]) -> List[GeneticNetwork]:
    """Stable sort, best first. Ties keep their original order."""
    _check_fitness(population)
    return sorted(population, key=lambda net: net.fitness, reverse=True)


def _breed(
    parent1: GeneticNetwork,
    parent2: GeneticNetwork,
    config: GenerationConfig,
    rng: np.random.Generator,
) -> GeneticNetwork:
    return reproduce(
        parent1,
        parent2,
        config.reproduction_mutation_rate,
        config.reproduction_mutation_std_dev,
        rng,
    )


def check_pairs_population(size: int, per_pair: int) -> None:
    """Pairs mode needs children_per_pair >= 2 dividing the population size."""
    if per_pair < 2 or size % per_pair != 0:
        raise InvalidConfigError(
            f"Population of {size} cannot be replaced by pairs each breeding "
            f"{per_pair} children; children_per_pair must be >= 2 and divide "
            f"the population size"
        )


def pairs_generation(
    population: Sequence[GeneticNetwork],
    config: GenerationConfig,
    rng: np.random.Generator,
) -> List[GeneticNetwork]:
    """
    Rank-ordered pairing.

    Ranks 1&2, 3&4, ... each breed children_per_pair children. With
    population size N, the top 2N/children_per_pair individuals breed, so
    the output has exactly N members; with children_per_pair=2 every
    individual is paired exactly once.
    """
    size = len(population)
    per_pair = config.children_per_pair
    check_pairs_population(size, per_pair)

    ranked = rank_by_fitness(population)
    num_pairs = size // per_pair

    children = []
    for pair in range(num_pairs):
        parent1, parent2 = ranked[2 * pair], ranked[2 * pair + 1]
        logger.debug(
            f"Pair {pair}: fitness {parent1.fitness} x {parent2.fitness} "
            f"-> {per_pair} children"
        )
        children.extend(_breed(parent1, parent2, config, rng) for _ in range(per_pair))

    return children


def selection_weights(population: Sequence[GeneticNetwork]) -> np.ndarray:
    """Fitness shifted so the worst individual weighs zero, normalized to sum 1."""
    _check_fitness(population)
    fitnesses = np.array([net.fitness for net in population], dtype=np.float64)

    shifted = fitnesses - fitnesses.min()
    total = shifted.sum()
    if not np.isfinite(total) or total <= 0:
        raise InvalidConfigError(
            "Weighted selection needs at least two distinct finite fitness values"
        )
    return shifted / total


def weighted_generation(
    population: Sequence[GeneticNetwork],
    config: GenerationConfig,
    rng: np.random.Generator,
) -> List[GeneticNetwork]:
    """
    Fitness-proportional selection, one child per drawn pair.

    Each individual may be drawn at most weighted_max_quota times across the
    whole generation. The quota must leave enough capacity for 2N draws.
    """
    size = len(population)
    weights = selection_weights(population)
    quota = config.weighted_max_quota

    if quota is not None:
        capacity = quota * int(np.count_nonzero(weights > 0))
        if capacity < 2 * size:
            raise InvalidConfigError(
                f"weighted_max_quota={quota} allows only {capacity} parent draws, "
                f"but {2 * size} are needed for a population of {size}"
            )

    counts = np.zeros(size, dtype=np.int64)
    children = []
    while len(children) < size:
        parent1 = population[weighted_index_sample(weights, quota, counts, rng)]
        parent2 = population[weighted_index_sample(weights, quota, counts, rng)]
        children.append(_breed(parent1, parent2, config, rng))

    return children


GenerationStrategy = Callable[
    [Sequence[GeneticNetwork], GenerationConfig, np.random.Generator],
    List[GeneticNetwork],
]

STRATEGIES: Dict[ReproductionMethod, GenerationStrategy] = {
    ReproductionMethod.PAIRS: pairs_generation,
    ReproductionMethod.WEIGHTED: weighted_generation,
}


def make_new_generation(
    population: Sequence[GeneticNetwork],
    config: Optional[GenerationConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> List[GeneticNetwork]:
    """
    Produce the successor of a fully scored population.

    Every returned network is new and has its fitness unset.
    """
    config = (config or GenerationConfig()).validate()
    rng = rng if rng is not None else np.random.default_rng()

    if len(population) == 0:
        raise EmptyPopulationError("Cannot make a generation from an empty population")

    signature = population[0].signature
    for i, net in enumerate(population):
        if net.signature != signature:
            raise ShapeMismatchError(
                f"Network at index {i} has signature {list(net.signature)}, "
                f"expected {list(signature)}"
            )

    strategy = STRATEGIES[config.reproduction_method]
    children = strategy(population, config, rng)

    best = max(net.fitness for net in population)
    logger.info(
        f"New generation via {config.reproduction_method.value}: "
        f"{len(population)} -> {len(children)} networks (best fitness {best:.4f})"
    )
    return children
