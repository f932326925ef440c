"""
evolution/runner.py

Round loop around the generation manager.

The surrounding simulation alternates:
1. Evaluate every network for one round
2. Assign each network its fitness
3. Replace the population with its offspring

EvolutionRunner owns the population and the rng for that loop and records
per-generation statistics. The simulation can also drive it step by step:
ask() for the networks, assign fitness, then tell().
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
import logging

import numpy as np

from neuro_flap.core.network import GeneticNetwork, validate_signature
from neuro_flap.exceptions import EmptyPopulationError, InvalidConfigError
from .generation import (
    GenerationConfig,
    ReproductionMethod,
    check_pairs_population,
    make_new_generation,
    rank_by_fitness,
)

logger = logging.getLogger(__name__)


FitnessFunction = Callable[[GeneticNetwork], float]


@dataclass
class RunConfig:
    """Configuration for a full evolution run."""
    signature: Tuple[int, ...] = (4, 6, 1)
    population_size: int = 50
    generations: int = 100

    # Genesis initialization: Normal(init_mean, init_stddev^2)
    init_mean: float = 0.0
    init_stddev: float = 1.0

    seed: Optional[int] = None
    generation: GenerationConfig = field(default_factory=GenerationConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunConfig":
        data = dict(data or {})
        generation = GenerationConfig.from_dict(data.pop("generation", {}))
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise InvalidConfigError(f"Unknown run config keys {sorted(unknown)}")
        if "signature" in data:
            data["signature"] = tuple(data["signature"])
        return cls(generation=generation, **data)


class EvolutionRunner:
    """
    Owns one population and advances it generation by generation.

    All randomness flows from a single np.random.Generator, so a seeded
    runner reproduces the same sequence of populations.
    """

    def __init__(self, config: RunConfig):
        self.config = config
        self.config.generation.validate()
        self.signature = validate_signature(config.signature)
        self.rng = np.random.default_rng(config.seed)

        if config.population_size < 1:
            raise EmptyPopulationError(
                f"Population size must be positive, got {config.population_size}"
            )
        if config.generation.reproduction_method is ReproductionMethod.PAIRS:
            check_pairs_population(config.population_size, config.generation.children_per_pair)

        self.population: List[GeneticNetwork] = [
            GeneticNetwork(self.signature).init_random(
                config.init_mean, config.init_stddev, self.rng
            )
            for _ in range(config.population_size)
        ]
        self.generation = 0
        self.history: List[Dict[str, Any]] = []

        # Best seen so far
        self.best_network: Optional[GeneticNetwork] = None
        self.best_fitness = float('-inf')

        logger.info(
            f"Runner initialized: {config.population_size} networks "
            f"with signature {list(self.signature)}"
        )

    def ask(self) -> List[GeneticNetwork]:
        """Networks awaiting evaluation this round."""
        return self.population

    def evaluate(self, fitness_fn: FitnessFunction) -> None:
        """Score every network of the current generation."""
        evaluate_population(self.population, fitness_fn)

    def tell(self) -> Dict[str, Any]:
        """Record statistics for the scored population and breed its successor."""
        ranked = rank_by_fitness(self.population)
        fitnesses = np.array([net.fitness for net in ranked])

        if ranked[0].fitness > self.best_fitness:
            self.best_fitness = ranked[0].fitness
            self.best_network = ranked[0].copy()

        stats = {
            'generation': self.generation,
            'best_fitness': float(fitnesses.max()),
            'mean_fitness': float(fitnesses.mean()),
            'min_fitness': float(fitnesses.min()),
            'best_overall': self.best_fitness,
        }
        self.history.append(stats)

        self.population = make_new_generation(
            self.population, self.config.generation, self.rng
        )
        self.generation += 1
        return stats

    def step(self, fitness_fn: FitnessFunction) -> Dict[str, Any]:
        self.evaluate(fitness_fn)
        return self.tell()

    def run(
        self,
        fitness_fn: FitnessFunction,
        generations: Optional[int] = None,
        callback: Optional[Callable[[Dict[str, Any]], None]] = None,
    ) -> List[Dict[str, Any]]:
        """Run the evaluate/breed loop and return the per-generation history."""
        generations = self.config.generations if generations is None else generations

        for _ in range(generations):
            stats = self.step(fitness_fn)
            logger.info(
                f"Generation {stats['generation']}: best={stats['best_fitness']:.4f} "
                f"mean={stats['mean_fitness']:.4f}"
            )
            if callback is not None:
                callback(stats)

        return self.history

    def get_best(self) -> Tuple[Optional[GeneticNetwork], float]:
        """Best network seen in any evaluated generation, and its fitness."""
        return self.best_network, self.best_fitness

    def get_statistics(self) -> Dict[str, Any]:
        return {
            'generation': self.generation,
            'population_size': len(self.population),
            'signature': list(self.signature),
            'method': self.config.generation.reproduction_method.value,
            'best_fitness': self.best_fitness,
        }


def evaluate_population(
    population: Sequence[GeneticNetwork],
    fitness_fn: FitnessFunction,
) -> None:
    """Assign fitness_fn(network) to every network in place."""
    for net in population:
        net.fitness = fitness_fn(net)
