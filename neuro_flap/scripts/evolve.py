#!/usr/bin/env python3
"""
Headless Evolution Demo CLI

Evolves a population of GeneticNetworks without the game: each network sees
synthetic bird/pipe sensor vectors and is scored on how often its flap
decision matches a simple rule (flap when the bird is below the gap centre).

Usage:
    # Defaults
    python -m neuro_flap.scripts.evolve

    # From a YAML config, overriding a few values
    python -m neuro_flap.scripts.evolve --config configs/evolve.yaml --generations 20

    # Legacy weighted selection
    python -m neuro_flap.scripts.evolve --method weighted --mutation-rate 0.2
"""

import argparse
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np
import yaml

from neuro_flap.core.network import GeneticNetwork
from neuro_flap.evolution.runner import EvolutionRunner, RunConfig

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


# Sensor layout: bird height, bird velocity, gap centre height, distance to pipe
SENSOR_SIZE = 4


@dataclass
class FlapTask:
    """Fixed set of sensor vectors with the decision an ideal agent makes."""
    inputs: np.ndarray   # (num_cases, SENSOR_SIZE), values in [0, 1]
    targets: np.ndarray  # (num_cases,), 1.0 = flap

    @classmethod
    def generate(cls, num_cases: int = 64, seed: Optional[int] = None) -> "FlapTask":
        rng = np.random.default_rng(seed)
        inputs = rng.uniform(0.0, 1.0, size=(num_cases, SENSOR_SIZE))
        # Screen y grows downward: flap when the bird sits below the gap centre
        targets = (inputs[:, 0] > inputs[:, 2]).astype(np.float64)
        return cls(inputs=inputs, targets=targets)

    def score(self, network: GeneticNetwork) -> float:
        """Correct decisions, plus a fractional term rewarding confident outputs."""
        outputs = np.array([network.compute(x)[0] for x in self.inputs])
        correct = np.sum((outputs > 0.5) == (self.targets > 0.5))
        closeness = 1.0 - np.mean(np.abs(outputs - self.targets))
        return float(correct + closeness)


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML config, or an empty one."""
    if config_path is None:
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def build_run_config(raw: Dict[str, Any], args: argparse.Namespace) -> RunConfig:
    run_section = dict(raw.get("run", {}))
    generation_section = dict(raw.get("generation", {}))

    if args.generations is not None:
        run_section["generations"] = args.generations
    if args.population is not None:
        run_section["population_size"] = args.population
    if args.seed is not None:
        run_section["seed"] = args.seed
    if args.method is not None:
        generation_section["reproduction_method"] = args.method
    if args.mutation_rate is not None:
        generation_section["reproduction_mutation_rate"] = args.mutation_rate

    run_section["generation"] = generation_section
    config = RunConfig.from_dict(run_section)
    config.signature = (SENSOR_SIZE,) + tuple(config.signature[1:])
    return config


def main(argv=None):
    parser = argparse.ArgumentParser(description="Evolve flap controllers headlessly")
    parser.add_argument("--config", default=None, help="YAML config file")
    parser.add_argument("--generations", type=int, default=None)
    parser.add_argument("--population", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--method", choices=["pairs", "weighted"], default=None)
    parser.add_argument("--mutation-rate", type=float, default=None)
    parser.add_argument("--dump-best", action="store_true",
                        help="Print the best network's parameters at the end")

    args = parser.parse_args(argv)

    raw = load_config(args.config)
    config = build_run_config(raw, args)

    task_section = raw.get("task", {})
    task = FlapTask.generate(
        num_cases=task_section.get("num_cases", 64),
        seed=task_section.get("seed"),
    )
    logger.info(f"Task: {len(task.targets)} cases, {int(task.targets.sum())} flaps")

    runner = EvolutionRunner(config)
    runner.run(task.score)

    best, best_fitness = runner.get_best()
    logger.info(f"Best fitness: {best_fitness:.4f} (max {len(task.targets) + 1})")
    if args.dump_best and best is not None:
        print(best)

    return runner


if __name__ == "__main__":
    main()
