"""Evaluated candidates, population sorting and per-generation snapshots."""

from __future__ import annotations

import statistics
from dataclasses import dataclass
from typing import Any, Generic, Sequence, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class EvaluatedCandidate(Generic[T]):
    """A candidate paired with its fitness score."""

    candidate: T
    fitness: float


def sort_evaluated_population(
    population: Sequence[EvaluatedCandidate[T]],
    natural_fitness: bool,
) -> Tuple[EvaluatedCandidate[T], ...]:
    """
    Sort a population fittest-first.

    The sort is stable: candidates with equal scores keep the order in which
    they were evaluated, so a fixed set of scores always sorts the same way.
    """
    return tuple(sorted(population, key=lambda c: c.fitness, reverse=natural_fitness))


@dataclass(frozen=True)
class PopulationData(Generic[T]):
    """
    Immutable snapshot of one evaluated generation.

    Handed to termination conditions and observers after every generation.
    """

    fittest_candidate: T
    best_fitness: float
    mean_fitness: float
    worst_fitness: float
    fitness_std_dev: float
    natural_fitness: bool
    population_size: int
    elite_count: int
    generation_number: int
    elapsed_time: float
    population: Tuple[EvaluatedCandidate[T], ...] = ()

    def summary(self) -> dict[str, Any]:
        """Scalar statistics of this generation, for logs and history."""
        return {
            "generation": self.generation_number,
            "best_fitness": self.best_fitness,
            "mean_fitness": self.mean_fitness,
            "worst_fitness": self.worst_fitness,
            "std_dev": self.fitness_std_dev,
            "elapsed_time": self.elapsed_time,
        }


def compute_population_data(
    population: Tuple[EvaluatedCandidate[T], ...],
    natural_fitness: bool,
    elite_count: int,
    generation_number: int,
    elapsed_time: float,
) -> PopulationData[T]:
    """Build the snapshot for a sorted, evaluated population."""
    scores = [c.fitness for c in population]
    return PopulationData(
        fittest_candidate=population[0].candidate,
        best_fitness=population[0].fitness,
        mean_fitness=statistics.fmean(scores),
        worst_fitness=population[-1].fitness,
        fitness_std_dev=statistics.pstdev(scores),
        natural_fitness=natural_fitness,
        population_size=len(population),
        elite_count=elite_count,
        generation_number=generation_number,
        elapsed_time=elapsed_time,
        population=population,
    )
