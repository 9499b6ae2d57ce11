"""
Termination conditions.

The engine checks its conditions, in order, after every evaluated generation
(generation 0 included) and stops as soon as at least one is satisfied. Each
condition sees the generation's PopulationData snapshot, which carries the
generation number, best and mean fitness, elapsed time and the population.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from genloop.core.candidate import PopulationData
from genloop.errors import ConfigurationError


class TerminationCondition(ABC):
    """Abstract base class for termination conditions."""

    @abstractmethod
    def should_terminate(self, data: PopulationData) -> bool:
        """Return True if evolution should stop after this generation."""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class GenerationCount(TerminationCondition):
    """
    Stops after a fixed number of generations.

    Generation 0 (the initial population) counts, so GenerationCount(5)
    stops once generations 0 to 4 have been evaluated.
    """

    def __init__(self, generation_count: int):
        if generation_count <= 0:
            raise ConfigurationError(
                f"Generation count must be positive, got {generation_count}"
            )
        self.generation_count = generation_count

    def should_terminate(self, data: PopulationData) -> bool:
        return data.generation_number + 1 >= self.generation_count

    def __repr__(self) -> str:
        return f"GenerationCount({self.generation_count})"


class TargetFitness(TerminationCondition):
    """Stops once the fittest candidate reaches a target score."""

    def __init__(self, target_fitness: float, natural_fitness: bool = True):
        self.target_fitness = target_fitness
        self.natural_fitness = natural_fitness

    def should_terminate(self, data: PopulationData) -> bool:
        if self.natural_fitness:
            return data.best_fitness >= self.target_fitness
        return data.best_fitness <= self.target_fitness

    def __repr__(self) -> str:
        return f"TargetFitness({self.target_fitness}, natural_fitness={self.natural_fitness})"


class ElapsedTime(TerminationCondition):
    """Stops once the run has lasted at least ``max_seconds``."""

    def __init__(self, max_seconds: float):
        if max_seconds <= 0:
            raise ConfigurationError(f"Duration must be positive, got {max_seconds}")
        self.max_seconds = max_seconds

    def should_terminate(self, data: PopulationData) -> bool:
        return data.elapsed_time >= self.max_seconds

    def __repr__(self) -> str:
        return f"ElapsedTime({self.max_seconds})"


class Stagnation(TerminationCondition):
    """
    Stops when fitness has not improved for a number of generations.

    Tracks either the best fitness or the population mean. The tracked state
    resets whenever generation 0 is seen, so one instance can serve several
    consecutive runs (but not concurrent ones).
    """

    def __init__(
        self,
        generation_limit: int,
        natural_fitness: bool = True,
        use_population_average: bool = False,
    ):
        if generation_limit <= 0:
            raise ConfigurationError(
                f"Stagnation limit must be positive, got {generation_limit}"
            )
        self.generation_limit = generation_limit
        self.natural_fitness = natural_fitness
        self.use_population_average = use_population_average
        self._best_fitness: float | None = None
        self._best_generation = 0

    def _improved(self, fitness: float) -> bool:
        if self._best_fitness is None:
            return True
        if self.natural_fitness:
            return fitness > self._best_fitness
        return fitness < self._best_fitness

    def should_terminate(self, data: PopulationData) -> bool:
        fitness = data.mean_fitness if self.use_population_average else data.best_fitness
        if data.generation_number == 0:
            self._best_fitness = None

        if self._improved(fitness):
            self._best_fitness = fitness
            self._best_generation = data.generation_number

        return data.generation_number - self._best_generation >= self.generation_limit

    def __repr__(self) -> str:
        return f"Stagnation({self.generation_limit})"


class UserAbort(TerminationCondition):
    """
    Cancellation flag that can be raised from any thread.

    The run stops at the next generation boundary after abort() is called; an
    evaluation already in flight is allowed to finish.
    """

    def __init__(self):
        self._aborted = threading.Event()

    def abort(self) -> None:
        self._aborted.set()

    @property
    def is_aborted(self) -> bool:
        return self._aborted.is_set()

    def reset(self) -> None:
        self._aborted.clear()

    def should_terminate(self, data: PopulationData) -> bool:
        return self._aborted.is_set()
