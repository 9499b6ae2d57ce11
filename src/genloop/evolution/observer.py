"""Observers notified once per completed generation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from genloop.core.candidate import PopulationData
from genloop.utils.logging import log_generation


class EvolutionObserver(ABC):
    """
    Abstract base class for generation observers.

    Observers receive an immutable snapshot and cannot change the run. An
    exception raised by an observer is logged by the engine and otherwise
    ignored.
    """

    @abstractmethod
    def population_update(self, data: PopulationData) -> None:
        """Called after each generation has been evaluated and sorted."""
        pass


class LoggingObserver(EvolutionObserver):
    """Logs best and mean fitness of every generation."""

    def population_update(self, data: PopulationData) -> None:
        log_generation(
            gen=data.generation_number,
            size=data.population_size,
            best_fitness=data.best_fitness,
            mean_fitness=data.mean_fitness,
            elapsed=f"{data.elapsed_time:.2f}s",
        )


class HistoryObserver(EvolutionObserver):
    """Keeps every snapshot it is sent, oldest first."""

    def __init__(self):
        self.history: List[PopulationData] = []

    def population_update(self, data: PopulationData) -> None:
        self.history.append(data)

    def best_fitness_history(self) -> List[float]:
        return [data.best_fitness for data in self.history]

    def mean_fitness_history(self) -> List[float]:
        return [data.mean_fitness for data in self.history]
