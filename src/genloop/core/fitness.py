"""
Fitness evaluators.

An evaluator scores one candidate, optionally using the whole generation as
context (for relative or competitive fitness). It also declares, once for a
run, whether its scores are natural (higher is fitter) or inverted (lower is
fitter); the engine and every selection strategy follow that declaration.

Evaluators may be called from several threads at once when parallel
evaluation is enabled, so they must not draw from the run's random source.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, Generic, Hashable, Sequence, TypeVar

T = TypeVar("T")


class FitnessEvaluator(ABC, Generic[T]):
    """Abstract base class for fitness evaluators."""

    @abstractmethod
    def evaluate(self, candidate: T, population: Sequence[T]) -> float:
        """
        Score a candidate.

        Args:
            candidate: The candidate to score.
            population: The full unevaluated generation the candidate belongs
                to. Read-only; evaluators that need no context ignore it.

        Returns:
            The fitness score.
        """
        pass

    @property
    @abstractmethod
    def is_natural(self) -> bool:
        """True if higher scores are fitter, False if lower scores are fitter."""
        pass


class FunctionFitnessEvaluator(FitnessEvaluator[T]):
    """Adapts a plain ``candidate -> float`` callable that needs no context."""

    def __init__(self, function: Callable[[T], float], natural: bool = True):
        self.function = function
        self._natural = natural

    def evaluate(self, candidate: T, population: Sequence[T]) -> float:
        return float(self.function(candidate))

    @property
    def is_natural(self) -> bool:
        return self._natural


class CachingFitnessEvaluator(FitnessEvaluator[T]):
    """
    Memoises the scores of a context-free evaluator.

    Useful when fitness is expensive and the same candidates reappear across
    generations (elites, duplicates produced by selection). Only correct for
    evaluators whose score does not depend on the rest of the population.
    Candidates must be hashable.
    """

    def __init__(self, delegate: FitnessEvaluator[T]):
        self.delegate = delegate
        self._cache: Dict[Hashable, float] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def evaluate(self, candidate: T, population: Sequence[T]) -> float:
        with self._lock:
            if candidate in self._cache:
                self.hits += 1
                return self._cache[candidate]
            self.misses += 1

        # Two threads may score the same new candidate concurrently; both
        # store the same value.
        fitness = self.delegate.evaluate(candidate, population)
        with self._lock:
            self._cache[candidate] = fitness
        return fitness

    @property
    def is_natural(self) -> bool:
        return self.delegate.is_natural

    def clear(self) -> None:
        """Drop all cached scores."""
        with self._lock:
            self._cache.clear()
            self.hits = 0
            self.misses = 0
