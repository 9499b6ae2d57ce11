"""
Base classes for evolutionary operators and selection strategies.

This module defines the contracts the engine relies on:

- EvolutionaryOperator: Transforms a population into a new population of the
  same size (crossover, mutation, or a pipeline of both)
- AbstractCrossover: Operator that recombines parents pairwise
- AbstractMutation: Operator that varies each candidate independently
- SelectionStrategy: Picks parents from an evaluated, sorted population

Every method that needs randomness receives the run's random source as an
argument. Implementations must not use the global ``random`` module or keep
their own generator, otherwise seeded runs stop being reproducible.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Generic, List, Sequence, TypeVar

from genloop.core.candidate import EvaluatedCandidate
from genloop.core.numbers import NumberSequence, as_sequence
from genloop.errors import ConfigurationError

T = TypeVar("T")


class EvolutionaryOperator(ABC, Generic[T]):
    """
    Abstract base class for evolutionary operators.

    An operator receives the selected parents and returns their offspring.
    The output must contain exactly as many candidates as the input; the
    engine treats any other size as a fatal contract violation. Candidates
    are immutable, so operators build new candidates instead of editing the
    ones they were given.
    """

    #: True if the operator can only process populations of even size.
    pairwise: bool = False

    @abstractmethod
    def apply(self, population: Sequence[T], rng: random.Random) -> List[T]:
        """
        Apply the operator to a population.

        Args:
            population: The candidates to transform, in selection order.
            rng: The run's random source.

        Returns:
            A new list with exactly ``len(population)`` candidates.
        """
        pass


class AbstractCrossover(EvolutionaryOperator[T]):
    """
    Base class for crossover operators that work on pairs of parents.

    Parents are paired in input order: the candidate at index 2i is mated with
    the one at index 2i+1. An odd-sized input cannot be paired and is
    rejected. For each pair the number of crossover points is drawn from a
    number sequence, so an operator can use a fixed or a randomized arity.
    """

    pairwise = True

    def __init__(
        self,
        crossover_points: int | NumberSequence[int] = 1,
        crossover_probability: float = 1.0,
    ):
        """
        Args:
            crossover_points: Number of crossover points per pair, either a
                constant or a sequence sampled once per pair.
            crossover_probability: Chance that a pair is recombined. Pairs
                that are not recombined pass through unchanged.

        Raises:
            ConfigurationError: If a constant point count is not positive or
                the probability is outside [0, 1].
        """
        if isinstance(crossover_points, int) and crossover_points <= 0:
            raise ConfigurationError(
                f"Number of crossover points must be positive, got {crossover_points}"
            )
        if not 0.0 <= crossover_probability <= 1.0:
            raise ConfigurationError(
                f"Crossover probability must be in [0, 1], got {crossover_probability}"
            )
        self.crossover_points = as_sequence(crossover_points)
        self.crossover_probability = crossover_probability

    def apply(self, population: Sequence[T], rng: random.Random) -> List[T]:
        if len(population) % 2 != 0:
            raise ConfigurationError(
                f"Crossover needs an even number of parents, got {len(population)}"
            )

        result: List[T] = []
        for i in range(0, len(population), 2):
            parent1, parent2 = population[i], population[i + 1]
            if self.crossover_probability < 1.0 and rng.random() >= self.crossover_probability:
                result.extend((parent1, parent2))
                continue
            points = self.crossover_points.next(rng)
            result.extend(self.reproduce(parent1, parent2, points, rng))
        return result

    @abstractmethod
    def reproduce(
        self,
        parent1: T,
        parent2: T,
        number_of_crossover_points: int,
        rng: random.Random,
    ) -> List[T]:
        """
        Recombine two parents.

        Implementations decide how many children to emit per pair. To keep
        apply() size-preserving, emit two.

        Args:
            parent1: First parent.
            parent2: Second parent.
            number_of_crossover_points: Points at which to exchange material.
            rng: The run's random source.

        Returns:
            The children.
        """
        pass


class AbstractMutation(EvolutionaryOperator[T]):
    """Base class for operators that mutate each candidate independently."""

    def apply(self, population: Sequence[T], rng: random.Random) -> List[T]:
        return [self.mutate(candidate, rng) for candidate in population]

    @abstractmethod
    def mutate(self, candidate: T, rng: random.Random) -> T:
        """
        Return a (possibly) mutated copy of a candidate.

        The input must not be modified. Returning the input itself is fine
        when nothing was mutated.
        """
        pass


class SelectionStrategy(ABC):
    """
    Abstract base class for selection strategies.

    A strategy picks the parents of the next generation from the previous
    generation's evaluated population. Selection pressure is the strategy's
    business; the shared rules are:

    - the result has exactly ``selection_size`` candidates,
    - every selected candidate is a member of ``population`` (the same
      candidate may be picked more than once unless the strategy forbids it),
    - ``natural_fitness`` decides whether high or low scores are better,
    - randomness comes only from ``rng``.
    """

    @abstractmethod
    def select(
        self,
        population: Sequence[EvaluatedCandidate[T]],
        natural_fitness: bool,
        selection_size: int,
        rng: random.Random,
    ) -> List[T]:
        """
        Select candidates from an evaluated population.

        Args:
            population: Evaluated candidates, sorted fittest-first under the
                given fitness direction.
            natural_fitness: True if higher scores are fitter.
            selection_size: Number of candidates to return.
            rng: The run's random source.

        Returns:
            The selected candidate values (not EvaluatedCandidate wrappers).
        """
        pass


def rebuild_sequence(template: Sequence, elements: List) -> Sequence:
    """Build a sequence of the same type as ``template`` from a list of elements."""
    if isinstance(template, str):
        return "".join(elements)
    if isinstance(template, tuple):
        return tuple(elements)
    return list(elements)
