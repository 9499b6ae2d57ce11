"""
Selection strategies for the generational loop.

This module implements the strategies that pick the parents of the next
generation from an evaluated, fittest-first population. They differ in
selection pressure and in how they consume randomness:

- TruncationSelection: Clones the fittest fraction cyclically (deterministic)
- RouletteWheelSelection: Fitness-proportionate, one spin per selection
- StochasticUniversalSampling: Fitness-proportionate, one spin in total
- TournamentSelection: Binary tournaments won by the fitter with probability p
- RankSelection: Proportionate selection on rank instead of raw fitness
- SigmaScaling: Proportionate selection on standard-deviation scaled fitness

All strategies honour the ``natural_fitness`` flag and draw randomness only
from the random source they are given.
"""

from __future__ import annotations

import bisect
import itertools
import math
import random
import statistics
from typing import List, Sequence, TypeVar

from genloop.core.candidate import EvaluatedCandidate
from genloop.errors import ConfigurationError
from genloop.evolution.operators import SelectionStrategy

T = TypeVar("T")


def _adjusted_fitness(raw_fitness: float, natural_fitness: bool) -> float:
    """Map a score to a wheel weight where bigger always means fitter."""
    if natural_fitness:
        return raw_fitness
    # A zero inverted score is a perfect candidate.
    return math.inf if raw_fitness == 0 else 1.0 / raw_fitness


def _wheel_weights(
    population: Sequence[EvaluatedCandidate[T]],
    natural_fitness: bool,
) -> List[float]:
    weights = [_adjusted_fitness(c.fitness, natural_fitness) for c in population]
    if any(w < 0 for w in weights):
        raise ValueError("Fitness-proportionate selection requires non-negative fitness scores")

    if any(math.isinf(w) for w in weights):
        # Only the perfect candidates get a share of the wheel.
        return [1.0 if math.isinf(w) else 0.0 for w in weights]
    if sum(weights) <= 0:
        return [1.0] * len(weights)
    return weights


class TruncationSelection(SelectionStrategy):
    """
    Selects the fittest fraction of the population.

    The top ``round(selection_ratio * len(population))`` candidates are
    eligible. If there are fewer eligible candidates than required, they are
    selected repeatedly, in fitness order, until the quota is filled; the
    last pass only fills the remainder. No randomness is consumed.

    If the ratio rounds to zero eligible candidates, the single fittest
    candidate is used.
    """

    def __init__(self, selection_ratio: float):
        """
        Args:
            selection_ratio: Proportion of the highest-ranked candidates that
                are eligible. Must lie strictly between 0 and 1.

        Raises:
            ConfigurationError: If the ratio is outside (0, 1).
        """
        if not 0.0 < selection_ratio < 1.0:
            raise ConfigurationError(
                f"Selection ratio must be strictly between 0 and 1, got {selection_ratio}"
            )
        self.selection_ratio = selection_ratio

    def eligible_count(self, population_size: int, selection_size: int) -> int:
        """Number of top candidates that take part in selection."""
        # Round half up, not Python's round-half-to-even.
        eligible = math.floor(self.selection_ratio * population_size + 0.5)
        return max(1, min(eligible, selection_size))

    def select(
        self,
        population: Sequence[EvaluatedCandidate[T]],
        natural_fitness: bool,
        selection_size: int,
        rng: random.Random,
    ) -> List[T]:
        eligible = self.eligible_count(len(population), selection_size)

        selection: List[T] = []
        while len(selection) < selection_size:
            count = min(eligible, selection_size - len(selection))
            selection.extend(population[i].candidate for i in range(count))
        return selection


class RouletteWheelSelection(SelectionStrategy):
    """
    Fitness-proportionate selection with replacement.

    Each selection spins the wheel once. Inverted scores are converted to
    ``1 / fitness``; candidates with an inverted score of zero are treated as
    infinitely fit and share the whole wheel. If every weight is zero the
    draw is uniform. Scores must be non-negative.
    """

    def select(
        self,
        population: Sequence[EvaluatedCandidate[T]],
        natural_fitness: bool,
        selection_size: int,
        rng: random.Random,
    ) -> List[T]:
        weights = _wheel_weights(population, natural_fitness)
        cumulative = list(itertools.accumulate(weights))
        total = cumulative[-1]
        # A pointer landing exactly on the total must not pick a zero-weight tail.
        last_positive = max(i for i, weight in enumerate(weights) if weight > 0)

        selection: List[T] = []
        for _ in range(selection_size):
            pointer = rng.random() * total
            index = min(bisect.bisect_right(cumulative, pointer), last_positive)
            selection.append(population[index].candidate)
        return selection


class StochasticUniversalSampling(SelectionStrategy):
    """
    Fitness-proportionate selection with a single spin.

    The wheel is divided into ``selection_size`` equally spaced pointers
    starting at one random offset, so each candidate is selected either
    floor or ceil of its expected number of times. Consumes exactly one
    random number per call. Weighting follows RouletteWheelSelection.
    """

    def select(
        self,
        population: Sequence[EvaluatedCandidate[T]],
        natural_fitness: bool,
        selection_size: int,
        rng: random.Random,
    ) -> List[T]:
        weights = _wheel_weights(population, natural_fitness)
        total = sum(weights)
        start_offset = rng.random()

        selection: List[T] = []
        cumulative_expectation = 0.0
        index = 0
        last_positive = 0
        for i, (candidate, weight) in enumerate(zip(population, weights)):
            if weight > 0:
                last_positive = i
            cumulative_expectation += weight * selection_size / total
            while index < selection_size and cumulative_expectation > start_offset + index:
                selection.append(candidate.candidate)
                index += 1

        # Rounding can leave the final pointer just past the wheel.
        while len(selection) < selection_size:
            selection.append(population[last_positive].candidate)
        return selection


class TournamentSelection(SelectionStrategy):
    """
    Binary tournament selection.

    For each selection two contestants are drawn uniformly with replacement.
    The fitter one wins with probability ``selection_probability``, otherwise
    the weaker one does. On a tie the first contestant drawn counts as the
    fitter.
    """

    def __init__(self, selection_probability: float = 0.7):
        """
        Args:
            selection_probability: Chance that the fitter contestant wins.
                Must be greater than 0.5 (otherwise selection would favour the
                weak) and at most 1.
        """
        if not 0.5 < selection_probability <= 1.0:
            raise ConfigurationError(
                f"Tournament selection probability must be in (0.5, 1], got {selection_probability}"
            )
        self.selection_probability = selection_probability

    def select(
        self,
        population: Sequence[EvaluatedCandidate[T]],
        natural_fitness: bool,
        selection_size: int,
        rng: random.Random,
    ) -> List[T]:
        size = len(population)
        selection: List[T] = []
        for _ in range(selection_size):
            first = population[rng.randrange(size)]
            second = population[rng.randrange(size)]

            if natural_fitness:
                first_is_fitter = first.fitness >= second.fitness
            else:
                first_is_fitter = first.fitness <= second.fitness
            fitter, weaker = (first, second) if first_is_fitter else (second, first)

            winner = fitter if rng.random() < self.selection_probability else weaker
            selection.append(winner.candidate)
        return selection


class RankSelection(SelectionStrategy):
    """
    Proportionate selection on rank.

    Raw scores are replaced with linear rank scores (the fittest of N
    candidates scores N, the weakest scores 1) which are then handed to a
    fitness-proportionate delegate. Candidates with equal raw fitness get
    distinct ranks in sorted order.
    """

    def __init__(self, delegate: SelectionStrategy | None = None):
        self.delegate = delegate or StochasticUniversalSampling()

    def select(
        self,
        population: Sequence[EvaluatedCandidate[T]],
        natural_fitness: bool,
        selection_size: int,
        rng: random.Random,
    ) -> List[T]:
        size = len(population)
        ranked = [
            EvaluatedCandidate(candidate.candidate, float(size - rank))
            for rank, candidate in enumerate(population)
        ]
        return self.delegate.select(ranked, True, selection_size, rng)


class SigmaScaling(SelectionStrategy):
    """
    Proportionate selection on sigma-scaled fitness.

    Each score becomes ``1 + (f - mean) / (2 * stdev)`` (deviation negated
    for inverted scores), floored at 0.1, or 1.0 for every candidate when the
    population has no variance. Scaling keeps selection pressure steady as
    the population converges. The scaled scores are natural and are handed
    to a fitness-proportionate delegate.
    """

    MINIMUM_SCALED_FITNESS = 0.1

    def __init__(self, delegate: SelectionStrategy | None = None):
        self.delegate = delegate or StochasticUniversalSampling()

    @classmethod
    def scaled_fitness(cls, fitness: float, mean: float, std_dev: float, natural_fitness: bool) -> float:
        if std_dev == 0:
            return 1.0
        deviation = fitness - mean if natural_fitness else mean - fitness
        return max(1.0 + deviation / (2.0 * std_dev), cls.MINIMUM_SCALED_FITNESS)

    def select(
        self,
        population: Sequence[EvaluatedCandidate[T]],
        natural_fitness: bool,
        selection_size: int,
        rng: random.Random,
    ) -> List[T]:
        scores = [c.fitness for c in population]
        mean = statistics.fmean(scores)
        std_dev = statistics.pstdev(scores)

        scaled = [
            EvaluatedCandidate(
                c.candidate,
                self.scaled_fitness(c.fitness, mean, std_dev, natural_fitness),
            )
            for c in population
        ]
        return self.delegate.select(scaled, True, selection_size, rng)


def get_selection_strategy(name: str, **kwargs) -> SelectionStrategy:
    """Factory function to get a selection strategy by name."""
    strategies = {
        "truncation": TruncationSelection,
        "roulette": RouletteWheelSelection,
        "sus": StochasticUniversalSampling,
        "tournament": TournamentSelection,
        "rank": RankSelection,
        "sigma": SigmaScaling,
    }

    if name not in strategies:
        raise ConfigurationError(f"Unknown selection strategy: {name}")

    return strategies[name](**kwargs)
