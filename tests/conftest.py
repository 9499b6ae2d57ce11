"""Pytest configuration and fixtures."""

import random

import pytest

from genloop.core.candidate import EvaluatedCandidate, sort_evaluated_population
from genloop.core.fitness import FunctionFitnessEvaluator
from genloop.utils.logging import set_verbosity


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep test output clean."""
    set_verbosity("silent")
    yield
    set_verbosity("normal")


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(42)


@pytest.fixture
def count_a():
    """Natural fitness: number of 'A' characters in a string."""
    return FunctionFitnessEvaluator(lambda s: s.count("A"))


@pytest.fixture
def scores():
    return [9.0, 7.5, 6.0, 4.0, 3.0, 2.5, 2.0, 1.0, 0.5, 0.1]


@pytest.fixture
def natural_population(scores):
    """Ten candidates c0..c9, sorted fittest-first for natural fitness (c0 is best)."""
    return sort_evaluated_population(
        [EvaluatedCandidate(f"c{i}", s) for i, s in enumerate(scores)],
        natural_fitness=True,
    )


@pytest.fixture
def inverted_population(scores):
    """The same candidates sorted fittest-first for inverted fitness (c9 is best)."""
    return sort_evaluated_population(
        [EvaluatedCandidate(f"c{i}", s) for i, s in enumerate(scores)],
        natural_fitness=False,
    )
