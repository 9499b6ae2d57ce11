"""
Number sequences: parameter streams that yield one value per invocation.

Operators draw per-application parameters (such as the number of crossover
points) from a sequence rather than a fixed constant, so the same operator
works with a fixed arity or a randomized one. Every sequence takes the run's
random source explicitly; a sequence never owns hidden randomness.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Callable, Generic, TypeVar

from genloop.errors import ConfigurationError

N = TypeVar("N", int, float)


class NumberSequence(ABC, Generic[N]):
    """A stream of numeric parameter values."""

    @abstractmethod
    def next(self, rng: random.Random) -> N:
        """Return the next value of the sequence."""
        pass


class ConstantSequence(NumberSequence[N]):
    """Yields the same value forever. Consumes no randomness."""

    def __init__(self, value: N):
        self.value = value

    def next(self, rng: random.Random) -> N:
        return self.value

    def __repr__(self) -> str:
        return f"ConstantSequence({self.value!r})"


class SampledSequence(NumberSequence[N]):
    """
    Yields values drawn from a distribution.

    Args:
        distribution: Callable taking the run's random source and returning
            one sample, e.g. ``lambda rng: rng.randint(1, 3)``.
    """

    def __init__(self, distribution: Callable[[random.Random], N]):
        self.distribution = distribution

    def next(self, rng: random.Random) -> N:
        return self.distribution(rng)


class DiscreteUniformSequence(SampledSequence[int]):
    """Integers drawn uniformly from ``[minimum, maximum]`` inclusive."""

    def __init__(self, minimum: int, maximum: int):
        if minimum > maximum:
            raise ConfigurationError(
                f"minimum ({minimum}) must not exceed maximum ({maximum})"
            )
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(lambda rng: rng.randint(self.minimum, self.maximum))

    def __repr__(self) -> str:
        return f"DiscreteUniformSequence({self.minimum}, {self.maximum})"


def as_sequence(value: int | float | NumberSequence) -> NumberSequence:
    """Wrap a plain number in a ConstantSequence; pass sequences through."""
    if isinstance(value, NumberSequence):
        return value
    return ConstantSequence(value)
