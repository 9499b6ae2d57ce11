"""
Candidate factories: sources of random initial candidates.

A factory knows one representation and how to produce a random member of it.
The engine asks it once per run for the initial population, optionally seeded
with caller-supplied candidates.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Generic, List, Sequence, TypeVar

from genloop.errors import ConfigurationError

T = TypeVar("T")


class CandidateFactory(ABC, Generic[T]):
    """
    Abstract base class for candidate factories.

    Subclasses implement generate_random_candidate(); population building and
    seeding are shared. All randomness must come from the supplied random
    source so that a fixed seed reproduces a fixed initial population.
    """

    @abstractmethod
    def generate_random_candidate(self, rng: random.Random) -> T:
        """
        Create a single random candidate.

        Args:
            rng: The run's random source. Must be the only source of
                randomness used.

        Returns:
            A new candidate of this factory's representation.
        """
        pass

    def generate_initial_population(
        self,
        size: int,
        rng: random.Random,
        seed_candidates: Sequence[T] | None = None,
    ) -> List[T]:
        """
        Create an unevaluated initial population.

        Args:
            size: Number of candidates to produce. Must be positive.
            rng: The run's random source.
            seed_candidates: Optional pre-built candidates placed at the front
                of the population. The remaining ``size - len(seed_candidates)``
                slots are filled with random candidates.

        Returns:
            A list of exactly ``size`` candidates.

        Raises:
            ConfigurationError: If size is not positive or there are more seed
                candidates than slots.
        """
        if size <= 0:
            raise ConfigurationError(f"Population size must be positive, got {size}")

        seeds = list(seed_candidates) if seed_candidates else []
        if len(seeds) > size:
            raise ConfigurationError(
                f"Too many seed candidates ({len(seeds)}) for population size {size}"
            )

        population = seeds
        for _ in range(size - len(seeds)):
            population.append(self.generate_random_candidate(rng))
        return population


class StringFactory(CandidateFactory[str]):
    """
    Fixed-length random strings over a given alphabet.

    Each character is drawn independently, so a character may appear many
    times or not at all.
    """

    def __init__(self, alphabet: Sequence[str], length: int):
        """
        Args:
            alphabet: Characters that may legally occur in a candidate.
            length: Length of every generated string.
        """
        if not alphabet:
            raise ConfigurationError("Alphabet must not be empty")
        if length <= 0:
            raise ConfigurationError(f"String length must be positive, got {length}")
        self.alphabet = tuple(alphabet)
        self.length = length

    def generate_random_candidate(self, rng: random.Random) -> str:
        return "".join(
            self.alphabet[rng.randrange(len(self.alphabet))] for _ in range(self.length)
        )
