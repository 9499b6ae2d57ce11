"""Mutation operators for sequence-encoded candidates."""

from __future__ import annotations

import random
from typing import Any, Sequence

from genloop.errors import ConfigurationError
from genloop.evolution.operators import AbstractMutation, rebuild_sequence


class SequenceMutation(AbstractMutation[Sequence]):
    """
    Point mutation for strings, lists and tuples.

    Every element is considered independently: with probability
    ``mutation_probability`` it is replaced by a value drawn uniformly from
    ``alternatives`` (which may draw the same value again). One random number
    is consumed per element, plus one per replacement.
    """

    def __init__(self, alternatives: Sequence[Any], mutation_probability: float):
        """
        Args:
            alternatives: Values an element may be replaced with, e.g. the
                alphabet of a string representation.
            mutation_probability: Per-element chance of replacement, in [0, 1].
        """
        if not alternatives:
            raise ConfigurationError("Mutation alternatives must not be empty")
        if not 0.0 <= mutation_probability <= 1.0:
            raise ConfigurationError(
                f"Mutation probability must be in [0, 1], got {mutation_probability}"
            )
        self.alternatives = tuple(alternatives)
        self.mutation_probability = mutation_probability

    def mutate(self, candidate: Sequence, rng: random.Random) -> Sequence:
        elements = list(candidate)
        changed = False
        for i in range(len(elements)):
            if rng.random() < self.mutation_probability:
                elements[i] = self.alternatives[rng.randrange(len(self.alternatives))]
                changed = True
        return rebuild_sequence(candidate, elements) if changed else candidate
