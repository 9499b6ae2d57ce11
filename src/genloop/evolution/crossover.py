"""Crossover operators for sequence-encoded candidates."""

from __future__ import annotations

import random
from typing import List, Sequence

from genloop.evolution.operators import AbstractCrossover, rebuild_sequence


class SequenceCrossover(AbstractCrossover[Sequence]):
    """
    Multi-point crossover for fixed-length strings, lists and tuples.

    For each crossover point a position in ``[1, length - 1]`` is drawn and
    the tails of the two offspring beyond that position are exchanged. Each
    pair yields two children of the same type as the parents. Sequences of
    length 0 or 1 have no crossover position and are copied unchanged.
    """

    def reproduce(
        self,
        parent1: Sequence,
        parent2: Sequence,
        number_of_crossover_points: int,
        rng: random.Random,
    ) -> List[Sequence]:
        if len(parent1) != len(parent2):
            raise ValueError(
                f"Cannot cross over parents of different lengths ({len(parent1)} != {len(parent2)})"
            )
        if number_of_crossover_points <= 0:
            raise ValueError(
                f"Number of crossover points must be positive, got {number_of_crossover_points}"
            )

        offspring1 = list(parent1)
        offspring2 = list(parent2)
        length = len(offspring1)
        if length > 1:
            for _ in range(number_of_crossover_points):
                point = rng.randrange(1, length)
                offspring1[point:], offspring2[point:] = offspring2[point:], offspring1[point:]

        return [rebuild_sequence(parent1, offspring1), rebuild_sequence(parent2, offspring2)]
