"""Composition of evolutionary operators."""

from __future__ import annotations

import random
from typing import List, Sequence, TypeVar

from genloop.errors import ConfigurationError, OperatorContractViolation
from genloop.evolution.operators import EvolutionaryOperator

T = TypeVar("T")


class EvolutionPipeline(EvolutionaryOperator[T]):
    """
    Applies a fixed sequence of operators, each to the previous one's output.

    A typical scheme is crossover followed by mutation. The pipeline checks
    every stage's output size and names the offending stage on a violation.
    """

    def __init__(self, operators: Sequence[EvolutionaryOperator[T]]):
        if not operators:
            raise ConfigurationError("An evolution pipeline needs at least one operator")
        self.operators = tuple(operators)

    @property
    def pairwise(self) -> bool:  # type: ignore[override]
        return any(op.pairwise for op in self.operators)

    def apply(self, population: Sequence[T], rng: random.Random) -> List[T]:
        current = list(population)
        for stage, operator in enumerate(self.operators):
            expected = len(current)
            current = list(operator.apply(current, rng))
            if len(current) != expected:
                raise OperatorContractViolation(
                    f"Pipeline stage {stage} ({type(operator).__name__}) returned "
                    f"{len(current)} candidates for {expected} inputs"
                )
        return current


class IdentityOperator(EvolutionaryOperator[T]):
    """Returns its input unchanged. Evolution driven by selection alone."""

    def apply(self, population: Sequence[T], rng: random.Random) -> List[T]:
        return list(population)
