"""Exception types raised by the evolution engine and its strategies."""

from __future__ import annotations

from typing import Any, Sequence


class ConfigurationError(ValueError):
    """Invalid parameters supplied before a run starts."""


class EvolutionError(RuntimeError):
    """
    Base class for failures that abort a run part-way through.

    Attributes:
        generation: Generation that was being produced when the failure
            happened (0 while building the initial population).
        population: Last fully evaluated population, fittest first, or
            None if the failure happened before generation 0 was evaluated.
    """

    def __init__(
        self,
        message: str,
        generation: int = 0,
        population: Sequence[Any] | None = None,
    ):
        super().__init__(message)
        self.generation = generation
        self.population = tuple(population) if population is not None else None


class OperatorContractViolation(EvolutionError):
    """A plugged-in operator or selection strategy returned the wrong number of candidates."""


class OperatorFailure(EvolutionError):
    """A selection strategy or evolution scheme raised while breeding a generation."""


class EvaluationFailure(EvolutionError):
    """A fitness evaluator raised while scoring a candidate."""

    def __init__(
        self,
        message: str,
        candidate: Any,
        generation: int = 0,
        population: Sequence[Any] | None = None,
    ):
        super().__init__(message, generation=generation, population=population)
        self.candidate = candidate
