"""Core data types and strategy contracts: candidates, factories, fitness, number sequences."""

from genloop.core.candidate import (
    EvaluatedCandidate,
    PopulationData,
    compute_population_data,
    sort_evaluated_population,
)
from genloop.core.factory import CandidateFactory, StringFactory
from genloop.core.fitness import CachingFitnessEvaluator, FitnessEvaluator, FunctionFitnessEvaluator
from genloop.core.numbers import (
    ConstantSequence,
    DiscreteUniformSequence,
    NumberSequence,
    SampledSequence,
    as_sequence,
)

__all__ = [
    "EvaluatedCandidate",
    "PopulationData",
    "compute_population_data",
    "sort_evaluated_population",
    "CandidateFactory",
    "StringFactory",
    "FitnessEvaluator",
    "FunctionFitnessEvaluator",
    "CachingFitnessEvaluator",
    "NumberSequence",
    "ConstantSequence",
    "SampledSequence",
    "DiscreteUniformSequence",
    "as_sequence",
]
