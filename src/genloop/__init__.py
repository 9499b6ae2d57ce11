"""
genloop: a generic evolutionary-computation engine

Plug in a candidate representation and a fitness function; genloop runs the
generational loop (selection, recombination, mutation, elitism, evaluation
and termination) around them.

## Core Concept

Every run is assembled from interchangeable strategies:
1. **CandidateFactory** creates the random initial population
2. **FitnessEvaluator** scores candidates (natural or inverted fitness)
3. **SelectionStrategy** picks parents from each evaluated generation
4. **EvolutionaryOperator** turns parents into offspring (crossover,
   mutation, or an EvolutionPipeline of several)
5. **TerminationCondition** decides when to stop

All randomness flows from one explicitly passed ``random.Random``, so a
seeded run is reproducible, including with parallel fitness evaluation.

## API Reference

### Simple Interface
```python
from genloop import evolve, StringFactory, FunctionFitnessEvaluator
from genloop import EvolutionPipeline, SequenceCrossover, SequenceMutation

result = evolve(
    StringFactory("01", 32),
    EvolutionPipeline([SequenceCrossover(1), SequenceMutation("01", 0.01)]),
    FunctionFitnessEvaluator(lambda s: s.count("1")),
)
print(result.fittest, result.best_fitness)
```

### Direct Engine Use
```python
import random
from genloop import EvolutionEngine, TruncationSelection, GenerationCount, TargetFitness

engine = EvolutionEngine(factory, scheme, evaluator, TruncationSelection(0.5), random.Random(1))
result = engine.evolve(100, 2, TargetFitness(32), GenerationCount(500))
```

## Key Components

- **EvolutionEngine**: The generational loop
- **Engine / evolve()**: Config-driven entry points
- **Config**: Hierarchical, YAML-loadable configuration
- **EvolutionResult**: Final population, fittest candidate and history
"""

from genloop.config import (
    Config,
    EvolutionConfig,
    SelectionConfig,
    TerminationConfig,
    EvaluationConfig,
    OutputConfig,
)
from genloop.errors import (
    ConfigurationError,
    EvolutionError,
    OperatorContractViolation,
    OperatorFailure,
    EvaluationFailure,
)
from genloop.core import (
    EvaluatedCandidate,
    PopulationData,
    CandidateFactory,
    StringFactory,
    FitnessEvaluator,
    FunctionFitnessEvaluator,
    CachingFitnessEvaluator,
    NumberSequence,
    ConstantSequence,
    SampledSequence,
    DiscreteUniformSequence,
)
from genloop.evolution import (
    EvolutionaryOperator,
    AbstractCrossover,
    AbstractMutation,
    SelectionStrategy,
    TruncationSelection,
    RouletteWheelSelection,
    StochasticUniversalSampling,
    TournamentSelection,
    RankSelection,
    SigmaScaling,
    SequenceCrossover,
    SequenceMutation,
    EvolutionPipeline,
    IdentityOperator,
    TerminationCondition,
    GenerationCount,
    TargetFitness,
    ElapsedTime,
    Stagnation,
    UserAbort,
    EvolutionObserver,
    LoggingObserver,
    HistoryObserver,
    EvolutionEngine,
    EvolutionResult,
)
from genloop.engine import Engine, evolve

__version__ = "0.1.0"

__all__ = [
    # Main interfaces
    "evolve",
    "Engine",
    "EvolutionEngine",
    "EvolutionResult",

    # Configuration
    "Config",
    "EvolutionConfig",
    "SelectionConfig",
    "TerminationConfig",
    "EvaluationConfig",
    "OutputConfig",

    # Errors
    "ConfigurationError",
    "EvolutionError",
    "OperatorContractViolation",
    "OperatorFailure",
    "EvaluationFailure",

    # Data and strategy contracts
    "EvaluatedCandidate",
    "PopulationData",
    "CandidateFactory",
    "FitnessEvaluator",
    "EvolutionaryOperator",
    "AbstractCrossover",
    "AbstractMutation",
    "SelectionStrategy",
    "TerminationCondition",
    "EvolutionObserver",
    "NumberSequence",

    # Implementations
    "StringFactory",
    "FunctionFitnessEvaluator",
    "CachingFitnessEvaluator",
    "ConstantSequence",
    "SampledSequence",
    "DiscreteUniformSequence",
    "TruncationSelection",
    "RouletteWheelSelection",
    "StochasticUniversalSampling",
    "TournamentSelection",
    "RankSelection",
    "SigmaScaling",
    "SequenceCrossover",
    "SequenceMutation",
    "EvolutionPipeline",
    "IdentityOperator",
    "GenerationCount",
    "TargetFitness",
    "ElapsedTime",
    "Stagnation",
    "UserAbort",
    "LoggingObserver",
    "HistoryObserver",
]
