"""Evolution module: operators, selection strategies, termination and the generational loop."""

from genloop.evolution.operators import (
    EvolutionaryOperator,
    AbstractCrossover,
    AbstractMutation,
    SelectionStrategy,
)
from genloop.evolution.selection import (
    TruncationSelection,
    RouletteWheelSelection,
    StochasticUniversalSampling,
    TournamentSelection,
    RankSelection,
    SigmaScaling,
    get_selection_strategy,
)
from genloop.evolution.crossover import SequenceCrossover
from genloop.evolution.mutation import SequenceMutation
from genloop.evolution.pipeline import EvolutionPipeline, IdentityOperator
from genloop.evolution.termination import (
    TerminationCondition,
    GenerationCount,
    TargetFitness,
    ElapsedTime,
    Stagnation,
    UserAbort,
)
from genloop.evolution.observer import EvolutionObserver, LoggingObserver, HistoryObserver
from genloop.evolution.loop import EvolutionEngine, EvolutionResult

__all__ = [
    "EvolutionaryOperator",
    "AbstractCrossover",
    "AbstractMutation",
    "SelectionStrategy",
    "TruncationSelection",
    "RouletteWheelSelection",
    "StochasticUniversalSampling",
    "TournamentSelection",
    "RankSelection",
    "SigmaScaling",
    "get_selection_strategy",
    "SequenceCrossover",
    "SequenceMutation",
    "EvolutionPipeline",
    "IdentityOperator",
    "TerminationCondition",
    "GenerationCount",
    "TargetFitness",
    "ElapsedTime",
    "Stagnation",
    "UserAbort",
    "EvolutionObserver",
    "LoggingObserver",
    "HistoryObserver",
    "EvolutionEngine",
    "EvolutionResult",
]
