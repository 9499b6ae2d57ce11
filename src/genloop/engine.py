"""
Config-driven entry point.

The Engine class turns a Config into the strategy objects the generational
loop needs (selection strategy, termination conditions, seeded random
source, logging observer) and runs them against a problem-specific candidate
factory, evolution scheme and fitness evaluator.
"""

from __future__ import annotations

import random
from typing import Any, List, Sequence

from genloop.config import Config, SelectionConfig
from genloop.core.factory import CandidateFactory
from genloop.core.fitness import FitnessEvaluator
from genloop.evolution.loop import EvolutionEngine, EvolutionResult
from genloop.evolution.observer import EvolutionObserver, LoggingObserver
from genloop.evolution.operators import EvolutionaryOperator, SelectionStrategy
from genloop.evolution.selection import get_selection_strategy
from genloop.evolution.termination import (
    ElapsedTime,
    GenerationCount,
    Stagnation,
    TargetFitness,
    TerminationCondition,
)
from genloop.utils.logging import LogLevel, log_event, print_header, print_result, set_verbosity


class Engine:
    """
    Runs evolutionary searches described by a Config.

    Examples:
        Default configuration:
        >>> engine = Engine()
        >>> result = engine.run(StringFactory("AB", 20), scheme, evaluator)
        >>> print(result.fittest, result.best_fitness)

        From a YAML file, with a custom selection strategy:
        >>> engine = Engine(Config.from_yaml("experiment.yaml"))
        >>> result = engine.run(factory, scheme, evaluator,
        ...                     selection_strategy=TruncationSelection(0.3))
    """

    def __init__(
        self,
        config: Config | None = None,
        verbosity: str | LogLevel | None = None,
    ):
        """
        Args:
            config: Complete configuration object (uses defaults if None)
            verbosity: Overrides ``config.output.verbosity`` when given
        """
        self.config = config or Config()
        set_verbosity(verbosity if verbosity is not None else self.config.output.verbosity)

    def build_selection_strategy(self) -> SelectionStrategy:
        """Create the configured selection strategy."""
        selection = self.config.evolution.selection
        return get_selection_strategy(selection.strategy, **self._get_selection_kwargs(selection))

    def build_termination_conditions(self, natural_fitness: bool) -> List[TerminationCondition]:
        """Create one condition per configured termination setting."""
        termination = self.config.evolution.termination
        conditions: List[TerminationCondition] = []
        if termination.target_fitness is not None:
            conditions.append(TargetFitness(termination.target_fitness, natural_fitness))
        if termination.stagnation is not None:
            conditions.append(
                Stagnation(
                    termination.stagnation,
                    natural_fitness,
                    use_population_average=termination.stagnation_use_average,
                )
            )
        if termination.max_time is not None:
            conditions.append(ElapsedTime(termination.max_time))
        if termination.generation_count is not None:
            conditions.append(GenerationCount(termination.generation_count))
        return conditions

    def build_rng(self) -> random.Random:
        """Create the run's random source from the configured seed."""
        return random.Random(self.config.evolution.seed)

    def create_engine(
        self,
        candidate_factory: CandidateFactory,
        evolution_scheme: EvolutionaryOperator,
        fitness_evaluator: FitnessEvaluator,
        selection_strategy: SelectionStrategy | None = None,
    ) -> EvolutionEngine:
        """Assemble an EvolutionEngine from the configuration and the given strategies."""
        evaluation = self.config.evolution.evaluation
        engine = EvolutionEngine(
            candidate_factory,
            evolution_scheme,
            fitness_evaluator,
            selection_strategy or self.build_selection_strategy(),
            self.build_rng(),
            parallel=evaluation.parallel,
            max_workers=evaluation.max_workers,
        )
        if self.config.output.log_generations:
            engine.add_evolution_observer(LoggingObserver())
        return engine

    def run(
        self,
        candidate_factory: CandidateFactory,
        evolution_scheme: EvolutionaryOperator,
        fitness_evaluator: FitnessEvaluator,
        seed_candidates: Sequence[Any] | None = None,
        selection_strategy: SelectionStrategy | None = None,
        observers: Sequence[EvolutionObserver] = (),
    ) -> EvolutionResult:
        """
        Run one evolutionary search.

        Args:
            candidate_factory: Source of the initial population
            evolution_scheme: Operator (or pipeline) applied to selected parents
            fitness_evaluator: Scores candidates and fixes the fitness direction
            seed_candidates: Optional candidates for the initial population
            selection_strategy: Overrides the configured strategy
            observers: Extra observers notified after every generation

        Returns:
            The EvolutionResult of the run.
        """
        print_header("genloop evolution run")

        evolution = self.config.evolution
        engine = self.create_engine(
            candidate_factory, evolution_scheme, fitness_evaluator, selection_strategy
        )
        for observer in observers:
            engine.add_evolution_observer(observer)

        conditions = self.build_termination_conditions(fitness_evaluator.is_natural)
        result = engine.evolve(
            evolution.population_size,
            evolution.elite_count,
            *conditions,
            seed_candidates=seed_candidates,
        )
        log_event(
            "DONE",
            level=LogLevel.NORMAL,
            generations=result.generations,
            best=f"{result.best_fitness:.4f}",
            reason=result.stop_reason,
        )
        print_result(
            result.fittest,
            result.best_fitness,
            generations=result.generations,
            stopped=result.stop_reason,
        )
        return result

    @staticmethod
    def _get_selection_kwargs(config: SelectionConfig) -> dict:
        """Get kwargs for the selection strategy based on strategy type."""
        strategy = config.strategy
        if strategy == "truncation":
            return {"selection_ratio": config.selection_ratio}
        elif strategy == "tournament":
            return {"selection_probability": config.selection_probability}
        return {}


def evolve(
    candidate_factory: CandidateFactory,
    evolution_scheme: EvolutionaryOperator,
    fitness_evaluator: FitnessEvaluator,
    config: Config | None = None,
    seed_candidates: Sequence[Any] | None = None,
    verbosity: str = "normal",
) -> EvolutionResult:
    """
    Run an evolutionary search in one call.

    Args:
        candidate_factory: Source of the initial population
        evolution_scheme: Operator (or pipeline) applied to selected parents
        fitness_evaluator: Scores candidates
        config: Optional configuration (defaults if None)
        seed_candidates: Optional candidates for the initial population
        verbosity: "silent", "minimal", "normal", "verbose" or "debug"

    Example:
        >>> from genloop import evolve, StringFactory, FunctionFitnessEvaluator
        >>> from genloop import EvolutionPipeline, SequenceCrossover, SequenceMutation
        >>> result = evolve(
        ...     StringFactory("01", 32),
        ...     EvolutionPipeline([SequenceCrossover(1), SequenceMutation("01", 0.01)]),
        ...     FunctionFitnessEvaluator(lambda s: s.count("1")),
        ... )
    """
    engine = Engine(config=config, verbosity=verbosity)
    return engine.run(
        candidate_factory,
        evolution_scheme,
        fitness_evaluator,
        seed_candidates=seed_candidates,
    )
