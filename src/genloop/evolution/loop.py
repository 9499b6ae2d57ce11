"""Generational evolution loop."""

from __future__ import annotations

import contextlib
import functools
import math
import random
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Generic, List, Sequence, Tuple, TypeVar

from genloop.core.candidate import (
    EvaluatedCandidate,
    PopulationData,
    compute_population_data,
    sort_evaluated_population,
)
from genloop.core.factory import CandidateFactory
from genloop.core.fitness import FitnessEvaluator
from genloop.errors import (
    ConfigurationError,
    EvaluationFailure,
    OperatorContractViolation,
    OperatorFailure,
)
from genloop.evolution.observer import EvolutionObserver
from genloop.evolution.operators import EvolutionaryOperator, SelectionStrategy
from genloop.evolution.termination import TerminationCondition, UserAbort
from genloop.utils.logging import LogLevel, log_event

T = TypeVar("T")


@dataclass
class EvolutionResult(Generic[T]):
    """Result of a completed run."""

    population: Tuple[EvaluatedCandidate[T], ...]
    fittest: T
    best_fitness: float
    generations: int
    elapsed_time: float
    satisfied_conditions: List[TerminationCondition] = field(default_factory=list)
    history: List[dict] = field(default_factory=list)
    observer_failures: int = 0

    @property
    def stop_reason(self) -> str:
        return ", ".join(repr(c) for c in self.satisfied_conditions)


class EvolutionEngine(Generic[T]):
    """
    Generational evolutionary algorithm.

    The engine owns no problem knowledge. It is assembled from four
    strategies and a random source:

    - a candidate factory builds the initial population,
    - a fitness evaluator scores candidates and fixes the fitness direction,
    - a selection strategy picks parents from each evaluated generation,
    - an evolution scheme (usually an EvolutionPipeline of crossover and
      mutation) turns the parents into offspring.

    Each generation:
    1. **Selection**: pick ``population_size - elite_count`` parents
    2. **Reproduction**: run the evolution scheme over the parents
    3. **Elitism**: append the ``elite_count`` fittest candidates unchanged
    4. **Evaluation**: score every candidate (optionally in parallel) and
       sort fittest-first
    5. **Termination**: notify observers, then check every condition

    All randomness is drawn, in a fixed order, from the single ``rng`` passed
    in. Fitness evaluation uses no randomness, so parallel evaluation does not
    change the outcome of a seeded run.

    Example:
        >>> engine = EvolutionEngine(
        ...     StringFactory("AB", 5),
        ...     EvolutionPipeline([SequenceCrossover(1), SequenceMutation("AB", 0.02)]),
        ...     FunctionFitnessEvaluator(lambda s: s.count("A")),
        ...     TournamentSelection(0.8),
        ...     random.Random(42),
        ... )
        >>> result = engine.evolve(20, 2, TargetFitness(5), GenerationCount(100))
        >>> print(result.fittest, result.best_fitness)
    """

    def __init__(
        self,
        candidate_factory: CandidateFactory[T],
        evolution_scheme: EvolutionaryOperator[T],
        fitness_evaluator: FitnessEvaluator[T],
        selection_strategy: SelectionStrategy,
        rng: random.Random | None = None,
        parallel: bool = False,
        max_workers: int | None = None,
    ):
        """
        Args:
            candidate_factory: Source of the initial population.
            evolution_scheme: Operator applied to the selected parents.
            fitness_evaluator: Scores candidates; its ``is_natural`` flag
                decides the fitness direction for the whole run.
            selection_strategy: Picks parents from each generation.
            rng: The run's only random source. A fresh unseeded
                ``random.Random`` is used if omitted.
            parallel: Evaluate candidates concurrently on a thread pool.
            max_workers: Thread pool size when ``parallel`` is set (None lets
                the executor choose).
        """
        self.candidate_factory = candidate_factory
        self.evolution_scheme = evolution_scheme
        self.fitness_evaluator = fitness_evaluator
        self.selection_strategy = selection_strategy
        self.rng = rng if rng is not None else random.Random()
        self.parallel = parallel
        self.max_workers = max_workers

        self._observers: List[EvolutionObserver] = []
        self._abort = UserAbort()

    def add_evolution_observer(self, observer: EvolutionObserver) -> None:
        self._observers.append(observer)

    def remove_evolution_observer(self, observer: EvolutionObserver) -> None:
        self._observers.remove(observer)

    def abort(self) -> None:
        """
        Ask a running evolve() call to stop at the next generation boundary.

        Safe to call from another thread or from an observer.
        """
        self._abort.abort()

    def evolve(
        self,
        population_size: int,
        elite_count: int,
        *conditions: TerminationCondition,
        seed_candidates: Sequence[T] | None = None,
    ) -> EvolutionResult[T]:
        """
        Run the algorithm until a termination condition is satisfied.

        Args:
            population_size: Number of candidates in every generation.
            elite_count: Number of fittest candidates copied unchanged into
                the next generation. Must be less than population_size.
            *conditions: Termination conditions; at least one is required.
            seed_candidates: Optional candidates placed in the initial
                population before random ones.

        Returns:
            EvolutionResult with the final sorted population, the fittest
            candidate, the satisfied conditions and per-generation history.

        Raises:
            ConfigurationError: Invalid parameters. Raised before the initial
                population is generated.
            OperatorContractViolation: The evolution scheme or selection
                strategy returned the wrong number of candidates.
            OperatorFailure: The evolution scheme or selection strategy
                raised. The original exception is chained.
            EvaluationFailure: The fitness evaluator raised or returned NaN.
                The exception carries the last fully evaluated population.
        """
        self._validate(population_size, elite_count, conditions, seed_candidates)
        self._abort.reset()

        with self._evaluation_executor() as executor:
            return self._run(population_size, elite_count, conditions, seed_candidates, executor)

    def evolve_population(
        self,
        population_size: int,
        elite_count: int,
        *conditions: TerminationCondition,
        seed_candidates: Sequence[T] | None = None,
    ) -> Tuple[EvaluatedCandidate[T], ...]:
        """Like evolve(), but return only the final evaluated population."""
        return self.evolve(
            population_size, elite_count, *conditions, seed_candidates=seed_candidates
        ).population

    def _validate(
        self,
        population_size: int,
        elite_count: int,
        conditions: Sequence[TerminationCondition],
        seed_candidates: Sequence[T] | None,
    ) -> None:
        if population_size <= 0:
            raise ConfigurationError(f"Population size must be positive, got {population_size}")
        if elite_count < 0:
            raise ConfigurationError(f"Elite count must not be negative, got {elite_count}")
        if elite_count >= population_size:
            raise ConfigurationError(
                f"Elite count ({elite_count}) must be less than population size ({population_size})"
            )
        if not conditions:
            raise ConfigurationError("At least one termination condition is required")
        if seed_candidates is not None and len(seed_candidates) > population_size:
            raise ConfigurationError(
                f"Too many seed candidates ({len(seed_candidates)}) for population size {population_size}"
            )

        selection_size = population_size - elite_count
        if getattr(self.evolution_scheme, "pairwise", False) and selection_size % 2 != 0:
            raise ConfigurationError(
                f"The evolution scheme recombines pairs of parents but "
                f"population_size - elite_count = {selection_size} is odd"
            )

    def _evaluation_executor(self):
        if self.parallel:
            return ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="genloop-eval",
            )
        return contextlib.nullcontext()

    def _run(
        self,
        population_size: int,
        elite_count: int,
        conditions: Sequence[TerminationCondition],
        seed_candidates: Sequence[T] | None,
        executor: ThreadPoolExecutor | None,
    ) -> EvolutionResult[T]:
        start_time = time.monotonic()
        natural = self.fitness_evaluator.is_natural
        all_conditions = [*conditions, self._abort]

        log_event(
            "EVOLUTION_START",
            level=LogLevel.VERBOSE,
            population=population_size,
            elite=elite_count,
            natural=natural,
            parallel=self.parallel,
        )

        generation = 0
        population = self.candidate_factory.generate_initial_population(
            population_size, self.rng, seed_candidates
        )
        evaluated = self._evaluate_population(population, natural, executor, generation, None)

        history: List[dict] = []
        observer_failures = 0
        while True:
            data = compute_population_data(
                evaluated, natural, elite_count, generation, time.monotonic() - start_time
            )
            history.append(data.summary())
            observer_failures += self._notify_observers(data)

            # Every condition is consulted so that stateful ones see each generation.
            satisfied = [c for c in all_conditions if c.should_terminate(data)]
            if satisfied:
                break

            generation += 1
            evaluated = self._next_generation(
                evaluated, population_size, elite_count, natural, executor, generation
            )

        result = EvolutionResult(
            population=evaluated,
            fittest=data.fittest_candidate,
            best_fitness=data.best_fitness,
            generations=generation + 1,
            elapsed_time=data.elapsed_time,
            satisfied_conditions=satisfied,
            history=history,
            observer_failures=observer_failures,
        )
        log_event(
            "EVOLUTION_COMPLETE",
            level=LogLevel.VERBOSE,
            generations=result.generations,
            best=f"{result.best_fitness:.4f}",
            reason=result.stop_reason,
        )
        return result

    def _next_generation(
        self,
        evaluated: Tuple[EvaluatedCandidate[T], ...],
        population_size: int,
        elite_count: int,
        natural: bool,
        executor: ThreadPoolExecutor | None,
        generation: int,
    ) -> Tuple[EvaluatedCandidate[T], ...]:
        selection_size = population_size - elite_count
        elite = [c.candidate for c in evaluated[:elite_count]]

        try:
            selected = list(self.selection_strategy.select(evaluated, natural, selection_size, self.rng))
        except Exception as e:
            raise OperatorFailure(
                f"{type(self.selection_strategy).__name__} failed in generation {generation}: {e}",
                generation=generation,
                population=evaluated,
            ) from e
        if len(selected) != selection_size:
            raise OperatorContractViolation(
                f"{type(self.selection_strategy).__name__} selected {len(selected)} "
                f"candidates, expected {selection_size}",
                generation=generation,
                population=evaluated,
            )

        try:
            offspring = list(self.evolution_scheme.apply(selected, self.rng))
        except OperatorContractViolation as e:
            raise OperatorContractViolation(str(e), generation=generation, population=evaluated) from e
        except Exception as e:
            raise OperatorFailure(
                f"{type(self.evolution_scheme).__name__} failed in generation {generation}: {e}",
                generation=generation,
                population=evaluated,
            ) from e
        if len(offspring) != selection_size:
            raise OperatorContractViolation(
                f"{type(self.evolution_scheme).__name__} returned {len(offspring)} "
                f"candidates for {selection_size} parents",
                generation=generation,
                population=evaluated,
            )

        return self._evaluate_population(offspring + elite, natural, executor, generation, evaluated)

    def _evaluate_population(
        self,
        population: Sequence[T],
        natural: bool,
        executor: ThreadPoolExecutor | None,
        generation: int,
        previous: Tuple[EvaluatedCandidate[T], ...] | None,
    ) -> Tuple[EvaluatedCandidate[T], ...]:
        context = tuple(population)

        if executor is None:
            scores = [
                self._collect_score(
                    candidate,
                    functools.partial(self.fitness_evaluator.evaluate, candidate, context),
                    generation,
                    previous,
                )
                for candidate in context
            ]
        else:
            futures = [executor.submit(self.fitness_evaluator.evaluate, c, context) for c in context]
            try:
                # Results are gathered positionally, whatever order they finish in.
                scores = [
                    self._collect_score(candidate, future.result, generation, previous)
                    for candidate, future in zip(context, futures)
                ]
            except EvaluationFailure:
                for future in futures:
                    future.cancel()
                raise

        evaluated = [EvaluatedCandidate(c, s) for c, s in zip(context, scores)]
        return sort_evaluated_population(evaluated, natural)

    def _collect_score(self, candidate, compute, generation, previous) -> float:
        try:
            fitness = float(compute())
        except Exception as e:
            raise EvaluationFailure(
                f"Fitness evaluation failed in generation {generation}: {e}",
                candidate=candidate,
                generation=generation,
                population=previous,
            ) from e
        if math.isnan(fitness):
            raise EvaluationFailure(
                f"Fitness evaluator returned NaN in generation {generation}",
                candidate=candidate,
                generation=generation,
                population=previous,
            )
        return fitness

    def _notify_observers(self, data: PopulationData) -> int:
        failures = 0
        for observer in list(self._observers):
            try:
                observer.population_update(data)
            except Exception as e:
                failures += 1
                log_event(
                    "OBSERVER_FAILED",
                    level=LogLevel.MINIMAL,
                    observer=type(observer).__name__,
                    generation=data.generation_number,
                    error=repr(e),
                )
        return failures
