"""Tests for the generational evolution loop."""

import random
import time
from collections import Counter

import pytest

from genloop.core.factory import CandidateFactory, StringFactory
from genloop.core.fitness import FitnessEvaluator, FunctionFitnessEvaluator
from genloop.errors import (
    ConfigurationError,
    EvaluationFailure,
    OperatorContractViolation,
    OperatorFailure,
)
from genloop.evolution.crossover import SequenceCrossover
from genloop.evolution.loop import EvolutionEngine
from genloop.evolution.mutation import SequenceMutation
from genloop.evolution.observer import EvolutionObserver, HistoryObserver
from genloop.evolution.operators import EvolutionaryOperator, SelectionStrategy
from genloop.evolution.pipeline import EvolutionPipeline, IdentityOperator
from genloop.evolution.selection import (
    RouletteWheelSelection,
    TournamentSelection,
    TruncationSelection,
)
from genloop.evolution.termination import GenerationCount, TargetFitness, UserAbort


class CountingFactory(StringFactory):
    def __init__(self, alphabet, length):
        super().__init__(alphabet, length)
        self.calls = 0

    def generate_random_candidate(self, rng):
        self.calls += 1
        return super().generate_random_candidate(rng)


class DroppingOperator(EvolutionaryOperator):
    def apply(self, population, rng):
        return list(population)[:-1]


class ShortSelection(SelectionStrategy):
    def select(self, population, natural_fitness, selection_size, rng):
        return [c.candidate for c in population][: selection_size - 1]


class ContextRecorder(FitnessEvaluator):
    """Counts 'A's and records the size of the context it was given."""

    def __init__(self):
        self.context_sizes = []

    def evaluate(self, candidate, population):
        self.context_sizes.append(len(population))
        return candidate.count("A")

    @property
    def is_natural(self):
        return True


class ReverseFinishEvaluator(FitnessEvaluator):
    """Counts 'A's, finishing later the earlier a candidate sits in its generation."""

    def evaluate(self, candidate, population):
        time.sleep(0.002 * (len(population) - population.index(candidate)))
        return candidate.count("A")

    @property
    def is_natural(self):
        return True


class BrokenOperator(EvolutionaryOperator):
    def apply(self, population, rng):
        raise RuntimeError("operator broke")


class FailingObserver(EvolutionObserver):
    def population_update(self, data):
        raise RuntimeError("observer broke")


class AbortingObserver(EvolutionObserver):
    def __init__(self, engine, at_generation):
        self.engine = engine
        self.at_generation = at_generation

    def population_update(self, data):
        if data.generation_number == self.at_generation:
            self.engine.abort()


def _without_timing(history):
    return [{k: v for k, v in entry.items() if k != "elapsed_time"} for entry in history]


def make_engine(evaluator, scheme=None, selection=None, seed=42, **kwargs):
    return EvolutionEngine(
        StringFactory("AB", 5),
        scheme or EvolutionPipeline([SequenceCrossover(1), SequenceMutation("AB", 0.05)]),
        evaluator,
        selection or TournamentSelection(0.8),
        random.Random(seed),
        **kwargs,
    )


class TestEvolutionLoop:
    def test_selection_only_improves_mean(self, count_a):
        engine = make_engine(count_a, scheme=IdentityOperator(), selection=TruncationSelection(0.5))
        history = HistoryObserver()
        engine.add_evolution_observer(history)

        result = engine.evolve(10, 0, GenerationCount(6))

        means = history.mean_fitness_history()
        assert result.generations == 6
        assert len(means) == 6
        for before, after in zip(means, means[1:]):
            assert after >= before

    def test_population_size_constant(self, count_a):
        engine = make_engine(count_a)
        history = HistoryObserver()
        engine.add_evolution_observer(history)

        result = engine.evolve(12, 2, GenerationCount(8))

        assert len(result.population) == 12
        assert all(data.population_size == 12 for data in history.history)
        assert [data.generation_number for data in history.history] == list(range(8))

    def test_elites_survive_unchanged(self, count_a):
        engine = make_engine(count_a, scheme=SequenceMutation("AB", 0.5))
        history = HistoryObserver()
        engine.add_evolution_observer(history)

        engine.evolve(10, 2, GenerationCount(10))

        for previous, current in zip(history.history, history.history[1:]):
            elites = Counter(c.candidate for c in previous.population[:2])
            survivors = Counter(c.candidate for c in current.population)
            assert all(survivors[candidate] >= n for candidate, n in elites.items())
            assert current.best_fitness >= previous.best_fitness

    def test_reproducible_with_same_seed(self, count_a):
        runs = []
        for _ in range(2):
            engine = make_engine(count_a, seed=7)
            history = HistoryObserver()
            engine.add_evolution_observer(history)
            result = engine.evolve(10, 2, GenerationCount(5))
            runs.append((result, history))

        (first, first_history), (second, second_history) = runs
        assert first.population == second.population
        assert [data.population for data in first_history.history] == [
            data.population for data in second_history.history
        ]
        assert _without_timing(first.history) == _without_timing(second.history)

    def test_parallel_matches_sequential(self, count_a):
        sequential = make_engine(count_a, seed=3).evolve(20, 2, GenerationCount(6))
        parallel = make_engine(count_a, seed=3, parallel=True, max_workers=4).evolve(
            20, 2, GenerationCount(6)
        )

        assert parallel.population == sequential.population
        assert parallel.fittest == sequential.fittest

    def test_parallel_results_kept_in_submission_order(self):
        evaluator = ReverseFinishEvaluator()
        sequential = make_engine(evaluator, seed=11).evolve(8, 2, GenerationCount(3))
        parallel = make_engine(evaluator, seed=11, parallel=True, max_workers=8).evolve(
            8, 2, GenerationCount(3)
        )

        assert parallel.population == sequential.population
        assert _without_timing(parallel.history) == _without_timing(sequential.history)

    def test_target_fitness_reached_by_seed(self, count_a):
        result = make_engine(count_a).evolve(
            10, 2, TargetFitness(5), GenerationCount(50), seed_candidates=["AAAAA"]
        )

        assert result.generations == 1
        assert result.fittest == "AAAAA"
        assert result.best_fitness == 5.0
        assert [type(c) for c in result.satisfied_conditions] == [TargetFitness]

    def test_all_satisfied_conditions_recorded(self, count_a):
        result = make_engine(count_a).evolve(
            10, 2, TargetFitness(0), GenerationCount(1)
        )

        assert [type(c) for c in result.satisfied_conditions] == [TargetFitness, GenerationCount]
        assert "GenerationCount(1)" in result.stop_reason

    def test_seed_candidates_in_initial_population(self, count_a):
        history = HistoryObserver()
        engine = make_engine(count_a)
        engine.add_evolution_observer(history)

        engine.evolve(10, 0, GenerationCount(1), seed_candidates=["BBBBB", "ABABA"])

        initial = [c.candidate for c in history.history[0].population]
        assert "BBBBB" in initial
        assert "ABABA" in initial

    def test_inverted_fitness_sorted_ascending(self):
        evaluator = FunctionFitnessEvaluator(lambda s: s.count("A"), natural=False)
        result = make_engine(evaluator).evolve(10, 2, GenerationCount(4))

        scores = [c.fitness for c in result.population]
        assert scores == sorted(scores)
        assert result.best_fitness == scores[0]
        assert result.fittest == result.population[0].candidate

    def test_evolve_population(self, count_a):
        population = make_engine(count_a).evolve_population(8, 2, GenerationCount(3))

        assert len(population) == 8
        scores = [c.fitness for c in population]
        assert scores == sorted(scores, reverse=True)

    def test_evaluator_sees_whole_generation(self):
        evaluator = ContextRecorder()
        make_engine(evaluator).evolve(6, 2, GenerationCount(3))

        assert evaluator.context_sizes == [6] * 18

    def test_history_matches_generations(self, count_a):
        result = make_engine(count_a).evolve(10, 2, GenerationCount(5))

        assert len(result.history) == result.generations == 5
        assert result.history[-1]["generation"] == 4


class TestConfigurationErrors:
    def test_elite_count_not_less_than_population(self, count_a, rng):
        factory = CountingFactory("AB", 5)
        engine = EvolutionEngine(factory, IdentityOperator(), count_a, TournamentSelection(), rng)

        with pytest.raises(ConfigurationError):
            engine.evolve(5, 5, GenerationCount(3))
        assert factory.calls == 0

    def test_negative_elite_count(self, count_a):
        with pytest.raises(ConfigurationError):
            make_engine(count_a).evolve(10, -1, GenerationCount(3))

    def test_non_positive_population(self, count_a):
        with pytest.raises(ConfigurationError):
            make_engine(count_a).evolve(0, 0, GenerationCount(3))

    def test_no_conditions(self, count_a):
        with pytest.raises(ConfigurationError):
            make_engine(count_a).evolve(10, 2)

    def test_odd_selection_size_with_crossover(self, count_a):
        with pytest.raises(ConfigurationError):
            make_engine(count_a).evolve(10, 1, GenerationCount(3))

    def test_odd_selection_size_without_crossover(self, count_a):
        result = make_engine(count_a, scheme=SequenceMutation("AB", 0.1)).evolve(
            10, 1, GenerationCount(3)
        )
        assert len(result.population) == 10

    def test_too_many_seeds(self, count_a):
        with pytest.raises(ConfigurationError):
            make_engine(count_a).evolve(2, 0, GenerationCount(3), seed_candidates=["A", "B", "A"])


class TestRunFailures:
    def test_operator_changing_size(self, count_a):
        engine = make_engine(count_a, scheme=DroppingOperator())

        with pytest.raises(OperatorContractViolation) as exc_info:
            engine.evolve(4, 0, GenerationCount(5))

        assert exc_info.value.generation == 1
        assert len(exc_info.value.population) == 4

    def test_pipeline_stage_changing_size(self, count_a):
        engine = make_engine(count_a, scheme=EvolutionPipeline([IdentityOperator(), DroppingOperator()]))

        with pytest.raises(OperatorContractViolation) as exc_info:
            engine.evolve(4, 0, GenerationCount(5))

        assert "stage 1" in str(exc_info.value)
        assert exc_info.value.population is not None

    def test_selection_returning_wrong_size(self, count_a):
        engine = make_engine(count_a, scheme=IdentityOperator(), selection=ShortSelection())

        with pytest.raises(OperatorContractViolation) as exc_info:
            engine.evolve(4, 0, GenerationCount(5))

        assert exc_info.value.generation == 1

    def test_evaluation_failure_in_initial_population(self):
        def broken(candidate):
            raise KeyError(candidate)

        engine = make_engine(FunctionFitnessEvaluator(broken))

        with pytest.raises(EvaluationFailure) as exc_info:
            engine.evolve(4, 0, GenerationCount(5))

        assert exc_info.value.generation == 0
        assert exc_info.value.population is None
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_evaluation_failure_keeps_last_population(self):
        calls = []

        def flaky(candidate):
            calls.append(candidate)
            if len(calls) > 4:
                raise ValueError("evaluator down")
            return candidate.count("A")

        engine = make_engine(FunctionFitnessEvaluator(flaky), scheme=IdentityOperator())

        with pytest.raises(EvaluationFailure) as exc_info:
            engine.evolve(4, 0, GenerationCount(5))

        failure = exc_info.value
        assert failure.generation == 1
        assert len(failure.population) == 4
        assert failure.candidate == calls[-1]

    def test_nan_fitness(self):
        engine = make_engine(FunctionFitnessEvaluator(lambda s: float("nan")))

        with pytest.raises(EvaluationFailure):
            engine.evolve(4, 0, GenerationCount(5))

    def test_selection_error_keeps_last_population(self):
        # Roulette selection rejects the negative scores of generation 0
        evaluator = FunctionFitnessEvaluator(lambda s: s.count("A") - 10)
        engine = make_engine(evaluator, scheme=IdentityOperator(), selection=RouletteWheelSelection())

        with pytest.raises(OperatorFailure) as exc_info:
            engine.evolve(6, 0, GenerationCount(5))

        failure = exc_info.value
        assert failure.generation == 1
        assert len(failure.population) == 6
        assert all(c.fitness < 0 for c in failure.population)
        assert isinstance(failure.__cause__, ValueError)

    def test_operator_error_keeps_last_population(self, count_a):
        engine = make_engine(count_a, scheme=BrokenOperator())

        with pytest.raises(OperatorFailure) as exc_info:
            engine.evolve(6, 2, GenerationCount(5))

        assert exc_info.value.generation == 1
        assert len(exc_info.value.population) == 6
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_parallel_evaluation_failure(self):
        def broken(candidate):
            raise RuntimeError("boom")

        engine = make_engine(FunctionFitnessEvaluator(broken), parallel=True, max_workers=2)

        with pytest.raises(EvaluationFailure) as exc_info:
            engine.evolve(6, 0, GenerationCount(5))

        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestObserversAndAbort:
    def test_failing_observer_does_not_stop_run(self, count_a):
        engine = make_engine(count_a)
        history = HistoryObserver()
        engine.add_evolution_observer(FailingObserver())
        engine.add_evolution_observer(history)

        result = engine.evolve(10, 2, GenerationCount(3))

        assert result.generations == 3
        assert result.observer_failures == 3
        assert len(history.history) == 3

    def test_removed_observer_not_notified(self, count_a):
        engine = make_engine(count_a)
        history = HistoryObserver()
        engine.add_evolution_observer(history)
        engine.remove_evolution_observer(history)

        engine.evolve(10, 2, GenerationCount(3))

        assert history.history == []

    def test_abort_from_observer(self, count_a):
        engine = make_engine(count_a)
        engine.add_evolution_observer(AbortingObserver(engine, at_generation=2))

        result = engine.evolve(10, 2, GenerationCount(100))

        assert result.generations == 3
        assert any(isinstance(c, UserAbort) for c in result.satisfied_conditions)

    def test_abort_is_reset_between_runs(self, count_a):
        engine = make_engine(count_a)
        engine.abort()

        result = engine.evolve(10, 2, GenerationCount(4))

        assert result.generations == 4
