"""Tests for evolutionary operators, pipelines and number sequences."""

import random

import pytest

from genloop.core.numbers import (
    ConstantSequence,
    DiscreteUniformSequence,
    SampledSequence,
    as_sequence,
)
from genloop.errors import ConfigurationError, OperatorContractViolation
from genloop.evolution.crossover import SequenceCrossover
from genloop.evolution.mutation import SequenceMutation
from genloop.evolution.operators import AbstractCrossover, EvolutionaryOperator
from genloop.evolution.pipeline import EvolutionPipeline, IdentityOperator


class RecordingCrossover(AbstractCrossover):
    """Returns parents unchanged and records every pairing."""

    def __init__(self, crossover_points=1, crossover_probability=1.0):
        super().__init__(crossover_points, crossover_probability)
        self.pairs = []
        self.points = []

    def reproduce(self, parent1, parent2, number_of_crossover_points, rng):
        self.pairs.append((parent1, parent2))
        self.points.append(number_of_crossover_points)
        return [parent1, parent2]


class SuffixOperator(EvolutionaryOperator):
    def __init__(self, suffix):
        self.suffix = suffix

    def apply(self, population, rng):
        return [candidate + self.suffix for candidate in population]


class DroppingOperator(EvolutionaryOperator):
    def apply(self, population, rng):
        return list(population)[:-1]


class TestSequenceCrossover:
    def test_single_point_children_are_complementary(self, rng):
        crossover = SequenceCrossover(1)
        child1, child2 = crossover.reproduce("AAAAAA", "BBBBBB", 1, rng)

        assert len(child1) == len(child2) == 6
        assert child1[0] == "A"
        assert child2[0] == "B"
        for a, b in zip(child1, child2):
            assert {a, b} == {"A", "B"}
        # One crossover point: a run of A's followed by a run of B's
        assert child1 == "A" * child1.count("A") + "B" * child1.count("B")

    def test_preserves_sequence_type(self, rng):
        crossover = SequenceCrossover(2)

        list_children = crossover.reproduce([1, 1, 1, 1], [2, 2, 2, 2], 2, rng)
        tuple_children = crossover.reproduce((1, 1, 1), (2, 2, 2), 2, rng)

        assert all(isinstance(c, list) for c in list_children)
        assert all(isinstance(c, tuple) for c in tuple_children)

    def test_does_not_modify_parents(self, rng):
        parent1 = [0, 0, 0, 0, 0]
        parent2 = [1, 1, 1, 1, 1]
        SequenceCrossover(3).reproduce(parent1, parent2, 3, rng)

        assert parent1 == [0, 0, 0, 0, 0]
        assert parent2 == [1, 1, 1, 1, 1]

    def test_length_one_is_copied(self, rng):
        assert SequenceCrossover(1).reproduce("A", "B", 1, rng) == ["A", "B"]

    def test_different_lengths_rejected(self, rng):
        with pytest.raises(ValueError):
            SequenceCrossover(1).reproduce("AAA", "BB", 1, rng)

    def test_size_preserving(self, rng):
        crossover = SequenceCrossover(2)
        for size in range(0, 20, 2):
            population = ["ABABAB"] * size
            assert len(crossover.apply(population, rng)) == size

    def test_reproducible(self):
        population = ["AAAAAAAA", "BBBBBBBB"] * 3
        crossover = SequenceCrossover(DiscreteUniformSequence(1, 3))

        first = crossover.apply(population, random.Random(9))
        second = crossover.apply(population, random.Random(9))

        assert first == second


class TestAbstractCrossover:
    def test_pairs_in_input_order(self, rng):
        crossover = RecordingCrossover()
        population = ["p0", "p1", "p2", "p3", "p4", "p5"]
        result = crossover.apply(population, rng)

        assert crossover.pairs == [("p0", "p1"), ("p2", "p3"), ("p4", "p5")]
        assert result == population

    def test_consumes_half_as_many_pairs(self, rng):
        for size in (2, 4, 10, 16):
            crossover = RecordingCrossover()
            crossover.apply([f"p{i}" for i in range(size)], rng)
            assert len(crossover.pairs) == size // 2

    def test_odd_population_rejected(self, rng):
        with pytest.raises(ConfigurationError):
            RecordingCrossover().apply(["a", "b", "c"], rng)

    def test_points_drawn_once_per_pair(self, rng):
        draws = []

        def distribution(r):
            draws.append(1)
            return r.randint(1, 4)

        crossover = RecordingCrossover(SampledSequence(distribution))
        crossover.apply(["a", "b", "c", "d", "e", "f", "g", "h"], rng)

        assert len(draws) == 4
        assert all(1 <= p <= 4 for p in crossover.points)

    def test_zero_probability_passes_parents_through(self, rng):
        crossover = RecordingCrossover(crossover_probability=0.0)
        result = crossover.apply(["a", "b", "c", "d"], rng)

        assert result == ["a", "b", "c", "d"]
        assert crossover.pairs == []

    def test_pairwise_flag(self):
        assert RecordingCrossover().pairwise is True
        assert SequenceMutation("AB", 0.1).pairwise is False

    def test_invalid_arguments(self):
        with pytest.raises(ConfigurationError):
            RecordingCrossover(crossover_points=0)
        with pytest.raises(ConfigurationError):
            RecordingCrossover(crossover_probability=1.5)


class TestSequenceMutation:
    def test_zero_probability_returns_input(self, rng):
        candidate = "ABAB"
        assert SequenceMutation("AB", 0.0).mutate(candidate, rng) is candidate

    def test_certain_mutation_with_single_alternative(self, rng):
        assert SequenceMutation("B", 1.0).mutate("AAAA", rng) == "BBBB"

    def test_preserves_type_and_input(self, rng):
        candidate = [0, 0, 0, 0]
        mutated = SequenceMutation([1], 1.0).mutate(candidate, rng)

        assert mutated == [1, 1, 1, 1]
        assert candidate == [0, 0, 0, 0]

    def test_only_alternatives_introduced(self, rng):
        mutation = SequenceMutation("XYZ", 0.5)
        for candidate in mutation.apply(["AAAAAAAA"] * 20, rng):
            assert set(candidate) <= set("AXYZ")
            assert len(candidate) == 8

    def test_size_preserving(self, rng):
        mutation = SequenceMutation("AB", 0.3)
        for size in range(0, 12):
            assert len(mutation.apply(["AAA"] * size, rng)) == size

    def test_invalid_arguments(self):
        with pytest.raises(ConfigurationError):
            SequenceMutation("", 0.1)
        with pytest.raises(ConfigurationError):
            SequenceMutation("AB", 1.2)


class TestEvolutionPipeline:
    def test_applies_operators_in_order(self, rng):
        pipeline = EvolutionPipeline([SuffixOperator("x"), SuffixOperator("y")])
        assert pipeline.apply(["a", "b"], rng) == ["axy", "bxy"]

    def test_stage_changing_size_is_violation(self, rng):
        pipeline = EvolutionPipeline([SuffixOperator("x"), DroppingOperator()])
        with pytest.raises(OperatorContractViolation):
            pipeline.apply(["a", "b", "c"], rng)

    def test_empty_pipeline_rejected(self):
        with pytest.raises(ConfigurationError):
            EvolutionPipeline([])

    def test_pairwise_if_any_stage_is(self):
        assert EvolutionPipeline([SequenceMutation("AB", 0.1)]).pairwise is False
        assert EvolutionPipeline([SequenceCrossover(1), SequenceMutation("AB", 0.1)]).pairwise is True

    def test_crossover_then_mutation_size_preserving(self, rng):
        pipeline = EvolutionPipeline([SequenceCrossover(1), SequenceMutation("AB", 0.2)])
        for size in range(0, 20, 2):
            assert len(pipeline.apply(["AABB"] * size, rng)) == size

    def test_identity(self, rng):
        population = ["a", "b", "c"]
        result = IdentityOperator().apply(population, rng)

        assert result == population
        assert result is not population


class TestNumberSequences:
    def test_constant_consumes_no_randomness(self, rng):
        state = rng.getstate()
        sequence = ConstantSequence(3)

        assert [sequence.next(rng) for _ in range(5)] == [3] * 5
        assert rng.getstate() == state

    def test_discrete_uniform_range(self, rng):
        sequence = DiscreteUniformSequence(2, 4)
        values = {sequence.next(rng) for _ in range(200)}

        assert values == {2, 3, 4}

    def test_discrete_uniform_invalid(self):
        with pytest.raises(ConfigurationError):
            DiscreteUniformSequence(5, 1)

    def test_sampled_uses_given_rng(self):
        sequence = SampledSequence(lambda r: r.random())
        assert sequence.next(random.Random(4)) == random.Random(4).random()

    def test_as_sequence(self):
        constant = as_sequence(2)
        sampled = SampledSequence(lambda r: 1)

        assert isinstance(constant, ConstantSequence)
        assert as_sequence(sampled) is sampled
