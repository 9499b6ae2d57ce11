#!/usr/bin/env python3
"""
Quick Start Examples for the genloop evolution engine

This script shows the most common usage patterns to help you get started quickly.
Run this file directly or copy the examples into your own code.

Usage: python examples/quick_start.py
"""

import random


TARGET = "EVOLUTION IS CLEVERER THAN YOU ARE"
ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ "


def matching_characters(candidate):
    return sum(1 for a, b in zip(candidate, TARGET) if a == b)


def example_1_simple_usage():
    """Example 1: Simplest possible usage - one function call"""
    print("=" * 60)
    print("EXAMPLE 1: Simple Usage")
    print("=" * 60)

    from genloop import evolve, StringFactory, FunctionFitnessEvaluator
    from genloop import EvolutionPipeline, SequenceCrossover, SequenceMutation

    # Evolve a bit string with as many 1s as possible
    result = evolve(
        StringFactory("01", 32),
        EvolutionPipeline([SequenceCrossover(1), SequenceMutation("01", 0.02)]),
        FunctionFitnessEvaluator(lambda s: s.count("1")),
        verbosity="minimal",
    )

    print(f"Fittest: {result.fittest}")
    print(f"Fitness: {result.best_fitness:.0f} after {result.generations} generations")
    print()


def example_2_string_target():
    """Example 2: Evolve a target string with a direct engine"""
    print("=" * 60)
    print("EXAMPLE 2: Evolving a Target String")
    print("=" * 60)

    from genloop import (
        EvolutionEngine,
        EvolutionPipeline,
        FunctionFitnessEvaluator,
        GenerationCount,
        SequenceCrossover,
        SequenceMutation,
        StringFactory,
        TargetFitness,
        TournamentSelection,
    )
    from genloop.utils.logging import print_header, print_result

    engine = EvolutionEngine(
        StringFactory(ALPHABET, len(TARGET)),
        EvolutionPipeline([SequenceCrossover(1), SequenceMutation(ALPHABET, 0.02)]),
        FunctionFitnessEvaluator(matching_characters),
        TournamentSelection(0.8),
        random.Random(7),
    )

    print_header(f"Target: {TARGET}")
    result = engine.evolve(200, 4, TargetFitness(len(TARGET)), GenerationCount(1000))
    print_result(
        result.fittest,
        result.best_fitness,
        generations=result.generations,
        stopped=result.stop_reason,
    )


def example_3_yaml_config():
    """Example 3: Config-driven runs"""
    print("=" * 60)
    print("EXAMPLE 3: Configuration")
    print("=" * 60)

    from genloop import Config, Engine, FunctionFitnessEvaluator, StringFactory
    from genloop import EvolutionPipeline, SequenceCrossover, SequenceMutation

    config = Config()
    config.evolution.population_size = 50
    config.evolution.seed = 1
    config.evolution.selection.strategy = "sigma"
    config.evolution.termination.generation_count = 40
    config.evolution.termination.stagnation = 15
    config.output.log_generations = False

    # config.to_yaml("experiment.yaml") saves it; Config.from_yaml() loads it back
    engine = Engine(config, verbosity="minimal")
    result = engine.run(
        StringFactory("01", 64),
        EvolutionPipeline([SequenceCrossover(2), SequenceMutation("01", 0.01)]),
        FunctionFitnessEvaluator(lambda s: s.count("1")),
    )

    print(f"Best fitness: {result.best_fitness:.0f}")
    print(f"Stopped by: {result.stop_reason}")
    print()


def example_4_error_handling():
    """Example 4: Proper error handling"""
    print("=" * 60)
    print("EXAMPLE 4: Error Handling")
    print("=" * 60)

    from genloop import (
        ConfigurationError,
        EvaluationFailure,
        EvolutionEngine,
        FunctionFitnessEvaluator,
        GenerationCount,
        IdentityOperator,
        SequenceCrossover,
        StringFactory,
        TruncationSelection,
    )

    factory = StringFactory("AB", 8)
    evaluator = FunctionFitnessEvaluator(lambda s: s.count("A"))

    try:
        # Crossover needs an even number of parents: 10 - 1 = 9 is rejected
        engine = EvolutionEngine(factory, SequenceCrossover(1), evaluator, TruncationSelection(0.5))
        engine.evolve(10, 1, GenerationCount(10))
    except ConfigurationError as e:
        print(f"Configuration error: {e}")

    def unreliable(candidate):
        if candidate.startswith("BBB"):
            raise ValueError(f"cannot score {candidate}")
        return candidate.count("A")

    try:
        engine = EvolutionEngine(
            factory,
            IdentityOperator(),
            FunctionFitnessEvaluator(unreliable),
            TruncationSelection(0.5),
            random.Random(3),
        )
        engine.evolve(30, 0, GenerationCount(10))
    except EvaluationFailure as e:
        print(f"Evaluation failed in generation {e.generation} on {e.candidate!r}")
        if e.population is not None:
            print(f"Last good population best: {e.population[0].fitness:.0f}")
    print()


if __name__ == "__main__":
    print("genloop - Quick Start Examples")
    print("=" * 60)
    print()

    try:
        example_1_simple_usage()
        example_2_string_target()
        example_3_yaml_config()
        example_4_error_handling()

        print("=" * 60)
        print("All examples completed!")

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
