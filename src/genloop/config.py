"""
Configuration schema for the genloop evolution engine.

This module defines the configuration classes using Pydantic for validation
and type safety. The main Config class combines all settings and can be
loaded from YAML files, so experiments can be re-run from a file.

Key configuration areas:
- SelectionConfig: Which selection strategy and its parameters
- TerminationConfig: When a run stops
- EvaluationConfig: Sequential or thread-parallel fitness evaluation
- EvolutionConfig: Population size, elitism, random seed
- OutputConfig: Logging verbosity

Problem-specific pieces (candidate factory, evolution scheme, fitness
evaluator) are objects, not configuration; they are handed to
genloop.engine.Engine.run() directly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator


class SelectionConfig(BaseModel):
    """
    Configuration for the selection strategy.

    Strategies:
    - **truncation**: Clone the fittest ``selection_ratio`` of the population
    - **roulette**: Fitness-proportionate, one spin per parent
    - **sus**: Stochastic universal sampling, one spin in total
    - **tournament**: Binary tournaments won by the fitter with
      ``selection_probability``
    - **rank**: Proportionate selection on rank
    - **sigma**: Proportionate selection on sigma-scaled fitness
    """

    strategy: Literal["truncation", "roulette", "sus", "tournament", "rank", "sigma"] = "tournament"
    selection_ratio: float = Field(default=0.5, gt=0, lt=1)            # truncation only
    selection_probability: float = Field(default=0.7, gt=0.5, le=1)    # tournament only

    class Config:
        extra = "forbid"


class TerminationConfig(BaseModel):
    """
    Configuration for termination conditions.

    Every field that is set adds one condition; the run stops when any of
    them is satisfied. At least one must be set.
    """

    generation_count: int | None = Field(default=100, ge=1)
    target_fitness: float | None = None
    max_time: float | None = Field(default=None, gt=0)     # Seconds
    stagnation: int | None = Field(default=None, ge=1)     # Generations without improvement
    stagnation_use_average: bool = False

    class Config:
        extra = "forbid"

    def is_empty(self) -> bool:
        return (
            self.generation_count is None
            and self.target_fitness is None
            and self.max_time is None
            and self.stagnation is None
        )


class EvaluationConfig(BaseModel):
    """Configuration for fitness evaluation."""

    parallel: bool = False
    max_workers: int | None = Field(default=None, ge=1)    # None = executor default

    class Config:
        extra = "forbid"


class EvolutionConfig(BaseModel):
    """
    Configuration for the generational loop.

    Tuning Guidelines:
    - **Quick experiments**: population_size=20, elite_count=1
    - **Balanced (default)**: population_size=100, elite_count=2
    - **Hard landscapes**: larger populations, tournament or sigma selection

    With a crossover in the evolution scheme, ``population_size - elite_count``
    must be even.
    """

    population_size: int = Field(default=100, ge=1)
    elite_count: int = Field(default=2, ge=0)
    seed: int | None = None                                # None = nondeterministic run
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    termination: TerminationConfig = Field(default_factory=TerminationConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)

    class Config:
        extra = "forbid"

    @model_validator(mode="after")
    def _check_consistency(self) -> "EvolutionConfig":
        if self.elite_count >= self.population_size:
            raise ValueError(
                f"elite_count ({self.elite_count}) must be less than "
                f"population_size ({self.population_size})"
            )
        if self.termination.is_empty():
            raise ValueError("at least one termination condition must be configured")
        return self


class OutputConfig(BaseModel):
    """Configuration for output settings."""
    verbosity: Literal["silent", "minimal", "normal", "verbose", "debug"] = "normal"
    log_generations: bool = True

    class Config:
        extra = "forbid"


class Config(BaseModel):
    """
    Main configuration for the genloop evolution engine.

    Usage Patterns:

    **Default Configuration**:
    >>> config = Config()
    >>> engine = Engine(config=config)

    **Programmatic Customization**:
    >>> config = Config()
    >>> config.evolution.population_size = 200
    >>> config.evolution.selection.strategy = "sigma"
    >>> config.output.verbosity = "verbose"

    **YAML Configuration**:
    >>> config = Config.from_yaml("experiment.yaml")
    >>> config.evolution.seed = 7
    >>> config.to_yaml("experiment_seed7.yaml")
    """

    evolution: EvolutionConfig = Field(default_factory=EvolutionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    class Config:
        extra = "forbid"

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Load configuration from a dictionary."""
        return cls(**data)

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary."""
        return self.model_dump()
