"""
Optimization module for the EVOLSTM forecaster.

This module provides the genetic algorithm that evolves network genomes and
the fitness measures it selects on.
"""

from .genetic.population import Population, GenerationResult
from .genetic.fitness import FitnessEvaluator, MSEFitnessEvaluator, ValidationReport

__all__ = [
    "Population",
    "GenerationResult",
    "FitnessEvaluator",
    "MSEFitnessEvaluator",
    "ValidationReport"
]
