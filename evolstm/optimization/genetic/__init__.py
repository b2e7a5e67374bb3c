"""
Genetic evolution of LSTM forecasting networks.
"""

from .fitness import (
    FitnessResult,
    FitnessEvaluator,
    MSEFitnessEvaluator,
    ValidationReport,
    evaluate_validation,
)
from .population import Population, GenerationResult

__all__ = [
    "FitnessResult",
    "FitnessEvaluator",
    "MSEFitnessEvaluator",
    "ValidationReport",
    "evaluate_validation",
    "Population",
    "GenerationResult"
]
