"""
Core functionality for the EVOLSTM forecaster.

This module contains configuration management, logging setup, and custom exceptions.
"""

from .config import Config, DataConfig, NetworkConfig, EvolutionConfig
from .exceptions import (
    EvoLSTMException,
    ConfigurationError,
    ValidationError,
    DataError,
    DegenerateFeatureError,
    GenomeError,
    ShapeMismatchError,
    InvalidGenomeError,
    MissingStateError,
    UnsupportedLayerError,
    OptimizationError,
    InsufficientPopulationError,
)
from .logging import setup_logging, get_logger

__all__ = [
    "Config",
    "DataConfig",
    "NetworkConfig",
    "EvolutionConfig",
    "EvoLSTMException",
    "ConfigurationError",
    "ValidationError",
    "DataError",
    "DegenerateFeatureError",
    "GenomeError",
    "ShapeMismatchError",
    "InvalidGenomeError",
    "MissingStateError",
    "UnsupportedLayerError",
    "OptimizationError",
    "InsufficientPopulationError",
    "setup_logging",
    "get_logger"
]
