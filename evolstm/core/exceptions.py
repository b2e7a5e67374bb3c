"""
Custom exceptions for the EVOLSTM forecaster.

Genome, data and optimization failures each get their own branch of the
hierarchy so callers can tell a structural defect in a network apart from a
problem with the input data.
"""

from typing import Optional, Any


class EvoLSTMException(Exception):
    """Base exception for errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(EvoLSTMException):
    """Raised when there are issues with configuration settings."""
    pass


class ValidationError(EvoLSTMException):
    """Raised when data or parameters fail validation."""
    pass


class DataError(EvoLSTMException):
    """Raised when there are issues with loading or preparing time-series data."""
    pass


class DegenerateFeatureError(DataError):
    """Raised when a scaler is fit on an empty set or a constant feature."""
    pass


class GenomeError(EvoLSTMException):
    """Base class for structural defects in a network genome."""
    pass


class ShapeMismatchError(GenomeError):
    """Raised when weight, input or state lengths disagree."""
    pass


class InvalidGenomeError(GenomeError):
    """Raised when serialized genome data is malformed."""
    pass


class MissingStateError(GenomeError):
    """Raised when an LSTM layer is activated without a previous state slot."""
    pass


class UnsupportedLayerError(GenomeError):
    """Raised when a layer variant is not recognised."""
    pass


class OptimizationError(EvoLSTMException):
    """Raised when there are issues during genetic optimization."""
    pass


class InsufficientPopulationError(OptimizationError):
    """Raised when selection runs on fewer than two individuals."""
    pass
