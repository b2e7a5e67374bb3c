"""
Fitness evaluation for evolved networks.

Fitness is the negated mean squared error of a network's last-timestep
prediction over a time series, so higher is better.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from evolstm.core.exceptions import OptimizationError, ShapeMismatchError
from evolstm.core.logging import get_logger
from evolstm.data.processors.preparer import TimeSeries
from evolstm.network.network import Network

logger = get_logger(__name__)


@dataclass
class FitnessResult:
    """Fitness of one network together with the metrics it was derived from."""

    fitness_score: float
    metrics: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        # Selection sorts on this value and NaN has no order
        if math.isnan(self.fitness_score):
            raise OptimizationError("Fitness score must not be NaN", details=self.metrics)


class FitnessEvaluator(ABC):
    """Abstract base class for fitness evaluation."""

    @abstractmethod
    def score(self, network: Network) -> float:
        """Fitness of ``network``; higher is better."""
        pass

    def evaluate(self, network: Network) -> FitnessResult:
        return FitnessResult(fitness_score=self.score(network))

    def evaluate_batch(self, networks: List[Network]) -> List[FitnessResult]:
        return [self.evaluate(network) for network in networks]


def sequence_loss(network: Network, sequence: List[List[float]], target: List[float]) -> Tuple[float, List[float]]:
    """
    Squared error of the last-timestep prediction summed over output units.

    Returns:
        Tuple of (loss, prediction)
    """
    prediction = network.predict(sequence)
    if len(prediction) != len(target):
        raise ShapeMismatchError(
            f"Prediction length {len(prediction)} does not match target output length {len(target)}"
        )
    loss = 0.0
    for predicted, expected in zip(prediction, target):
        loss += (predicted - expected) ** 2
    return loss, prediction


def mean_sequence_loss(network: Network, series: TimeSeries) -> float:
    if len(series) == 0:
        raise ShapeMismatchError("Cannot compute loss over an empty time series")
    total = 0.0
    for sequence, target in zip(series.input_sequences, series.target_outputs):
        loss, _ = sequence_loss(network, sequence, target)
        total += loss
    return total / len(series)


class MSEFitnessEvaluator(FitnessEvaluator):
    """Scores networks by negated mean squared error on a time series."""

    def __init__(self, time_series: TimeSeries):
        self.time_series = time_series

    def score(self, network: Network) -> float:
        return -mean_sequence_loss(network, self.time_series)

    def evaluate(self, network: Network) -> FitnessResult:
        mse = mean_sequence_loss(network, self.time_series)
        return FitnessResult(fitness_score=-mse, metrics={"mse": mse})


@dataclass
class ValidationReport:
    """Validation MSE of a network plus a few denormalized predictions."""

    mse: float
    num_sequences: int
    samples: List[Tuple[float, float]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mse": self.mse,
            "num_sequences": self.num_sequences,
            "samples": [{"true": t, "predicted": p} for t, p in self.samples],
        }


def evaluate_validation(network: Network, series: TimeSeries, num_samples: int = 5) -> ValidationReport:
    """
    Compute validation MSE and the first ``num_samples`` (true, predicted)
    pairs mapped back to the target's original units.
    """
    total = 0.0
    samples = []
    for index, (sequence, target) in enumerate(zip(series.input_sequences, series.target_outputs)):
        loss, prediction = sequence_loss(network, sequence, target)
        total += loss
        if index < num_samples:
            samples.append((
                series.denormalize_target(target[0]),
                series.denormalize_target(prediction[0]),
            ))

    mse = total / len(series) if len(series) else float('nan')
    return ValidationReport(mse=mse, num_sequences=len(series), samples=samples)
