"""
Activation functions and numeric primitives shared by genes and blocks.

Activations are a closed set so that a serialized neuron can name its
activation and be reloaded without evaluating arbitrary code.
"""

import math
import random
from enum import Enum
from typing import Sequence

from evolstm.core.exceptions import InvalidGenomeError, ShapeMismatchError


def sigmoid(x: float) -> float:
    """Logistic function, evaluated so that large |x| cannot overflow."""
    if x >= 0:
        return 1.0 / (1.0 + math.exp(-x))
    z = math.exp(x)
    return z / (1.0 + z)


def tanh(x: float) -> float:
    return math.tanh(x)


def identity(x: float) -> float:
    return x


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def random_float(low: float, high: float, rng: random.Random) -> float:
    """Uniform draw from [low, high)."""
    return rng.random() * (high - low) + low


def weighted_sum(inputs: Sequence[float], weights: Sequence[float], bias: float) -> float:
    """
    Dot product of ``inputs`` and ``weights`` plus ``bias``.

    Raises:
        ShapeMismatchError: If the two vectors differ in length
    """
    if len(inputs) != len(weights):
        raise ShapeMismatchError(
            "Inputs and weights must have the same length",
            details={"inputs": len(inputs), "weights": len(weights)}
        )
    total = 0.0
    for x, w in zip(inputs, weights):
        total += x * w
    return total + bias


class Activation(Enum):
    """Activations a neuron may be serialized with."""

    SIGMOID = "sigmoid"
    TANH = "tanh"
    IDENTITY = "identity"

    def apply(self, x: float) -> float:
        return _ACTIVATION_FUNCTIONS[self](x)

    @classmethod
    def from_name(cls, name: str) -> "Activation":
        """
        Resolve a serialized activation name.

        Raises:
            InvalidGenomeError: If the name is not a registered activation
        """
        try:
            return cls(name)
        except ValueError:
            raise InvalidGenomeError(
                f"Unknown activation function: {name!r}",
                details=[a.value for a in cls]
            )


_ACTIVATION_FUNCTIONS = {
    Activation.SIGMOID: sigmoid,
    Activation.TANH: tanh,
    Activation.IDENTITY: identity,
}
