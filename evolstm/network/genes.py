"""
Gene-level building blocks of an evolved network.

A gene is a weight vector plus a bias. ``WeightedInputPoint`` feeds the gates
of an LSTM block and is immutable: its operators return new points.
``Neuron`` is the unit of a dense layer; it carries clamp bounds and mutates
in place, scaling its perturbation by the configured weight/bias range rather
than by a fixed step. The two mutation policies are intentionally different.
"""

import random
from numbers import Real
from typing import Any, Dict, List, Optional, Sequence

from evolstm.core.exceptions import InvalidGenomeError, ShapeMismatchError
from evolstm.utils.helpers import ensure_rng
from .activations import Activation, clamp, random_float, weighted_sum


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _validate_weights(weights: Any, owner: str) -> List[float]:
    if not isinstance(weights, list):
        raise InvalidGenomeError(f"{owner} weights must be an array", details=type(weights).__name__)
    if not all(_is_number(w) for w in weights):
        raise InvalidGenomeError(f"{owner} weights must all be numbers")
    return [float(w) for w in weights]


class WeightedInputPoint:
    """A weight vector and bias feeding one gate of an LSTM block."""

    def __init__(self, weights: Sequence[float], bias: float):
        self.weights = list(weights)
        self.bias = bias

    @classmethod
    def create_random(cls, size: int, rng: Optional[random.Random] = None) -> "WeightedInputPoint":
        """Weights and bias drawn uniformly from [-1, 1]."""
        rng = ensure_rng(rng)
        weights = [random_float(-1.0, 1.0, rng) for _ in range(size)]
        return cls(weights, random_float(-1.0, 1.0, rng))

    def mutate(
        self,
        mutation_rate: float = 0.1,
        mutation_amount: float = 0.1,
        rng: Optional[random.Random] = None
    ) -> "WeightedInputPoint":
        """
        Return a copy where each weight and the bias is, with probability
        ``mutation_rate``, shifted by a uniform draw from
        [-mutation_amount, mutation_amount].
        """
        rng = ensure_rng(rng)
        weights = []
        for weight in self.weights:
            if rng.random() < mutation_rate:
                weight = weight + random_float(-mutation_amount, mutation_amount, rng)
            weights.append(weight)

        bias = self.bias
        if rng.random() < mutation_rate:
            bias = bias + random_float(-mutation_amount, mutation_amount, rng)

        return WeightedInputPoint(weights, bias)

    def crossover(self, other: "WeightedInputPoint", rng: Optional[random.Random] = None) -> "WeightedInputPoint":
        """Uniform crossover: every gene is copied from one parent or the other."""
        rng = ensure_rng(rng)
        weights = [
            mine if rng.random() < 0.5 else theirs
            for mine, theirs in zip(self.weights, other.weights)
        ]
        bias = self.bias if rng.random() < 0.5 else other.bias
        return WeightedInputPoint(weights, bias)

    def clone(self) -> "WeightedInputPoint":
        return WeightedInputPoint(list(self.weights), self.bias)

    @property
    def size(self) -> int:
        return len(self.weights)

    def to_dict(self) -> Dict[str, Any]:
        return {"weights": list(self.weights), "bias": self.bias}

    @classmethod
    def from_dict(cls, data: Any) -> "WeightedInputPoint":
        if not isinstance(data, dict):
            raise InvalidGenomeError("Invalid JSON data for WeightedInputPoint")
        weights = _validate_weights(data.get("weights"), "WeightedInputPoint")
        bias = data.get("bias")
        if not _is_number(bias):
            raise InvalidGenomeError("WeightedInputPoint bias must be a number", details=bias)
        return cls(weights, float(bias))

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, WeightedInputPoint):
            return False
        return self.weights == other.weights and self.bias == other.bias

    def __repr__(self) -> str:
        return f"WeightedInputPoint(size={self.size}, bias={self.bias:.4f})"


class Neuron:
    """
    Weighted-sum unit with an activation and clamped weight/bias ranges.

    In evolved networks neurons only appear in the final dense projection and
    use the identity activation.
    """

    def __init__(
        self,
        num_inputs: int,
        activation: Activation = Activation.IDENTITY,
        min_weight: float = -1.0,
        max_weight: float = 1.0,
        min_bias: float = -1.0,
        max_bias: float = 1.0,
        weights: Optional[Sequence[float]] = None,
        bias: Optional[float] = None,
        rng: Optional[random.Random] = None
    ):
        self.num_inputs = num_inputs
        self.num_outputs = 1
        self.activation = activation
        self.min_weight = min_weight
        self.max_weight = max_weight
        self.min_bias = min_bias
        self.max_bias = max_bias

        if weights is None or bias is None:
            rng = ensure_rng(rng)
        if weights is None:
            weights = [random_float(min_weight, max_weight, rng) for _ in range(num_inputs)]
        if bias is None:
            bias = random_float(min_bias, max_bias, rng)

        self.weights = list(weights)
        self.bias = bias

        if len(self.weights) != num_inputs:
            raise ShapeMismatchError(
                "Neuron weight count must equal its number of inputs",
                details={"num_inputs": num_inputs, "weights": len(self.weights)}
            )

    def activate(self, inputs: Sequence[float]) -> float:
        return self.activation.apply(weighted_sum(inputs, self.weights, self.bias))

    def _bounds(self) -> Dict[str, float]:
        return {
            "min_weight": self.min_weight,
            "max_weight": self.max_weight,
            "min_bias": self.min_bias,
            "max_bias": self.max_bias,
        }

    def clone(self) -> "Neuron":
        return Neuron(
            self.num_inputs,
            self.activation,
            weights=list(self.weights),
            bias=self.bias,
            **self._bounds()
        )

    def mutate(
        self,
        mutation_rate: float = 0.2,
        mutation_amount: float = 0.2,
        rng: Optional[random.Random] = None
    ) -> "Neuron":
        """
        Mutate in place and return self.

        Each weight is, with probability ``mutation_rate``, shifted by
        ``mutation_amount * uniform(min_weight, max_weight)`` and clamped. The
        bias is always shifted by ``mutation_amount * uniform(min_bias, max_bias)``
        and clamped.
        """
        rng = ensure_rng(rng)
        for i, weight in enumerate(self.weights):
            if rng.random() >= mutation_rate:
                continue
            delta = random_float(self.min_weight, self.max_weight, rng) * mutation_amount
            self.weights[i] = clamp(weight + delta, self.min_weight, self.max_weight)

        delta = random_float(self.min_bias, self.max_bias, rng) * mutation_amount
        self.bias = clamp(self.bias + delta, self.min_bias, self.max_bias)
        return self

    def crossover(self, other: "Neuron", rng: Optional[random.Random] = None) -> "Neuron":
        if self.num_inputs != other.num_inputs:
            raise ShapeMismatchError(
                "Input sizes must match for crossover",
                details={"self": self.num_inputs, "other": other.num_inputs}
            )
        rng = ensure_rng(rng)
        weights = [
            mine if rng.random() < 0.5 else theirs
            for mine, theirs in zip(self.weights, other.weights)
        ]
        bias = self.bias if rng.random() < 0.5 else other.bias
        return Neuron(self.num_inputs, self.activation, weights=weights, bias=bias, **self._bounds())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weights": list(self.weights),
            "bias": self.bias,
            "activationFunction": self.activation.value,
            "minWeight": self.min_weight,
            "maxWeight": self.max_weight,
            "minBias": self.min_bias,
            "maxBias": self.max_bias,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Neuron":
        if not isinstance(data, dict):
            raise InvalidGenomeError("Invalid JSON data for Neuron")
        weights = _validate_weights(data.get("weights"), "Neuron")
        bias = data.get("bias")
        if not _is_number(bias):
            raise InvalidGenomeError("Neuron bias must be a number", details=bias)
        name = data.get("activationFunction")
        if not isinstance(name, str):
            raise InvalidGenomeError("Neuron activation function must be a string", details=name)

        bounds = {}
        for json_key, attr, default in (
            ("minWeight", "min_weight", -1.0),
            ("maxWeight", "max_weight", 1.0),
            ("minBias", "min_bias", -1.0),
            ("maxBias", "max_bias", 1.0),
        ):
            value = data.get(json_key, default)
            if not _is_number(value):
                raise InvalidGenomeError(f"Neuron {json_key} must be a number", details=value)
            bounds[attr] = float(value)

        return cls(
            len(weights),
            Activation.from_name(name),
            weights=weights,
            bias=float(bias),
            **bounds
        )

    def __repr__(self) -> str:
        return f"Neuron(num_inputs={self.num_inputs}, activation={self.activation.value})"
