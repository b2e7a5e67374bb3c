"""
Network genome: an ordered stack of layers evolved as one individual.

The forward pass threads a separate recurrent state through every LSTM layer
across the timesteps of a sequence, and returns one output vector per timestep.
"""

import json
import random
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from evolstm.core.exceptions import (
    InvalidGenomeError,
    ShapeMismatchError,
    UnsupportedLayerError,
)
from evolstm.core.logging import get_logger
from evolstm.utils.helpers import ensure_rng
from .block import ForwardState
from .layers import BaseLayer, DenseLayer, LayerType, LSTMLayer, layer_from_dict

logger = get_logger(__name__)


class Network:
    """
    An individual of the population.

    Layers are validated as they are added so that layer ``i`` always consumes
    what layer ``i - 1`` produces. ``fitness`` is assigned by the population
    and defaults to negative infinity.
    """

    def __init__(self, input_size: int, output_size: int):
        self.input_size = input_size
        self.output_size = output_size
        self.layers: List[BaseLayer] = []
        self.fitness: float = float('-inf')

    def add_layer(self, layer: BaseLayer) -> None:
        if self.layers:
            expected = self.layers[-1].output_size
            message = "Layer input size must match previous layer output size"
        else:
            expected = self.input_size
            message = "Layer input size must match network input size"
        if layer.input_size != expected:
            raise ShapeMismatchError(message, details={"expected": expected, "got": layer.input_size})
        self.layers.append(layer)

    def forward(self, sequence_inputs: Sequence[Sequence[float]]) -> List[List[float]]:
        """
        Run a whole sequence through the network.

        Every LSTM layer starts from zeroed (hidden, cell) states and keeps its
        own states between timesteps. Dense layers are stateless.

        Args:
            sequence_inputs: One feature vector per timestep

        Returns:
            One output vector per timestep, each ``output_size`` wide
        """
        if not sequence_inputs:
            raise ShapeMismatchError("Input sequence must not be empty")
        if len(sequence_inputs[0]) != self.input_size:
            raise ShapeMismatchError(
                f"Input size must match network input size: {self.input_size}",
                details=len(sequence_inputs[0])
            )
        if not self.layers:
            raise ShapeMismatchError("Network has no layers")

        lstm_states: List[List[ForwardState]] = [
            layer.initial_states() for layer in self.layers if layer.layer_type is LayerType.LSTM
        ]

        outputs: List[List[float]] = []
        for timestep in sequence_inputs:
            current = list(timestep)
            lstm_index = 0

            for layer in self.layers:
                if layer.layer_type is LayerType.LSTM:
                    new_states = layer.activate(current, lstm_states[lstm_index])
                    lstm_states[lstm_index] = new_states
                    current = [state.hidden_state for state in new_states]
                    lstm_index += 1
                elif layer.layer_type is LayerType.DENSE:
                    current = layer.activate(current)
                else:
                    raise UnsupportedLayerError(
                        f"Unsupported layer type: {type(layer).__name__}. "
                        "Only DenseLayer and LSTMLayer are supported."
                    )

            outputs.append(current)

        if len(outputs[-1]) != self.layers[-1].output_size:
            raise ShapeMismatchError(
                "Output size must match last layer output size",
                details={"expected": self.layers[-1].output_size, "got": len(outputs[-1])}
            )
        return outputs

    def predict(self, sequence_inputs: Sequence[Sequence[float]]) -> List[float]:
        """Output vector of the last timestep."""
        return self.forward(sequence_inputs)[-1]

    def clone(self) -> "Network":
        cloned = Network(self.input_size, self.output_size)
        cloned.layers = [layer.clone() for layer in self.layers]
        cloned.fitness = self.fitness
        return cloned

    def mutate(self, mutation_rate: float = 0.1, mutation_amount: float = 0.1,
               rng: Optional[random.Random] = None) -> None:
        rng = ensure_rng(rng)
        for layer in self.layers:
            layer.mutate(mutation_rate, mutation_amount, rng)

    def crossover(self, other: "Network", rng: Optional[random.Random] = None) -> "Network":
        """
        Layer-by-layer crossover with ``other``.

        Both networks must share input/output sizes, layer count and the layer
        variant at every position.
        """
        if self.input_size != other.input_size or self.output_size != other.output_size:
            raise ShapeMismatchError(
                "Input and output sizes must match for crossover",
                details={
                    "self": (self.input_size, self.output_size),
                    "other": (other.input_size, other.output_size),
                }
            )
        if len(self.layers) != len(other.layers):
            raise ShapeMismatchError(
                "Cannot crossover Networks with different numbers of layers",
                details={"self": len(self.layers), "other": len(other.layers)}
            )

        rng = ensure_rng(rng)
        child = Network(self.input_size, self.output_size)
        for index, (layer_a, layer_b) in enumerate(zip(self.layers, other.layers)):
            if layer_a.layer_type is not layer_b.layer_type:
                raise ShapeMismatchError(
                    f"Cannot crossover layers of different types at index {index}",
                    details=(layer_a.layer_type.value, layer_b.layer_type.value)
                )
            child.add_layer(layer_a.crossover(layer_b, rng))
        return child

    @classmethod
    def create_random(
        cls,
        features_per_timestep: int,
        hidden_units_per_layer: int,
        num_lstm_layers: int,
        output_size: int,
        rng: Optional[random.Random] = None,
        **neuron_options
    ) -> "Network":
        """
        Stack ``num_lstm_layers`` LSTM layers and one linear dense output layer.

        ``neuron_options`` (activation and weight/bias bounds) are forwarded to
        the dense layer.
        """
        rng = ensure_rng(rng)
        network = cls(features_per_timestep, output_size)

        feature_size = features_per_timestep
        for _ in range(num_lstm_layers):
            network.add_layer(LSTMLayer.create_random(feature_size, hidden_units_per_layer, rng))
            feature_size = hidden_units_per_layer

        network.add_layer(DenseLayer.create_random(feature_size, output_size, rng, **neuron_options))
        return network

    @property
    def parameter_count(self) -> int:
        count = 0
        for layer in self.layers:
            if layer.layer_type is LayerType.LSTM:
                count += sum(point.size + 1 for block in layer.blocks for point in block.points)
            else:
                count += sum(neuron.num_inputs + 1 for neuron in layer.neurons)
        return count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "inputSize": self.input_size,
            "outputSize": self.output_size,
            "layers": [layer.to_dict() for layer in self.layers],
            "fitness": self.fitness,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Network":
        if not isinstance(data, dict):
            raise InvalidGenomeError("Network JSON must be an object")
        for key in ("inputSize", "outputSize"):
            value = data.get(key)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise InvalidGenomeError(f"Network {key} must be a positive integer", details=value)
        if not isinstance(data.get("layers"), list):
            raise InvalidGenomeError("Network JSON must have a layers array")
        if not data["layers"]:
            raise InvalidGenomeError("Network JSON must have at least one layer")

        network = cls(data["inputSize"], data["outputSize"])
        fitness = data.get("fitness")
        if fitness is None:
            fitness = float('-inf')
        elif not isinstance(fitness, (int, float)) or isinstance(fitness, bool):
            raise InvalidGenomeError("Network fitness must be a number", details=fitness)
        network.fitness = float(fitness)

        for layer_data in data["layers"]:
            layer = layer_from_dict(layer_data)
            try:
                network.add_layer(layer)
            except ShapeMismatchError as e:
                raise InvalidGenomeError(f"Inconsistent network JSON: {e.message}", details=e.details)

        if network.layers[-1].output_size != network.output_size:
            raise InvalidGenomeError(
                "Last layer output size must equal network output size",
                details={"layer": network.layers[-1].output_size, "network": network.output_size}
            )
        return network

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "Network":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise InvalidGenomeError(f"Network JSON could not be parsed: {e}")
        return cls.from_dict(data)

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json())
        logger.info(f"Network saved to {path}")
        return path

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Network":
        path = Path(path)
        network = cls.from_json(path.read_text())
        logger.info(f"Network loaded from {path}")
        return network

    def __repr__(self) -> str:
        layers = ", ".join(repr(layer) for layer in self.layers)
        return f"Network(input_size={self.input_size}, output_size={self.output_size}, layers=[{layers}])"
