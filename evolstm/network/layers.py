"""
Layer variants of an evolved network.

Layers carry an explicit ``layer_type`` tag; the network dispatches on that
tag during the forward pass, crossover and deserialization.
"""

import random
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from evolstm.core.exceptions import (
    InvalidGenomeError,
    MissingStateError,
    ShapeMismatchError,
    UnsupportedLayerError,
)
from evolstm.utils.helpers import ensure_rng
from .activations import Activation
from .block import ForwardState, LSTMBlock
from .genes import Neuron


class LayerType(Enum):
    """Discriminant written to the ``type`` field of serialized layers."""

    LSTM = "LSTMLayer"
    DENSE = "DenseLayer"


class BaseLayer(ABC):
    """Common contract of every layer variant."""

    layer_type: LayerType

    def __init__(self, input_size: int, output_size: int):
        self.input_size = input_size
        self.output_size = output_size

    @abstractmethod
    def activate(self, inputs: Sequence[float], previous_states: Optional[Sequence[ForwardState]] = None):
        """Run one timestep through the layer."""
        pass

    @abstractmethod
    def clone(self) -> "BaseLayer":
        pass

    @abstractmethod
    def mutate(self, mutation_rate: float = 0.1, mutation_amount: float = 0.1,
               rng: Optional[random.Random] = None) -> None:
        """Mutate the layer in place."""
        pass

    @abstractmethod
    def crossover(self, other: "BaseLayer", rng: Optional[random.Random] = None) -> "BaseLayer":
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        pass

    def _check_crossover_partner(self, other: "BaseLayer") -> None:
        if other.layer_type is not self.layer_type:
            raise ShapeMismatchError(
                f"Other layer must be a {self.layer_type.value} for crossover",
                details=other.layer_type.value
            )
        if self.input_size != other.input_size or self.output_size != other.output_size:
            raise ShapeMismatchError(
                "Layer sizes must match for crossover",
                details={
                    "self": (self.input_size, self.output_size),
                    "other": (other.input_size, other.output_size),
                }
            )

    def __repr__(self) -> str:
        return f"{self.layer_type.value}(input_size={self.input_size}, output_size={self.output_size})"


class LSTMLayer(BaseLayer):
    """Stateful layer of LSTM blocks, one block per output unit."""

    layer_type = LayerType.LSTM

    def __init__(
        self,
        input_size: int,
        output_size: int,
        blocks: Optional[Sequence[LSTMBlock]] = None,
        rng: Optional[random.Random] = None
    ):
        super().__init__(input_size, output_size)
        if blocks is None:
            rng = ensure_rng(rng)
            blocks = [LSTMBlock.create_random(input_size, rng) for _ in range(output_size)]
        self.blocks: List[LSTMBlock] = list(blocks)

        if len(self.blocks) != output_size:
            raise ShapeMismatchError(
                "LSTMLayer block count must equal its output size",
                details={"output_size": output_size, "blocks": len(self.blocks)}
            )
        for index, block in enumerate(self.blocks):
            if block.input_width != input_size + 1:
                raise ShapeMismatchError(
                    f"Block {index} width does not match layer input size {input_size} (+1 hidden)",
                    details=block.input_width
                )

    @classmethod
    def create_random(cls, input_size: int, output_size: int,
                      rng: Optional[random.Random] = None) -> "LSTMLayer":
        return cls(input_size, output_size, rng=ensure_rng(rng))

    def initial_states(self) -> List[ForwardState]:
        return [ForwardState() for _ in self.blocks]

    def activate(self, inputs: Sequence[float],
                 previous_states: Optional[Sequence[ForwardState]] = None) -> List[ForwardState]:
        """Advance every block one timestep and return the new per-block states."""
        previous_states = previous_states or []
        new_states = []
        for index, block in enumerate(self.blocks):
            if index >= len(previous_states) or previous_states[index] is None:
                raise MissingStateError(f"Previous state for block {index} must be defined")
            new_states.append(block.forward(inputs, previous_states[index]))
        return new_states

    def clone(self) -> "LSTMLayer":
        return LSTMLayer(self.input_size, self.output_size, [block.clone() for block in self.blocks])

    def mutate(self, mutation_rate: float = 0.1, mutation_amount: float = 0.1,
               rng: Optional[random.Random] = None) -> None:
        rng = ensure_rng(rng)
        self.blocks = [block.mutate(mutation_rate, mutation_amount, rng) for block in self.blocks]

    def crossover(self, other: BaseLayer, rng: Optional[random.Random] = None) -> "LSTMLayer":
        self._check_crossover_partner(other)
        rng = ensure_rng(rng)
        blocks = [mine.crossover(theirs, rng) for mine, theirs in zip(self.blocks, other.blocks)]
        return LSTMLayer(self.input_size, self.output_size, blocks)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.layer_type.value,
            "inputSize": self.input_size,
            "outputSize": self.output_size,
            "blocks": [block.to_dict() for block in self.blocks],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LSTMLayer":
        input_size, output_size = _read_sizes(data)
        if not isinstance(data.get("blocks"), list):
            raise InvalidGenomeError("LSTMLayer JSON must have a blocks array")
        blocks = [LSTMBlock.from_dict(block) for block in data["blocks"]]
        try:
            return cls(input_size, output_size, blocks)
        except ShapeMismatchError as e:
            raise InvalidGenomeError(f"Inconsistent LSTMLayer JSON: {e.message}", details=e.details)


class DenseLayer(BaseLayer):
    """Stateless fully connected layer, used as the linear output projection."""

    layer_type = LayerType.DENSE

    def __init__(
        self,
        input_size: int,
        output_size: int,
        neurons: Optional[Sequence[Neuron]] = None,
        rng: Optional[random.Random] = None,
        activation: Activation = Activation.IDENTITY,
        min_weight: float = -1.0,
        max_weight: float = 1.0,
        min_bias: float = -1.0,
        max_bias: float = 1.0
    ):
        super().__init__(input_size, output_size)
        if neurons is None:
            rng = ensure_rng(rng)
            neurons = [
                Neuron(input_size, activation, min_weight, max_weight, min_bias, max_bias, rng=rng)
                for _ in range(output_size)
            ]
        self.neurons: List[Neuron] = list(neurons)

        if len(self.neurons) != output_size:
            raise ShapeMismatchError(
                "DenseLayer neuron count must equal its output size",
                details={"output_size": output_size, "neurons": len(self.neurons)}
            )
        for index, neuron in enumerate(self.neurons):
            if neuron.num_inputs != input_size:
                raise ShapeMismatchError(
                    f"Neuron {index} input count does not match layer input size {input_size}",
                    details=neuron.num_inputs
                )

    @classmethod
    def create_random(cls, input_size: int, output_size: int,
                      rng: Optional[random.Random] = None, **neuron_options) -> "DenseLayer":
        return cls(input_size, output_size, rng=ensure_rng(rng), **neuron_options)

    def activate(self, inputs: Sequence[float],
                 previous_states: Optional[Sequence[ForwardState]] = None) -> List[float]:
        if len(inputs) != self.input_size:
            raise ShapeMismatchError(
                f"DenseLayer input length mismatch: expected {self.input_size}, got {len(inputs)}"
            )
        return [neuron.activate(inputs) for neuron in self.neurons]

    def clone(self) -> "DenseLayer":
        return DenseLayer(self.input_size, self.output_size, [neuron.clone() for neuron in self.neurons])

    def mutate(self, mutation_rate: float = 0.1, mutation_amount: float = 0.1,
               rng: Optional[random.Random] = None) -> None:
        rng = ensure_rng(rng)
        for neuron in self.neurons:
            neuron.mutate(mutation_rate, mutation_amount, rng)

    def crossover(self, other: BaseLayer, rng: Optional[random.Random] = None) -> "DenseLayer":
        self._check_crossover_partner(other)
        rng = ensure_rng(rng)
        neurons = [mine.crossover(theirs, rng) for mine, theirs in zip(self.neurons, other.neurons)]
        return DenseLayer(self.input_size, self.output_size, neurons)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.layer_type.value,
            "inputSize": self.input_size,
            "outputSize": self.output_size,
            "neurons": [neuron.to_dict() for neuron in self.neurons],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DenseLayer":
        input_size, output_size = _read_sizes(data)
        if not isinstance(data.get("neurons"), list):
            raise InvalidGenomeError("DenseLayer JSON must have a neurons array")
        neurons = [Neuron.from_dict(neuron) for neuron in data["neurons"]]
        try:
            return cls(input_size, output_size, neurons)
        except ShapeMismatchError as e:
            raise InvalidGenomeError(f"Inconsistent DenseLayer JSON: {e.message}", details=e.details)


def _read_sizes(data: Dict[str, Any]):
    sizes = []
    for key in ("inputSize", "outputSize"):
        value = data.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise InvalidGenomeError(f"Layer {key} must be a positive integer", details=value)
        sizes.append(value)
    return tuple(sizes)


_LAYER_CLASSES = {
    LayerType.LSTM: LSTMLayer,
    LayerType.DENSE: DenseLayer,
}


def layer_from_dict(data: Any) -> BaseLayer:
    """
    Rebuild a layer from its serialized form, dispatching on the ``type`` tag.

    Raises:
        InvalidGenomeError: If the payload is not a layer object
        UnsupportedLayerError: If the tag names no known layer variant
    """
    if not isinstance(data, dict):
        raise InvalidGenomeError("Layer JSON must be an object", details=type(data).__name__)
    try:
        layer_type = LayerType(data.get("type"))
    except ValueError:
        raise UnsupportedLayerError(
            f"Unsupported layer type in JSON: {data.get('type')!r}",
            details=[t.value for t in LayerType]
        )
    return _LAYER_CLASSES[layer_type].from_dict(data)
