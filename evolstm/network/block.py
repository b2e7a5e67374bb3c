"""
LSTM memory cell whose gate weights are evolved rather than trained.
"""

import math
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from evolstm.core.exceptions import InvalidGenomeError, ShapeMismatchError
from evolstm.utils.helpers import ensure_rng
from .activations import sigmoid, weighted_sum
from .genes import WeightedInputPoint

# input gate, forget gate, output gate, block activation; serialized genomes depend on this order
POINTS_PER_BLOCK = 4


@dataclass(frozen=True)
class ForwardState:
    """Recurrent state carried by one block between timesteps."""

    hidden_state: float = 0.0
    cell_state: float = 0.0


class LSTMBlock:
    """
    One recurrent memory cell.

    The block holds four weighted input points (input gate, forget gate, output
    gate, block activation). Each point sees the current input vector with the
    previous hidden state appended, so every point is ``feature_width + 1`` wide.
    The block itself is stateless; state is passed in and returned.
    """

    def __init__(self, points: Sequence[WeightedInputPoint]):
        if len(points) != POINTS_PER_BLOCK:
            raise ShapeMismatchError(
                f"LSTMBlock requires exactly {POINTS_PER_BLOCK} points",
                details=len(points)
            )
        widths = {point.size for point in points}
        if len(widths) != 1:
            raise ShapeMismatchError("All LSTMBlock points must have the same width", details=sorted(widths))
        self.points: List[WeightedInputPoint] = list(points)

    @property
    def input_width(self) -> int:
        """Width of the combined input (features plus fed-back hidden state)."""
        return self.points[0].size

    def forward(self, inputs: Sequence[float], previous_state: ForwardState) -> ForwardState:
        combined_inputs = list(inputs)
        combined_inputs.append(previous_state.hidden_state)

        input_point, forget_point, output_point, block_point = self.points

        if len(combined_inputs) != input_point.size:
            raise ShapeMismatchError(
                "Combined inputs must match input point weights length",
                details={"combined_inputs": len(combined_inputs), "weights": input_point.size}
            )

        input_gate = sigmoid(weighted_sum(combined_inputs, input_point.weights, input_point.bias))
        forget_gate = sigmoid(weighted_sum(combined_inputs, forget_point.weights, forget_point.bias))
        block_value = math.tanh(weighted_sum(combined_inputs, block_point.weights, block_point.bias))

        new_cell_state = forget_gate * previous_state.cell_state + input_gate * block_value

        output_gate = sigmoid(weighted_sum(combined_inputs, output_point.weights, output_point.bias))
        new_hidden_state = output_gate * math.tanh(new_cell_state)

        return ForwardState(hidden_state=new_hidden_state, cell_state=new_cell_state)

    @classmethod
    def create_random(cls, feature_width: int, rng: Optional[random.Random] = None) -> "LSTMBlock":
        rng = ensure_rng(rng)
        # +1 for the fed-back hidden state
        return cls([WeightedInputPoint.create_random(feature_width + 1, rng) for _ in range(POINTS_PER_BLOCK)])

    def clone(self) -> "LSTMBlock":
        return LSTMBlock([point.clone() for point in self.points])

    def mutate(
        self,
        mutation_rate: float = 0.1,
        mutation_amount: float = 0.1,
        rng: Optional[random.Random] = None
    ) -> "LSTMBlock":
        rng = ensure_rng(rng)
        return LSTMBlock([point.mutate(mutation_rate, mutation_amount, rng) for point in self.points])

    def crossover(self, other: "LSTMBlock", rng: Optional[random.Random] = None) -> "LSTMBlock":
        if self.input_width != other.input_width:
            raise ShapeMismatchError(
                "Both LSTM blocks must have the same input width",
                details={"self": self.input_width, "other": other.input_width}
            )
        rng = ensure_rng(rng)
        return LSTMBlock([mine.crossover(theirs, rng) for mine, theirs in zip(self.points, other.points)])

    def to_dict(self) -> Dict[str, Any]:
        return {"points": [point.to_dict() for point in self.points]}

    @classmethod
    def from_dict(cls, data: Any) -> "LSTMBlock":
        if not isinstance(data, dict) or not isinstance(data.get("points"), list):
            raise InvalidGenomeError("LSTMBlock JSON must have a points array")
        if len(data["points"]) != POINTS_PER_BLOCK:
            raise InvalidGenomeError(
                f"LSTMBlock JSON must have exactly {POINTS_PER_BLOCK} points",
                details=len(data["points"])
            )
        points = [WeightedInputPoint.from_dict(point) for point in data["points"]]
        if len({point.size for point in points}) != 1:
            raise InvalidGenomeError("LSTMBlock points must all have the same width")
        return cls(points)

    def __repr__(self) -> str:
        return f"LSTMBlock(input_width={self.input_width})"
