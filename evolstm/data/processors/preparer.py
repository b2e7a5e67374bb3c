"""
Turns tabular observations into scaled sliding-window sequences.

Each window of ``sequence_length`` consecutive scaled feature vectors is paired
with the scaled target of the row immediately after the window, then the pairs
are split chronologically into training and validation partitions.

The scaler is fit on every row before the split, so validation extremes take
part in normalization. This is kept deliberately to preserve the established
fitness scale; it is a known train/validation leakage.
"""

from dataclasses import dataclass
from typing import List

import numpy as np

from evolstm.core.exceptions import DataError, ShapeMismatchError
from evolstm.core.logging import get_logger
from ..providers.csv_provider import TabularData
from .scaler import Scaler

logger = get_logger(__name__)


@dataclass
class TimeSeries:
    """Parallel input sequences and single-element targets sharing one scaler."""

    input_sequences: List[List[List[float]]]
    target_outputs: List[List[float]]
    scaler: Scaler
    target_index: int = 0

    def __post_init__(self):
        if len(self.input_sequences) != len(self.target_outputs):
            raise ShapeMismatchError(
                "Input sequences and target outputs must have the same length",
                details={"inputs": len(self.input_sequences), "targets": len(self.target_outputs)}
            )

    def __len__(self) -> int:
        return len(self.input_sequences)

    def denormalize_target(self, value: float) -> float:
        return self.scaler.inverse_scale_single(value, self.target_index)


@dataclass
class PreparedData:
    training: TimeSeries
    validation: TimeSeries


class DataPreparer:
    """Builds training and validation time series from a tabular source."""

    def __init__(self, data: TabularData, sequence_length: int = 12, training_split: float = 0.8):
        """
        Args:
            data: Source of records, feature keys and target key
            sequence_length: Timesteps per input window
            training_split: Fraction of windows assigned to training
        """
        if sequence_length <= 0:
            raise DataError("Sequence length must be positive", details=sequence_length)
        if not 0 < training_split <= 1:
            raise DataError("Training split must be in (0, 1]", details=training_split)
        self.data = data
        self.sequence_length = sequence_length
        self.training_split = training_split

    def prepare_data(self) -> PreparedData:
        records = self.data.records
        feature_keys = list(self.data.feature_keys)
        target_key = self.data.target_key

        if not records:
            raise DataError("Data must not be empty")
        if not feature_keys:
            raise DataError("Feature keys must not be empty")
        if target_key not in feature_keys:
            raise DataError(
                f"Target key '{target_key}' must be one of feature keys: {', '.join(feature_keys)}"
            )
        target_index = feature_keys.index(target_key)

        feature_vectors = [self.data.get_features(record) for record in records]
        target_values = [self.data.get_target(record) for record in records]

        scaler = Scaler(feature_vectors)
        scaled_features: np.ndarray = scaler.transform(feature_vectors)

        window_count = len(feature_vectors) - self.sequence_length
        if window_count <= 0:
            raise DataError(
                f"Need more than {self.sequence_length} rows to build a window",
                details={"rows": len(feature_vectors)}
            )

        input_sequences = []
        target_outputs = []
        for start in range(window_count):
            end = start + self.sequence_length
            input_sequences.append(scaled_features[start:end].tolist())
            target_outputs.append([scaler.scale_single(target_values[end], target_index)])

        split_index = int(np.floor(window_count * self.training_split))
        if split_index == 0:
            raise DataError(
                "Training partition is empty",
                details={"windows": window_count, "training_split": self.training_split}
            )

        training = TimeSeries(input_sequences[:split_index], target_outputs[:split_index], scaler, target_index)
        validation = TimeSeries(input_sequences[split_index:], target_outputs[split_index:], scaler, target_index)

        logger.info(
            f"Prepared {window_count} windows of length {self.sequence_length}: "
            f"{len(training)} training, {len(validation)} validation"
        )
        return PreparedData(training=training, validation=validation)
