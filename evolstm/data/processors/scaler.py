"""
Per-feature min-max scaling of observation vectors.

Fitting is delegated to scikit-learn's ``MinMaxScaler``; single values are
scaled with the same affine parameters so that windows built value-by-value
and whole matrices transformed at once agree exactly.
"""

from typing import Dict, List, Sequence

import numpy as np
from sklearn.preprocessing import MinMaxScaler

from evolstm.core.exceptions import DataError, DegenerateFeatureError, ShapeMismatchError
from evolstm.core.logging import get_logger

logger = get_logger(__name__)


class Scaler:
    """
    Min-max scaler over a fixed feature-vector width.

    Constructed once from the full set of raw feature vectors. A feature whose
    minimum is not strictly below its maximum cannot be scaled and is rejected
    at construction.
    """

    def __init__(self, feature_vectors: Sequence[Sequence[float]]):
        """
        Fit the scaler.

        Args:
            feature_vectors: Raw observations, one vector per timestep

        Raises:
            DegenerateFeatureError: If the set is empty or a feature is constant
            DataError: If any value is NaN or infinite
            ShapeMismatchError: If the vectors do not all have the same width
        """
        try:
            matrix = np.asarray(feature_vectors, dtype=float)
        except ValueError as e:
            raise ShapeMismatchError(f"Feature vectors must all have the same width: {e}")

        if matrix.ndim != 2 or matrix.shape[0] == 0 or matrix.shape[1] == 0:
            raise DegenerateFeatureError("Feature data must contain at least one element")
        if not np.isfinite(matrix).all():
            raise DataError("Feature data must be finite")

        self._scaler = MinMaxScaler()
        self._scaler.fit(matrix)

        mins = self._scaler.data_min_
        maxs = self._scaler.data_max_
        degenerate = [i for i in range(matrix.shape[1]) if not mins[i] < maxs[i]]
        if degenerate:
            raise DegenerateFeatureError(
                "MinMax min must be less than max for every feature",
                details={"feature_indices": degenerate}
            )

        logger.debug(f"Fitted scaler on {matrix.shape[0]} vectors of width {matrix.shape[1]}")

    @property
    def num_features(self) -> int:
        return int(self._scaler.n_features_in_)

    @property
    def min_max(self) -> List[Dict[str, float]]:
        return [
            {"min": float(low), "max": float(high)}
            for low, high in zip(self._scaler.data_min_, self._scaler.data_max_)
        ]

    def _check_index(self, feature_index: int) -> None:
        if not 0 <= feature_index < self.num_features:
            raise ShapeMismatchError(
                f"Feature index {feature_index} out of range for {self.num_features} features"
            )

    def scale_single(self, value: float, feature_index: int) -> float:
        self._check_index(feature_index)
        if self._scaler.data_range_[feature_index] == 0:
            return 0.0
        return float(value * self._scaler.scale_[feature_index] + self._scaler.min_[feature_index])

    def inverse_scale_single(self, value: float, feature_index: int) -> float:
        self._check_index(feature_index)
        return float((value - self._scaler.min_[feature_index]) / self._scaler.scale_[feature_index])

    def _check_width(self, timestep: Sequence[float]) -> None:
        if len(timestep) != self.num_features:
            raise ShapeMismatchError(
                f"Timestep length must match number of features: {self.num_features}",
                details=len(timestep)
            )

    def scale(self, timestep: Sequence[float]) -> List[float]:
        self._check_width(timestep)
        return [self.scale_single(value, index) for index, value in enumerate(timestep)]

    def inverse_scale(self, timestep: Sequence[float]) -> List[float]:
        self._check_width(timestep)
        return [self.inverse_scale_single(value, index) for index, value in enumerate(timestep)]

    def transform(self, feature_vectors: Sequence[Sequence[float]]) -> np.ndarray:
        """Scale a whole matrix of observations at once."""
        matrix = np.asarray(feature_vectors, dtype=float)
        if matrix.ndim != 2 or matrix.shape[1] != self.num_features:
            raise ShapeMismatchError(
                f"Feature matrix must be 2-D with {self.num_features} columns",
                details=matrix.shape
            )
        return self._scaler.transform(matrix)

    def __repr__(self) -> str:
        return f"Scaler(num_features={self.num_features})"
