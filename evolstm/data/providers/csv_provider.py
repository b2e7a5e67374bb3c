"""
Tabular data sources for the forecaster.

A source exposes its rows as records together with the feature and target
columns to read from them. ``CSVData`` reads a file with pandas; ``DataFrameData``
wraps a frame that is already in memory.
"""

import math
from abc import ABC, abstractmethod
from numbers import Real
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from evolstm.core.exceptions import DataError, ValidationError
from evolstm.core.logging import get_logger
from evolstm.utils.validators import validate_dataframe

logger = get_logger(__name__)

Record = Dict[str, Any]


class TabularData(ABC):
    """Interface the data preparer consumes."""

    target_key: str
    feature_keys: List[str]

    @property
    @abstractmethod
    def records(self) -> List[Record]:
        """All rows, in time order."""
        pass

    def get_target(self, record: Record) -> float:
        value = record.get(self.target_key)
        if not _is_numeric(value):
            raise DataError(
                f"Target value for key '{self.target_key}' must be a finite number, got: {value!r}"
            )
        return float(value)

    def get_features(self, record: Record) -> List[float]:
        features = []
        for key in self.feature_keys:
            value = record.get(key)
            if not _is_numeric(value):
                raise DataError(
                    f"Feature value for key '{key}' must be a finite number, got: {value!r}"
                )
            features.append(float(value))
        return features

    def __len__(self) -> int:
        return len(self.records)


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


class DataFrameData(TabularData):
    """Tabular data backed by an in-memory DataFrame."""

    def __init__(self, frame: pd.DataFrame, target_key: str, feature_keys: Sequence[str]):
        """
        Args:
            frame: Observations, one row per timestep, in time order
            target_key: Column holding the value to forecast
            feature_keys: Columns forming each input vector
        """
        self.target_key = target_key
        self.feature_keys = list(feature_keys)

        try:
            validate_dataframe(
                frame,
                required_columns=self.feature_keys + [target_key],
                numeric_columns=self.feature_keys + [target_key],
            )
        except ValidationError as e:
            raise DataError(f"Invalid tabular data: {e.message}", details=e.details)

        self.frame = frame.reset_index(drop=True)
        self._records: Optional[List[Record]] = None

    @property
    def records(self) -> List[Record]:
        if self._records is None:
            self._records = self.frame.to_dict(orient="records")
        return self._records


class CSVData(DataFrameData):
    """Tabular data read from a CSV file with a header row."""

    def __init__(self, path: Union[str, Path], target_key: str, feature_keys: Sequence[str]):
        self.path = Path(path)
        if not self.path.exists():
            raise DataError(f"File not found: {self.path}")

        try:
            frame = pd.read_csv(self.path, skipinitialspace=True)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise DataError(f"Failed to read CSV file {self.path}: {e}")

        frame.columns = [str(column).strip() for column in frame.columns]
        logger.info(f"Loaded {len(frame)} rows from {self.path}")
        super().__init__(frame, target_key, feature_keys)
