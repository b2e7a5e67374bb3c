"""
Tests for tabular data sources.
"""

import pytest
import pandas as pd

from evolstm.data.providers.csv_provider import TabularData, DataFrameData, CSVData
from evolstm.core.exceptions import DataError

pytestmark = [
    pytest.mark.unit,
    pytest.mark.data
]


class ListData(TabularData):
    """Minimal in-memory source for exercising the base class."""

    def __init__(self, rows, target_key, feature_keys):
        self._rows = rows
        self.target_key = target_key
        self.feature_keys = feature_keys

    @property
    def records(self):
        return self._rows


class TestTabularData:

    def test_abstract(self):
        with pytest.raises(TypeError):
            TabularData()

    def test_get_features_in_key_order(self):
        data = ListData([{"a": 1, "b": 2.5}], "a", ["b", "a"])
        assert data.get_features(data.records[0]) == [2.5, 1.0]
        assert data.get_target(data.records[0]) == 1.0
        assert len(data) == 1

    @pytest.mark.parametrize("value", ["12", None, True, float("nan"), float("inf"), float("-inf")])
    def test_non_numeric_feature(self, value):
        data = ListData([{"a": value}], "a", ["a"])
        with pytest.raises(DataError, match="must be a finite number"):
            data.get_features(data.records[0])
        with pytest.raises(DataError, match="must be a finite number"):
            data.get_target(data.records[0])


class TestDataFrameData:

    def test_records(self, sample_dataframe):
        data = DataFrameData(sample_dataframe, "close", ["open", "close"])
        assert len(data) == 40
        assert data.get_target(data.records[0]) == pytest.approx(sample_dataframe["close"].iloc[0])

    def test_missing_column(self, sample_dataframe):
        with pytest.raises(DataError) as exc_info:
            DataFrameData(sample_dataframe, "close", ["open", "vwap"])
        assert exc_info.value.details == ["vwap"]

    def test_non_numeric_column(self):
        frame = pd.DataFrame({"close": [1.0, 2.0], "label": ["x", "y"]})
        with pytest.raises(DataError, match="must be numeric"):
            DataFrameData(frame, "close", ["close", "label"])

    def test_empty_frame(self):
        with pytest.raises(DataError):
            DataFrameData(pd.DataFrame({"close": []}), "close", ["close"])


class TestCSVData:

    def test_load(self, sample_csv):
        data = CSVData(sample_csv, "close", ["open", "high", "low", "close", "volume"])
        assert len(data) == 40
        assert len(data.get_features(data.records[5])) == 5

    def test_header_whitespace_is_stripped(self, temp_dir):
        path = temp_dir / "spaced.csv"
        path.write_text("open, close\n1.0, 2.0\n1.5, 2.5\n")

        data = CSVData(path, "close", ["open", "close"])
        assert data.get_features(data.records[1]) == [1.5, 2.5]

    def test_missing_file(self, temp_dir):
        with pytest.raises(DataError, match="File not found"):
            CSVData(temp_dir / "missing.csv", "close", ["close"])

    def test_empty_file(self, temp_dir):
        path = temp_dir / "empty.csv"
        path.write_text("")
        with pytest.raises(DataError, match="Failed to read CSV"):
            CSVData(path, "close", ["close"])

    def test_non_numeric_cell(self, temp_dir):
        path = temp_dir / "bad.csv"
        path.write_text("open,close\n1.0,2.0\n1.5,oops\n")
        with pytest.raises(DataError):
            CSVData(path, "close", ["open", "close"])
