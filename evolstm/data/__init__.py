"""
Data layer for the EVOLSTM forecaster.

This module provides tabular data sources, scaling and windowing.
"""

from .providers.csv_provider import TabularData, DataFrameData, CSVData
from .processors.scaler import Scaler
from .processors.preparer import DataPreparer, TimeSeries, PreparedData

__all__ = [
    'TabularData',
    'DataFrameData',
    'CSVData',
    'Scaler',
    'DataPreparer',
    'TimeSeries',
    'PreparedData'
]
