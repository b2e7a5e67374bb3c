"""
Tabular data sources for the EVOLSTM forecaster.
"""

from .csv_provider import TabularData, DataFrameData, CSVData

__all__ = [
    'TabularData',
    'DataFrameData',
    'CSVData'
]
