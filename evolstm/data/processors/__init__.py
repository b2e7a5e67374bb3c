"""
Data processors for the EVOLSTM forecaster.

This module contains min-max scaling and the sliding-window preparer.
"""

from .scaler import Scaler
from .preparer import DataPreparer, TimeSeries, PreparedData

__all__ = [
    'Scaler',
    'DataPreparer',
    'TimeSeries',
    'PreparedData'
]
