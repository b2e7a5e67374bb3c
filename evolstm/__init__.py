"""
EVOLSTM - Neuroevolved LSTM Time-Series Forecaster

Evolves the weights of small LSTM networks with a genetic algorithm instead of
gradient descent, and uses the best network to forecast the next value of a
target column in tabular time-series data.
"""

__version__ = "0.1.0"

from .core.config import Config
from .core.logging import setup_logging
from .network import Network
from .data import CSVData, DataPreparer, Scaler
from .optimization import Population

__all__ = [
    "Config",
    "setup_logging",
    "Network",
    "CSVData",
    "DataPreparer",
    "Scaler",
    "Population"
]
