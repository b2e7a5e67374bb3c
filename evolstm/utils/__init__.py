"""
Utility functions for the EVOLSTM forecaster.
"""

from .validators import validate_dataframe
from .helpers import ensure_directory, ensure_rng, make_rng, timestamp_slug

__all__ = [
    "validate_dataframe",
    "ensure_directory",
    "ensure_rng",
    "make_rng",
    "timestamp_slug"
]
