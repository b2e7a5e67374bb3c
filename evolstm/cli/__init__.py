"""
Command Line Interface for the EVOLSTM forecaster.

This package provides CLI tools for evolving networks and evaluating saved ones.
"""

from .evolve import evolve_command
from .evaluate import evaluate_command

__all__ = [
    'evolve_command',
    'evaluate_command'
]
