"""
Helper utilities for the EVOLSTM forecaster.
"""

import random
from datetime import datetime
from pathlib import Path
from typing import Optional, Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path

    Returns:
        Path object for the directory
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def ensure_rng(rng: Optional[random.Random] = None) -> random.Random:
    """
    Return ``rng`` or a fresh, unseeded generator when none was injected.

    Every stochastic operator accepts an optional generator; passing the same
    seeded instance through a whole run makes it reproducible.
    """
    if rng is None:
        return random.Random()
    return rng


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Create a generator, seeded when ``seed`` is given."""
    return random.Random(seed)


def timestamp_slug(moment: Optional[datetime] = None) -> str:
    """Filesystem-safe timestamp, e.g. ``2024-05-01T12-30-00-123456``."""
    moment = moment or datetime.now()
    return moment.isoformat().replace(":", "-").replace(".", "-")
