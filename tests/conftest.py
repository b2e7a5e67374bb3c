"""
Pytest configuration and common fixtures for EVOLSTM testing.

This file contains shared fixtures and configuration that can be used
across all test modules.
"""

import pytest
import random
import tempfile
import shutil
from pathlib import Path
import pandas as pd
import numpy as np

# Add the project root to Python path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from evolstm.core import Config, setup_logging
from evolstm.core.logging import get_logger


@pytest.fixture(scope="session")
def test_logger():
    """Set up logging for tests."""
    # Configure logging for tests (console only, no files)
    setup_logging(level="DEBUG", enable_file=False, enable_console=True)
    return get_logger("test")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_dir = Path(tempfile.mkdtemp())
    yield temp_dir
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def rng():
    """Seeded generator shared by the genetic operators under test."""
    return random.Random(42)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove EVOLSTM_* overrides so defaults are observable."""
    for name in ("EVOLSTM_DATA_PATH", "EVOLSTM_SEED", "EVOLSTM_N_JOBS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "data": {
            "data_path": "test_data.csv",
            "target_feature": "close",
            "features": ["open", "close", "volume"],
            "sequence_length": 4,
            "training_split": 0.75
        },
        "network": {
            "input_feature_size": 3,
            "hidden_units_per_layer": 2,
            "lstm_layer_count": 1
        },
        "evolution": {
            "population_size": 6,
            "generations": 3,
            "mutation_rate": 0.1,
            "seed": 123
        }
    }


@pytest.fixture
def config_file(temp_dir, sample_config_data):
    """Create a temporary config file for testing."""
    import json
    config_path = temp_dir / "test_config.json"
    with open(config_path, 'w') as f:
        json.dump(sample_config_data, f, indent=2)
    return config_path


@pytest.fixture
def config_from_file(config_file, clean_env):
    """Create a config instance from a test file."""
    return Config(config_file=config_file, env_file=Path("nonexistent.env"))


@pytest.fixture
def small_config(temp_dir, clean_env):
    """Config sized for fast evolution runs in tests."""
    config = Config(env_file=Path("nonexistent.env"))
    config.data.sequence_length = 4
    config.data.training_split = 0.75
    config.network.hidden_units_per_layer = 2
    config.network.lstm_layer_count = 1
    config.evolution.population_size = 4
    config.evolution.generations = 2
    config.evolution.evaluate_every = 1
    config.evolution.seed = 7
    config.evolution.model_dir = str(temp_dir / "models")
    return config


@pytest.fixture
def sample_dataframe():
    """Synthetic OHLCV series with no constant columns."""
    steps = np.arange(40, dtype=float)
    close = 100.0 + 5.0 * np.sin(steps / 4.0) + 0.5 * steps
    return pd.DataFrame({
        'open': close - 0.5,
        'high': close + 1.0 + 0.1 * (steps % 3),
        'low': close - 1.0 - 0.1 * (steps % 2),
        'close': close,
        'volume': 1000.0 + 25.0 * steps
    })


@pytest.fixture
def sample_csv(temp_dir, sample_dataframe):
    """Write the synthetic series to a CSV file."""
    path = temp_dir / "prices.csv"
    sample_dataframe.to_csv(path, index=False)
    return path


# Test markers for organizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "core: mark test as testing core functionality"
    )
    config.addinivalue_line(
        "markers", "config: mark test as testing configuration"
    )
    config.addinivalue_line(
        "markers", "logging: mark test as testing logging"
    )
    config.addinivalue_line(
        "markers", "exceptions: mark test as testing exceptions"
    )
    config.addinivalue_line(
        "markers", "utils: mark test as testing utilities"
    )
    config.addinivalue_line(
        "markers", "network: mark test as testing network genomes"
    )
    config.addinivalue_line(
        "markers", "data: mark test as testing data loading and preparation"
    )
    config.addinivalue_line(
        "markers", "optimization: mark test as testing optimization"
    )
    config.addinivalue_line(
        "markers", "genetic: mark test as testing the genetic algorithm"
    )
    config.addinivalue_line(
        "markers", "cli: mark test as testing the command line interface"
    )
