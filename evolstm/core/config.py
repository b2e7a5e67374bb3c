"""
Configuration management for the EVOLSTM forecaster.

Settings come from dataclass defaults, an optional JSON file and a handful of
environment overrides (read through python-dotenv so a local ``.env`` works).
"""

import os
import json
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field, asdict
from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .logging import get_logger


@dataclass
class DataConfig:
    """Configuration for loading and windowing the time series."""
    data_path: str = "data/stock_data.csv"
    target_feature: str = "close"
    features: List[str] = field(default_factory=lambda: [
        "open", "high", "low", "close", "volume"
    ])
    sequence_length: int = 12
    training_split: float = 0.8


@dataclass
class NetworkConfig:
    """Configuration for the shape of evolved networks."""
    input_feature_size: int = 5
    hidden_units_per_layer: int = 5
    lstm_layer_count: int = 3
    output_size: int = 1
    min_weight: float = -1.0
    max_weight: float = 1.0
    min_bias: float = -1.0
    max_bias: float = 1.0


@dataclass
class EvolutionConfig:
    """Configuration for the genetic algorithm."""
    population_size: int = 100
    generations: int = 500
    mutation_rate: float = 0.2
    mutation_amount: float = 0.2
    parent_fraction: float = 0.25
    evaluate_every: int = 10
    seed: Optional[int] = None
    n_jobs: int = 1
    model_dir: str = "models"
    save_best_individual: bool = True


class Config:
    """
    Main configuration class for the EVOLSTM forecaster.

    Groups the data, network and evolution sections and validates them as a
    whole, since several constraints span sections (e.g. the network input
    width must match the number of configured features).
    """

    _SECTIONS = ("data", "network", "evolution")

    def __init__(self, config_file: Optional[Path] = None, env_file: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to JSON configuration file
            env_file: Path to .env file with EVOLSTM_* overrides
        """
        self.logger = get_logger(__name__)

        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        self.data = DataConfig()
        self.network = NetworkConfig()
        self.evolution = EvolutionConfig()

        if config_file and Path(config_file).exists():
            self._load_from_file(Path(config_file))

        self._load_env_overrides()
        self.validate()

        self.logger.info("Configuration loaded successfully")

    def _load_from_file(self, config_file: Path):
        """Load configuration from JSON file."""
        try:
            with open(config_file, 'r') as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load config file {config_file}: {e}")

        for section_name, section_data in config_data.items():
            if section_name not in self._SECTIONS or not isinstance(section_data, dict):
                continue
            section = getattr(self, section_name)
            for key, value in section_data.items():
                if hasattr(section, key):
                    setattr(section, key, value)

        self.logger.info(f"Loaded configuration from {config_file}")

    def _load_env_overrides(self):
        """Apply EVOLSTM_* environment variables on top of file settings."""
        data_path = os.getenv("EVOLSTM_DATA_PATH")
        if data_path:
            self.data.data_path = data_path

        for env_name, attr in (("EVOLSTM_SEED", "seed"), ("EVOLSTM_N_JOBS", "n_jobs")):
            raw = os.getenv(env_name)
            if not raw:
                continue
            try:
                setattr(self.evolution, attr, int(raw))
            except ValueError:
                raise ConfigurationError(f"{env_name} must be an integer, got {raw!r}")

    def validate(self):
        """Validate configuration settings."""
        errors = []

        if self.data.sequence_length <= 0:
            errors.append("Sequence length must be positive and greater than 0")

        if not 0 < self.data.training_split <= 1:
            errors.append("Training split must be in (0, 1]")

        if not self.data.features:
            errors.append("Features list cannot be empty")
        elif self.data.target_feature not in self.data.features:
            errors.append(f"Target feature '{self.data.target_feature}' must be one of the features")

        if self.network.input_feature_size != len(self.data.features):
            errors.append("Network input feature size must equal the number of features")

        for name in ("input_feature_size", "hidden_units_per_layer", "output_size"):
            if getattr(self.network, name) <= 0:
                errors.append(f"{name} must be positive and greater than 0")

        if self.network.lstm_layer_count < 0:
            errors.append("LSTM layer count cannot be negative")

        if self.network.min_weight >= self.network.max_weight:
            errors.append("min_weight must be less than max_weight")

        if self.network.min_bias >= self.network.max_bias:
            errors.append("min_bias must be less than max_bias")

        if self.evolution.population_size < 2:
            errors.append("Population size must be at least 2")

        if self.evolution.generations < 0:
            errors.append("Generations cannot be negative")

        if not 0 <= self.evolution.mutation_rate <= 1:
            errors.append("Mutation rate must be between 0 and 1")

        if self.evolution.mutation_amount < 0:
            errors.append("Mutation amount cannot be negative")

        if not 0 < self.evolution.parent_fraction <= 1:
            errors.append("Parent fraction must be in (0, 1]")

        if self.evolution.evaluate_every <= 0:
            errors.append("evaluate_every must be positive and greater than 0")

        if self.evolution.n_jobs <= 0:
            errors.append("n_jobs must be positive and greater than 0")

        if errors:
            raise ConfigurationError("Configuration validation failed", details=errors)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {name: asdict(getattr(self, name)) for name in self._SECTIONS}

    def save(self, config_file: Path):
        """Save configuration to JSON file."""
        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(config_file, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Failed to save config file {config_file}: {e}")
        self.logger.info(f"Configuration saved to {config_file}")

    def get_data_path(self) -> Path:
        """Get the full path to the data file."""
        return Path(self.data.data_path)

    def get_model_dir(self) -> Path:
        """Get the directory evolved networks are written to."""
        return Path(self.evolution.model_dir)

    def __repr__(self) -> str:
        return (
            f"Config(data={self.data.data_path}, population={self.evolution.population_size}, "
            f"generations={self.evolution.generations})"
        )


_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Global configuration instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def set_config(config: Config):
    """
    Set the global configuration instance.

    Args:
        config: Configuration instance to set
    """
    global _config
    _config = config
