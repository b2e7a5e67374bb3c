"""
Evolution CLI for the EVOLSTM forecaster.

Runs the genetic algorithm on a CSV file and saves the best network found.
"""

import argparse
import asyncio
from pathlib import Path
from typing import Optional

from ..core.config import Config
from ..core.logging import setup_logging, get_logger, log_with_correlation
from ..data.providers.csv_provider import CSVData
from ..optimization.genetic.population import Population


def build_config(parsed_args: argparse.Namespace) -> Config:
    """Load the configuration file, then apply command-line overrides."""
    config = Config(config_file=parsed_args.config, env_file=parsed_args.env_file)

    if parsed_args.data_path:
        config.data.data_path = str(parsed_args.data_path)
    if parsed_args.features:
        config.data.features = [f.strip() for f in parsed_args.features.split(',') if f.strip()]
        config.network.input_feature_size = len(config.data.features)
    if parsed_args.target:
        config.data.target_feature = parsed_args.target

    for arg_name, section, attr in (
        ("sequence_length", config.data, "sequence_length"),
        ("training_split", config.data, "training_split"),
        ("population_size", config.evolution, "population_size"),
        ("generations", config.evolution, "generations"),
        ("mutation_rate", config.evolution, "mutation_rate"),
        ("mutation_amount", config.evolution, "mutation_amount"),
        ("evaluate_every", config.evolution, "evaluate_every"),
        ("seed", config.evolution, "seed"),
        ("n_jobs", config.evolution, "n_jobs"),
        ("hidden_units", config.network, "hidden_units_per_layer"),
        ("lstm_layers", config.network, "lstm_layer_count"),
    ):
        value = getattr(parsed_args, arg_name, None)
        if value is not None:
            setattr(section, attr, value)

    if getattr(parsed_args, "output_dir", None):
        config.evolution.model_dir = str(parsed_args.output_dir)

    # Overrides can break cross-section constraints, so validate again
    config.validate()
    return config


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    config_group = parser.add_argument_group('Configuration')
    config_group.add_argument('--config', '-c', type=Path, help='Path to configuration file (JSON)')
    config_group.add_argument('--env-file', '-e', type=Path, help='Path to .env file with EVOLSTM_* overrides')

    data_group = parser.add_argument_group('Data Parameters')
    data_group.add_argument('--data-path', type=Path, help='Path to CSV file of observations')
    data_group.add_argument('--features', type=str, help='Comma-separated feature columns')
    data_group.add_argument('--target', type=str, help='Target column (must be one of the features)')
    data_group.add_argument('--sequence-length', type=int, help='Timesteps per input window')
    data_group.add_argument('--training-split', type=float, help='Fraction of windows used for training')

    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], default='INFO',
                        help='Logging level')


@log_with_correlation
def run_evolution(config: Config, save: bool = True) -> Population:
    logger = get_logger(__name__)

    data = CSVData(config.get_data_path(), config.data.target_feature, config.data.features)
    population = Population(data, config)

    best = asyncio.run(population.run_generations(
        config.evolution.generations,
        config.evolution.evaluate_every
    ))

    if best is None:
        logger.error("No best individual found after all generations.")
        return population

    logger.info(f"Overall Best Fitness: {population.best_fitness:.6f}")
    if save and config.evolution.save_best_individual:
        path = population.save_best_individual(config.get_model_dir())
        logger.info(f"Best individual saved to {path}")
    return population


def evolve_command(args: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Evolve LSTM forecasting networks with a genetic algorithm",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Evolve with default settings
  evolstm evolve --data-path data/GOOG.csv --features open,high,low,close,volume --target close

  # Smaller, reproducible run
  evolstm evolve --data-path data/GOOG.csv --population-size 20 --generations 50 --seed 7
        """
    )
    add_common_arguments(parser)

    genetic_group = parser.add_argument_group('Genetic Search')
    genetic_group.add_argument('--population-size', type=int, help='Population size')
    genetic_group.add_argument('--generations', type=int, help='Number of generations')
    genetic_group.add_argument('--mutation-rate', type=float, help='Per-gene mutation probability')
    genetic_group.add_argument('--mutation-amount', type=float, help='Mutation magnitude')
    genetic_group.add_argument('--evaluate-every', type=int, help='Log progress every N generations')
    genetic_group.add_argument('--seed', type=int, help='Random seed for a reproducible run')
    genetic_group.add_argument('--n-jobs', type=int, help='Worker processes for fitness evaluation')

    network_group = parser.add_argument_group('Network Shape')
    network_group.add_argument('--hidden-units', type=int, help='Units per LSTM layer')
    network_group.add_argument('--lstm-layers', type=int, help='Number of stacked LSTM layers')

    output_group = parser.add_argument_group('Output')
    output_group.add_argument('--output-dir', type=Path, help='Directory to save the best network')
    output_group.add_argument('--no-save', dest='save', action='store_false', help='Do not save the best network')

    parsed_args = parser.parse_args(args)

    setup_logging(level=parsed_args.log_level)
    config = build_config(parsed_args)
    get_logger(__name__).info(f"Configuration: {config}")

    run_evolution(config, save=parsed_args.save)


if __name__ == "__main__":
    evolve_command()
