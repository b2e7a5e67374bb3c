"""
Evaluation CLI for the EVOLSTM forecaster.

Loads a saved network and reports its MSE on the validation partition of a CSV
file, together with a few predictions in the target's original units.
"""

import argparse
import json
from pathlib import Path
from typing import Optional

from ..core.config import Config
from ..core.exceptions import DataError
from ..core.logging import setup_logging, get_logger
from ..data.processors.preparer import DataPreparer
from ..data.providers.csv_provider import CSVData
from ..network.network import Network
from ..optimization.genetic.fitness import ValidationReport, evaluate_validation
from .evolve import add_common_arguments, build_config


def evaluate_network(network: Network, config: Config, num_samples: int = 5) -> ValidationReport:
    """Window the configured CSV file and score ``network`` on its validation split."""
    logger = get_logger(__name__)

    if network.input_size != len(config.data.features):
        raise DataError(
            "Network input size does not match the number of features",
            details={"network": network.input_size, "features": len(config.data.features)}
        )

    data = CSVData(config.get_data_path(), config.data.target_feature, config.data.features)
    prepared = DataPreparer(
        data,
        sequence_length=config.data.sequence_length,
        training_split=config.data.training_split
    ).prepare_data()

    if len(prepared.validation) == 0:
        raise DataError("Validation partition is empty; lower --training-split")

    report = evaluate_validation(network, prepared.validation, num_samples)
    logger.info(f"Validation MSE: {report.mse:.6f} over {report.num_sequences} sequences")
    for true_value, predicted in report.samples:
        logger.info(f"True: {true_value:.2f}, Predicted: {predicted:.2f}")
    return report


def evaluate_command(args: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Evaluate a saved network on the validation split of a CSV file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  evolstm evaluate --model models/-0.0012-2024-01-01T00-00-00.json --data-path data/GOOG.csv
        """
    )
    parser.add_argument('--model', '-m', type=Path, required=True, help='Path to saved network JSON')
    parser.add_argument('--samples', type=int, default=5, help='Number of denormalized predictions to show')
    parser.add_argument('--json', dest='as_json', action='store_true', help='Print the report as JSON')
    add_common_arguments(parser)

    parsed_args = parser.parse_args(args)

    setup_logging(level=parsed_args.log_level)
    config = build_config(parsed_args)

    network = Network.load(parsed_args.model)
    report = evaluate_network(network, config, parsed_args.samples)

    if parsed_args.as_json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(f"Validation MSE: {report.mse:.6f}")
        for true_value, predicted in report.samples:
            print(f"True: {true_value:.2f}, Predicted: {predicted:.2f}")


if __name__ == "__main__":
    evaluate_command()
