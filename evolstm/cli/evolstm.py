import argparse
from typing import Optional


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(
        description="EVOLSTM unified CLI: evolve, evaluate"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Subcommand options are parsed by the subcommand itself
    subparsers.add_parser("evolve", help="Evolve LSTM networks on a CSV file", add_help=False)
    subparsers.add_parser("evaluate", help="Evaluate a saved network", add_help=False)

    args, remaining = parser.parse_known_args(argv)

    if args.command == "evolve":
        from .evolve import evolve_command
        evolve_command(remaining)
    elif args.command == "evaluate":
        from .evaluate import evaluate_command
        evaluate_command(remaining)


if __name__ == "__main__":
    main()
