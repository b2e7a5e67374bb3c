#!/usr/bin/env python3
"""
Test runner for the EVOLSTM forecaster.

This script provides convenient ways to run different groups of tests.
"""

import sys
import subprocess
import argparse


TEST_TYPES = [
    "unit", "integration", "core", "config", "logging", "utils",
    "network", "data", "optimization", "genetic", "cli", "all"
]


def run_command(cmd, description):
    """Run a command and handle errors."""
    print(f"\n{'='*60}")
    print(f"Running: {description}")
    print(f"Command: {' '.join(cmd)}")
    print(f"{'='*60}")

    try:
        subprocess.run(cmd, check=True, capture_output=False)
        print(f"\n{description} completed successfully!")
        return True
    except subprocess.CalledProcessError as e:
        print(f"\n{description} failed with exit code {e.returncode}")
        return False


def build_marker_expression(test_type, markers, include_slow):
    """Combine the selected markers into a single ``-m`` expression."""
    terms = []
    if test_type != "all":
        terms.append(test_type)
    if markers:
        terms.extend(markers)
    if not include_slow:
        terms.append("not slow")
    return " and ".join(terms)


def main():
    parser = argparse.ArgumentParser(description="Run EVOLSTM tests")
    parser.add_argument(
        "--type",
        choices=TEST_TYPES,
        default="unit",
        help="Type of tests to run"
    )
    parser.add_argument(
        "--markers",
        nargs="+",
        help="Specific pytest markers to run"
    )
    parser.add_argument(
        "--file",
        help="Run tests from specific file"
    )
    parser.add_argument(
        "--function",
        help="Run specific test function"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--coverage",
        action="store_true",
        help="Run with coverage reporting"
    )
    parser.add_argument(
        "--slow",
        action="store_true",
        help="Include slow tests"
    )

    args = parser.parse_args()

    cmd = [sys.executable, "-m", "pytest"]

    expression = build_marker_expression(args.type, args.markers, args.slow)
    if expression:
        cmd.extend(["-m", expression])

    if args.file:
        cmd.append(args.file)

    if args.function:
        cmd.extend(["-k", args.function])

    if args.verbose:
        cmd.append("-vv")

    if args.coverage:
        cmd.extend(["--cov=evolstm", "--cov-report=html", "--cov-report=term-missing"])

    success = run_command(cmd, f"EVOLSTM {args.type} tests")

    if success:
        print("\nAll tests passed!")
        sys.exit(0)
    else:
        print("\nSome tests failed. Please review the output above.")
        sys.exit(1)


if __name__ == "__main__":
    main()
