"""
Evolutionary loop over a population of LSTM networks.

A run loads and windows the data once, seeds a population of random networks,
then alternates fitness evaluation with truncation selection, crossover and
mutation for a fixed number of generations. The best network ever seen is kept
as an owned snapshot and finally evaluated on the validation partition.
"""

import asyncio
import math
import random
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np

from evolstm.core.config import Config, get_config
from evolstm.core.exceptions import InsufficientPopulationError, OptimizationError
from evolstm.core.logging import get_logger
from evolstm.data.processors.preparer import DataPreparer, TimeSeries
from evolstm.data.providers.csv_provider import TabularData
from evolstm.network.network import Network
from evolstm.utils.helpers import ensure_directory, make_rng, timestamp_slug
from .fitness import FitnessResult, MSEFitnessEvaluator, ValidationReport, evaluate_validation

logger = get_logger(__name__)

# Set in each worker process by _init_worker
_worker_evaluator: Optional[MSEFitnessEvaluator] = None


def _init_worker(time_series: TimeSeries) -> None:
    """Build the evaluator once per worker so the training series is sent once."""
    global _worker_evaluator
    _worker_evaluator = MSEFitnessEvaluator(time_series)


def _evaluate_in_worker(network: Network) -> FitnessResult:
    return _worker_evaluator.evaluate(network)


@dataclass
class GenerationResult:
    """Fitness summary of one evaluated generation."""

    generation: int
    best_fitness: float
    avg_fitness: float
    worst_fitness: float
    all_time_best_fitness: float
    best_mse: float


class Population:
    """
    A generation of networks and the loop that evolves it.

    The population size stays constant across generations. ``best_individual``
    is always a clone, never one of the live ``individuals``, so later mutation
    of the population cannot alter it.
    """

    def __init__(
        self,
        data: TabularData,
        config: Optional[Config] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Args:
            data: Tabular source of features and target
            config: Configuration, defaults to the global configuration
            rng: Random generator used by every genetic operator; when omitted
                one is created from ``config.evolution.seed``
        """
        self.data = data
        self.config = config or get_config()
        self.rng = rng or make_rng(self.config.evolution.seed)

        self.individuals: List[Network] = []
        self.generation: int = 0
        self.best_individual: Optional[Network] = None
        self.best_fitness: float = float('-inf')
        self.training_data: Optional[TimeSeries] = None
        self.validation_data: Optional[TimeSeries] = None

        self.generation_history: List[GenerationResult] = []
        self.validation_report: Optional[ValidationReport] = None
        self._stop_requested = False
        self._executor: Optional[ProcessPoolExecutor] = None

    @property
    def population_size(self) -> int:
        return self.config.evolution.population_size

    async def load_data(self) -> None:
        """Window and scale the data once, before the loop starts."""
        preparer = DataPreparer(
            self.data,
            sequence_length=self.config.data.sequence_length,
            training_split=self.config.data.training_split
        )
        prepared = preparer.prepare_data()
        self.training_data = prepared.training
        self.validation_data = prepared.validation

    def initialize_population(self) -> None:
        """Seed the population with random networks."""
        network_config = self.config.network
        logger.info(f"Initializing population of size {self.population_size}")

        self.individuals = [
            Network.create_random(
                network_config.input_feature_size,
                network_config.hidden_units_per_layer,
                network_config.lstm_layer_count,
                network_config.output_size,
                self.rng,
                min_weight=network_config.min_weight,
                max_weight=network_config.max_weight,
                min_bias=network_config.min_bias,
                max_bias=network_config.max_bias,
            )
            for _ in range(self.population_size)
        ]
        if self.individuals:
            logger.debug(f"Each network has {self.individuals[0].parameter_count} evolvable parameters")

    def _score_population(self, evaluator: MSEFitnessEvaluator) -> List[FitnessResult]:
        if self._executor is not None:
            return list(self._executor.map(_evaluate_in_worker, self.individuals))
        return evaluator.evaluate_batch(self.individuals)

    def _start_executor(self) -> Optional[ProcessPoolExecutor]:
        """One worker pool per run; each worker receives the training series once."""
        n_jobs = self.config.evolution.n_jobs
        if n_jobs <= 1 or self.population_size <= 1:
            return None
        self._executor = ProcessPoolExecutor(
            max_workers=n_jobs,
            initializer=_init_worker,
            initargs=(self.training_data,)
        )
        logger.info(f"Scoring individuals with {n_jobs} worker processes")
        return self._executor

    def evaluate_fitness(self) -> GenerationResult:
        """
        Assign every individual its fitness on the training data and update the
        best-ever snapshot on strict improvement.

        Scoring is spread over worker processes only while ``run_generations``
        holds a pool; a direct call scores in this process.
        """
        if self.training_data is None:
            raise OptimizationError("Training data must be loaded before evaluating fitness")
        if not self.individuals:
            raise OptimizationError("Population must not be empty before evaluating fitness")
        if len(self.training_data) == 0:
            raise OptimizationError("Training data must contain at least one sequence")

        evaluator = MSEFitnessEvaluator(self.training_data)
        results = self._score_population(evaluator)
        scores = [result.fitness_score for result in results]

        for individual, score in zip(self.individuals, scores):
            individual.fitness = score

        best_index = max(range(len(scores)), key=lambda i: scores[i])
        if scores[best_index] > self.best_fitness:
            self.best_fitness = scores[best_index]
            self.best_individual = self.individuals[best_index].clone()
            logger.debug(f"New best fitness: {self.best_fitness:.6f}")

        result = GenerationResult(
            generation=self.generation,
            best_fitness=scores[best_index],
            avg_fitness=float(np.mean(scores)),
            worst_fitness=min(scores),
            all_time_best_fitness=self.best_fitness,
            best_mse=results[best_index].metrics["mse"]
        )
        self.generation_history.append(result)
        return result

    def select_parents(self) -> List[Network]:
        """
        Truncation selection: sort by fitness, best first, and keep the top
        ``parent_fraction`` of the population (at least one individual).
        """
        if len(self.individuals) < 2:
            raise InsufficientPopulationError(
                "Population must have at least two individuals to select parents",
                details=len(self.individuals)
            )

        self.individuals.sort(key=lambda individual: individual.fitness, reverse=True)

        parent_count = max(1, math.floor(len(self.individuals) * self.config.evolution.parent_fraction))
        return self.individuals[:parent_count]

    def crossover_and_mutate(self) -> None:
        """Replace the population with mutated children of the selected parents."""
        evolution = self.config.evolution
        parents = self.select_parents()

        new_population: List[Network] = []
        while len(new_population) < self.population_size:
            if len(parents) > 1:
                parent1, parent2 = self.rng.sample(parents, 2)
                child = parent1.crossover(parent2, self.rng)
            else:
                child = parents[0].clone()

            child.mutate(evolution.mutation_rate, evolution.mutation_amount, self.rng)
            child.fitness = float('-inf')
            new_population.append(child)

        self.individuals = new_population
        self.generation += 1

    def request_stop(self) -> None:
        """Ask a running loop to finish after the current generation."""
        self._stop_requested = True

    async def run_generations(
        self,
        generations: Optional[int] = None,
        evaluate_every: Optional[int] = None
    ) -> Optional[Network]:
        """
        Run the full evolutionary loop.

        Args:
            generations: Number of generations, defaults to the configured value
            evaluate_every: Progress is logged every this many generations

        Returns:
            Clone of the best network found, or None if no generation ran
        """
        if generations is None:
            generations = self.config.evolution.generations
        if evaluate_every is None:
            evaluate_every = self.config.evolution.evaluate_every
        if evaluate_every <= 0:
            raise OptimizationError("evaluate_every must be positive", details=evaluate_every)

        self._stop_requested = False
        await self.load_data()
        self.initialize_population()

        executor = self._start_executor() if generations > 0 else None
        try:
            for i in range(generations):
                if self._stop_requested:
                    logger.info(f"Stop requested, ending evolution before generation {i}")
                    break

                result = self.evaluate_fitness()
                logger.debug(f"Generation {i} best MSE: {result.best_mse:.6f}")

                if i % evaluate_every == 0:
                    logger.info(f"Generation {i}, Best Fitness: {self.best_fitness:.4f}")

                self.crossover_and_mutate()

                # Give other tasks, such as one calling request_stop, a turn
                await asyncio.sleep(0)
        finally:
            if executor is not None:
                executor.shutdown()
                self._executor = None

        if self.best_individual is not None and self.validation_data is not None:
            if len(self.validation_data):
                logger.info("Training complete. Evaluating best individual on validation data.")
                self.validation_report = self.evaluate_validation()
            else:
                logger.warning("Validation partition is empty; skipping validation")

        return self.best_individual

    def evaluate_validation(self, num_samples: int = 5) -> ValidationReport:
        """Validation MSE of the best individual, with denormalized samples."""
        if self.best_individual is None:
            raise OptimizationError("No best individual to validate")
        if self.validation_data is None:
            raise OptimizationError("Validation data must be loaded before validating")

        report = evaluate_validation(self.best_individual, self.validation_data, num_samples)
        logger.info(f"Best Individual Validation MSE: {report.mse:.6f}")
        if report.samples:
            logger.info("--- Sample Denormalized Predictions ---")
            for true_value, predicted in report.samples:
                logger.info(f"True: {true_value:.2f}, Predicted: {predicted:.2f}")
        return report

    def save_best_individual(self, directory: Optional[Union[str, Path]] = None) -> Path:
        """Write the best network to ``<directory>/<fitness>-<timestamp>.json``."""
        if self.best_individual is None:
            raise OptimizationError("No best individual found to save")

        directory = ensure_directory(directory or self.config.evolution.model_dir)
        path = directory / f"{self.best_fitness:.4f}-{timestamp_slug()}.json"
        return self.best_individual.save(path)

    def get_summary(self) -> Dict[str, Any]:
        return {
            "generation": self.generation,
            "population_size": self.population_size,
            "best_fitness": self.best_fitness,
            "parameter_count": self.best_individual.parameter_count if self.best_individual else None,
            "fitness_history": [result.all_time_best_fitness for result in self.generation_history],
            "validation": self.validation_report.to_dict() if self.validation_report else None,
        }
