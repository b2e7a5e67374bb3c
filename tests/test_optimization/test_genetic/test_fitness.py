"""
Tests for fitness evaluation of evolved networks.
"""

import math
import pytest

from evolstm.data.processors.preparer import TimeSeries
from evolstm.data.processors.scaler import Scaler
from evolstm.network.genes import Neuron
from evolstm.network.layers import DenseLayer
from evolstm.network.network import Network
from evolstm.optimization.genetic.fitness import (
    FitnessResult,
    FitnessEvaluator,
    MSEFitnessEvaluator,
    evaluate_validation,
    mean_sequence_loss,
    sequence_loss,
)
from evolstm.core.exceptions import OptimizationError, ShapeMismatchError

pytestmark = [
    pytest.mark.unit,
    pytest.mark.optimization,
    pytest.mark.genetic
]


@pytest.fixture
def echo_network():
    """Predicts the last input value unchanged."""
    network = Network(1, 1)
    network.add_layer(DenseLayer(1, 1, [Neuron(1, weights=[1.0], bias=0.0)]))
    return network


@pytest.fixture
def unit_scaler():
    # Fit on [0, 10] so that scaled 0.5 maps back to 5.0
    return Scaler([[0.0], [10.0]])


@pytest.fixture
def series(unit_scaler):
    return TimeSeries(
        input_sequences=[[[0.2], [0.5]], [[0.1], [0.3]]],
        target_outputs=[[0.5], [0.0]],
        scaler=unit_scaler
    )


class TestLosses:

    def test_sequence_loss(self, echo_network):
        loss, prediction = sequence_loss(echo_network, [[0.1], [0.3]], [0.0])
        assert prediction == [0.3]
        assert loss == pytest.approx(0.09)

    def test_sequence_loss_target_length_mismatch(self, echo_network):
        with pytest.raises(ShapeMismatchError):
            sequence_loss(echo_network, [[0.1]], [0.0, 1.0])

    def test_mean_sequence_loss(self, echo_network, series):
        assert mean_sequence_loss(echo_network, series) == pytest.approx(0.045)

    def test_mean_sequence_loss_empty(self, echo_network, unit_scaler):
        with pytest.raises(ShapeMismatchError):
            mean_sequence_loss(echo_network, TimeSeries([], [], unit_scaler))


class TestMSEFitnessEvaluator:

    def test_score_is_negated_mse(self, echo_network, series):
        assert MSEFitnessEvaluator(series).score(echo_network) == pytest.approx(-0.045)

    def test_perfect_prediction_scores_zero(self, echo_network, unit_scaler):
        perfect = TimeSeries([[[0.4]], [[0.7]]], [[0.4], [0.7]], unit_scaler)
        assert MSEFitnessEvaluator(perfect).score(echo_network) == 0.0

    def test_evaluate(self, echo_network, series):
        result = MSEFitnessEvaluator(series).evaluate(echo_network)

        assert isinstance(result, FitnessResult)
        assert result.fitness_score == pytest.approx(-0.045)
        assert result.metrics["mse"] == pytest.approx(0.045)

    def test_evaluate_batch(self, echo_network, series):
        results = MSEFitnessEvaluator(series).evaluate_batch([echo_network, echo_network.clone()])
        assert [r.fitness_score for r in results] == pytest.approx([-0.045, -0.045])
        assert [r.metrics["mse"] for r in results] == pytest.approx([0.045, 0.045])

    def test_evaluator_is_abstract(self):
        with pytest.raises(TypeError):
            FitnessEvaluator()

    def test_base_evaluate_has_no_metrics(self, echo_network):
        class ConstantEvaluator(FitnessEvaluator):
            def score(self, network):
                return -1.5

        result = ConstantEvaluator().evaluate(echo_network)
        assert result.fitness_score == -1.5
        assert result.metrics == {}

    def test_nan_fitness_rejected(self):
        with pytest.raises(OptimizationError, match="NaN"):
            FitnessResult(fitness_score=float("nan"), metrics={"mse": float("nan")})


class TestValidationReport:

    def test_samples_are_denormalized(self, echo_network, series):
        report = evaluate_validation(echo_network, series, num_samples=1)

        assert report.mse == pytest.approx(0.045)
        assert report.num_sequences == 2
        assert len(report.samples) == 1
        assert report.samples[0] == pytest.approx((5.0, 5.0))

    def test_to_dict(self, echo_network, series):
        data = evaluate_validation(echo_network, series).to_dict()
        assert len(data["samples"]) == 2
        assert data["samples"][1]["true"] == pytest.approx(0.0)
        assert data["samples"][1]["predicted"] == pytest.approx(3.0)

    def test_empty_series(self, echo_network, unit_scaler):
        report = evaluate_validation(echo_network, TimeSeries([], [], unit_scaler))
        assert math.isnan(report.mse)
        assert report.samples == []
