"""
Tests for weighted input points and neurons.
"""

import pytest
from evolstm.network.activations import Activation
from evolstm.network.genes import WeightedInputPoint, Neuron
from evolstm.core.exceptions import InvalidGenomeError, ShapeMismatchError

pytestmark = [
    pytest.mark.unit,
    pytest.mark.network
]


class TestWeightedInputPoint:

    def test_create_random_bounds(self, rng):
        point = WeightedInputPoint.create_random(6, rng)
        assert point.size == 6
        assert all(-1.0 <= w <= 1.0 for w in point.weights)
        assert -1.0 <= point.bias <= 1.0

    def test_mutate_returns_new_point(self, rng):
        point = WeightedInputPoint([0.1, 0.2, 0.3], 0.4)
        mutated = point.mutate(1.0, 0.5, rng)

        assert mutated is not point
        assert point.weights == [0.1, 0.2, 0.3]
        assert point.bias == 0.4
        for before, after in zip(point.weights + [point.bias], mutated.weights + [mutated.bias]):
            assert abs(after - before) <= 0.5

    def test_zero_rate_mutation_is_identity(self, rng):
        point = WeightedInputPoint([0.1, -0.2], 0.3)
        assert point.mutate(0.0, 0.5, rng) == point

    def test_crossover_genes_come_from_a_parent(self, rng):
        a = WeightedInputPoint([0.0] * 20, 0.0)
        b = WeightedInputPoint([1.0] * 20, 1.0)
        child = a.crossover(b, rng)

        assert child.size == 20
        assert all(w in (0.0, 1.0) for w in child.weights)
        assert child.bias in (0.0, 1.0)
        # 20 fair coin flips all landing on one side would be a broken operator
        assert 0.0 in child.weights and 1.0 in child.weights

    def test_clone_is_independent(self):
        point = WeightedInputPoint([0.5, 0.5], 0.1)
        cloned = point.clone()
        cloned.weights[0] = 9.0
        assert point.weights[0] == 0.5

    def test_dict_round_trip(self, rng):
        point = WeightedInputPoint.create_random(4, rng)
        assert WeightedInputPoint.from_dict(point.to_dict()) == point

    @pytest.mark.parametrize("payload", [
        None,
        {"weights": "abc", "bias": 0.1},
        {"weights": [0.1, "x"], "bias": 0.1},
        {"weights": [0.1], "bias": None},
        {"weights": [0.1], "bias": True},
    ])
    def test_from_dict_rejects_malformed(self, payload):
        with pytest.raises(InvalidGenomeError):
            WeightedInputPoint.from_dict(payload)


class TestNeuron:

    def test_random_neuron_within_bounds(self, rng):
        neuron = Neuron(5, min_weight=-0.5, max_weight=0.5, min_bias=0.0, max_bias=0.2, rng=rng)
        assert len(neuron.weights) == 5
        assert all(-0.5 <= w <= 0.5 for w in neuron.weights)
        assert 0.0 <= neuron.bias <= 0.2

    def test_weight_count_must_match(self):
        with pytest.raises(ShapeMismatchError):
            Neuron(3, weights=[0.1, 0.2], bias=0.0)

    def test_activate_identity(self):
        neuron = Neuron(2, weights=[0.5, -1.0], bias=0.25)
        assert neuron.activate([2.0, 1.0]) == pytest.approx(0.25)

    def test_activate_sigmoid(self):
        neuron = Neuron(1, Activation.SIGMOID, weights=[0.0], bias=0.0)
        assert neuron.activate([3.0]) == 0.5

    def test_mutate_in_place_and_clamped(self, rng):
        neuron = Neuron(4, weights=[0.99, -0.99, 0.0, 0.5], bias=0.99)
        result = neuron.mutate(1.0, 5.0, rng)

        assert result is neuron
        assert all(-1.0 <= w <= 1.0 for w in neuron.weights)
        assert -1.0 <= neuron.bias <= 1.0

    def test_bias_always_mutates(self, rng):
        neuron = Neuron(2, weights=[0.1, 0.2], bias=0.0)
        neuron.mutate(0.0, 0.5, rng)

        assert neuron.weights == [0.1, 0.2]
        assert neuron.bias != 0.0

    def test_crossover(self, rng):
        a = Neuron(10, weights=[0.0] * 10, bias=0.0)
        b = Neuron(10, weights=[1.0] * 10, bias=1.0)
        child = a.crossover(b, rng)

        assert child.num_inputs == 10
        assert all(w in (0.0, 1.0) for w in child.weights)

    def test_crossover_size_mismatch(self, rng):
        with pytest.raises(ShapeMismatchError):
            Neuron(2, rng=rng).crossover(Neuron(3, rng=rng), rng)

    def test_clone_keeps_bounds(self):
        neuron = Neuron(2, weights=[0.1, 0.2], bias=0.0, min_weight=-2.0, max_weight=2.0)
        cloned = neuron.clone()

        assert cloned is not neuron
        assert cloned.weights == neuron.weights
        assert cloned.max_weight == 2.0

    def test_dict_round_trip(self, rng):
        neuron = Neuron(3, Activation.TANH, rng=rng)
        data = neuron.to_dict()
        restored = Neuron.from_dict(data)

        assert data["activationFunction"] == "tanh"
        assert restored.weights == neuron.weights
        assert restored.bias == neuron.bias
        assert restored.activation is Activation.TANH

    def test_from_dict_defaults_bounds(self):
        neuron = Neuron.from_dict({"weights": [0.1], "bias": 0.0, "activationFunction": "identity"})
        assert (neuron.min_weight, neuron.max_weight) == (-1.0, 1.0)

    @pytest.mark.parametrize("payload", [
        [],
        {"weights": [0.1], "bias": 0.0},
        {"weights": [0.1], "bias": 0.0, "activationFunction": "relu"},
        {"weights": [0.1], "bias": "0", "activationFunction": "identity"},
        {"weights": [0.1], "bias": 0.0, "activationFunction": "identity", "minWeight": "low"},
    ])
    def test_from_dict_rejects_malformed(self, payload):
        with pytest.raises(InvalidGenomeError):
            Neuron.from_dict(payload)
