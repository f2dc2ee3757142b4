# Tests for the feedforward network and activations

import pytest
import numpy as np
import torch

from evoracer.models import (
    Activation,
    DimensionError,
    NeuralLayer,
    NeuralNetwork,
    apply_activation,
    get_activation,
)


class TestActivation:

    def test_lookup_by_name(self):
        assert get_activation("softsign") is Activation.SOFTSIGN
        assert get_activation("TANH") is Activation.TANH
        assert get_activation(Activation.RELU) is Activation.RELU

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown activation"):
            get_activation("swish")

    def test_values(self):
        x = torch.tensor([-1.0, 0.0, 1.0], dtype=torch.float64)
        assert torch.allclose(apply_activation(Activation.SOFTSIGN, x), x / (1 + x.abs()))
        assert apply_activation(Activation.SIGMOID, x)[1].item() == 0.5
        assert torch.allclose(apply_activation(Activation.TANH, x), torch.tanh(x))
        assert apply_activation(Activation.RELU, x).tolist() == [0.0, 0.0, 1.0]


class TestNeuralLayer:

    def test_weight_count_includes_bias(self):
        assert NeuralLayer(7, 8).weight_count == 64

    def test_bias_row(self):
        """The last weight row multiplies the implicit 1.0 input."""
        layer = NeuralLayer(1, 1)
        layer.set_weights([0.0, 1.0])
        out = layer(torch.tensor([5.0], dtype=torch.float64))
        assert np.isclose(out.item(), 0.5)

    def test_wrong_weight_count(self):
        with pytest.raises(DimensionError):
            NeuralLayer(2, 2).set_weights([0.0] * 5)

    def test_invalid_sizes(self):
        with pytest.raises(ValueError):
            NeuralLayer(0, 3)


class TestNeuralNetwork:

    @pytest.fixture
    def network(self, rng):
        net = NeuralNetwork([7, 8, 6, 2])
        net.set_weights(rng.uniform(-1, 1, net.weight_count))
        return net

    def test_weight_count(self):
        assert NeuralNetwork([7, 8, 6, 2]).weight_count == 132

    def test_too_few_layers(self):
        with pytest.raises(ValueError):
            NeuralNetwork([7])

    def test_output_shape_and_range(self, network, rng):
        outputs = network.process_inputs(rng.uniform(0, 1, 7))
        assert len(outputs) == 2
        assert all(-1.0 < v < 1.0 for v in outputs)

    def test_forward_is_pure(self, network, rng):
        """Same weights and inputs always give the same outputs."""
        inputs = rng.uniform(0, 1, 7)
        first = network.process_inputs(inputs)
        for _ in range(5):
            assert network.process_inputs(inputs) == first

        other = NeuralNetwork.from_parameters([7, 8, 6, 2], network.get_weights())
        assert other.process_inputs(inputs) == first

    def test_zero_weights_give_zero_outputs(self):
        network = NeuralNetwork([7, 8, 6, 2])
        assert network.process_inputs(np.ones(7)) == [0.0, 0.0]

    def test_set_weights_wrong_length(self, network):
        with pytest.raises(DimensionError):
            network.set_weights(np.zeros(131))
        with pytest.raises(DimensionError):
            network.set_weights(np.zeros(133))

    def test_forward_wrong_input_length(self, network):
        with pytest.raises(DimensionError):
            network.process_inputs(np.zeros(6))

    def test_dimension_error_is_value_error(self):
        assert issubclass(DimensionError, ValueError)

    def test_weights_roundtrip(self, network):
        weights = network.get_weights()
        assert weights.shape == (132,)
        fresh = NeuralNetwork([7, 8, 6, 2])
        fresh.set_weights(weights)
        assert np.array_equal(fresh.get_weights(), weights)

    def test_layer_order(self):
        """Weights fill the first layer first."""
        network = NeuralNetwork([2, 3, 1])
        network.set_weights(np.arange(13, dtype=np.float64))
        assert network.layers[0].weights.reshape(-1).tolist() == list(range(9))
        assert network.layers[1].weights.reshape(-1).tolist() == [9, 10, 11, 12]

    def test_clone_is_independent(self, network):
        copy = network.clone()
        assert np.array_equal(copy.get_weights(), network.get_weights())
        copy.set_weights(np.zeros(copy.weight_count))
        assert not np.array_equal(copy.get_weights(), network.get_weights())

    def test_batched_forward(self, network, rng):
        with torch.no_grad():
            out = network(rng.uniform(0, 1, (5, 7)))
        assert out.shape == (5, 2)

    def test_activation_choice(self, rng):
        weights = rng.uniform(-1, 1, NeuralNetwork([3, 2]).weight_count)
        sigmoid = NeuralNetwork.from_parameters([3, 2], weights, "sigmoid")
        outputs = sigmoid.process_inputs([0.1, 0.2, 0.3])
        assert all(0.0 < v < 1.0 for v in outputs)
