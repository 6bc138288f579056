import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from dense_mlp.activations import Sigmoid
from dense_mlp.initializers import He, Random, Xavier, Zero, get_initializer
from dense_mlp.layer import Layer


def test_layer_shapes_and_zero_biases():
    layer = Layer(4, 3, 'relu', 'xavier', rng=0)
    assert layer.weights.shape == (4, 3)
    assert layer.biases.shape == (3,)
    assert_array_equal(layer.biases, np.zeros(3))
    assert layer.parameter_count == 15


def test_xavier_within_limit():
    layer = Layer(6, 4, initializer=Xavier(), rng=1)
    limit = np.sqrt(6.0 / 10)
    assert np.all(np.abs(layer.weights) <= limit)
    assert np.any(layer.weights != 0.0)


def test_he_within_limit():
    layer = Layer(8, 2, initializer=He(), rng=1)
    assert np.all(np.abs(layer.weights) <= np.sqrt(2.0 / 8))


def test_random_is_small_gaussian():
    layer = Layer(50, 40, initializer=Random(), rng=2)
    assert abs(layer.weights.std() - 0.01) < 0.002


def test_zero_initializer():
    layer = Layer(3, 2, initializer='zero', rng=3)
    assert_array_equal(layer.weights, np.zeros((3, 2)))


def test_same_seed_same_weights():
    a = Layer(3, 5, initializer='xavier', rng=11)
    b = Layer(3, 5, initializer='xavier', rng=11)
    assert_array_equal(a.weights, b.weights)


def test_forward_is_activation_of_affine_map():
    layer = Layer(2, 2, Sigmoid(), 'zero')
    layer.weights[...] = [[1.0, -1.0], [2.0, 0.5]]
    layer.biases[...] = [0.1, -0.2]
    x = np.array([0.5, 1.0])
    expected = 1.0 / (1.0 + np.exp(-(layer.weights.T @ x + layer.biases)))
    assert_allclose(layer.forward(x), expected)
    # Batch of rows gives the same per-row result
    assert_allclose(layer.forward(np.stack([x, x])), np.stack([expected, expected]))


def test_forward_rejects_wrong_feature_count():
    layer = Layer(3, 2)
    with pytest.raises(ValueError):
        layer.forward(np.ones(2))


def test_invalid_sizes_and_types():
    with pytest.raises(ValueError):
        Layer(0, 2)
    with pytest.raises(TypeError):
        Layer(2, 2, activation=42)
    with pytest.raises(ValueError):
        get_initializer('orthogonal')


def test_set_weights_checks_shapes():
    layer = Layer(2, 3)
    with pytest.raises(ValueError):
        layer.set_weights(np.zeros((3, 2)), np.zeros(3))
    with pytest.raises(ValueError):
        layer.set_weights(np.zeros((2, 3)), np.zeros(2))
    layer.set_weights(np.ones((2, 3)), np.full(3, 0.5))
    weights, biases = layer.get_weights()
    assert_array_equal(weights, np.ones((2, 3)))
    assert_array_equal(biases, np.full(3, 0.5))


def test_summary_and_repr_describe_layer():
    layer = Layer(4, 3, activation='tanh', id=2)
    text = layer.summary()
    assert "Layer Summary (id=2)" in text
    assert "Activation: Tanh" in text
    assert "Weights shape: (4, 3)" in text
    assert "Parameters: 15 parameters" in text
    assert repr(layer) == "Layer(id=2, input_size=4, output_size=3, activation=Tanh)"
