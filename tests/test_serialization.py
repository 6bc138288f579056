import json

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from dense_mlp.network import Network
from dense_mlp.serialization import apply_weights_dict, load_weights, save_weights, weights_to_dict


def build_network(seed, sizes=(3, 5, 2)):
    return Network.from_layer_sizes(list(sizes), ['relu', 'softmax'], rng=seed)


def test_round_trip_is_exact(tmp_path):
    source = build_network(1)
    # Move the biases away from zero so they are exercised too
    source.train(3, np.random.default_rng(2).normal(size=(6, 3)), np.eye(2)[[0, 1, 0, 1, 1, 0]])
    path = tmp_path / "weights.json"
    source.save_weights(str(path))

    target = build_network(99)
    target.load_weights(str(path))
    for a, b in zip(source.layers, target.layers):
        assert_array_equal(a.weights, b.weights)
        assert_array_equal(a.biases, b.biases)
    x = np.array([0.3, -0.1, 0.8])
    assert_array_equal(source.forward(x), target.forward(x))


def test_file_layout(tmp_path):
    network = build_network(0)
    path = tmp_path / "weights.json"
    save_weights(network, str(path))
    data = json.loads(path.read_text())
    assert list(data) == ["layers"]
    assert len(data["layers"]) == 2
    assert len(data["layers"][0]["weights"]) == 3
    assert len(data["layers"][0]["weights"][0]) == 5
    assert data["layers"][1]["biases"] == [0.0, 0.0]
    assert data == weights_to_dict(network)


def test_layer_count_mismatch_rejected(tmp_path):
    path = tmp_path / "weights.json"
    save_weights(Network.from_layer_sizes([3, 2], rng=0), str(path))
    with pytest.raises(ValueError, match="Number of layers"):
        load_weights(build_network(0), str(path))


def test_dimension_mismatch_leaves_network_untouched():
    network = build_network(0)
    before = [layer.get_weights() for layer in network.layers]
    data = weights_to_dict(build_network(1))
    data["layers"][1]["weights"] = [[1.0, 2.0, 3.0]] * 5
    with pytest.raises(ValueError, match="Layer 1"):
        apply_weights_dict(network, data)
    # Layer 0 was valid but must not have been applied
    for layer, (w, b) in zip(network.layers, before):
        assert_array_equal(layer.weights, w)
        assert_array_equal(layer.biases, b)


def test_bias_mismatch_rejected():
    network = build_network(0)
    data = weights_to_dict(network)
    data["layers"][0]["biases"] = [0.0] * 4
    with pytest.raises(ValueError, match="biases"):
        apply_weights_dict(network, data)


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_weights(build_network(0), str(tmp_path / "missing.json"))


def test_malformed_json_raises_value_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ValueError):
        load_weights(build_network(0), str(path))


def test_missing_keys_raise_value_error():
    network = build_network(0)
    with pytest.raises(ValueError):
        apply_weights_dict(network, {"weights": []})
    with pytest.raises(ValueError):
        apply_weights_dict(network, {"layers": [{"weights": [[1.0]]}, {}]})
