"""
JSON persistence of a network's weights and biases.

File layout (layers in network order, weights row-major, one row per input):

    {"layers": [{"weights": [[...], ...], "biases": [...]}, ...]}

Only parameters are stored. Architecture, activations and optimizer state
are not; weights are loaded into an already-built network of the same
topology.
"""

import json
import logging
from typing import Any, Dict, List, Tuple

import numpy as np


def weights_to_dict(network) -> Dict[str, List[Dict[str, Any]]]:
    """Returns the network's parameters in the persisted layout (plain lists of floats)."""
    return {
        "layers": [
            {"weights": layer.weights.tolist(), "biases": layer.biases.tolist()}
            for layer in network.layers
        ]
    }


def _validate(network, data: Any) -> List[Tuple[np.ndarray, np.ndarray]]:
    """Checks a decoded weights document against the network and converts it to arrays."""
    if not isinstance(data, dict) or not isinstance(data.get("layers"), list):
        raise ValueError("Weights document must be an object with a 'layers' list")

    stored_layers = data["layers"]
    if len(stored_layers) != len(network.layers):
        raise ValueError(f"Number of layers in file ({len(stored_layers)}) does not match "
                         f"network structure ({len(network.layers)})")

    validated = []
    for i, (stored, layer) in enumerate(zip(stored_layers, network.layers)):
        try:
            weights = np.array(stored["weights"], dtype=float)
            biases = np.array(stored["biases"], dtype=float)
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Layer {i}: missing or malformed weights/biases") from e

        if weights.ndim != 2 or weights.shape != layer.weights.shape:
            raise ValueError(f"Layer {i}: weights shape {weights.shape} does not match "
                             f"expected shape {layer.weights.shape}")
        if biases.ndim != 1 or biases.shape != layer.biases.shape:
            raise ValueError(f"Layer {i}: biases shape {biases.shape} does not match "
                             f"expected shape {layer.biases.shape}")
        validated.append((weights, biases))
    return validated


def apply_weights_dict(network, data: Any):
    """
    Replaces every layer's weights and biases from a decoded weights document.

    All layers are validated before any is modified, so a failure leaves the
    network untouched.

    Raises:
        ValueError: If the layer count or any layer's dimensions differ from the network.
    """
    validated = _validate(network, data)
    for layer, (weights, biases) in zip(network.layers, validated):
        layer.set_weights(weights, biases)


def save_weights(network, filename: str):
    """
    Saves the network's weights and biases to a JSON file.

    Args:
        network: Network whose layers are saved.
        filename: Path of the JSON file to write.

    Raises:
        OSError: If the file cannot be written.
    """
    try:
        with open(filename, "w") as f:
            json.dump(weights_to_dict(network), f, indent=4)
    except OSError as e:
        logging.error(f"Error saving weights to {filename}: {e}")
        raise
    logging.info(f"Network weights saved to {filename}")


def load_weights(network, filename: str):
    """
    Loads weights and biases from a JSON file into an existing network.

    Args:
        network: Network with the same topology as the one that was saved.
        filename: Path of the JSON file to read.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid JSON or does not fit the network.
    """
    try:
        with open(filename, "r") as f:
            data = json.load(f)
    except FileNotFoundError:
        logging.error(f"Weight file not found: {filename}")
        raise
    except json.JSONDecodeError as e:
        logging.error(f"Error decoding weight file {filename}: {e}")
        raise ValueError(f"Could not decode weights from {filename}") from e

    try:
        apply_weights_dict(network, data)
    except ValueError as e:
        logging.error(f"Incompatible weight file {filename}: {e}")
        raise
    logging.info(f"Network weights loaded from {filename}")
