import numpy as np
from typing import Dict, Type
import logging


class Initializer:
    """Base class for weight initialization strategies.

    An initializer fills ``layer.weights`` in place. Biases are left at zero.
    All randomness comes from the generator passed in, so a seeded generator
    gives reproducible weights.
    """

    def init(self, layer, rng: np.random.Generator):
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class Random(Initializer):
    """Small random normal weights: N(0, 1) * scale."""

    def __init__(self, scale: float = 0.01):
        self.scale = scale

    def init(self, layer, rng: np.random.Generator):
        layer.weights[...] = rng.standard_normal(layer.weights.shape) * self.scale
        logging.debug(f"Layer #{layer.id}: Initializing weights with small random normal (scale={self.scale}).")

    def __repr__(self):
        return f"Random(scale={self.scale})"


class Xavier(Initializer):
    """Xavier/Glorot uniform initialization.

    Uniform distribution limits: sqrt(6 / (fan_in + fan_out))
    """

    def init(self, layer, rng: np.random.Generator):
        rows, cols = layer.weights.shape
        limit = np.sqrt(6.0 / (rows + cols))
        layer.weights[...] = rng.uniform(-limit, limit, (rows, cols))
        logging.debug(f"Layer #{layer.id}: Initializing weights with Xavier uniform ({limit:.4f}).")


class He(Initializer):
    """Uniform initialization scaled by fan-in: limits sqrt(2 / fan_in)."""

    def init(self, layer, rng: np.random.Generator):
        rows, cols = layer.weights.shape
        limit = np.sqrt(2.0 / rows)
        layer.weights[...] = rng.uniform(-limit, limit, (rows, cols))
        logging.debug(f"Layer #{layer.id}: Initializing weights with He uniform ({limit:.4f}).")


class Zero(Initializer):
    """All-zero weights.

    Every unit in a layer then receives identical updates, so the network
    cannot break symmetry. Useful for tests only.
    """

    def init(self, layer, rng: np.random.Generator):
        layer.weights.fill(0.0)
        logging.debug(f"Layer #{layer.id}: Initializing weights to zero.")


INITIALIZERS: Dict[str, Type[Initializer]] = {
    'random': Random,
    'xavier': Xavier,
    'he': He,
    'zero': Zero,
}


def get_initializer(name: str) -> Initializer:
    """Factory function to get an initializer instance by name.

    Raises:
        ValueError: If the initializer name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in INITIALIZERS:
        raise ValueError(
            f"Unknown weight initializer '{name}'. "
            f"Available initializers: {list(INITIALIZERS.keys())}"
        )
    return INITIALIZERS[name_lower]()
