"""
Weight update rules.

The network computes the full weight gradient of a layer (including the L2
term) and hands it to ``Optimizer.update`` together with the layer index.
Once every layer of a training example has been updated the network calls
``Optimizer.step()``, which is where stateful optimizers advance their step
counter. Biases are updated by the network directly and never reach the
optimizer.
"""

import numpy as np
from typing import Dict, List, Optional, Sequence, Type
import logging


class Optimizer:
    """Base class for optimizers."""

    def update(self, weights: np.ndarray, gradients: np.ndarray, learning_rate: float, layer_index: int = 0):
        """Update ``weights`` in place from a gradient matrix of the same shape.

        Raises:
            ValueError: If the gradient shape differs from the weight shape.
        """
        raise NotImplementedError

    def step(self):
        """Mark the end of one training step (all layers updated)."""

    def __repr__(self):
        return f"{self.__class__.__name__}()"


def _check_shapes(weights: np.ndarray, gradients: np.ndarray, layer_index: int):
    if weights.shape != gradients.shape:
        raise ValueError(f"Layer {layer_index}: gradient shape {gradients.shape} "
                         f"does not match weight shape {weights.shape}")


class SGD(Optimizer):
    """Plain stochastic gradient descent: w -= lr * g. Stateless."""

    def update(self, weights: np.ndarray, gradients: np.ndarray, learning_rate: float, layer_index: int = 0):
        _check_shapes(weights, gradients, layer_index)
        weights -= learning_rate * gradients


class Adam(Optimizer):
    """
    Adam optimizer with per-layer moment matrices and one shared step counter.

    For layer ``i`` and gradient ``g``:
        m[i] = beta1 * m[i] + (1 - beta1) * g
        v[i] = beta2 * v[i] + (1 - beta2) * g^2
        m_hat = m[i] / (1 - beta1^(t+1))
        v_hat = v[i] / (1 - beta2^(t+1))
        w -= lr * m_hat / (sqrt(v_hat) + epsilon)

    ``t`` advances in ``step()``, once per training step, so all layers
    updated within the same step share one bias correction. Adam applies its
    own ``learning_rate``; the rate the network passes to ``update`` is ignored.

    Moments must be allocated from the final layer topology, either by passing
    ``layers`` to the constructor or by calling ``init_state`` (the network
    does this when the optimizer is attached).
    """

    def __init__(
        self,
        layers: Optional[Sequence] = None,
        learning_rate: float = 0.001,
        beta1: float = 0.9,
        beta2: float = 0.999,
        epsilon: float = 1e-8,
    ):
        self.learning_rate = learning_rate
        self.beta1 = beta1
        self.beta2 = beta2
        self.epsilon = epsilon
        self.m: List[np.ndarray] = []
        self.v: List[np.ndarray] = []
        self.t = 0
        if layers is not None:
            self.init_state(layers)

    def init_state(self, layers: Sequence):
        """Allocate zeroed moments shaped like each layer's weights and reset the step counter."""
        self.m = [np.zeros_like(layer.weights) for layer in layers]
        self.v = [np.zeros_like(layer.weights) for layer in layers]
        self.t = 0
        logging.debug(f"Adam: allocated moments for {len(self.m)} layers: {[m.shape for m in self.m]}")

    def update(self, weights: np.ndarray, gradients: np.ndarray, learning_rate: float, layer_index: int = 0):
        if layer_index < 0 or layer_index >= len(self.m):
            raise RuntimeError(f"Adam: no moments allocated for layer {layer_index} "
                               f"({len(self.m)} allocated). Allocate them from the final topology.")
        _check_shapes(weights, gradients, layer_index)
        if self.m[layer_index].shape != weights.shape:
            raise RuntimeError(f"Adam: moments for layer {layer_index} have shape {self.m[layer_index].shape}, "
                               f"weights have shape {weights.shape}")

        m = self.m[layer_index]
        v = self.v[layer_index]
        m *= self.beta1
        m += (1 - self.beta1) * gradients
        v *= self.beta2
        v += (1 - self.beta2) * gradients ** 2

        # Bias correction
        m_hat = m / (1 - self.beta1 ** (self.t + 1))
        v_hat = v / (1 - self.beta2 ** (self.t + 1))

        weights -= self.learning_rate * m_hat / (np.sqrt(v_hat) + self.epsilon)

    def step(self):
        self.t += 1

    def __repr__(self):
        return (f"Adam(learning_rate={self.learning_rate}, beta1={self.beta1}, "
                f"beta2={self.beta2}, epsilon={self.epsilon})")


OPTIMIZERS: Dict[str, Type[Optimizer]] = {
    'sgd': SGD,
    'adam': Adam,
}


def get_optimizer(name: str, **kwargs) -> Optimizer:
    """Factory function to get an optimizer instance by name.

    Args:
        name: Optimizer name (case-insensitive).
        **kwargs: Passed to the optimizer's constructor (e.g. beta1 for Adam).

    Raises:
        ValueError: If the optimizer name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in OPTIMIZERS:
        raise ValueError(f"Unknown optimizer '{name}'. "
                         f"Available optimizers: {list(OPTIMIZERS.keys())}")
    return OPTIMIZERS[name_lower](**kwargs)
