import numpy as np
from typing import Dict, Type
import logging


class Activation:
    """Base class for all activation functions.

    Activations are stateless: both methods are pure functions of the vector
    they receive and return an array of the same shape.
    """

    def activate(self, x: np.ndarray) -> np.ndarray:
        """Compute the activation function value.

        Args:
            x: Input vector (or batch of row vectors).

        Returns:
            Activated output, same shape as x.
        """
        raise NotImplementedError

    def derivative(self, y: np.ndarray) -> np.ndarray:
        """Compute the derivative of the activation function from its output.

        Note: the network calls this with the layer's *activated output*
        y = f(z), not the pre-activation sum z, so every formula below is
        written in terms of y.

        Args:
            y: Activated output of this function.

        Returns:
            f'(z) evaluated elementwise, same shape as y.
        """
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class ReLU(Activation):
    """Rectified Linear Unit activation function.

    Mathematical form:
        activate:   f(x) = max(0, x)
        derivative: f'(y) = 1 if y > 0 else 0  (0 at y == 0)
    """

    def activate(self, x: np.ndarray) -> np.ndarray:
        """Compute ReLU activation: max(0, x)"""
        logging.debug(f"ReLU activate - input shape: {np.shape(x)}")
        return np.maximum(0.0, x)

    def derivative(self, y: np.ndarray) -> np.ndarray:
        """Compute ReLU derivative: 1 if y > 0 else 0"""
        return np.where(np.asarray(y) > 0, 1.0, 0.0)


class Tanh(Activation):
    """Hyperbolic tangent activation function.

    Mathematical form:
        activate:   f(x) = tanh(x)
        derivative: f'(y) = 1 - y^2, with y = tanh(x)
    """

    def activate(self, x: np.ndarray) -> np.ndarray:
        logging.debug(f"Tanh activate - input shape: {np.shape(x)}")
        return np.tanh(x)

    def derivative(self, y: np.ndarray) -> np.ndarray:
        return 1.0 - np.asarray(y, dtype=float) ** 2


class Sigmoid(Activation):
    """Sigmoid activation function.

    Mathematical form:
        activate:   f(x) = 1 / (1 + e^-x)
        derivative: f'(y) = y * (1 - y), with y = f(x)
    """

    def activate(self, x: np.ndarray) -> np.ndarray:
        """Compute sigmoid activation with clipping for numerical stability."""
        logging.debug(f"Sigmoid activate - input shape: {np.shape(x)}")
        # Clip input to avoid overflow in exp(-x) for large negative x
        clipped_x = np.clip(x, -500, 500)
        return 1.0 / (1.0 + np.exp(-clipped_x))

    def derivative(self, y: np.ndarray) -> np.ndarray:
        """Compute sigmoid derivative from the sigmoid output y."""
        y = np.asarray(y, dtype=float)
        return y * (1.0 - y)


class Softmax(Activation):
    """Softmax activation function.

    Normalizes a vector to a probability distribution:
        activate: f(x_i) = e^(x_i - max(x)) / Σ e^(x_j - max(x))

    Derivative:
        The true derivative is a Jacobian matrix. This class returns only its
        diagonal, y * (1 - y) with y = softmax(x), so that Softmax fits the same
        elementwise contract as the other activations. Combined with
        CrossEntropy the generic backward path therefore does *not* produce the
        textbook gradient (predicted - target); treat it as an approximation.
    """

    def activate(self, x: np.ndarray) -> np.ndarray:
        """Compute softmax safely using the max subtraction trick.

        Args:
            x: A single vector, or a 2D batch (softmax is taken per row).

        Returns:
            Probabilities with the same shape as x.
        """
        x = np.asarray(x, dtype=float)
        if np.any(np.isnan(x)) or np.any(np.isinf(x)):
            logging.warning(f"Softmax received NaN or inf inputs: min={np.nanmin(x)}, max={np.nanmax(x)}")

        x_max = np.max(x, axis=-1, keepdims=True)
        exp_x = np.exp(x - x_max)
        return exp_x / np.sum(exp_x, axis=-1, keepdims=True)

    def derivative(self, y: np.ndarray) -> np.ndarray:
        """Diagonal approximation of the softmax Jacobian: y * (1 - y)."""
        y = np.asarray(y, dtype=float)
        return y * (1.0 - y)


class Linear(Activation):
    """Linear activation function (identity).

    Mathematical form:
        activate:   f(x) = x
        derivative: f'(y) = 1
    """

    def activate(self, x: np.ndarray) -> np.ndarray:
        return np.asarray(x, dtype=float)

    def derivative(self, y: np.ndarray) -> np.ndarray:
        # Returns an array of ones with the same shape as y
        return np.ones_like(y, dtype=float)


# Dictionary mapping activation function names to their classes
ACTIVATION_FUNCTIONS: Dict[str, Type[Activation]] = {
    'relu': ReLU,
    'tanh': Tanh,
    'sigmoid': Sigmoid,
    'softmax': Softmax,
    'linear': Linear,
}


def get_activation(name: str) -> Activation:
    """Factory function to get an activation function instance by name.

    Args:
        name: Name of the activation function (case-insensitive).

    Returns:
        An instance of the requested Activation class.

    Raises:
        ValueError: If the activation function name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in ACTIVATION_FUNCTIONS:
        raise ValueError(
            f"Unknown activation function '{name}'. "
            f"Available functions: {list(ACTIVATION_FUNCTIONS.keys())}"
        )
    return ACTIVATION_FUNCTIONS[name_lower]()
