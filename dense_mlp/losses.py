import numpy as np
from typing import Dict, Type

# Probabilities are clipped to [EPSILON, 1 - EPSILON] before logs and reciprocals
EPSILON = 1e-15


def _check_shapes(name: str, predicted: np.ndarray, target: np.ndarray):
    if predicted.shape != target.shape:
        raise ValueError(f"{name}: predicted shape {predicted.shape} must match target shape {target.shape}")


class Loss:
    """Base class for loss functions applied once, at the network output."""

    name = ''

    def compute(self, predicted: np.ndarray, target: np.ndarray) -> float:
        """From predictions and targets, compute a scalar loss.

        Raises:
            ValueError: If predicted and target have different shapes.
        """
        raise NotImplementedError

    def gradient(self, predicted: np.ndarray, target: np.ndarray) -> np.ndarray:
        """Gradient of the loss with respect to the predictions (same shape as predicted).

        Raises:
            ValueError: If predicted and target have different shapes.
        """
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class MSE(Loss):
    """
    Mean Squared Error.

    Loss = (1/N) * Σ(p_i - t_i)^2
    Gradient (dL/dp) = (2/N) * (p - t)
    """

    name = 'mse'

    def compute(self, predicted: np.ndarray, target: np.ndarray) -> float:
        predicted, target = np.asarray(predicted, dtype=float), np.asarray(target, dtype=float)
        _check_shapes("MSE", predicted, target)
        return float(np.mean((predicted - target) ** 2))

    def gradient(self, predicted: np.ndarray, target: np.ndarray) -> np.ndarray:
        predicted, target = np.asarray(predicted, dtype=float), np.asarray(target, dtype=float)
        _check_shapes("MSE", predicted, target)
        return 2.0 * (predicted - target) / predicted.size


class CrossEntropy(Loss):
    """
    Cross-Entropy for one-hot (or probability) targets.

    Loss = Σ -t_i * log(clip(p_i))
    Gradient (dL/dp) = -t / clip(p)

    Unlike MSE and BinaryCrossEntropy, neither the loss nor the gradient is
    divided by N, so loss magnitudes are not directly comparable across losses.
    """

    name = 'cross_entropy'

    def compute(self, predicted: np.ndarray, target: np.ndarray) -> float:
        predicted, target = np.asarray(predicted, dtype=float), np.asarray(target, dtype=float)
        _check_shapes("CrossEntropy", predicted, target)
        clipped = np.clip(predicted, EPSILON, 1.0 - EPSILON)
        return float(np.sum(-target * np.log(clipped)))

    def gradient(self, predicted: np.ndarray, target: np.ndarray) -> np.ndarray:
        predicted, target = np.asarray(predicted, dtype=float), np.asarray(target, dtype=float)
        _check_shapes("CrossEntropy", predicted, target)
        clipped = np.clip(predicted, EPSILON, 1.0 - EPSILON)
        return -target / clipped


class BinaryCrossEntropy(Loss):
    """
    Binary Cross-Entropy (for Sigmoid outputs).

    Loss = (1/N) * Σ [ -t * log(p) - (1 - t) * log(1 - p) ]
    Gradient (dL/dp) = (1/N) * [ -t/p + (1 - t)/(1 - p) ]

    p is clipped to [EPSILON, 1 - EPSILON] in both.
    """

    name = 'binary_cross_entropy'

    def compute(self, predicted: np.ndarray, target: np.ndarray) -> float:
        predicted, target = np.asarray(predicted, dtype=float), np.asarray(target, dtype=float)
        _check_shapes("BinaryCrossEntropy", predicted, target)
        clipped = np.clip(predicted, EPSILON, 1.0 - EPSILON)
        term1 = target * np.log(clipped)
        term2 = (1 - target) * np.log(1 - clipped)
        return float(-np.mean(term1 + term2))

    def gradient(self, predicted: np.ndarray, target: np.ndarray) -> np.ndarray:
        predicted, target = np.asarray(predicted, dtype=float), np.asarray(target, dtype=float)
        _check_shapes("BinaryCrossEntropy", predicted, target)
        clipped = np.clip(predicted, EPSILON, 1.0 - EPSILON)
        grad_term1 = -target / clipped
        grad_term2 = (1 - target) / (1 - clipped)
        return (grad_term1 + grad_term2) / predicted.size


# Dictionary mapping loss names to loss classes
LOSS_FUNCTIONS: Dict[str, Type[Loss]] = {
    "mse": MSE,
    "cross_entropy": CrossEntropy,
    "binary_cross_entropy": BinaryCrossEntropy,
}


def get_loss(name: str) -> Loss:
    """Factory function to get a loss instance by name.

    Raises:
        ValueError: If the loss name is not recognized.
    """
    name_lower = name.lower()
    if name_lower not in LOSS_FUNCTIONS:
        raise ValueError(f"Unsupported loss '{name}'. "
                         f"Valid options: {list(LOSS_FUNCTIONS.keys())}")
    return LOSS_FUNCTIONS[name_lower]()
