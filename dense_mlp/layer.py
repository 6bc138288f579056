import numpy as np
from typing import Tuple, Union
import logging

from dense_mlp.activations import Activation, get_activation
from dense_mlp.initializers import Initializer, get_initializer


class Layer:
    """
    A single fully-connected layer: one weight matrix, one bias vector and one
    activation function.

    The layer holds no per-call state. Forward passes are pure, so the same
    layer can be used for inference between training steps without caching
    anything; the network keeps whatever intermediate outputs backpropagation
    needs.

    Key Attributes:
        weights (np.ndarray): Weight matrix of shape (input_size, output_size).
                              Row j holds the weights leaving input feature j,
                              column k the weights entering output unit k.
        biases (np.ndarray): Bias vector of shape (output_size,), zero at creation.
        activation_fn (Activation): Applied element-wise to the weighted sum plus bias.
    """

    def __init__(
        self,
        input_size: int,
        output_size: int,
        activation: Union[str, Activation, None] = 'linear',
        initializer: Union[str, Initializer, None] = 'xavier',
        rng: Union[None, int, np.random.Generator] = None,
        id: int = 0,
    ):
        """
        Initializes the layer.

        Args:
            input_size: Number of input features (output size of the previous layer).
            output_size: Number of units in this layer.
            activation: Activation function name (e.g., 'relu', 'sigmoid') or an
                        Activation instance. Defaults to 'linear'.
            initializer: Weight initializer name ('xavier', 'random', 'he', 'zero')
                         or an Initializer instance.
            rng: Random generator (or seed) used by the initializer.
            id: An identifier for the layer (its index in the network).

        Raises:
            ValueError: If a size is not positive or a name is unknown.
            TypeError: If activation or initializer has an unexpected type.
        """
        if input_size <= 0 or output_size <= 0:
            raise ValueError(f"Layer {id}: sizes must be positive, got input_size={input_size}, output_size={output_size}")

        self.input_size = input_size
        self.output_size = output_size
        self.id = id

        if isinstance(activation, str):
            self.activation_fn = get_activation(activation)
        elif isinstance(activation, Activation):
            self.activation_fn = activation
        elif activation is None:
            self.activation_fn = get_activation('linear')
        else:
            raise TypeError(f"Layer {id}: invalid activation type '{type(activation)}'")

        if isinstance(initializer, str):
            self.initializer = get_initializer(initializer)
        elif isinstance(initializer, Initializer):
            self.initializer = initializer
        elif initializer is None:
            self.initializer = get_initializer('xavier')
        else:
            raise TypeError(f"Layer {id}: invalid initializer type '{type(initializer)}'")

        self.weights = np.zeros((input_size, output_size), dtype=float)
        self.biases = np.zeros(output_size, dtype=float)
        self.initializer.init(self, np.random.default_rng(rng))

        logging.debug(
            f"Layer #{self.id} created: input_size={input_size}, "
            f"output_size={output_size}, activation={self.activation_fn.__class__.__name__}, "
            f"initializer={self.initializer!r}, weight_shape={self.weights.shape}"
        )

    def forward(self, inputs: np.ndarray) -> np.ndarray:
        """
        Computes activation(X @ W + b).

        Args:
            inputs: A single input vector (input_size,) or a batch of row vectors
                    (batch_size, input_size).

        Returns:
            Activated output, (output_size,) or (batch_size, output_size).

        Raises:
            ValueError: If the input feature count is wrong.
        """
        inputs = np.asarray(inputs, dtype=float)
        if inputs.ndim not in (1, 2):
            raise ValueError(f"Layer {self.id}: Unexpected input dimensions: {inputs.shape}. Expected 1D or 2D array.")
        if inputs.shape[-1] != self.input_size:
            raise ValueError(f"Layer {self.id}: Expected {self.input_size} input features, got {inputs.shape[-1]}")

        # Equivalent to W.T @ x + b for a single column vector x
        z = inputs @ self.weights + self.biases
        return self.activation_fn.activate(z)

    def get_weights(self) -> Tuple[np.ndarray, np.ndarray]:
        """Returns copies of the current weights and biases of the layer."""
        return self.weights.copy(), self.biases.copy()

    def set_weights(self, weights: np.ndarray, biases: np.ndarray):
        """
        Replaces the weights and biases wholesale.

        Raises:
            ValueError: If either shape differs from the layer's current shape.
        """
        weights = np.array(weights, dtype=float)
        biases = np.array(biases, dtype=float)
        if weights.shape != self.weights.shape:
            raise ValueError(f"Layer {self.id}: weights shape {weights.shape} does not match expected shape {self.weights.shape}")
        if biases.shape != self.biases.shape:
            raise ValueError(f"Layer {self.id}: biases shape {biases.shape} does not match expected shape {self.biases.shape}")
        self.weights = weights
        self.biases = biases

    @property
    def parameter_count(self) -> int:
        return self.weights.size + self.biases.size

    def summary(self) -> str:
        """Returns a string summary of the layer's configuration."""
        return (
            f"Layer Summary (id={self.id}):\n"
            f"  Type: Fully Connected\n"
            f"  Input size: {self.input_size}\n"
            f"  Output size: {self.output_size}\n"
            f"  Activation: {self.activation_fn.__class__.__name__}\n"
            f"  Weights shape: {self.weights.shape}\n"
            f"  Biases shape: {self.biases.shape}\n"
            f"  Parameters: {self.parameter_count:,} parameters\n"
        )

    def __repr__(self):
        return (f"Layer(id={self.id}, input_size={self.input_size}, "
                f"output_size={self.output_size}, "
                f"activation={self.activation_fn.__class__.__name__})")
