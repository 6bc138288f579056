import numpy as np
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
import logging

from dense_mlp.layer import Layer
from dense_mlp.activations import Activation
from dense_mlp.initializers import Initializer
from dense_mlp.losses import Loss, get_loss
from dense_mlp.optimizers import Optimizer, get_optimizer
from dense_mlp import serialization

# Called as nan_hook(name, layer_index, values) when a NaN or Inf shows up during training
NanHookType = Callable[[str, int, np.ndarray], None]


class Network:
    """
    A Feedforward Neural Network (Multilayer Perceptron) of dense layers.

    Manages an ordered sequence of layers, the forward pass, the detailed
    (cached) forward pass, backpropagation with L2 regularization, parameter
    updates through an optimizer, and the per-example / mini-batch training
    loops.

    Training is example-by-example: every call to ``backward`` runs a fresh
    detailed forward pass, computes every layer's error, and updates weights
    (through the optimizer) and biases (directly) before returning.

    Stateful optimizers (Adam) allocate their moments from the topology at the
    time they are attached, so attach them with ``set_optimizer`` after the
    last ``add_layer`` call (``from_layer_sizes`` does this for you).
    """

    def __init__(
        self,
        learning_rate: float = 0.01,
        l2: float = 0.0,
        loss: Union[str, Loss] = 'mse',
        optimizer: Union[str, Optimizer] = 'sgd',
        input_size: Optional[int] = None,
        rng: Union[None, int, np.random.Generator] = None,
        nan_hook: Optional[NanHookType] = None,
    ):
        """
        Initializes an empty network.

        Args:
            learning_rate: Step size used for bias updates and passed to the optimizer.
            l2: L2 regularization strength (lambda).
            loss: Loss name ('mse', 'cross_entropy', 'binary_cross_entropy') or a Loss instance.
            optimizer: Optimizer name ('sgd', 'adam') or an Optimizer instance.
            input_size: Optional declared input size; the first layer must match it.
            rng: Seed or numpy Generator used for weight initialization and batch shuffling.
            nan_hook: Optional callable notified when a NaN/Inf is detected during training.
        """
        self.learning_rate = learning_rate
        self.l2 = l2
        self.loss = get_loss(loss) if isinstance(loss, str) else loss
        self.input_size = input_size
        self.rng = np.random.default_rng(rng)
        self.nan_hook = nan_hook
        self.layers: List[Layer] = []
        self.set_optimizer(optimizer)

        logging.info(f"Created neural network: loss={self.loss!r}, optimizer={self.optimizer!r}, "
                     f"learning_rate={learning_rate}, l2={l2}")

    @classmethod
    def from_layer_sizes(
        cls,
        layer_sizes: Sequence[int],
        activations: Optional[Sequence[Union[str, Activation]]] = None,
        initializer: Union[str, Initializer] = 'xavier',
        **kwargs: Any,
    ) -> 'Network':
        """
        Builds a network from a list of layer sizes.

        Args:
            layer_sizes: Sizes starting with the input dimension and ending with the
                         output dimension. Example: [2, 3, 1].
            activations: One activation per layer (len(layer_sizes) - 1). Defaults to
                         'linear' everywhere.
            initializer: Weight initializer used for every layer.
            **kwargs: Passed to the Network constructor (learning_rate, loss, optimizer, rng, ...).

        Raises:
            ValueError: If fewer than two sizes are given or the activation count is wrong.
        """
        if len(layer_sizes) < 2:
            raise ValueError("Network must have at least an input and an output layer size.")

        num_layers = len(layer_sizes) - 1
        if activations is None:
            activations = ['linear'] * num_layers
        elif len(activations) != num_layers:
            raise ValueError(f"Number of activation functions ({len(activations)}) must match "
                             f"number of layers ({num_layers}).")

        kwargs.setdefault('input_size', layer_sizes[0])
        network = cls(**kwargs)
        for i in range(num_layers):
            network.add_layer(layer_sizes[i], layer_sizes[i + 1], activations[i], initializer)

        # Let stateful optimizers size their state from the final topology
        network.set_optimizer(network.optimizer)

        logging.info(f"Created neural network with architecture: {list(layer_sizes)}")
        logging.info(f"Layer activations: {[l.activation_fn.__class__.__name__ for l in network.layers]}")
        return network

    def set_optimizer(self, optimizer: Union[str, Optimizer]):
        """Attaches an optimizer, allocating its state from the current layers if it keeps any."""
        if isinstance(optimizer, str):
            optimizer = get_optimizer(optimizer)
        if hasattr(optimizer, 'init_state'):
            optimizer.init_state(self.layers)
        self.optimizer = optimizer

    def add_layer(
        self,
        input_size: int,
        output_size: int,
        activation: Union[str, Activation, None] = 'linear',
        initializer: Union[str, Initializer, None] = 'xavier',
    ) -> Layer:
        """
        Appends a dense layer, initializing its weights with the network's generator.

        Raises:
            ValueError: If input_size does not chain with the previous layer's output
                        size (or the declared network input size for the first layer).
        """
        if self.layers:
            expected = self.layers[-1].output_size
            if input_size != expected:
                raise ValueError(f"Layer {len(self.layers)}: input size {input_size} does not match "
                                 f"previous layer output size {expected}")
        elif self.input_size is not None and input_size != self.input_size:
            raise ValueError(f"Layer 0: input size {input_size} does not match "
                             f"network input size {self.input_size}")

        layer = Layer(
            input_size  = input_size,
            output_size = output_size,
            activation  = activation,
            initializer = initializer,
            rng         = self.rng,
            id          = len(self.layers),
        )
        self.layers.append(layer)
        logging.debug(f"Added {layer!r}")
        return layer

    def _check_ready(self):
        if not self.layers:
            raise RuntimeError("Network has no layers; call add_layer() first.")

    def _as_input(self, inputs: Any) -> np.ndarray:
        inputs = np.asarray(inputs, dtype=float)
        expected = self.layers[0].input_size
        if inputs.ndim == 0 or inputs.shape[-1] != expected:
            raise ValueError(f"Expected input of size {expected}, got shape {inputs.shape}")
        return inputs

    def _report_non_finite(self, name: str, layer_index: int, values: Any):
        if np.all(np.isfinite(values)):
            return
        logging.warning(f"NaN or Inf detected in {name} (layer {layer_index})")
        if self.nan_hook is not None:
            self.nan_hook(name, layer_index, np.asarray(values))

    def forward(self, inputs: np.ndarray) -> np.ndarray:
        """
        Performs an inference forward pass through all layers, keeping no intermediate state.

        Args:
            inputs: Input vector of shape (input_dim,) (a 2D batch is accepted too).

        Returns:
            Output of the last layer.
        """
        self._check_ready()
        current_output = self._as_input(inputs)
        for layer in self.layers:
            current_output = layer.forward(current_output)
        return current_output

    def detailed_forward(self, inputs: np.ndarray) -> List[np.ndarray]:
        """
        Forward pass that retains every layer's post-activation output.

        Entry i is the output of layer i; layer 0 reads the raw input and
        layer i > 0 reads entry i - 1. Backpropagation needs all of them.
        """
        self._check_ready()
        current_output = self._as_input(inputs)
        outputs = []
        for i, layer in enumerate(self.layers):
            current_output = layer.forward(current_output)
            logging.debug(f"Detailed forward - Layer {i} output shape: {current_output.shape}")
            outputs.append(current_output)
        return outputs

    def l2_penalty(self) -> float:
        """0.5 * l2 * sum of all squared weights."""
        if self.l2 == 0.0:
            return 0.0
        return 0.5 * self.l2 * float(sum(np.sum(layer.weights ** 2) for layer in self.layers))

    def backward(self, inputs: np.ndarray, target: np.ndarray) -> float:
        """
        Performs one training step on a single example.

        1. Detailed forward pass.
        2. Loss of the output plus the L2 penalty (measured before this step's update).
        3. Errors right to left: the output layer's error is the loss gradient;
           hidden layer i gets (W[i+1] @ error[i+1]) * derivative(output[i]).
        4. Every layer's weights are updated through the optimizer with the
           gradient outer(layer_input, error) + l2 * W; biases are updated
           directly with learning_rate * error.

        Args:
            inputs: Input vector (input_dim,).
            target: Target vector (output_dim,).

        Returns:
            The loss including the L2 penalty, computed before the update.
        """
        self._check_ready()
        inputs = self._as_input(inputs)
        target = np.asarray(target, dtype=float)
        outputs = self.detailed_forward(inputs)
        num_layers = len(self.layers)

        loss = self.loss.compute(outputs[-1], target) + self.l2_penalty()
        self._report_non_finite("loss", num_layers - 1, loss)

        errors: List[Optional[np.ndarray]] = [None] * num_layers
        errors[-1] = self.loss.gradient(outputs[-1], target)
        self._report_non_finite("output error", num_layers - 1, errors[-1])
        for i in range(num_layers - 2, -1, -1):
            next_layer = self.layers[i + 1]
            derivative = self.layers[i].activation_fn.derivative(outputs[i])
            errors[i] = (next_layer.weights @ errors[i + 1]) * derivative
            logging.debug(f"Backward pass - Layer {i} error shape: {errors[i].shape}")

        for i, layer in enumerate(self.layers):
            layer_input = inputs if i == 0 else outputs[i - 1]
            gradients = np.outer(layer_input, errors[i]) + self.l2 * layer.weights
            self.optimizer.update(layer.weights, gradients, self.learning_rate, i)
            # Biases bypass the optimizer and carry no L2 term
            layer.biases -= self.learning_rate * errors[i]
            self._report_non_finite("weights", i, layer.weights)
            self._report_non_finite("biases", i, layer.biases)

        self.optimizer.step()
        return loss

    def _check_dataset(self, inputs: Sequence, targets: Sequence, epochs: int = 0):
        """Validates a dataset and returns it as float arrays with 2D targets."""
        if epochs < 0:
            raise ValueError(f"Number of epochs must not be negative, got {epochs}")
        if len(inputs) != len(targets):
            raise ValueError(f"Number of inputs ({len(inputs)}) does not match number of targets ({len(targets)})")
        if len(inputs) == 0:
            raise ValueError("Training data is empty.")
        self._check_ready()

        inputs = np.asarray(inputs, dtype=float)
        targets = np.asarray(targets, dtype=float)
        # One scalar target per example
        if targets.ndim == 1:
            targets = targets.reshape(-1, 1)
        return inputs, targets

    def _log_epoch(self, epoch: int, epochs: int, loss: float, log_every: int):
        if log_every > 0 and (epoch % log_every == 0 or epoch == epochs - 1):
            logging.info(f"Epoch {epoch + 1}/{epochs} - loss: {loss:.6f}")

    def train(self, epochs: int, inputs: Sequence, targets: Sequence, log_every: int = 100) -> List[float]:
        """
        Trains example-by-example, in dataset order, for a number of epochs.

        Args:
            epochs: Number of passes over the data.
            inputs: Sequence (or 2D array) of input vectors.
            targets: Sequence (or 2D array) of target vectors, same length as inputs.
            log_every: Log progress every `log_every` epochs (0 disables).

        Returns:
            Mean per-example loss of each epoch.

        Raises:
            ValueError: If epochs is negative, or inputs and targets differ in
                        length or are empty.
        """
        inputs, targets = self._check_dataset(inputs, targets, epochs)
        num_samples = len(inputs)

        loss_history = []
        for epoch in range(epochs):
            total_loss = 0.0
            for i in range(num_samples):
                total_loss += self.backward(inputs[i], targets[i])
            epoch_loss = total_loss / num_samples
            loss_history.append(epoch_loss)
            self._log_epoch(epoch, epochs, epoch_loss, log_every)

        logging.info("Training finished.")
        return loss_history

    def train_batch(self, epochs: int, batch_size: int, inputs: Sequence, targets: Sequence,
                    log_every: int = 10) -> List[float]:
        """
        Trains over shuffled mini-batches.

        Each epoch draws a permutation from the network's generator and splits it
        into floor(N / batch_size) full batches; a shorter remainder is dropped.
        Every example in a batch goes through ``backward`` in turn. The recorded
        epoch loss is the accumulated loss divided by the full dataset size N,
        dropped examples included.

        Raises:
            ValueError: If epochs is negative, inputs and targets differ in
                        length or are empty, or batch_size is not positive.
        """
        inputs, targets = self._check_dataset(inputs, targets, epochs)
        if batch_size <= 0:
            raise ValueError(f"Batch size must be positive, got {batch_size}")

        num_samples = len(inputs)
        num_batches = num_samples // batch_size
        if num_batches == 0:
            logging.warning(f"Batch size ({batch_size}) is larger than training set size ({num_samples}). "
                            f"No examples will be processed.")

        loss_history = []
        for epoch in range(epochs):
            total_loss = 0.0
            indices = self.rng.permutation(num_samples)
            for batch in range(num_batches):
                batch_loss = 0.0
                for idx in indices[batch * batch_size:(batch + 1) * batch_size]:
                    batch_loss += self.backward(inputs[idx], targets[idx])
                total_loss += batch_loss
            epoch_loss = total_loss / num_samples
            loss_history.append(epoch_loss)
            self._log_epoch(epoch, epochs, epoch_loss, log_every)

        logging.info("Training finished.")
        return loss_history

    def predict(self, inputs: np.ndarray) -> np.ndarray:
        """
        Generates predictions for a batch of inputs.

        Args:
            inputs: Input data (num_samples, input_dim) or a single vector.

        Returns:
            Network predictions (num_samples, output_dim).
        """
        inputs = np.asarray(inputs, dtype=float)
        if inputs.ndim == 1:
            inputs = inputs.reshape(1, -1)
        elif inputs.ndim != 2:
            raise ValueError(f"Input must be a 1D or 2D array, got {inputs.ndim}D.")
        return self.forward(inputs)

    def evaluate(self, inputs: Sequence, targets: Sequence) -> Dict[str, float]:
        """
        Evaluates the network on a dataset without updating it.

        Returns:
            'loss': mean per-example loss (no regularization term).
            'accuracy': for one output, the share of rows where (output > 0.5)
                        equals the target; for several outputs, argmax agreement.
        """
        inputs, targets = self._check_dataset(inputs, targets)
        predictions = self.predict(inputs)
        if targets.shape != predictions.shape:
            raise ValueError(f"Targets shape {targets.shape} does not match predictions shape {predictions.shape}")

        losses = [self.loss.compute(p, t) for p, t in zip(predictions, targets)]
        metrics = {'loss': float(np.mean(losses))}

        if predictions.shape[1] == 1:
            metrics['accuracy'] = float(np.mean((predictions > 0.5) == (targets > 0.5)))
        else:
            metrics['accuracy'] = float(np.mean(np.argmax(predictions, axis=1) == np.argmax(targets, axis=1)))
        return metrics

    def save_weights(self, filename: str):
        """Saves every layer's weights and biases as JSON. See dense_mlp.serialization."""
        serialization.save_weights(self, filename)

    def load_weights(self, filename: str):
        """Loads weights and biases saved by ``save_weights`` into this network's layers."""
        serialization.load_weights(self, filename)

    def summary(self) -> str:
        """
        Generates a text summary of the network architecture and parameters.

        Returns:
            A string containing the network summary.
        """
        summary_str = "\n" + "="*50 + "\n"
        summary_str += "Neural Network Summary\n"
        summary_str += "="*50 + "\n"
        total_params = 0
        for layer in self.layers:
            total_params += layer.parameter_count
            summary_str += layer.summary()
            summary_str += "-"*50 + "\n"

        summary_str += f"Loss: {self.loss!r}\n"
        summary_str += f"Optimizer: {self.optimizer!r}\n"
        summary_str += f"Total Parameters: {total_params}\n"
        summary_str += "="*50 + "\n"
        return summary_str
