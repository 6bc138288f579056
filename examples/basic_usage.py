import os
import time
import logging
import numpy as np
import matplotlib.pyplot as plt
from sklearn.datasets import make_moons

from dense_mlp import Adam, Network

# --- Plotting Functions ---

def plot_decision_boundary(X: np.ndarray, y_raw: np.ndarray, model: Network, title: str = "Decision Boundary"):
    """Plots the decision boundary of a trained single-output model.

    Args:
        X: Input features used for training, shape (n_samples, 2).
        y_raw: True integer class labels, shape (n_samples,).
        model: Trained Network instance.
        title: Figure title.
    """
    h = 0.02 # Step size in the mesh

    x_min, x_max = X[:, 0].min() - 0.5, X[:, 0].max() + 0.5
    y_min, y_max = X[:, 1].min() - 0.5, X[:, 1].max() + 0.5
    xx, yy = np.meshgrid(np.arange(x_min, x_max, h),
                         np.arange(y_min, y_max, h))

    mesh_points = np.c_[xx.ravel(), yy.ravel()]
    Z = (model.predict(mesh_points) >= 0.5).astype(int).ravel()
    Z = Z.reshape(xx.shape)

    plt.figure(title, figsize=(8, 6))
    plt.contourf(xx, yy, Z, cmap=plt.cm.Spectral, alpha=0.8)
    plt.scatter(X[:, 0], X[:, 1], c=y_raw, cmap=plt.cm.Spectral, edgecolor='k', s=35)
    plt.xlabel("Feature 1")
    plt.ylabel("Feature 2")
    plt.title(title)
    plt.xlim(xx.min(), xx.max())
    plt.ylim(yy.min(), yy.max())
    plt.grid(True, alpha=0.2)


def plot_loss_history(history, title: str, ylabel: str):
    plt.figure(title, figsize=(8, 5))
    plt.plot(range(1, len(history) + 1), history, label='Training Loss')
    plt.xlabel('Epoch')
    plt.ylabel(ylabel)
    plt.title(title)
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.ylim(bottom=0)
    plt.tight_layout()


# --- XOR Example ---

def xor_example():
    """Trains a 2-3-1 sigmoid network on XOR with MSE and plain SGD."""
    logger = logging.getLogger("XORExample")

    X = np.array([[0, 0], [0, 1], [1, 0], [1, 1]], dtype=float)
    y = np.array([[0], [1], [1], [0]], dtype=float)

    network = Network.from_layer_sizes(
        [2, 3, 1],
        activations=['sigmoid', 'sigmoid'],
        initializer='xavier',
        loss='mse',
        optimizer='sgd',
        learning_rate=0.1,
        rng=42,
    )
    logger.info(f"XOR Network Summary:\n{network.summary()}")

    logger.info("Starting XOR training...")
    history = network.train(5000, X, y, log_every=500)

    predictions = network.predict(X)
    correct = 0
    for inputs, target, pred in zip(X, y, predictions):
        pred_class = int(pred[0] > 0.5)
        is_correct = pred_class == int(target[0])
        correct += is_correct
        logger.info(f"Input: {inputs}, Target: {target[0]:.0f}, Prediction: {pred[0]:.4f} -> Class: {pred_class} "
                    f"{'(Correct)' if is_correct else '(Incorrect)'}")
    logger.info(f"XOR Accuracy: {correct / len(X):.2%}")

    plot_loss_history(history, "XOR Training History", "Loss (MSE)")
    plot_decision_boundary(X, y.ravel(), network, "XOR Decision Boundary")


# --- Make Moons Example ---

def make_moons_example():
    """Trains on 'make_moons' with mini-batches, Adam and binary cross-entropy, then saves the weights."""
    logger = logging.getLogger("MakeMoonsExample")

    X_original, y_raw = make_moons(n_samples=300, noise=0.1, random_state=42)
    # Normalize features
    X = (X_original - X_original.mean(axis=0)) / (X_original.std(axis=0) + 1e-8)
    y = y_raw.reshape(-1, 1).astype(float)

    network = Network(
        learning_rate=0.01,
        l2=1e-4,
        loss='binary_cross_entropy',
        input_size=2,
        rng=7,
    )
    network.add_layer(2, 16, 'relu', 'he')
    network.add_layer(16, 16, 'relu', 'he')
    network.add_layer(16, 1, 'sigmoid', 'xavier')
    # Adam sizes its moments from the final topology
    network.set_optimizer(Adam(learning_rate=0.005))
    print(network.summary())

    start_time = time.time()
    history = network.train_batch(200, 32, X, y, log_every=20)
    logger.info(f"Training finished. Total training time: {time.time() - start_time:.2f} seconds")

    metrics = network.evaluate(X, y)
    print("\nEvaluation Metrics (on training data):")
    print(f"  Loss: {metrics['loss']:.4f}")
    print(f"  Accuracy: {metrics['accuracy']:.4f}")

    plot_loss_history(history, "Make Moons Training History", "Loss (BCE)")
    plot_decision_boundary(X, y_raw, network, "Make Moons Decision Boundary")

    model_filename = os.path.join(".", "make_moons_model_weights.json")
    network.save_weights(model_filename)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    print("\n" + "="*40)
    print("--- Running XOR Classification Example ---")
    print("="*40)
    xor_example()

    print("\n" + "="*40)
    print("--- Running Make Moons Classification Example ---")
    print("="*40)
    make_moons_example()

    print("\nDisplaying plots. Close plot windows to exit.")
    plt.show()
