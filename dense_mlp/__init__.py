from dense_mlp.activations import Activation, Linear, ReLU, Sigmoid, Softmax, Tanh, get_activation
from dense_mlp.initializers import He, Initializer, Random, Xavier, Zero, get_initializer
from dense_mlp.layer import Layer
from dense_mlp.losses import MSE, BinaryCrossEntropy, CrossEntropy, Loss, get_loss
from dense_mlp.network import Network
from dense_mlp.optimizers import SGD, Adam, Optimizer, get_optimizer
from dense_mlp.serialization import load_weights, save_weights

__version__ = "0.1.0"
