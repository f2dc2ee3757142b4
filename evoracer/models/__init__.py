# Models module - Neural networks
# FORBIDDEN: env.*, training.*, logging, pathlib

from .blocks import Activation, get_activation, apply_activation
from .network import NeuralLayer, NeuralNetwork, DimensionError
