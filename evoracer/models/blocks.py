# Activation functions
# FORBIDDEN: env.*, training.*, logging, pathlib

from enum import Enum

import torch
import torch.nn.functional as F


class Activation(Enum):
    """Closed set of layer activations."""
    SOFTSIGN = "softsign"
    SIGMOID = "sigmoid"
    TANH = "tanh"
    RELU = "relu"


def get_activation(name) -> Activation:
    """Get activation by name.

    Args:
        name: Activation name ("softsign", "sigmoid", "tanh", "relu")
            or an Activation member

    Returns:
        Activation member
    """
    if isinstance(name, Activation):
        return name
    try:
        return Activation(str(name).lower())
    except ValueError:
        available = [a.value for a in Activation]
        raise ValueError(f"Unknown activation: {name}. Available: {available}") from None


def apply_activation(activation: Activation, x: torch.Tensor) -> torch.Tensor:
    """Apply activation elementwise.

    softsign is x / (1 + |x|): bounded and smooth without exponentials.
    """
    if activation is Activation.SOFTSIGN:
        return F.softsign(x)
    if activation is Activation.SIGMOID:
        return torch.sigmoid(x)
    if activation is Activation.TANH:
        return torch.tanh(x)
    if activation is Activation.RELU:
        return torch.relu(x)
    raise ValueError(f"Unhandled activation: {activation}")
