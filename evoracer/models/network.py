# Fixed-topology feedforward network driven by a flat weight vector
# FORBIDDEN: env.*, training.*, logging, pathlib

import numpy as np
import torch
import torch.nn as nn
from typing import List, Sequence, Union

from .blocks import Activation, apply_activation, get_activation

ArrayLike = Union[Sequence[float], np.ndarray, torch.Tensor]


class DimensionError(ValueError):
    """A vector length does not match the network layout.

    Always a configuration bug: inputs are never truncated or padded.
    """


def _as_vector(values: ArrayLike) -> torch.Tensor:
    if isinstance(values, torch.Tensor):
        return values.to(torch.float64).reshape(-1)
    return torch.as_tensor(np.asarray(values, dtype=np.float64)).reshape(-1)


class NeuralLayer(nn.Module):
    """Fully connected layer with an implicit bias input of 1.0.

    Weights have shape (inputs + 1, outputs); the last row holds the
    bias. Weights are a buffer, not a parameter: they only ever change
    through set_weights, never by gradient descent.
    """

    def __init__(
        self,
        input_count: int,
        output_count: int,
        activation: Union[str, Activation] = Activation.SOFTSIGN,
    ):
        super().__init__()

        if input_count <= 0 or output_count <= 0:
            raise ValueError(f"Layer sizes must be positive, got {input_count} -> {output_count}")

        self.input_count = input_count
        self.output_count = output_count
        self.activation = get_activation(activation)
        self.register_buffer(
            "weights",
            torch.zeros(input_count + 1, output_count, dtype=torch.float64),
        )

    @property
    def weight_count(self) -> int:
        return (self.input_count + 1) * self.output_count

    def set_weights(self, flat: ArrayLike) -> None:
        """Fill the weight matrix row by row from a flat slice."""
        values = _as_vector(flat)
        if values.numel() != self.weight_count:
            raise DimensionError(
                f"Weight count mismatch: expected {self.weight_count}, got {values.numel()}"
            )
        self.weights.copy_(values.reshape(self.input_count + 1, self.output_count))

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        if x.shape[-1] != self.input_count:
            raise DimensionError(
                f"Input count mismatch: expected {self.input_count}, got {x.shape[-1]}"
            )
        bias = torch.ones(*x.shape[:-1], 1, dtype=x.dtype)
        return apply_activation(self.activation, torch.cat([x, bias], dim=-1) @ self.weights)


class NeuralNetwork(nn.Module):
    """Feedforward stack built from a topology such as [7, 8, 6, 2].

    A pure function of (topology, weights, inputs): the same weights and
    inputs always produce the same outputs.
    """

    def __init__(
        self,
        topology: Sequence[int],
        activation: Union[str, Activation] = Activation.SOFTSIGN,
    ):
        super().__init__()

        if len(topology) < 2:
            raise ValueError("Network must have at least input and output layers")

        self.topology = [int(n) for n in topology]
        self.activation = get_activation(activation)
        self.layers = nn.ModuleList([
            NeuralLayer(n_in, n_out, self.activation)
            for n_in, n_out in zip(self.topology[:-1], self.topology[1:])
        ])

    @property
    def weight_count(self) -> int:
        return sum(layer.weight_count for layer in self.layers)

    @property
    def input_count(self) -> int:
        return self.topology[0]

    @property
    def output_count(self) -> int:
        return self.topology[-1]

    @classmethod
    def from_parameters(
        cls,
        topology: Sequence[int],
        parameters: ArrayLike,
        activation: Union[str, Activation] = Activation.SOFTSIGN,
    ) -> "NeuralNetwork":
        """Build a network and load a genotype's parameters into it."""
        network = cls(topology, activation)
        network.set_weights(parameters)
        return network

    def set_weights(self, flat: ArrayLike) -> None:
        """Partition a flat vector into per-layer slices, in layer order.

        Raises:
            DimensionError: if len(flat) != weight_count
        """
        values = _as_vector(flat)
        if values.numel() != self.weight_count:
            raise DimensionError(
                f"Weight count mismatch: expected {self.weight_count}, got {values.numel()}"
            )

        offset = 0
        for layer in self.layers:
            count = layer.weight_count
            layer.set_weights(values[offset:offset + count])
            offset += count

    def get_weights(self) -> np.ndarray:
        """All weights as one flat vector, in the order set_weights reads them."""
        return torch.cat([layer.weights.reshape(-1) for layer in self.layers]).numpy().copy()

    def forward(self, inputs: ArrayLike) -> torch.Tensor:
        """Run inputs through every layer.

        Args:
            inputs: Vector of length topology[0], or a batch of them

        Returns:
            Output tensor of length topology[-1] (batched if the input was)
        """
        x = inputs if isinstance(inputs, torch.Tensor) else torch.as_tensor(
            np.asarray(inputs, dtype=np.float64)
        )
        x = x.to(torch.float64)
        if x.dim() == 0 or x.shape[-1] != self.input_count:
            got = 0 if x.dim() == 0 else x.shape[-1]
            raise DimensionError(f"Input count mismatch: expected {self.input_count}, got {got}")

        for layer in self.layers:
            x = layer(x)
        return x

    def process_inputs(self, inputs: ArrayLike) -> List[float]:
        """Single forward pass returning plain floats."""
        with torch.no_grad():
            return self.forward(inputs).tolist()

    def clone(self) -> "NeuralNetwork":
        """Deep copy with the same topology, activation and weights."""
        return NeuralNetwork.from_parameters(self.topology, self.get_weights(), self.activation)
