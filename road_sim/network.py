"""
Feed-forward controller network.

Layers are affine transforms followed by a hard threshold (step at 0).
Evaluation is a pure function of ``(inputs, network)`` so carriers can be
evaluated independently of one another.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import numpy as np


CONTROL_OUTPUTS = 4  # forward, left, right, reverse


class DimensionMismatch(ValueError):
    """Input vector length differs from the layer's expected input count."""


@dataclass(frozen=True)
class ControlVector:
    """Network output mapped onto driving controls (each 0.0 or 1.0)."""

    forward: float
    left: float
    right: float
    reverse: float

    @classmethod
    def from_outputs(cls, outputs: Sequence[float]) -> "ControlVector":
        if len(outputs) != CONTROL_OUTPUTS:
            raise DimensionMismatch(
                f"expected {CONTROL_OUTPUTS} control outputs, got {len(outputs)}"
            )
        return cls(
            forward=float(outputs[0]),
            left=float(outputs[1]),
            right=float(outputs[2]),
            reverse=float(outputs[3]),
        )


class Level:
    """One layer: ``weights`` is (output_count, input_count), ``biases`` is (output_count,)."""

    def __init__(self, weights: np.ndarray, biases: np.ndarray) -> None:
        weights = np.asarray(weights, dtype=np.float64)
        biases = np.asarray(biases, dtype=np.float64)
        if weights.ndim != 2:
            raise ValueError(f"weights must be 2-D, got shape {weights.shape}")
        if biases.shape != (weights.shape[0],):
            raise ValueError(
                f"biases shape {biases.shape} does not match {weights.shape[0]} outputs"
            )
        self.weights = weights
        self.biases = biases

    @classmethod
    def random(cls, input_count: int, output_count: int, rng: np.random.Generator) -> "Level":
        if input_count <= 0 or output_count <= 0:
            raise ValueError(
                f"layer sizes must be positive, got {input_count}x{output_count}"
            )
        weights = rng.uniform(-1.0, 1.0, size=(output_count, input_count))
        biases = rng.uniform(-1.0, 1.0, size=output_count)
        return cls(weights, biases)

    @property
    def input_count(self) -> int:
        return int(self.weights.shape[1])

    @property
    def output_count(self) -> int:
        return int(self.weights.shape[0])

    def feed_forward(self, inputs: np.ndarray) -> np.ndarray:
        if inputs.shape[0] != self.input_count:
            raise DimensionMismatch(
                f"layer expects {self.input_count} inputs, got {inputs.shape[0]}"
            )
        sums = self.biases + self.weights @ inputs
        return np.where(sums > 0.0, 1.0, 0.0)


class NeuralNetwork:
    """Layered controller built from a list of node counts, e.g. ``[8, 6, 4]``."""

    def __init__(
        self,
        neuron_counts: Sequence[int],
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        counts = [int(c) for c in neuron_counts]
        if len(counts) < 2:
            raise ValueError(f"need at least input and output sizes, got {counts}")
        if rng is None:
            rng = np.random.default_rng()
        self.levels: List[Level] = [
            Level.random(counts[i], counts[i + 1], rng) for i in range(len(counts) - 1)
        ]

    @classmethod
    def from_levels(cls, levels: Sequence[Level]) -> "NeuralNetwork":
        if not levels:
            raise ValueError("network needs at least one level")
        for prev, nxt in zip(levels, levels[1:]):
            if prev.output_count != nxt.input_count:
                raise ValueError(
                    f"level output {prev.output_count} does not feed "
                    f"next level input {nxt.input_count}"
                )
        network = cls.__new__(cls)
        network.levels = list(levels)
        return network

    @property
    def input_count(self) -> int:
        return self.levels[0].input_count

    @property
    def output_count(self) -> int:
        return self.levels[-1].output_count

    @property
    def neuron_counts(self) -> List[int]:
        return [self.input_count] + [level.output_count for level in self.levels]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Nested float lists; floats survive a JSON round trip unchanged."""
        return {
            "levels": [
                {
                    "weights": level.weights.tolist(),
                    "biases": level.biases.tolist(),
                }
                for level in self.levels
            ]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NeuralNetwork":
        levels = [
            Level(np.array(lv["weights"], dtype=np.float64), np.array(lv["biases"], dtype=np.float64))
            for lv in data["levels"]
        ]
        return cls.from_levels(levels)


def feed_forward(inputs: Sequence[float], network: NeuralNetwork) -> List[float]:
    """Evaluate ``network`` on ``inputs``; every output is 0.0 or 1.0."""
    values = np.asarray(inputs, dtype=np.float64)
    if values.ndim != 1 or values.shape[0] != network.input_count:
        raise DimensionMismatch(
            f"network expects {network.input_count} inputs, got {values.shape}"
        )
    for level in network.levels:
        values = level.feed_forward(values)
    return [float(v) for v in values]


def evaluate(network: NeuralNetwork, inputs: Sequence[float]) -> ControlVector:
    """Evaluate and map the final layer onto driving controls."""
    return ControlVector.from_outputs(feed_forward(inputs, network))
