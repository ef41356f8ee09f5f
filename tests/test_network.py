from __future__ import annotations

import json

import numpy as np
import pytest

from road_sim.network import (
    ControlVector,
    DimensionMismatch,
    Level,
    NeuralNetwork,
    evaluate,
    feed_forward,
)


def _single_node_network() -> NeuralNetwork:
    return NeuralNetwork.from_levels([Level(np.array([[1.0]]), np.array([0.0]))])


def test_positive_sum_fires() -> None:
    assert feed_forward([0.6], _single_node_network()) == [1.0]


def test_negative_sum_stays_off() -> None:
    assert feed_forward([-0.1], _single_node_network()) == [0.0]


def test_zero_sum_stays_off() -> None:
    assert feed_forward([0.0], _single_node_network()) == [0.0]


def test_layers_chain_and_map_to_controls() -> None:
    hidden = Level(np.array([[1.0], [-1.0]]), np.array([0.0, 0.0]))
    out = Level(
        np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0], [-1.0, -1.0]]),
        np.array([0.0, 0.0, -0.5, 0.5]),
    )
    network = NeuralNetwork.from_levels([hidden, out])

    # hidden -> [1, 0]; outputs -> [1, 0, 1, 0]
    assert feed_forward([0.5], network) == [1.0, 0.0, 1.0, 0.0]
    assert evaluate(network, [0.5]) == ControlVector(forward=1.0, left=0.0, right=1.0, reverse=0.0)


def test_wrong_input_length_raises() -> None:
    network = NeuralNetwork([8, 6, 4], rng=np.random.default_rng(0))
    with pytest.raises(DimensionMismatch):
        feed_forward([0.0] * 7, network)
    with pytest.raises(ValueError):
        feed_forward([0.0] * 9, network)


def test_random_network_shapes_and_ranges() -> None:
    network = NeuralNetwork([8, 6, 4], rng=np.random.default_rng(1))
    assert network.neuron_counts == [8, 6, 4]
    assert [level.weights.shape for level in network.levels] == [(6, 8), (4, 6)]
    for level in network.levels:
        assert np.all(np.abs(level.weights) <= 1.0)
        assert np.all(np.abs(level.biases) <= 1.0)


def test_evaluation_is_deterministic() -> None:
    network = NeuralNetwork([5, 3, 4], rng=np.random.default_rng(7))
    inputs = [0.0, 0.25, 0.5, 0.75, 1.0]
    first = feed_forward(inputs, network)
    assert feed_forward(inputs, network) == first
    assert all(v in (0.0, 1.0) for v in first)


def test_same_seed_builds_same_network() -> None:
    a = NeuralNetwork([4, 4], rng=np.random.default_rng(3))
    b = NeuralNetwork([4, 4], rng=np.random.default_rng(3))
    assert a.to_dict() == b.to_dict()


def test_mismatched_levels_rejected_at_construction() -> None:
    first = Level(np.zeros((3, 2)), np.zeros(3))
    second = Level(np.zeros((4, 2)), np.zeros(4))
    with pytest.raises(ValueError):
        NeuralNetwork.from_levels([first, second])
    with pytest.raises(ValueError):
        NeuralNetwork([8])
    with pytest.raises(ValueError):
        Level(np.zeros((3, 2)), np.zeros(2))


def test_dict_round_trip_is_lossless() -> None:
    network = NeuralNetwork([8, 6, 4], rng=np.random.default_rng(11))
    restored = NeuralNetwork.from_dict(json.loads(json.dumps(network.to_dict())))
    for orig, back in zip(network.levels, restored.levels):
        assert np.array_equal(orig.weights, back.weights)
        assert np.array_equal(orig.biases, back.biases)
    inputs = [0.1 * i for i in range(8)]
    assert feed_forward(inputs, restored) == feed_forward(inputs, network)


def test_control_vector_needs_four_outputs() -> None:
    with pytest.raises(DimensionMismatch):
        ControlVector.from_outputs([1.0, 0.0])
