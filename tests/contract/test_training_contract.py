"""Behavioural guarantees of the training engine on the 3-bit parity task."""

import numpy as np
import pytest

from mlpnet.core.network import MultiLayerPerceptron
from mlpnet.data import registry
from mlpnet.reporting.metrics import HistoryCapture

_SEEDS = (0, 1, 2, 3, 4)


@pytest.fixture(scope="module")
def trained_runs():
    samples = registry.get("parity3").samples
    runs = []
    for seed in _SEEDS:
        net = MultiLayerPerceptron(3, 8, 6, 1, 0.7, 0.9, seed=seed)
        capture = HistoryCapture()
        net.train(samples, epochs=8000, report_every=500, callbacks=[capture])
        runs.append((net, capture.losses()))
    return runs


def test_reference_scenario_classifies_known_points(trained_runs):
    correct = 0
    for net, _ in trained_runs:
        if net.forward([0, 0, 1])[0] > 0.5 and net.forward([0, 0, 0])[0] < 0.5:
            correct += 1
    assert correct == len(_SEEDS)


def test_reported_losses_mostly_non_increasing(trained_runs):
    pairs = []
    for _, losses in trained_runs:
        assert len(losses) == 16
        pairs.extend(zip(losses[:-1], losses[1:]))
    tolerance = 1e-2
    improving = sum(1 for before, after in pairs if after <= before + tolerance)
    assert improving >= 0.9 * len(pairs)


def test_loss_decreases_over_training(trained_runs):
    for _, losses in trained_runs:
        assert losses[-1] < losses[0]


def test_training_is_deterministic_for_a_seed():
    samples = registry.get("parity3").samples
    a = MultiLayerPerceptron(3, 8, 6, 1, 0.7, 0.9, seed=21)
    b = MultiLayerPerceptron(3, 8, 6, 1, 0.7, 0.9, seed=21)
    a.train(samples, epochs=200, report_every=0)
    b.train(samples, epochs=200, report_every=0)
    assert a.to_record() == b.to_record()
    x = [1.0, 0.0, 1.0]
    assert a.forward(x).tobytes() == b.forward(x).tobytes()


def test_round_trip_after_training_preserves_predictions():
    samples = registry.get("parity3").samples
    net = MultiLayerPerceptron(3, 8, 6, 1, 0.7, 0.9, seed=5)
    net.train(samples, epochs=300, report_every=0)
    clone = MultiLayerPerceptron.from_record(net.to_record())
    for sample in samples:
        assert np.array_equal(net.forward(sample.inputs), clone.forward(sample.inputs))
