"""Tests for the per-step entropy estimator."""

from itertools import islice

import pytest

from pwgram.bigram import State
from pwgram.entropy import EntropyEstimator
from pwgram.qtable import QuantizedTable
from pwgram.train import train


def test_first_steps_of_branching_chain():
    model = train(["a", "b", "a", "c"])
    est = EntropyEstimator(model)

    assert next(est) == pytest.approx(0.0)
    assert next(est) == pytest.approx(1.0)


def test_initial_distribution_is_certain_start():
    est = EntropyEstimator(train(["a"]))

    assert est.distribution == QuantizedTable([(255, State.START)])


def test_absorbing_mass_folds_back_into_start():
    # START -> a, then a -> b | c, both absorbing.
    model = train(["a", "b", "\n", "a", "c"])
    est = EntropyEstimator(model)

    values = list(islice(est, 6))

    assert values == pytest.approx([0.0, 1.0, 0.0, 0.0, 1.0, 0.0])


def test_distribution_after_restart_is_start():
    model = train(["a", "b", "\n", "a", "c"])
    est = EntropyEstimator(model)

    list(islice(est, 3))

    assert est.distribution == QuantizedTable([(255, State.START)])


def test_propagate_conserves_joint_mass(word_model):
    est = EntropyEstimator(word_model)
    for _ in range(10):
        assert sum(est.propagate().values()) == 256 * 256
        next(est)


def test_empty_model_never_gains_entropy():
    est = EntropyEstimator(train([]))

    assert list(islice(est, 5)) == [0.0] * 5
    assert est.distribution == QuantizedTable([(255, State.START)])


def test_deterministic_chain_has_zero_entropy():
    est = EntropyEstimator(train(list("abc")))

    assert all(bits == 0.0 for bits in islice(est, 20))


def test_entropy_is_never_negative_and_total_never_decreases(word_model):
    total = 0.0
    for bits in islice(EntropyEstimator(word_model), 200):
        assert bits >= 0.0
        new_total = total + bits
        assert new_total >= total
        total = new_total
    assert total > 0.0


def test_estimator_is_infinite(word_model):
    values = list(islice(EntropyEstimator(word_model), 1000))

    assert len(values) == 1000


def test_step_entropy_is_bounded_by_sample_space(word_model):
    # 256 equally likely states is the most a single step can express.
    for bits in islice(EntropyEstimator(word_model), 100):
        assert bits <= 8.0 + 1e-9


def test_estimators_sharing_a_model_are_independent(word_model):
    first = list(islice(EntropyEstimator(word_model), 30))
    second = list(islice(EntropyEstimator(word_model), 30))

    assert first == second
