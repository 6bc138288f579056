import numpy as np
import pytest
from numpy.testing import assert_allclose

from dense_mlp.losses import MSE, BinaryCrossEntropy, CrossEntropy, get_loss


def test_mse_zero_for_identical_vectors():
    rng = np.random.default_rng(1)
    for _ in range(10):
        p = rng.normal(size=5)
        assert MSE().compute(p, p) == 0.0
        assert_allclose(MSE().gradient(p, p), np.zeros(5))


def test_mse_values():
    p = np.array([1.0, 2.0])
    t = np.array([0.0, 0.0])
    assert MSE().compute(p, t) == pytest.approx(2.5)
    assert_allclose(MSE().gradient(p, t), [1.0, 2.0])


def test_cross_entropy_is_unnormalized():
    p = np.array([0.25, 0.75])
    t = np.array([0.0, 1.0])
    assert CrossEntropy().compute(p, t) == pytest.approx(-np.log(0.75))
    assert_allclose(CrossEntropy().gradient(p, t), [0.0, -1.0 / 0.75])


def test_binary_cross_entropy_values():
    p = np.array([0.8, 0.4])
    t = np.array([1.0, 0.0])
    expected = -(np.log(0.8) + np.log(0.6)) / 2
    assert BinaryCrossEntropy().compute(p, t) == pytest.approx(expected)
    assert_allclose(BinaryCrossEntropy().gradient(p, t), [(-1 / 0.8) / 2, (1 / 0.6) / 2])


@pytest.mark.parametrize("loss", [CrossEntropy(), BinaryCrossEntropy()])
def test_probability_losses_stay_finite_at_bounds(loss):
    p = np.array([0.0, 1.0, 0.0, 1.0])
    t = np.array([1.0, 0.0, 0.0, 1.0])
    assert np.isfinite(loss.compute(p, t))
    assert np.all(np.isfinite(loss.gradient(p, t)))


@pytest.mark.parametrize("loss", [MSE(), CrossEntropy(), BinaryCrossEntropy()])
def test_mismatched_lengths_rejected(loss):
    with pytest.raises(ValueError):
        loss.compute(np.zeros(3), np.zeros(2))
    with pytest.raises(ValueError):
        loss.gradient(np.zeros(3), np.zeros(2))


def test_get_loss_by_name():
    assert isinstance(get_loss('mse'), MSE)
    assert isinstance(get_loss('binary_cross_entropy'), BinaryCrossEntropy)
    with pytest.raises(ValueError, match="Unsupported loss"):
        get_loss('hinge')
