import pytest

from radiate import vectorops
from radiate.activation import Activation, ActivationKind
from radiate.kinds import Loss

TANH = Activation(ActivationKind.TANH)


def test_element_multiply_in_place():
    values = [1.0, 2.0, 3.0]
    vectorops.element_multiply(values, [2.0, 0.5, 0.0])
    assert values == [2.0, 1.0, 0.0]


def test_element_add_in_place():
    values = [1.0, 2.0]
    vectorops.element_add(values, [0.5, -2.0])
    assert values == [1.5, 0.0]


@pytest.mark.parametrize(
    "func", [vectorops.element_multiply, vectorops.element_add, vectorops.product, vectorops.subtract]
)
def test_shape_mismatch_raises(func):
    with pytest.raises(ValueError):
        func([1.0, 2.0], [1.0])


def test_invert_twice_is_identity():
    values = [0.25, 0.5, 0.75]
    vectorops.element_invert(values)
    assert values == [0.75, 0.5, 0.25]
    vectorops.element_invert(values)
    assert values == [0.25, 0.5, 0.75]


def test_element_activate_and_deactivate():
    xs = [-0.5, 0.0, 0.5]
    assert vectorops.element_activate(xs, TANH) == [TANH.activate(x) for x in xs]
    assert vectorops.element_deactivate(xs, TANH) == [TANH.deactivate(x) for x in xs]


def test_product_and_subtract():
    assert vectorops.product([2.0, 3.0], [0.5, 2.0]) == [1.0, 6.0]
    one, two = [1.5, 4.0], [0.5, 1.0]
    diff = vectorops.subtract(one, two)
    assert [d + b for d, b in zip(diff, two)] == one


def test_softmax_is_a_distribution():
    out = vectorops.softmax([1.0, 2.0, 3.0])
    assert sum(out) == pytest.approx(1.0)
    assert out[0] < out[1] < out[2]
    assert vectorops.softmax([4.0, 4.0]) == pytest.approx([0.5, 0.5])


def test_d_softmax():
    assert vectorops.d_softmax([0.5, 1.0]) == [-0.5, 0.0]


def test_diff_loss():
    total, errs = vectorops.loss([1.0, 2.0], [0.5, 2.5], Loss.DIFF)
    assert errs == vectorops.subtract([1.0, 2.0], [0.5, 2.5])
    assert total == pytest.approx(sum(errs))


def test_mse_loss():
    total, errs = vectorops.loss([1.0, 3.0], [0.0, 1.0], Loss.MSE)
    assert errs == [1.0, 4.0]
    assert total == pytest.approx(sum(errs) / len(errs))


def test_loss_mismatch_raises():
    with pytest.raises(ValueError):
        vectorops.loss([1.0], [1.0, 2.0], Loss.MSE)