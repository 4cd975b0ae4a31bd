"""Element-wise operations on float lists."""

from __future__ import annotations

import math
from typing import MutableSequence, Sequence

from .activation import Activation
from .kinds import Loss


def _check(one: Sequence[float], two: Sequence[float], message: str) -> None:
    if len(one) != len(two):
        raise ValueError(message)


def element_multiply(one: MutableSequence[float], two: Sequence[float]) -> None:
    """Multiply ``one`` by ``two`` in place."""
    _check(one, two, "Element multiply vector shapes don't match")
    one[:] = [a * b for a, b in zip(one, two)]


def element_invert(one: MutableSequence[float]) -> None:
    """Replace each value ``a`` in place with ``1 - a``."""
    one[:] = [1.0 - a for a in one]


def element_add(one: MutableSequence[float], two: Sequence[float]) -> None:
    """Add ``two`` to ``one`` in place."""
    _check(one, two, "Element add vector shapes don't match")
    one[:] = [a + b for a, b in zip(one, two)]


def element_activate(one: Sequence[float], func: Activation) -> list[float]:
    return [func.activate(x) for x in one]


def element_deactivate(one: Sequence[float], func: Activation) -> list[float]:
    return [func.deactivate(x) for x in one]


def product(one: Sequence[float], two: Sequence[float]) -> list[float]:
    _check(one, two, "Product dimensions do not match")
    return [a * b for a, b in zip(one, two)]


def subtract(one: Sequence[float], two: Sequence[float]) -> list[float]:
    _check(one, two, "Subtract lengths do not match")
    return [a - b for a, b in zip(one, two)]


def softmax(one: Sequence[float]) -> list[float]:
    ex = [math.exp(x) for x in one]
    total = sum(ex)
    return [x / total for x in ex]


def d_softmax(one: Sequence[float]) -> list[float]:
    return [x - 1.0 for x in one]


def loss(one: Sequence[float], two: Sequence[float], loss_fn: Loss) -> tuple[float, list[float]]:
    """Return the total loss and per-element errors between targets and outputs."""
    _check(one, two, "Loss vector shape don't match")
    if loss_fn is Loss.DIFF:
        difference = subtract(one, two)
        return sum(difference), difference
    errs = [(i - j) ** 2 for i, j in zip(one, two)]
    return sum(errs) / len(one), errs