"""Activation functions and their derivatives."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ActivationKind(Enum):
    """The family of an activation function."""

    SIGMOID = "Sigmoid"
    TANH = "Tanh"
    RELU = "Relu"
    SOFTMAX = "Softmax"
    LEAKY_RELU = "LeakyRelu"
    EXP_RELU = "ExpRelu"
    LINEAR = "Linear"


_PARAMETRIC = {ActivationKind.LEAKY_RELU, ActivationKind.EXP_RELU, ActivationKind.LINEAR}
_ALIASES = {"Tahn": ActivationKind.TANH}


@dataclass(frozen=True)
class Activation:
    """An activation function, with ``alpha`` for the parametric kinds."""

    kind: ActivationKind
    alpha: float | None = None

    def __post_init__(self) -> None:
        if self.kind in _PARAMETRIC and self.alpha is None:
            raise ValueError(f"{self.kind.value} activation needs an alpha")
        if self.kind not in _PARAMETRIC and self.alpha is not None:
            raise ValueError(f"{self.kind.value} activation takes no alpha")

    def activate(self, x: float) -> float:
        """Apply the function to a single value."""
        kind = self.kind
        if kind is ActivationKind.SIGMOID:
            z = -x * 4.9
            if z > 700.0:
                return 0.0
            return 1.0 / (1.0 + math.exp(z))
        if kind is ActivationKind.TANH:
            return math.tanh(x)
        if kind is ActivationKind.RELU:
            return x if x > 0.0 else 0.0
        if kind is ActivationKind.LINEAR:
            return self.alpha * x
        if kind is ActivationKind.LEAKY_RELU:
            a = self.alpha * x
            return a if a > x else x
        if kind is ActivationKind.EXP_RELU:
            if x >= 0.0:
                return x
            return self.alpha * (math.exp(x) - 1.0)
        raise ValueError("Cannot activate single neuron")

    def deactivate(self, x: float) -> float:
        """Apply the derivative of the function to a single value."""
        kind = self.kind
        if kind is ActivationKind.SIGMOID:
            a = self.activate(x)
            return a * (1.0 - a)
        if kind is ActivationKind.TANH:
            return 1.0 - self.activate(x) ** 2
        if kind is ActivationKind.LINEAR:
            return self.alpha
        if kind is ActivationKind.RELU:
            return 1.0 if self.activate(x) > 0.0 else 0.0
        if kind is ActivationKind.EXP_RELU:
            if self.activate(x) > 0.0:
                return 1.0
            return self.alpha * math.exp(x)
        if kind is ActivationKind.LEAKY_RELU:
            return 1.0 if self.activate(x) > 0.0 else self.alpha
        raise ValueError("Cannot deactivate single neuron")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind.value}
        if self.alpha is not None:
            data["alpha"] = self.alpha
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Activation:
        name = data["kind"]
        kind = _ALIASES.get(name) or ActivationKind(name)
        return cls(kind, data.get("alpha"))