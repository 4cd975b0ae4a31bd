"""Typed indices for neurons and edges inside a layer graph."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

_INDEX_MAX = 2**32 - 1


@dataclass(frozen=True, order=True)
class NeuronId:
    """Position of a neuron in its layer's node list."""

    index: int

    MIN: ClassVar[int] = 0
    MAX: ClassVar[int] = _INDEX_MAX

    def __post_init__(self) -> None:
        if self.index < self.MIN:
            raise ValueError(f"NeuronId cannot be negative: {self.index}")
        if self.index > self.MAX:
            raise ValueError(
                f"NeuronId too small, layer has more then {self.MAX} neurons"
            )

    def __str__(self) -> str:
        return f"NeuronId({self.index})"


@dataclass(frozen=True, order=True)
class EdgeId:
    """Position of an edge in its layer's edge list."""

    index: int

    MIN: ClassVar[int] = 0
    MAX: ClassVar[int] = _INDEX_MAX

    def __post_init__(self) -> None:
        if self.index < self.MIN:
            raise ValueError(f"EdgeId cannot be negative: {self.index}")
        if self.index > self.MAX:
            raise ValueError(f"EdgeId too small, layer has more then {self.MAX} edges")

    def __str__(self) -> str:
        return f"EdgeId({self.index})"