"""Common interface for the layers a network is built from."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any, Iterable, Sequence

_REGISTRY: dict[str, type[Layer]] = {}


class Layer(ABC):
    """A layer that maps an input vector to an output vector and can learn.

    ``forward`` propagates inputs and returns the outputs. ``backward`` takes
    the output errors, adjusts the layer's weights and returns the errors of
    the layer's inputs so they can be passed on to the previous layer.
    """

    @abstractmethod
    def forward(self, inputs: Sequence[float]) -> list[float]:
        """Propagate ``inputs`` through the layer and return its outputs."""

    @abstractmethod
    def backward(self, errors: Sequence[float], learning_rate: float) -> list[float]:
        """Backpropagate ``errors`` and return the errors of the inputs."""

    @abstractmethod
    def shape(self) -> tuple[int, int]:
        """Return ``(input size, output size)``."""

    def _sublayers(self) -> Iterable[Layer]:
        """Layers whose state is managed along with this one; none by default."""
        return ()

    def reset(self) -> None:
        """Clear any state held between forward passes."""
        for sub in self._sublayers():
            sub.reset()

    def add_tracer(self) -> None:
        """Start recording history needed for backpropagation through time."""
        for sub in self._sublayers():
            sub.add_tracer()

    def remove_tracer(self) -> None:
        """Stop recording history."""
        for sub in self._sublayers():
            sub.remove_tracer()

    def clone(self) -> Layer:
        """Return an independent copy of the layer."""
        return copy.deepcopy(self)

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Serialise to plain data; the ``type`` key names the layer class."""


def register_layer(cls: type[Layer]) -> type[Layer]:
    """Class decorator making a layer class loadable by ``layer_from_dict``."""
    if not isinstance(cls, type) or not issubclass(cls, Layer):
        raise TypeError(f"{cls!r} is not a Layer subclass")
    _REGISTRY[cls.__name__] = cls
    return cls


def layer_from_dict(data: dict[str, Any]) -> Layer:
    """Rebuild a layer from the output of its ``to_dict``."""
    name = data.get("type")
    cls = _REGISTRY.get(name) if isinstance(name, str) else None
    if cls is None:
        raise ValueError(f"Unknown layer type: {name!r}")
    return cls.from_dict(data)