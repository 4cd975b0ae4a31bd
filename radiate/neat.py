"""A network made of stacked layers that can be trained or evolved."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Sequence

from . import mutation, vectorops
from .activation import Activation, ActivationKind
from .dense import Dense
from .environment import NeatEnvironment
from .gru import GRU
from .kinds import LayerType, Loss
from .layer import Layer, layer_from_dict
from .lstm import LSTM


@dataclass
class _LayerWrap:
    layer_type: LayerType
    layer: Layer


class Neat:
    """A neural network of layers fed one after another.

    Layers are appended with ``dense_pool``, ``dense``, ``lstm`` and ``gru``;
    each new layer takes its input size from the output size of the previous
    one, or from ``input_size`` when it is the first.
    """

    def __init__(self, input_size: int = 0, batch_size: int = 1) -> None:
        self.layers: list[_LayerWrap] = []
        self.input_size = input_size
        self.batch_size = batch_size

    def reset(self) -> None:
        """Reset every layer."""
        for wrap in self.layers:
            wrap.layer.reset()

    def train(
        self,
        inputs: Sequence[Sequence[float]],
        targets: Sequence[Sequence[float]],
        rate: float,
        loss_fn: Loss,
        run: Callable[[int, float], bool],
    ) -> None:
        """Train until ``run(epoch, loss)`` returns true.

        Data are fed in batches of ``batch_size``; each batch is
        backpropagated before the next one starts.
        """
        if len(inputs) != len(targets):
            raise ValueError("Input and target data are different sizes")
        if not inputs or len(inputs[0]) != self.input_size:
            raise ValueError("Input size is different than network input size")

        if self.batch_size > 1:
            for wrap in self.layers:
                wrap.layer.add_tracer()

        last = len(inputs) - 1
        epoch = 0
        try:
            while True:
                loss = 0.0
                count = 0
                pass_out: list[list[float]] = []
                pass_tar: list[list[float]] = []
                for j, (sample, target) in enumerate(zip(inputs, targets)):
                    count += 1
                    pass_out.append(self.forward(sample))
                    pass_tar.append(list(target))
                    if count == self.batch_size or j == last:
                        count = 0
                        loss += self.backward(pass_out, pass_tar, rate, loss_fn)
                        pass_out, pass_tar = [], []
                if run(epoch, loss):
                    break
                epoch += 1
        finally:
            for wrap in self.layers:
                wrap.layer.remove_tracer()

    def backward(
        self,
        net_outs: Sequence[Sequence[float]],
        net_targets: Sequence[Sequence[float]],
        rate: float,
        loss_fn: Loss,
    ) -> float:
        """Backpropagate a batch, newest step first, and return its total loss."""
        total_loss = 0.0
        for out, target in reversed(list(zip(net_outs, net_targets))):
            step_loss, errors = vectorops.loss(target, out, loss_fn)
            total_loss += step_loss
            for wrap in reversed(self.layers):
                errors = wrap.layer.backward(errors, rate)
        self.reset()
        return total_loss

    def forward(self, data: Sequence[float]) -> list[float]:
        """Feed ``data`` through every layer and return the final output."""
        values = list(data)
        for wrap in self.layers:
            values = wrap.layer.forward(values)
        return list(values)

    def _layer_sizes(self, size: int) -> tuple[int, int]:
        if not self.layers:
            return self.input_size, size
        return self.layers[-1].layer.shape()[1], size

    def _push(self, layer_type: LayerType, layer: Layer) -> Neat:
        self.layers.append(_LayerWrap(layer_type, layer))
        return self

    def dense_pool(self, size: int, activation: Activation) -> Neat:
        """Append a dense layer that evolution may grow."""
        num_in, num_out = self._layer_sizes(size)
        return self._push(
            LayerType.DENSE_POOL,
            Dense(num_in, num_out, LayerType.DENSE_POOL, activation),
        )

    def dense(self, size: int, activation: Activation) -> Neat:
        """Append a fixed fully connected layer."""
        num_in, num_out = self._layer_sizes(size)
        return self._push(
            LayerType.DENSE, Dense(num_in, num_out, LayerType.DENSE, activation)
        )

    def lstm(self, size: int, output_size: int, act: Activation) -> Neat:
        """Append an LSTM layer with ``size`` memory cells."""
        num_in, num_out = self._layer_sizes(output_size)
        return self._push(LayerType.LSTM, LSTM(num_in, size, num_out, act))

    def gru(self, size: int, output_size: int, act: Activation) -> Neat:
        """Append a GRU layer with ``size`` memory cells."""
        num_in, num_out = self._layer_sizes(output_size)
        return self._push(LayerType.GRU, GRU(num_in, size, num_out, act))

    def save(self, file_path: str | Path) -> None:
        """Write the network to a JSON file."""
        with open(file_path, "w", encoding="utf-8") as handle:
            json.dump(self.to_dict(), handle, indent=2)

    @classmethod
    def load(cls, file_path: str | Path) -> Neat:
        """Read a network written by ``save``."""
        with open(file_path, encoding="utf-8") as handle:
            return cls.from_dict(json.load(handle))

    def clone(self) -> Neat:
        twin = Neat(self.input_size, self.batch_size)
        twin.layers = [_LayerWrap(w.layer_type, w.layer.clone()) for w in self.layers]
        return twin

    def to_dict(self) -> dict[str, Any]:
        return {
            "layers": [
                {"layer_type": w.layer_type.value, "layer": w.layer.to_dict()}
                for w in self.layers
            ],
            "input_size": self.input_size,
            "batch_size": self.batch_size,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Neat:
        net = cls(data["input_size"], data["batch_size"])
        net.layers = [
            _LayerWrap(LayerType(w["layer_type"]), layer_from_dict(w["layer"]))
            for w in data["layers"]
        ]
        return net

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Neat):
            return NotImplemented
        return all(a.layer == b.layer for a, b in zip(self.layers, other.layers))

    __hash__ = None  # type: ignore[assignment]

    @staticmethod
    def crossover(
        one: Neat, two: Neat, env: NeatEnvironment, crossover_rate: float
    ) -> Neat:
        """Cross matching layers of ``one`` (the fitter parent) and ``two``."""
        child = Neat(one.input_size, one.batch_size)
        for wrap_one, wrap_two in zip(one.layers, two.layers):
            kind = wrap_one.layer_type
            if kind in (LayerType.DENSE, LayerType.DENSE_POOL):
                layer: Layer = mutation.crossover(
                    wrap_one.layer, wrap_two.layer, env, crossover_rate
                )
            elif kind is LayerType.LSTM:
                layer = LSTM.crossover(wrap_one.layer, wrap_two.layer, env, crossover_rate)
            else:
                layer = GRU.crossover(wrap_one.layer, wrap_two.layer, env, crossover_rate)
            child.layers.append(_LayerWrap(kind, layer))
        return child

    @staticmethod
    def base(env: NeatEnvironment) -> Neat:
        """A minimal network: one sigmoid dense pool from inputs to outputs."""
        if env.input_size is None or env.output_size is None:
            raise ValueError("Environment input_size and output_size must be set")
        return Neat(env.input_size).dense_pool(
            env.output_size, Activation(ActivationKind.SIGMOID)
        )

    @staticmethod
    def distance(one: Neat, two: Neat, env: NeatEnvironment) -> float:
        """Sum of the distances between matching layers."""
        total = 0.0
        for wrap_one, wrap_two in zip(one.layers, two.layers):
            kind = wrap_one.layer_type
            if kind in (LayerType.DENSE, LayerType.DENSE_POOL):
                total += mutation.distance(wrap_one.layer, wrap_two.layer, env)
            elif kind is LayerType.LSTM:
                total += LSTM.distance(wrap_one.layer, wrap_two.layer, env)
            else:
                total += GRU.distance(wrap_one.layer, wrap_two.layer, env)
        return total