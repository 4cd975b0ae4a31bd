"""A gated recurrent unit layer built from three dense gates."""

from __future__ import annotations

from typing import Any, Sequence

from . import mutation, vectorops
from .activation import Activation, ActivationKind
from .dense import Dense
from .environment import NeatEnvironment
from .kinds import LayerType
from .layer import Layer, register_layer


@register_layer
class GRU(Layer):
    """Recurrent layer keeping a memory vector and its last output between steps."""

    def __init__(
        self, input_size: int, memory_size: int, output_size: int, act: Activation
    ) -> None:
        network_in = input_size + memory_size + output_size
        self._assign(
            input_size,
            memory_size,
            output_size,
            f_gate=Dense(
                network_in, memory_size, LayerType.DENSE_POOL, Activation(ActivationKind.SIGMOID)
            ),
            e_gate=Dense(
                network_in, memory_size, LayerType.DENSE_POOL, Activation(ActivationKind.TANH)
            ),
            o_gate=Dense(network_in, output_size, LayerType.DENSE_POOL, act),
        )

    def _assign(
        self,
        input_size: int,
        memory_size: int,
        output_size: int,
        f_gate: Dense,
        e_gate: Dense,
        o_gate: Dense,
        current_memory: list[float] | None = None,
        current_output: list[float] | None = None,
    ) -> None:
        self.input_size = input_size
        self.memory_size = memory_size
        self.output_size = output_size
        self.current_memory = (
            list(current_memory) if current_memory is not None else [0.0] * memory_size
        )
        self.current_output = (
            list(current_output) if current_output is not None else [0.0] * output_size
        )
        self.f_gate = f_gate
        self.e_gate = e_gate
        self.o_gate = o_gate

    @classmethod
    def _from_parts(cls, *args: Any, **kwargs: Any) -> GRU:
        layer = cls.__new__(cls)
        layer._assign(*args, **kwargs)
        return layer

    def forward(self, inputs: Sequence[float]) -> list[float]:
        concat = [*self.current_output, *inputs]
        network_input = [*concat, *self.current_memory]

        forget = self.f_gate.forward(network_input)
        memory = self.e_gate.forward(network_input)

        vectorops.element_multiply(self.current_memory, forget)
        vectorops.element_invert(forget)
        vectorops.element_multiply(memory, forget)
        vectorops.element_add(self.current_memory, memory)

        concat.extend(self.current_memory)
        self.current_output = self.o_gate.forward(concat)
        return list(self.current_output)

    def backward(self, errors: Sequence[float], learning_rate: float) -> list[float]:
        """GRU layers are evolved only; training them by gradient is unsupported."""
        raise RuntimeError("GRU layers cannot be trained by backpropagation")

    def shape(self) -> tuple[int, int]:
        return self.input_size, self.output_size

    def clone(self) -> GRU:
        """Copy the gates; memory and output start again from zeros."""
        return self._from_parts(
            self.input_size,
            self.memory_size,
            self.output_size,
            f_gate=self.f_gate.clone(),
            e_gate=self.e_gate.clone(),
            o_gate=self.o_gate.clone(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "GRU",
            "input_size": self.input_size,
            "memory_size": self.memory_size,
            "output_size": self.output_size,
            "current_memory": list(self.current_memory),
            "current_output": list(self.current_output),
            "f_gate": self.f_gate.to_dict(),
            "e_gate": self.e_gate.to_dict(),
            "o_gate": self.o_gate.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GRU:
        return cls._from_parts(
            data["input_size"],
            data["memory_size"],
            data["output_size"],
            f_gate=Dense.from_dict(data["f_gate"]),
            e_gate=Dense.from_dict(data["e_gate"]),
            o_gate=Dense.from_dict(data["o_gate"]),
            current_memory=data["current_memory"],
            current_output=data["current_output"],
        )

    @staticmethod
    def crossover(
        child: GRU, parent_two: GRU, env: NeatEnvironment, crossover_rate: float
    ) -> GRU:
        """Cross each gate of ``child`` with the matching gate of ``parent_two``."""
        return GRU._from_parts(
            child.input_size,
            child.memory_size,
            child.output_size,
            f_gate=mutation.crossover(child.f_gate, parent_two.f_gate, env, crossover_rate),
            o_gate=mutation.crossover(child.o_gate, parent_two.o_gate, env, crossover_rate),
            e_gate=mutation.crossover(child.e_gate, parent_two.e_gate, env, crossover_rate),
        )

    @staticmethod
    def distance(one: GRU, two: GRU, env: NeatEnvironment) -> float:
        """Sum of the distances between matching gates."""
        return (
            mutation.distance(one.f_gate, two.f_gate, env)
            + mutation.distance(one.o_gate, two.o_gate, env)
            + mutation.distance(one.e_gate, two.e_gate, env)
        )

    def __str__(self) -> str:
        return (
            f"GRU=[input={self.input_size}, memory={self.memory_size}, "
            f"output={self.output_size}]"
        )