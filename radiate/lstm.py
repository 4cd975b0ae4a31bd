"""A long short-term memory layer built from five dense gates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from . import mutation, vectorops
from .activation import Activation, ActivationKind
from .dense import Dense
from .environment import NeatEnvironment
from .kinds import LayerType
from .layer import Layer, register_layer

_TANH = Activation(ActivationKind.TANH)
_SIGMOID = Activation(ActivationKind.SIGMOID)


@dataclass
class LSTMState:
    """Gate outputs and memory recorded at each traced time step."""

    f_gate_output: list[list[float]] = field(default_factory=list)
    i_gate_output: list[list[float]] = field(default_factory=list)
    s_gate_output: list[list[float]] = field(default_factory=list)
    o_gate_output: list[list[float]] = field(default_factory=list)
    memory_states: list[list[float]] = field(default_factory=list)
    d_prev_memory: list[float] | None = None
    d_prev_hidden: list[float] | None = None

    def update_forward(
        self,
        fg: list[float],
        ig: list[float],
        sg: list[float],
        og: list[float],
        mem_state: list[float],
    ) -> None:
        """Record the gate outputs and memory of one forward step."""
        self.f_gate_output.append(fg)
        self.i_gate_output.append(ig)
        self.s_gate_output.append(sg)
        self.o_gate_output.append(og)
        self.memory_states.append(mem_state)

    def to_dict(self) -> dict[str, Any]:
        return {
            "f_gate_output": [list(x) for x in self.f_gate_output],
            "i_gate_output": [list(x) for x in self.i_gate_output],
            "s_gate_output": [list(x) for x in self.s_gate_output],
            "o_gate_output": [list(x) for x in self.o_gate_output],
            "memory_states": [list(x) for x in self.memory_states],
            "d_prev_memory": None if self.d_prev_memory is None else list(self.d_prev_memory),
            "d_prev_hidden": None if self.d_prev_hidden is None else list(self.d_prev_hidden),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LSTMState:
        def _opt(value: list[float] | None) -> list[float] | None:
            return None if value is None else list(value)

        return cls(
            f_gate_output=[list(x) for x in data["f_gate_output"]],
            i_gate_output=[list(x) for x in data["i_gate_output"]],
            s_gate_output=[list(x) for x in data["s_gate_output"]],
            o_gate_output=[list(x) for x in data["o_gate_output"]],
            memory_states=[list(x) for x in data["memory_states"]],
            d_prev_memory=_opt(data.get("d_prev_memory")),
            d_prev_hidden=_opt(data.get("d_prev_hidden")),
        )


_GATES = ("g_gate", "i_gate", "f_gate", "o_gate", "v_gate")


@register_layer
class LSTM(Layer):
    """Recurrent layer carrying a memory cell and a hidden state through time."""

    def __init__(
        self, input_size: int, memory_size: int, output_size: int, activation: Activation
    ) -> None:
        cell_input = input_size + memory_size
        self._assign(
            input_size,
            memory_size,
            output_size,
            activation,
            g_gate=Dense(cell_input, memory_size, LayerType.DENSE_POOL, _TANH),
            i_gate=Dense(cell_input, memory_size, LayerType.DENSE_POOL, _SIGMOID),
            f_gate=Dense(cell_input, memory_size, LayerType.DENSE_POOL, _SIGMOID),
            o_gate=Dense(cell_input, memory_size, LayerType.DENSE_POOL, _SIGMOID),
            v_gate=Dense(memory_size, output_size, LayerType.DENSE_POOL, activation),
        )

    def _assign(
        self,
        input_size: int,
        memory_size: int,
        output_size: int,
        activation: Activation,
        g_gate: Dense,
        i_gate: Dense,
        f_gate: Dense,
        o_gate: Dense,
        v_gate: Dense,
        memory: list[float] | None = None,
        hidden: list[float] | None = None,
        states: LSTMState | None = None,
    ) -> None:
        self.input_size = input_size
        self.memory_size = memory_size
        self.output_size = output_size
        self.activation = activation
        self.memory = list(memory) if memory is not None else [0.0] * memory_size
        self.hidden = list(hidden) if hidden is not None else [0.0] * memory_size
        self.states = states if states is not None else LSTMState()
        self.g_gate = g_gate
        self.i_gate = i_gate
        self.f_gate = f_gate
        self.o_gate = o_gate
        self.v_gate = v_gate

    @classmethod
    def _from_parts(cls, *args: Any, **kwargs: Any) -> LSTM:
        layer = cls.__new__(cls)
        layer._assign(*args, **kwargs)
        return layer

    def _gates(self) -> list[Dense]:
        return [getattr(self, name) for name in _GATES]

    def _step(self, inputs: Sequence[float], record: bool) -> list[float]:
        hidden_input = [*self.hidden, *inputs]

        f_out = self.f_gate.forward(hidden_input)
        i_out = self.i_gate.forward(hidden_input)
        o_out = self.o_gate.forward(hidden_input)
        g_out = self.g_gate.forward(hidden_input)

        current_state = list(g_out)
        current_output = list(o_out)

        vectorops.element_multiply(self.memory, f_out)
        vectorops.element_multiply(current_state, i_out)
        vectorops.element_add(self.memory, current_state)
        vectorops.element_multiply(
            current_output, vectorops.element_activate(self.memory, _TANH)
        )

        if record:
            self.states.update_forward(f_out, i_out, g_out, o_out, list(self.memory))

        self.hidden = current_output
        return self.v_gate.forward(self.hidden)

    def step_forward(self, inputs: Sequence[float]) -> list[float]:
        """Advance one time step without recording history."""
        return self._step(inputs, record=False)

    def step_back(self, errors: Sequence[float], l_rate: float) -> list[float]:
        """Backpropagate one recorded time step and return the input errors.

        Raises RuntimeError when the carried gradients are not initialised or
        no forward step is left to undo.
        """
        states = self.states
        if states.d_prev_hidden is None or states.d_prev_memory is None:
            raise RuntimeError("Carried gradients are not initialised")
        if not states.memory_states:
            raise RuntimeError("No recorded forward step to backpropagate")
        dh_next = list(states.d_prev_hidden)
        dc_next = list(states.d_prev_memory)

        c_old = states.memory_states.pop()
        g_curr = states.s_gate_output.pop()
        i_curr = states.i_gate_output.pop()
        f_curr = states.f_gate_output.pop()
        o_curr = states.o_gate_output.pop()

        dh = self.v_gate.backward(errors, l_rate)
        vectorops.element_add(dh, dh_next)

        dho = vectorops.element_activate(c_old, _TANH)
        vectorops.element_multiply(dho, dh)
        vectorops.element_multiply(
            dho, vectorops.element_deactivate(o_curr, self.o_gate.activation)
        )
        dx_o = self.o_gate.backward(dho, l_rate)

        dc = vectorops.product(o_curr, dh)
        vectorops.element_multiply(dc, vectorops.element_deactivate(c_old, _TANH))
        vectorops.element_add(dc, dc_next)

        dhf = vectorops.product(c_old, dc)
        vectorops.element_multiply(
            dhf, vectorops.element_deactivate(f_curr, self.f_gate.activation)
        )
        dx_f = self.f_gate.backward(dhf, l_rate)

        dhi = vectorops.product(g_curr, dc)
        vectorops.element_multiply(
            dhi, vectorops.element_deactivate(i_curr, self.i_gate.activation)
        )
        dx_i = self.i_gate.backward(dhi, l_rate)

        dhc = vectorops.product(i_curr, dc)
        vectorops.element_multiply(
            dhc, vectorops.element_deactivate(g_curr, self.g_gate.activation)
        )
        dx_g = self.g_gate.backward(dhc, l_rate)

        dx = [0.0] * (self.input_size + self.memory_size)
        for part in (dx_o, dx_f, dx_i, dx_g):
            vectorops.element_add(dx, part)

        states.d_prev_hidden = dx[: self.memory_size]
        states.d_prev_memory = vectorops.product(f_curr, dc)
        return dx[: self.input_size]

    def forward(self, inputs: Sequence[float]) -> list[float]:
        """Advance one step, recording history when the gates are traced."""
        return self._step(inputs, record=self.f_gate.trace_states is not None)

    def backward(self, errors: Sequence[float], learning_rate: float) -> list[float]:
        if self.states.d_prev_hidden is None and self.states.d_prev_memory is None:
            self.states.d_prev_memory = [0.0] * self.memory_size
            self.states.d_prev_hidden = [0.0] * self.memory_size
        return self.step_back(errors, learning_rate)

    def reset(self) -> None:
        """Clear gate state, recorded history, memory and hidden state."""
        for gate in self._gates():
            gate.reset()
        self.states = LSTMState()
        self.memory = [0.0] * self.memory_size
        self.hidden = [0.0] * self.memory_size

    def add_tracer(self) -> None:
        for gate in self._gates():
            gate.add_tracer()

    def remove_tracer(self) -> None:
        for gate in self._gates():
            gate.remove_tracer()

    def shape(self) -> tuple[int, int]:
        return self.input_size, self.output_size

    def clone(self) -> LSTM:
        """Copy the gates; memory, hidden state and history start afresh."""
        return self._from_parts(
            self.input_size,
            self.memory_size,
            self.output_size,
            self.activation,
            **{name: getattr(self, name).clone() for name in _GATES},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": "LSTM",
            "input_size": self.input_size,
            "memory_size": self.memory_size,
            "output_size": self.output_size,
            "activation": self.activation.to_dict(),
            "memory": list(self.memory),
            "hidden": list(self.hidden),
            "states": self.states.to_dict(),
        }
        data.update({name: getattr(self, name).to_dict() for name in _GATES})
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LSTM:
        return cls._from_parts(
            data["input_size"],
            data["memory_size"],
            data["output_size"],
            Activation.from_dict(data["activation"]),
            memory=data["memory"],
            hidden=data["hidden"],
            states=LSTMState.from_dict(data["states"]),
            **{name: Dense.from_dict(data[name]) for name in _GATES},
        )

    @staticmethod
    def crossover(
        child: LSTM, parent_two: LSTM, env: NeatEnvironment, crossover_rate: float
    ) -> LSTM:
        """Cross each gate of ``child`` with the matching gate of ``parent_two``."""
        gates = {
            name: mutation.crossover(
                getattr(child, name), getattr(parent_two, name), env, crossover_rate
            )
            for name in _GATES
        }
        return LSTM._from_parts(
            child.input_size,
            child.memory_size,
            child.output_size,
            child.activation,
            **gates,
        )

    @staticmethod
    def distance(one: LSTM, two: LSTM, env: NeatEnvironment) -> float:
        """Sum of the distances between matching gates."""
        return sum(
            mutation.distance(getattr(one, name), getattr(two, name), env) for name in _GATES
        )

    def __str__(self) -> str:
        return (
            f"LSTM=[input={self.input_size}, memory={self.memory_size}, "
            f"output={self.output_size}]"
        )