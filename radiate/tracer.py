"""Per-time-step history of neuron values for backpropagation through time."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .ids import NeuronId


@dataclass
class Tracer:
    """Records activations and derivatives of neurons at each forward step."""

    activations: dict[NeuronId, list[float]] = field(default_factory=dict)
    derivatives: dict[NeuronId, list[float]] = field(default_factory=dict)
    max_neuron_index: int = 0
    index: int = 0

    def reset(self) -> None:
        self.activations = {}
        self.derivatives = {}
        self.index = 0

    def update_neuron_activation(self, neuron_id: NeuronId, value: float) -> None:
        states = self.activations.get(neuron_id)
        if states is None:
            self.activations[neuron_id] = [value]
            return
        states.append(value)
        if len(states) > self.max_neuron_index:
            self.max_neuron_index += 1

    def update_neuron_derivative(self, neuron_id: NeuronId, value: float) -> None:
        self.derivatives.setdefault(neuron_id, []).append(value)

    def _at_index(self, table: dict[NeuronId, list[float]], neuron_id: NeuronId) -> float:
        if neuron_id not in table:
            raise KeyError(f"Tracer neuron state doesn't contain uuid: {neuron_id}")
        if self.index < 1:
            raise IndexError("Tracer index is at the start; no step recorded")
        return table[neuron_id][self.index - 1]

    def neuron_activation(self, neuron_id: NeuronId) -> float:
        """Activated value of a neuron at the current step."""
        return self._at_index(self.activations, neuron_id)

    def neuron_derivative(self, neuron_id: NeuronId) -> float:
        """Derivative of a neuron at the current step."""
        return self._at_index(self.derivatives, neuron_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "neuron_activation": {str(k.index): list(v) for k, v in self.activations.items()},
            "neuron_derivative": {str(k.index): list(v) for k, v in self.derivatives.items()},
            "max_neuron_index": self.max_neuron_index,
            "index": self.index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tracer:
        return cls(
            activations={NeuronId(int(k)): list(v) for k, v in data["neuron_activation"].items()},
            derivatives={NeuronId(int(k)): list(v) for k, v in data["neuron_derivative"].items()},
            max_neuron_index=data["max_neuron_index"],
            index=data["index"],
        )