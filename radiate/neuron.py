"""Neurons of a layer graph."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .activation import Activation, ActivationKind
from .ids import EdgeId, NeuronId
from .kinds import NeuronDirection, NeuronType

if TYPE_CHECKING:
    from .edge import Edge


@dataclass
class NeuronLink:
    """An incoming connection as seen from the receiving neuron."""

    id: EdgeId
    src: NeuronId
    weight: float

    @classmethod
    def from_edge(cls, edge: Edge) -> NeuronLink:
        return cls(edge.id, edge.src, edge.weight)


@dataclass(eq=False)
class Neuron:
    """A node in the graph holding its state and connection lists."""

    id: NeuronId
    neuron_type: NeuronType
    activation: Activation
    direction: NeuronDirection
    outgoing: list[EdgeId] = field(default_factory=list)
    incoming: list[NeuronLink] = field(default_factory=list)
    activated_value: float = 0.0
    deactivated_value: float = 0.0
    current_state: float = 0.0
    previous_state: float = 0.0
    error: float = 0.0
    bias: float = field(default_factory=random.random)

    def add_incoming(self, edge: Edge) -> None:
        self.incoming.append(NeuronLink.from_edge(edge))

    def add_outgoing(self, edge_id: EdgeId) -> None:
        self.outgoing.append(edge_id)

    def update_incoming(self, edge: Edge, weight: float) -> None:
        """Set the weight of the incoming link that belongs to ``edge``."""
        link = next((x for x in self.incoming if x.id == edge.id), None)
        if link is not None:
            link.weight = weight

    def remove_incoming(self, edge: Edge) -> None:
        self.incoming = [x for x in self.incoming if x.id != edge.id]

    def remove_outgoing(self, edge_id: EdgeId) -> None:
        self.outgoing = [x for x in self.outgoing if x != edge_id]

    def activate(self) -> None:
        """Compute the activated value and derivative from the current state."""
        if self.activation.kind is ActivationKind.SOFTMAX:
            return
        state = self.current_state
        if self.direction is NeuronDirection.RECURRENT:
            state += self.previous_state
        self.activated_value = self.activation.activate(state)
        self.deactivated_value = self.activation.deactivate(state)
        self.previous_state = self.current_state

    def reset_neuron(self) -> None:
        self.error = 0.0
        self.activated_value = 0.0
        self.deactivated_value = 0.0
        self.current_state = 0.0

    def _copy(self, keep_values: bool) -> Neuron:
        copy = Neuron(
            id=self.id,
            neuron_type=self.neuron_type,
            activation=self.activation,
            direction=self.direction,
            outgoing=list(self.outgoing),
            incoming=[NeuronLink(x.id, x.src, x.weight) for x in self.incoming],
            bias=self.bias,
        )
        if keep_values:
            copy.activated_value = self.activated_value
            copy.deactivated_value = self.deactivated_value
            copy.current_state = self.current_state
            copy.previous_state = self.previous_state
            copy.error = self.error
        return copy

    def clone_with_values(self) -> Neuron:
        """Copy the neuron including its current state values."""
        return self._copy(keep_values=True)

    def clone(self) -> Neuron:
        """Copy the neuron's structure and bias with cleared state values."""
        return self._copy(keep_values=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id.index,
            "outgoing": [x.index for x in self.outgoing],
            "incoming": [
                {"id": x.id.index, "src": x.src.index, "weight": x.weight}
                for x in self.incoming
            ],
            "activation": self.activation.to_dict(),
            "direction": self.direction.value,
            "neuron_type": self.neuron_type.value,
            "activated_value": self.activated_value,
            "deactivated_value": self.deactivated_value,
            "current_state": self.current_state,
            "previous_state": self.previous_state,
            "error": self.error,
            "bias": self.bias,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Neuron:
        return cls(
            id=NeuronId(data["id"]),
            neuron_type=NeuronType(data["neuron_type"]),
            activation=Activation.from_dict(data["activation"]),
            direction=NeuronDirection(data["direction"]),
            outgoing=[EdgeId(x) for x in data["outgoing"]],
            incoming=[
                NeuronLink(EdgeId(x["id"]), NeuronId(x["src"]), x["weight"])
                for x in data["incoming"]
            ],
            activated_value=data["activated_value"],
            deactivated_value=data["deactivated_value"],
            current_state=data["current_state"],
            previous_state=data["previous_state"],
            error=data["error"],
            bias=data["bias"],
        )