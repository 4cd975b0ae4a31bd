"""Weighted connections between neurons."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Sequence

from .ids import EdgeId, NeuronId

if TYPE_CHECKING:
    from .neuron import Neuron


def _node_at(nodes: Sequence[Neuron], node_id: NeuronId) -> Neuron | None:
    return nodes[node_id.index] if node_id.index < len(nodes) else None


@dataclass
class Edge:
    """A connection from ``src`` to ``dst``; ``innov`` identifies it across layers."""

    id: EdgeId
    src: NeuronId
    dst: NeuronId
    weight: float
    active: bool = True
    innov: uuid.UUID = field(default_factory=uuid.uuid4)

    def update(self, delta: float, nodes: Sequence[Neuron]) -> None:
        """Shift the weight by ``delta``."""
        self.update_weight(self.weight + delta, nodes)

    def calculate(self, val: float) -> float:
        return val * self.weight

    def update_weight(self, weight: float, nodes: Sequence[Neuron]) -> None:
        self.weight = weight
        dst = _node_at(nodes, self.dst)
        if dst is not None:
            dst.update_incoming(self, weight)

    def link_nodes(self, nodes: Sequence[Neuron]) -> None:
        """Register this edge with its source and destination neurons."""
        src = _node_at(nodes, self.src)
        if src is not None:
            src.add_outgoing(self.id)
        dst = _node_at(nodes, self.dst)
        if dst is not None:
            dst.add_incoming(self)

    def enable(self, nodes: Sequence[Neuron]) -> None:
        if self.active:
            return
        self.active = True
        src = _node_at(nodes, self.src)
        if src is not None:
            src.add_outgoing(self.id)
        dst = _node_at(nodes, self.dst)
        if dst is not None:
            dst.update_incoming(self, self.weight)

    def disable(self, nodes: Sequence[Neuron]) -> None:
        """Deactivate; the destination keeps the link with a zero weight."""
        self.active = False
        src = _node_at(nodes, self.src)
        if src is not None:
            src.remove_outgoing(self.id)
        dst = _node_at(nodes, self.dst)
        if dst is not None:
            dst.update_incoming(self, 0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id.index,
            "innov": str(self.innov),
            "src": self.src.index,
            "dst": self.dst.index,
            "weight": self.weight,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Edge:
        return cls(
            id=EdgeId(data["id"]),
            src=NeuronId(data["src"]),
            dst=NeuronId(data["dst"]),
            weight=data["weight"],
            active=data["active"],
            innov=uuid.UUID(data["innov"]),
        )