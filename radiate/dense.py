"""A layer stored as a graph of neurons and edges that evolution can grow."""

from __future__ import annotations

import copy
import random
import uuid
from dataclasses import dataclass, replace
from typing import Any, Sequence

from . import vectorops
from .activation import Activation, ActivationKind
from .edge import Edge
from .ids import EdgeId, NeuronId
from .kinds import LayerType, NeuronDirection, NeuronType
from .layer import Layer, register_layer
from .neuron import Neuron
from .tracer import Tracer

_MAX_STALLED_PASSES = 10


@dataclass
class _NodeUpdate:
    """Progress of one node during a forward pass.

    While pending, ``value`` holds the partial sum; once activated it holds
    the activated value.
    """

    activated: bool
    value: float
    output: int | None


def _process(updates: list[_NodeUpdate], node: Neuron, output: int | None) -> _NodeUpdate:
    total = node.bias
    pending = 0
    for link in node.incoming:
        src = link.src.index
        if src < len(updates) and updates[src].activated:
            total += updates[src].value * link.weight
        else:
            pending += 1
    if pending:
        return _NodeUpdate(False, total, output)
    node.current_state = total
    node.activate()
    return _NodeUpdate(True, node.activated_value, output)


@register_layer
class Dense(Layer):
    """A layer whose inputs start fully connected to its outputs.

    A ``DENSE_POOL`` layer may later gain hidden nodes and extra edges; while
    it has none, forward passes take a faster direct route.
    """

    def __init__(
        self,
        num_in: int,
        num_out: int,
        layer_type: LayerType,
        activation: Activation,
    ) -> None:
        self.inputs: list[NeuronId] = []
        self.outputs: list[NeuronId] = []
        self.nodes: list[Neuron] = []
        self.edges: list[Edge] = []
        self.edge_innov_map: dict[uuid.UUID, EdgeId] = {}
        self.trace_states: Tracer | None = None
        self.layer_type = layer_type
        self.activation = activation
        self.fast_mode = True

        inputs = [
            self.make_node(NeuronType.INPUT, activation, NeuronDirection.FORWARD)
            for _ in range(num_in)
        ]
        outputs = [
            self.make_node(NeuronType.OUTPUT, activation, NeuronDirection.FORWARD)
            for _ in range(num_out)
        ]
        for node_in in inputs:
            for node_out in outputs:
                self.make_edge(node_in, node_out, random.random() * 2.0 - 1.0)
        self.inputs = inputs
        self.outputs = outputs

    def make_node(
        self,
        neuron_type: NeuronType,
        activation: Activation,
        direction: NeuronDirection,
    ) -> NeuronId:
        """Append a new neuron and return its id."""
        node_id = NeuronId(len(self.nodes))
        self.nodes.append(Neuron(node_id, neuron_type, activation, direction))
        return node_id

    def make_edge(self, src: NeuronId, dst: NeuronId, weight: float) -> EdgeId:
        """Append a new active edge, wire it into its nodes and return its id."""
        edge_id = EdgeId(len(self.edges))
        edge = Edge(edge_id, src, dst, weight, True)
        edge.link_nodes(self.nodes)
        self.edge_innov_map[edge.innov] = edge_id
        self.edges.append(edge)
        return edge_id

    def disable_edge(self, edge_id: EdgeId) -> None:
        if edge_id.index < len(self.edges):
            self.edges[edge_id.index].disable(self.nodes)

    def get_edge_by_innov(self, innov: uuid.UUID) -> Edge | None:
        edge_id = self.edge_innov_map.get(innov)
        if edge_id is None or edge_id.index >= len(self.edges):
            return None
        return self.edges[edge_id.index]

    def contains_edge(self, innov: uuid.UUID) -> bool:
        return self.get_edge_by_innov(innov) is not None

    def _reset_neurons(self) -> None:
        for node in self.nodes:
            node.reset_neuron()

    def get_outputs(self) -> list[float]:
        """Activated values of the output neurons."""
        return [self.nodes[x.index].activated_value for x in self.outputs]

    def get_output_states(self) -> list[float]:
        """Raw summed states of the output neurons."""
        return [self.nodes[x.index].current_state for x in self.outputs]

    def set_output_values(self) -> None:
        """Activate the output neurons together, as softmax needs."""
        states = self.get_output_states()
        if self.activation.kind is ActivationKind.SOFTMAX:
            act = vectorops.softmax(states)
            d_act = vectorops.d_softmax(act)
        else:
            act = vectorops.element_activate(states, self.activation)
            d_act = vectorops.element_deactivate(states, self.activation)
        for neuron_id, value, derivative in zip(self.outputs, act, d_act):
            neuron = self.nodes[neuron_id.index]
            neuron.activated_value = value
            neuron.deactivated_value = derivative

    def update_traces(self) -> None:
        """Record every neuron's values for this step if tracing is on."""
        tracer = self.trace_states
        if tracer is None:
            return
        for node in self.nodes:
            tracer.update_neuron_activation(node.id, node.activated_value)
            tracer.update_neuron_derivative(node.id, node.deactivated_value)
        tracer.index += 1

    def _finish(self, outputs: list[float]) -> list[float]:
        if self.activation.kind is ActivationKind.SOFTMAX:
            self.set_output_values()
            self.update_traces()
            return self.get_outputs()
        self.update_traces()
        return outputs

    def _fast_forward(self, data: Sequence[float]) -> list[float]:
        in_size = len(self.inputs)
        for node, value in zip(self.nodes[:in_size], data):
            node.reset_neuron()
            node.activated_value = value

        outputs = []
        for node in self.nodes[in_size:]:
            node.reset_neuron()
            node.current_state = node.bias + sum(
                value * link.weight for link, value in zip(node.incoming, data)
            )
            node.activate()
            outputs.append(node.activated_value)
        return self._finish(outputs)

    def forward(self, data: Sequence[float]) -> list[float]:
        """Feed ``data`` through the graph.

        Raises ValueError on a wrong input size and RuntimeError when the
        graph cannot settle because of cyclical links.
        """
        if len(data) != len(self.inputs):
            raise ValueError(
                f"Expected {len(self.inputs)} inputs, got {len(data)}"
            )
        if self.fast_mode:
            return self._fast_forward(data)

        outputs: list[float] = []
        updates: list[_NodeUpdate] = []
        pending = 0
        lowest_pending = len(self.nodes)
        values = iter(data)

        for node in self.nodes:
            node.reset_neuron()
            if node.neuron_type is NeuronType.INPUT:
                value = next(values)
                node.activated_value = value
                update = _NodeUpdate(True, value, None)
            elif node.neuron_type is NeuronType.OUTPUT:
                update = _process(updates, node, len(outputs))
                outputs.append(update.value if update.activated else 0.0)
            else:
                update = _process(updates, node, None)
            if not update.activated:
                lowest_pending = min(lowest_pending, len(updates))
                pending += 1
            updates.append(update)

        tries = _MAX_STALLED_PASSES
        while pending:
            changes = 0
            start = lowest_pending
            lowest_pending = len(self.nodes)
            for idx, node in enumerate(self.nodes[start:], start):
                old = updates[idx]
                if old.activated:
                    continue
                update = _process(updates, node, old.output)
                if update.activated:
                    if update.output is not None:
                        outputs[update.output] = update.value
                    pending -= 1
                    changes += 1
                else:
                    lowest_pending = min(lowest_pending, idx)
                updates[idx] = update
            if not changes:
                tries -= 1
                if tries == 0:
                    raise RuntimeError(
                        "Forward pass did not settle: the layer has cyclical links"
                    )

        return self._finish(outputs)

    def backward(self, error: Sequence[float], learning_rate: float) -> list[float]:
        """Adjust weights and biases from output errors; return input errors."""
        path: list[NeuronId] = []
        for neuron_id, value in zip(self.outputs, error, strict=False):
            self.nodes[neuron_id.index].error = value
            path.append(neuron_id)
        if len(error) < len(self.outputs):
            raise IndexError("Fewer errors than layer outputs")

        tracer = self.trace_states
        while path:
            node = self.nodes[path.pop().index]
            curr_error = node.error
            derivative = (
                tracer.neuron_derivative(node.id)
                if tracer is not None
                else node.deactivated_value
            )
            step = curr_error * derivative * learning_rate

            if node.neuron_type is not NeuronType.INPUT:
                node.bias += learning_rate * curr_error
                node.error = 0.0

            for edge_id in [link.id for link in node.incoming]:
                edge = self.edges[edge_id.index]
                if not edge.active:
                    continue
                path.append(edge.src)
                src = self.nodes[edge.src.index]
                src.error += edge.weight * curr_error
                activation = (
                    tracer.neuron_activation(src.id)
                    if tracer is not None
                    else src.activated_value
                )
                edge.update(step * activation, self.nodes)

        output = []
        for neuron_id in self.inputs:
            neuron = self.nodes[neuron_id.index]
            activation = (
                tracer.neuron_activation(neuron.id)
                if tracer is not None
                else neuron.activated_value
            )
            output.append(neuron.error * activation)
            neuron.error = 0.0
        if tracer is not None:
            tracer.index -= 1
        return output

    def reset(self) -> None:
        if self.trace_states is not None:
            self.trace_states.reset()
        self._reset_neurons()

    def add_tracer(self) -> None:
        self.trace_states = Tracer()

    def remove_tracer(self) -> None:
        self.trace_states = None

    def shape(self) -> tuple[int, int]:
        return len(self.inputs), len(self.outputs)

    @classmethod
    def _blank(cls, layer_type: LayerType, activation: Activation) -> Dense:
        return cls(0, 0, layer_type, activation)

    def clone(self) -> Dense:
        """Copy the structure and weights; neuron state values are cleared."""
        twin = self._blank(self.layer_type, self.activation)
        twin.inputs = list(self.inputs)
        twin.outputs = list(self.outputs)
        twin.nodes = [node.clone() for node in self.nodes]
        twin.edges = [replace(edge) for edge in self.edges]
        twin.edge_innov_map = dict(self.edge_innov_map)
        twin.trace_states = copy.deepcopy(self.trace_states)
        twin.fast_mode = self.fast_mode
        return twin

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "Dense",
            "inputs": [x.index for x in self.inputs],
            "outputs": [x.index for x in self.outputs],
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "edge_innov_map": {str(k): v.index for k, v in self.edge_innov_map.items()},
            "trace_states": None if self.trace_states is None else self.trace_states.to_dict(),
            "layer_type": self.layer_type.value,
            "activation": self.activation.to_dict(),
            "fast_mode": self.fast_mode,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Dense:
        layer = cls._blank(
            LayerType(data["layer_type"]), Activation.from_dict(data["activation"])
        )
        layer.inputs = [NeuronId(x) for x in data["inputs"]]
        layer.outputs = [NeuronId(x) for x in data["outputs"]]
        layer.nodes = [Neuron.from_dict(x) for x in data["nodes"]]
        layer.edges = [Edge.from_dict(x) for x in data["edges"]]
        layer.edge_innov_map = {
            uuid.UUID(k): EdgeId(v) for k, v in data["edge_innov_map"].items()
        }
        tracer = data.get("trace_states")
        layer.trace_states = None if tracer is None else Tracer.from_dict(tracer)
        layer.fast_mode = data.get("fast_mode", True)
        return layer

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dense):
            return NotImplemented
        return (
            len(self.nodes) == len(other.nodes)
            and len(self.edges) == len(other.edges)
            and all(a == b for a, b in zip(self.edges, other.edges))
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return f"Dense=[{len(self.nodes)}, {len(self.edges)}]"