"""Evolution operators for dense layers: growth, weight edits, crossover and distance."""

from __future__ import annotations

import math
import random

from .activation import Activation
from .dense import Dense
from .edge import Edge
from .environment import NeatEnvironment
from .ids import EdgeId, NeuronId
from .kinds import LayerType, NeuronDirection, NeuronType


def _require_pool(layer: Dense) -> None:
    if layer.layer_type is not LayerType.DENSE_POOL:
        raise ValueError("Only DensePool layers can grow nodes and edges")


def _setting(env: NeatEnvironment, name: str) -> float:
    value = getattr(env, name)
    if value is None:
        raise ValueError(f"Environment setting {name!r} is not set")
    return value


def _perturbation(size: float) -> float:
    if not size > 0.0:
        raise ValueError(f"Weight perturbation range must be positive, got {size}")
    return random.uniform(-size, size)


def _random_node_not_of_type(layer: Dense, node_type: NeuronType) -> NeuronId:
    candidates = [node.id for node in layer.nodes if node.neuron_type is not node_type]
    if not candidates:
        raise ValueError(f"Layer has no neuron that is not of type {node_type.value}")
    return random.choice(candidates)


def _exists(layer: Dense, sending: NeuronId, receiving: NeuronId) -> bool:
    return any(edge.src == sending and edge.dst == receiving for edge in layer.edges)


def _cyclical(layer: Dense, sending: NeuronId, receiving: NeuronId) -> bool:
    """Whether ``sending`` can already be reached from ``receiving``."""
    stack = [layer.edges[e.index].dst for e in layer.nodes[receiving.index].outgoing]
    seen: set[NeuronId] = set()
    while stack:
        node_id = stack.pop()
        if node_id == sending:
            return True
        if node_id in seen:
            continue
        seen.add(node_id)
        stack.extend(layer.edges[e.index].dst for e in layer.nodes[node_id.index].outgoing)
    return False


def _valid_connection(layer: Dense, sending: NeuronId, receiving: NeuronId) -> bool:
    return not (
        sending == receiving
        or _exists(layer, sending, receiving)
        or _cyclical(layer, sending, receiving)
    )


def add_node(layer: Dense, activation: Activation, direction: NeuronDirection) -> None:
    """Split a random edge with a new hidden node.

    The edge into the new node gets weight 1.0, the edge out of it keeps the
    old weight, and the split edge is disabled.
    """
    _require_pool(layer)
    if len(layer.nodes) == NeuronId.MAX:
        return
    layer.fast_mode = False
    new_node = layer.make_node(NeuronType.HIDDEN, activation, direction)
    if not layer.edges:
        raise ValueError("Layer has no edge to insert a node into")
    split: Edge = random.choice(layer.edges)
    src, dst, weight, split_id = split.src, split.dst, split.weight, split.id
    layer.make_edge(src, new_node, 1.0)
    layer.make_edge(new_node, dst, weight)
    layer.disable_edge(split_id)


def add_edge(layer: Dense) -> None:
    """Try to connect a random non-output node to a random non-input node.

    No edge is added when the pair is the same node, already connected, or
    would close a cycle.
    """
    _require_pool(layer)
    if len(layer.edges) == EdgeId.MAX:
        return
    layer.fast_mode = False
    sending = _random_node_not_of_type(layer, NeuronType.OUTPUT)
    receiving = _random_node_not_of_type(layer, NeuronType.INPUT)
    if _valid_connection(layer, sending, receiving):
        layer.make_edge(sending, receiving, random.random())


def edit_weights(layer: Dense, editable: float, size: float) -> None:
    """Replace or scale every weight and bias at random.

    With probability ``editable`` a value is replaced by a draw from [0, 1);
    otherwise it is multiplied by a draw from (-size, size).
    """
    for edge in layer.edges:
        if random.random() < editable:
            weight = random.random()
        else:
            weight = edge.weight * _perturbation(size)
        edge.update_weight(weight, layer.nodes)
    for node in layer.nodes:
        if random.random() < editable:
            node.bias = random.random()
        else:
            node.bias *= _perturbation(size)


def crossover(
    child: Dense, parent_two: Dense, env: NeatEnvironment, crossover_rate: float
) -> Dense:
    """Produce a new layer from ``child`` (the fitter parent) and ``parent_two``.

    With probability ``crossover_rate`` shared edges take weights from either
    parent; otherwise the copy is mutated as the environment directs. Raises
    ValueError when a needed environment setting is missing.
    """
    new_child = child.clone()
    if random.random() < crossover_rate:
        for edge in new_child.edges:
            parent_edge = parent_two.get_edge_by_innov(edge.innov)
            if parent_edge is None:
                continue
            if random.random() < 0.5:
                edge.update_weight(parent_edge.weight, new_child.nodes)
            if (not edge.active or not parent_edge.active) and random.random() < _setting(
                env, "reactivate"
            ):
                edge.enable(new_child.nodes)
        return new_child

    if random.random() < _setting(env, "weight_mutate_rate"):
        edit_weights(new_child, _setting(env, "edit_weights"), _setting(env, "weight_perturb"))

    if new_child.layer_type is LayerType.DENSE_POOL:
        if random.random() < _setting(env, "new_node_rate"):
            if not env.activation_functions:
                raise ValueError("Environment has no activation functions to choose from")
            act = random.choice(env.activation_functions)
            if random.random() < _setting(env, "recurrent_neuron_rate"):
                add_node(new_child, act, NeuronDirection.RECURRENT)
            else:
                add_node(new_child, act, NeuronDirection.FORWARD)
        if random.random() < _setting(env, "new_edge_rate"):
            add_edge(new_child)
    return new_child


def _ratio(num: float, den: float) -> float:
    if den == 0:
        return math.nan if num == 0 else math.inf
    return num / den


def distance(one: Dense, two: Dense, env: NeatEnvironment) -> float:
    """Structural distance: 0 for identical edge sets, 2 for disjoint ones."""
    similar = float(sum(1 for innov in one.edge_innov_map if two.contains_edge(innov)))
    return 2.0 - (_ratio(similar, len(one.edges)) + _ratio(similar, len(two.edges)))