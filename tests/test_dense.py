import json
import math
import uuid

import pytest

from radiate.activation import Activation, ActivationKind
from radiate.dense import Dense
from radiate.kinds import LayerType, NeuronDirection, NeuronType
from radiate.layer import layer_from_dict

SIGMOID = Activation(ActivationKind.SIGMOID)
LINEAR = Activation(ActivationKind.LINEAR, 1.0)
SOFTMAX = Activation(ActivationKind.SOFTMAX)


def _zero_biases(layer):
    for node in layer.nodes:
        node.bias = 0.0


def test_construction_is_fully_connected():
    layer = Dense(2, 3, LayerType.DENSE_POOL, SIGMOID)
    assert layer.shape() == (2, 3)
    assert len(layer.nodes) == 5
    assert len(layer.edges) == 6
    for out in layer.outputs:
        assert len(layer.nodes[out.index].incoming) == 2
    for inp in layer.inputs:
        assert len(layer.nodes[inp.index].outgoing) == 3
    assert all(-1.0 <= e.weight <= 1.0 for e in layer.edges)
    assert str(layer) == "Dense=[5, 6]"


def test_sigmoid_forward_in_range():
    layer = Dense(3, 2, LayerType.DENSE, SIGMOID)
    out = layer.forward([0.1, -0.5, 0.9])
    assert len(out) == 2
    assert all(0.0 < v < 1.0 for v in out)
    assert layer.get_outputs() == out


def test_forward_wrong_size():
    layer = Dense(2, 1, LayerType.DENSE, SIGMOID)
    with pytest.raises(ValueError):
        layer.forward([1.0])


def test_fast_and_graph_forward_agree():
    layer = Dense(3, 2, LayerType.DENSE_POOL, SIGMOID)
    data = [0.2, 0.4, -0.7]
    fast = layer.forward(data)
    layer.fast_mode = False
    slow = layer.forward(data)
    assert slow == pytest.approx(fast)


def test_softmax_forward_sums_to_one():
    layer = Dense(3, 4, LayerType.DENSE, SOFTMAX)
    out = layer.forward([0.3, 0.1, 0.5])
    assert sum(out) == pytest.approx(1.0)
    assert all(v > 0.0 for v in out)


def test_set_output_values_softmax_derivative():
    layer = Dense(1, 3, LayerType.DENSE, SOFTMAX)
    for out, state in zip(layer.outputs, [0.5, 1.0, 2.0]):
        layer.nodes[out.index].current_state = state
    assert layer.get_output_states() == [0.5, 1.0, 2.0]
    layer.set_output_values()
    acts = layer.get_outputs()
    assert sum(acts) == pytest.approx(1.0)
    for out in layer.outputs:
        node = layer.nodes[out.index]
        assert node.deactivated_value == pytest.approx(node.activated_value - 1.0)


def test_hidden_node_forward():
    layer = Dense(1, 1, LayerType.DENSE_POOL, LINEAR)
    layer.disable_edge(layer.edges[0].id)
    hidden = layer.make_node(NeuronType.HIDDEN, LINEAR, NeuronDirection.FORWARD)
    layer.make_edge(layer.inputs[0], hidden, 1.0)
    layer.make_edge(hidden, layer.outputs[0], 0.5)
    layer.fast_mode = False
    _zero_biases(layer)
    assert layer.forward([2.0]) == [pytest.approx(1.0)]


def test_cyclical_graph_raises():
    layer = Dense(1, 1, LayerType.DENSE_POOL, SIGMOID)
    h1 = layer.make_node(NeuronType.HIDDEN, SIGMOID, NeuronDirection.FORWARD)
    h2 = layer.make_node(NeuronType.HIDDEN, SIGMOID, NeuronDirection.FORWARD)
    layer.make_edge(h1, h2, 0.5)
    layer.make_edge(h2, h1, 0.5)
    layer.make_edge(h1, layer.outputs[0], 0.5)
    layer.fast_mode = False
    with pytest.raises(RuntimeError):
        layer.forward([1.0])


def test_disable_edge_unlinks_nodes():
    layer = Dense(1, 1, LayerType.DENSE_POOL, SIGMOID)
    edge = layer.edges[0]
    layer.disable_edge(edge.id)
    assert edge.active is False
    assert layer.nodes[edge.src.index].outgoing == []
    assert layer.nodes[edge.dst.index].incoming[0].weight == 0.0


def test_edge_lookup_by_innov():
    layer = Dense(2, 2, LayerType.DENSE, SIGMOID)
    edge = layer.edges[3]
    assert layer.get_edge_by_innov(edge.innov) is edge
    assert layer.contains_edge(edge.innov)
    unknown = uuid.uuid4()
    assert layer.get_edge_by_innov(unknown) is None
    assert not layer.contains_edge(unknown)


def test_backward_reduces_error():
    layer = Dense(2, 1, LayerType.DENSE, LINEAR)
    data, target = [0.5, -0.3], 0.8
    first = abs(target - layer.forward(data)[0])
    for _ in range(100):
        out = layer.forward(data)
        grads = layer.backward([target - out[0]], 0.1)
        assert len(grads) == 2
        layer.reset()
    last = abs(target - layer.forward(data)[0])
    assert last < first
    assert last < 1e-3


def test_tracer_steps_and_rewinds():
    layer = Dense(2, 1, LayerType.DENSE, SIGMOID)
    layer.add_tracer()
    layer.forward([0.1, 0.2])
    layer.forward([0.3, 0.4])
    tracer = layer.trace_states
    assert tracer.index == 2
    assert len(tracer.activations[layer.outputs[0]]) == 2
    layer.backward([0.5], 0.1)
    assert tracer.index == 1
    layer.reset()
    assert tracer.index == 0
    layer.remove_tracer()
    assert layer.trace_states is None


def test_update_traces_records_all_nodes():
    layer = Dense(2, 2, LayerType.DENSE, SIGMOID)
    layer.add_tracer()
    layer.update_traces()
    assert layer.trace_states.index == 1
    assert set(layer.trace_states.derivatives) == {n.id for n in layer.nodes}


def test_clone_is_equal_and_independent():
    layer = Dense(2, 2, LayerType.DENSE_POOL, SIGMOID)
    layer.forward([0.5, 0.5])
    twin = layer.clone()
    assert twin == layer
    out = layer.outputs[0]
    assert layer.nodes[out.index].activated_value > 0.0
    assert twin.nodes[out.index].activated_value == 0.0
    twin.edges[0].update_weight(twin.edges[0].weight + 1.0, twin.nodes)
    assert twin != layer
    assert twin.nodes[out.index].bias == layer.nodes[out.index].bias


def test_dict_round_trip():
    layer = Dense(3, 2, LayerType.DENSE_POOL, SIGMOID)
    layer.add_tracer()
    layer.forward([0.1, 0.2, 0.3])
    data = json.loads(json.dumps(layer.to_dict()))
    assert data["type"] == "Dense"
    rebuilt = Dense.from_dict(data)
    assert rebuilt == layer
    assert rebuilt.trace_states.index == 1
    assert rebuilt.layer_type is LayerType.DENSE_POOL
    generic = layer_from_dict(data)
    assert isinstance(generic, Dense)
    rebuilt.remove_tracer()
    layer.remove_tracer()
    assert rebuilt.forward([0.4, 0.5, 0.6]) == layer.forward([0.4, 0.5, 0.6])


def test_linear_outputs_follow_weights():
    layer = Dense(2, 1, LayerType.DENSE, LINEAR)
    _zero_biases(layer)
    for edge in layer.edges:
        edge.update_weight(1.0, layer.nodes)
    out = layer.forward([0.25, 0.5])
    assert out[0] == pytest.approx(0.75)
    assert math.isclose(layer.get_output_states()[0], out[0])