import pytest

from radiate.activation import Activation, ActivationKind
from radiate.edge import Edge
from radiate.ids import EdgeId, NeuronId
from radiate.kinds import NeuronDirection, NeuronType
from radiate.neuron import Neuron, NeuronLink

TANH = Activation(ActivationKind.TANH)


def _neuron(direction=NeuronDirection.FORWARD, activation=TANH, idx=1):
    return Neuron(NeuronId(idx), NeuronType.OUTPUT, activation, direction)


def _edge(idx=0, weight=0.5):
    return Edge(EdgeId(idx), NeuronId(0), NeuronId(1), weight, True)


def test_bias_is_random_unit_value():
    assert 0.0 <= _neuron().bias < 1.0


def test_link_from_edge():
    edge = _edge(weight=0.25)
    link = NeuronLink.from_edge(edge)
    assert (link.id, link.src, link.weight) == (edge.id, edge.src, edge.weight)


def test_incoming_update_and_remove():
    neuron = _neuron()
    first, second = _edge(0, 0.5), _edge(1, 0.75)
    neuron.add_incoming(first)
    neuron.add_incoming(second)
    neuron.update_incoming(second, 0.125)
    assert [x.weight for x in neuron.incoming] == [0.5, 0.125]
    neuron.remove_incoming(first)
    assert [x.id for x in neuron.incoming] == [second.id]


def test_outgoing_add_and_remove():
    neuron = _neuron()
    neuron.add_outgoing(EdgeId(2))
    neuron.add_outgoing(EdgeId(3))
    neuron.remove_outgoing(EdgeId(2))
    assert neuron.outgoing == [EdgeId(3)]


def test_forward_activation():
    neuron = _neuron()
    neuron.current_state = 0.3
    neuron.activate()
    assert neuron.activated_value == pytest.approx(TANH.activate(0.3))
    assert neuron.deactivated_value == pytest.approx(TANH.deactivate(0.3))
    assert neuron.previous_state == 0.3


def test_recurrent_activation_adds_previous_state():
    neuron = _neuron(NeuronDirection.RECURRENT)
    neuron.previous_state = 0.2
    neuron.current_state = 0.3
    neuron.activate()
    assert neuron.activated_value == pytest.approx(TANH.activate(0.3 + 0.2))
    assert neuron.previous_state == 0.3


def test_softmax_neuron_is_left_untouched():
    neuron = _neuron(activation=Activation(ActivationKind.SOFTMAX))
    neuron.current_state = 0.9
    neuron.activate()
    assert neuron.activated_value == 0.0
    assert neuron.previous_state == 0.0


def test_reset_keeps_previous_state():
    neuron = _neuron()
    neuron.current_state = 0.4
    neuron.activate()
    neuron.error = 1.5
    neuron.reset_neuron()
    assert (neuron.error, neuron.activated_value, neuron.current_state) == (0.0, 0.0, 0.0)
    assert neuron.previous_state == 0.4


def test_clone_clears_values_and_copies_lists():
    neuron = _neuron()
    neuron.add_outgoing(EdgeId(4))
    neuron.current_state = 0.6
    neuron.activate()
    copy = neuron.clone()
    assert copy.bias == neuron.bias
    assert copy.activated_value == 0.0 and copy.previous_state == 0.0
    copy.add_outgoing(EdgeId(5))
    assert neuron.outgoing == [EdgeId(4)]


def test_clone_with_values_keeps_state():
    neuron = _neuron()
    neuron.current_state = 0.6
    neuron.activate()
    copy = neuron.clone_with_values()
    assert copy.activated_value == neuron.activated_value
    assert copy.previous_state == neuron.previous_state


def test_dict_round_trip():
    neuron = _neuron(NeuronDirection.RECURRENT)
    neuron.add_incoming(_edge())
    neuron.add_outgoing(EdgeId(9))
    restored = Neuron.from_dict(neuron.to_dict())
    assert restored.to_dict() == neuron.to_dict()
    assert restored.direction is NeuronDirection.RECURRENT