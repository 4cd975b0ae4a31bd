import pytest

from radiate.kinds import LayerType, Loss, NeuronDirection, NeuronType


@pytest.mark.parametrize("enum", [NeuronDirection, NeuronType, Loss, LayerType])
def test_round_trip_through_value(enum):
    for member in enum:
        assert enum(member.value) is member


def test_layer_type_serialised_names():
    assert LayerType.DENSE_POOL.value == "DensePool"
    assert LayerType("GRU") is LayerType.GRU


def test_neuron_type_members():
    looked_up = [NeuronType(name) for name in ("Input", "Output", "Hidden")]
    assert len(set(looked_up)) == 3
    assert set(looked_up) == set(NeuronType)
    assert [member.value for member in looked_up] == ["Input", "Output", "Hidden"]


def test_unknown_value_rejected():
    with pytest.raises(ValueError):
        NeuronDirection("Sideways")