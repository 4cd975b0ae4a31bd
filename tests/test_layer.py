import pytest

from radiate.layer import Layer, layer_from_dict, register_layer


class _Scale(Layer):
    def __init__(self, factor, size):
        self.factor = factor
        self.size = size

    def forward(self, inputs):
        if len(inputs) != self.size:
            raise ValueError("size mismatch")
        return [x * self.factor for x in inputs]

    def backward(self, errors, learning_rate):
        return [e * self.factor for e in errors]

    def shape(self):
        return (self.size, self.size)

    def to_dict(self):
        return {"type": "_Scale", "factor": self.factor, "size": self.size}

    @classmethod
    def from_dict(cls, data):
        return cls(data["factor"], data["size"])


register_layer(_Scale)


def test_abstract_layer_cannot_be_instantiated():
    with pytest.raises(TypeError):
        Layer()


def test_register_layer_returns_class():
    assert register_layer(_Scale) is _Scale


def test_register_rejects_non_layer():
    with pytest.raises(TypeError):
        register_layer(int)


def test_layer_from_dict_round_trip():
    layer = _Scale(3.0, 2)
    rebuilt = layer_from_dict(layer.to_dict())
    assert isinstance(rebuilt, _Scale)
    assert rebuilt.forward([1.0, 2.0]) == layer.forward([1.0, 2.0])
    assert rebuilt.shape() == (2, 2)


def test_layer_from_dict_unknown_type():
    with pytest.raises(ValueError):
        layer_from_dict({"type": "Missing"})


def test_layer_from_dict_without_type():
    with pytest.raises(ValueError):
        layer_from_dict({})


def test_default_clone_is_independent():
    layer = _Scale(2.0, 1)
    twin = layer.clone()
    twin.factor = 5.0
    assert layer.forward([1.0]) == [2.0]
    assert twin.forward([1.0]) == [5.0]


def test_default_hooks_leave_layer_unchanged():
    layer = _Scale(2.0, 1)
    assert layer.reset() is None
    assert layer.add_tracer() is None
    assert layer.remove_tracer() is None
    assert layer.forward([4.0]) == [8.0]
    assert layer.backward([1.0], 0.1) == [2.0]