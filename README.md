# radiate

Neural networks that can be trained with backpropagation and also crossed
over, mutated and compared in NEAT style. Pure Python, no dependencies.

## Install

    pip install .

For running the tests:

    pip install ".[test]"
    pytest

## Building and training a network

A `Neat` network (`radiate.neat`) is a stack of layers. Each builder method
takes the size of the layer's output and returns the network, so calls can
be chained; the input size is taken from the previous layer, or from
`input_size` for the first one.

```python
from radiate.activation import Activation, ActivationKind
from radiate.kinds import Loss
from radiate.neat import Neat

tanh = Activation(ActivationKind.TANH)
sigmoid = Activation(ActivationKind.SIGMOID)

net = Neat(input_size=2).dense_pool(4, tanh).dense(1, sigmoid)

inputs = [[0.0, 0.0], [1.0, 1.0], [1.0, 0.0], [0.0, 1.0]]
targets = [[0.0], [0.0], [1.0], [1.0]]

net.train(inputs, targets, 0.3, Loss.DIFF, lambda epoch, loss: epoch == 500)
print(net.forward([1.0, 0.0]))
```

`train` keeps running epochs until the `run(epoch, loss)` callback returns
true. It raises `ValueError` when inputs and targets differ in length or the
sample size does not match the network's input size.

Layers available:

- `dense_pool(size, activation)` – a fully connected layer that may gain
  hidden neurons and new connections when evolved.
- `dense(size, activation)` – a fully connected layer with fixed topology.
- `lstm(memory_size, output_size, activation)` – a long short-term memory layer.
- `gru(memory_size, output_size, activation)` – a gated recurrent unit. It
  runs forward only; its `backward` raises `RuntimeError`, so a network with a
  GRU layer can be evolved but not trained.

Activations are `Activation(kind)` or, for `LEAKY_RELU`, `EXP_RELU` and
`LINEAR`, `Activation(kind, alpha)`. `SOFTMAX` is applied across the outputs
of a dense layer. Losses are `Loss.MSE` and `Loss.DIFF`.

A batch size above one (`Neat(input_size=2, batch_size=4)`) makes training
record neuron values for each step so that errors are propagated back
through time.

## Evolving networks

Crossover and mutation are driven by a `NeatEnvironment`
(`radiate.environment`):

```python
from radiate.environment import NeatEnvironment
from radiate.neat import Neat

env = NeatEnvironment(
    input_size=3,
    output_size=1,
    weight_mutate_rate=0.8,
    weight_perturb=1.5,
    new_node_rate=0.03,
    new_edge_rate=0.04,
    edit_weights=0.1,
    reactivate=0.2,
)

one = Neat.base(env)
two = Neat.base(env)
child = Neat.crossover(one, two, env, 0.75)
print(Neat.distance(one, child, env))
```

With probability `crossover_rate`, edges shared by both parents take their
weight from either one and may be re-enabled; otherwise the copy of the first
parent is mutated. A setting the chosen path needs that is left as `None`
raises `ValueError`. `Neat.distance` counts the connection innovations two
networks share: 0 per layer for identical edge sets, 2 for disjoint ones.

The dense-layer operators (`add_node`, `add_edge`, `edit_weights`,
`crossover`, `distance`) are in `radiate.mutation`; `LSTM` and `GRU` have
their own `crossover` and `distance`.

## Saving and loading

```python
net.save("model.json")
restored = Neat.load("model.json")
```

Networks are stored as JSON (`to_dict` / `from_dict`) and come back with the
same layers, weights and topology.

## What it does not do

The package provides the genome operations only. It has no population,
selection, speciation or generation loop to run an evolution, and no command
line tool.