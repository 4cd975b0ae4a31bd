"""Settings that steer mutation and crossover of networks."""

from __future__ import annotations

from dataclasses import dataclass, field

from .activation import Activation, ActivationKind


def _default_activations() -> list[Activation]:
    return [Activation(ActivationKind.SIGMOID)]


@dataclass
class NeatEnvironment:
    """Evolution settings.

    weight_mutate_rate: chance of editing weights during mutation.
    weight_perturb: weights are scaled by a value drawn from (-perturb, perturb).
    new_node_rate, new_edge_rate: chances of growing the graph.
    recurrent_neuron_rate: chance that a new node is recurrent.
    edit_weights: chance that a weight is replaced instead of perturbed.
    reactivate: chance of re-enabling a disabled edge during crossover.
    """

    weight_mutate_rate: float | None = None
    weight_perturb: float | None = None
    new_node_rate: float | None = None
    new_edge_rate: float | None = None
    recurrent_neuron_rate: float | None = 0.0
    edit_weights: float | None = None
    reactivate: float | None = None
    input_size: int | None = None
    output_size: int | None = None
    activation_functions: list[Activation] = field(default_factory=_default_activations)