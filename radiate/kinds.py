"""Enumerations describing neurons, layers and loss functions."""

from __future__ import annotations

from enum import Enum


class NeuronDirection(Enum):
    """Whether a neuron feeds its previous state back into itself."""

    FORWARD = "Forward"
    RECURRENT = "Recurrent"


class NeuronType(Enum):
    """Role of a neuron inside a layer graph."""

    INPUT = "Input"
    OUTPUT = "Output"
    HIDDEN = "Hidden"


class Loss(Enum):
    """Loss function used while training."""

    MSE = "MSE"
    DIFF = "Diff"


class LayerType(Enum):
    """Kind of layer held by a network."""

    DENSE_POOL = "DensePool"
    DENSE = "Dense"
    LSTM = "LSTM"
    GRU = "GRU"