"""Evolvable neural networks with NEAT-style dense pools, LSTM and GRU layers."""

__version__ = "0.1.0"