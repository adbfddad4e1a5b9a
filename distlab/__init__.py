"""Simulated RPC network, value encoding, key/value history model and MapReduce pieces."""

__version__ = "0.1.0"