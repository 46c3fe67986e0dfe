"""
Errors raised by the simulation core.

ConfigurationError is a caller mistake (bad qubit count, bad range, bad
weights) caught before anything is sampled. The other two signal that the
simulator itself produced an impossible state.
"""


class QuantumSynthError(Exception):
    """Base class for everything raised by quantum-synth."""


class ConfigurationError(QuantumSynthError, ValueError):
    """Invalid qubit count, empty range, malformed weights or gate wiring."""


class NumericalInvariantViolation(QuantumSynthError, ArithmeticError):
    """State vector norm drifted away from 1. Always fatal."""

    def __init__(self, message: str, circuit: str | None = None, norm: float | None = None):
        super().__init__(message)
        self.circuit = circuit
        self.norm = norm


class SamplingDegenerateDistribution(QuantumSynthError):
    """Total probability was ~0 when a measurement was attempted."""

    def __init__(self, message: str, total: float = 0.0):
        super().__init__(message)
        self.total = total
