"""
Categorical sampler: any weight vector → a circuit whose measurement
distribution equals it.

Qubit count is ceil(log2(len(weights))); unused basis states get weight 0.
State preparation walks a binary tree from the most significant qubit down.
For every prefix already decided, a controlled Ry on the next qubit splits
the prefix's probability mass between its two halves:

    θ = 2·arcsin(√(p_upper / p_prefix))

Controls that must read 0 are flipped with X before and after the rotation.
"""

import math

import numpy as np

from core.circuit import Circuit, CircuitExecutor
from core.errors import ConfigurationError
from core.sampler import RandomSource

WEIGHT_TOLERANCE = 1e-6


def validate_weights(weights, name: str = "weights") -> np.ndarray:
    """Non-empty, finite, non-negative and summing to 1."""
    w = np.asarray(weights, dtype=float)
    if w.ndim != 1 or len(w) == 0:
        raise ConfigurationError(f"{name}: need a non-empty 1-D weight vector")
    if not np.all(np.isfinite(w)) or np.any(w < 0):
        raise ConfigurationError(f"{name}: weights must be finite and non-negative")
    total = float(w.sum())
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise ConfigurationError(f"{name}: weights sum to {total:.8f}, expected 1")
    return w


def qubits_for(n_categories: int) -> int:
    return max(1, math.ceil(math.log2(n_categories)))


def prepare_distribution(circuit: Circuit, probs: np.ndarray,
                         qubits: tuple[int, ...]) -> Circuit:
    """Append gates loading `probs` onto `qubits` (qubits[0] = LSB).

    `qubits` must start in |0...0⟩. len(probs) must be 2^len(qubits).
    """
    n = len(qubits)
    if len(probs) != 2 ** n:
        raise ConfigurationError(f"Need {2 ** n} probabilities, got {len(probs)}")

    for k in range(n - 1, -1, -1):
        block = 2 ** (k + 1)
        half = 2 ** k
        higher = qubits[k + 1:]
        for prefix in range(2 ** (n - 1 - k)):
            start = prefix * block
            parent = float(probs[start:start + block].sum())
            upper = float(probs[start + half:start + block].sum())
            if parent <= 0.0 or upper <= 0.0:
                continue
            ratio = min(1.0, upper / parent)
            theta = 2 * math.asin(math.sqrt(ratio))

            zeros = [q for j, q in enumerate(higher) if not (prefix >> j) & 1]
            for q in zeros:
                circuit.x(q)
            circuit.ry(qubits[k], theta, controls=tuple(higher))
            for q in zeros:
                circuit.x(q)
    return circuit


class CategoricalSampler:
    """Samples a category index with probability weights[i]."""

    def __init__(self, weights, name: str = "categorical",
                 executor: CircuitExecutor | None = None):
        self.weights = validate_weights(weights, name)
        self.name = name
        self.n_categories = len(self.weights)
        self.n_qubits = qubits_for(self.n_categories)
        self.executor = executor or CircuitExecutor()

        padded = np.zeros(2 ** self.n_qubits)
        padded[:self.n_categories] = self.weights
        self.circuit = prepare_distribution(
            Circuit(self.n_qubits, name=name), padded, tuple(range(self.n_qubits)))

    def sample(self, source: RandomSource) -> int:
        return self.executor.sample(self.circuit, source).value

    def exact_probabilities(self) -> np.ndarray:
        """Born-rule distribution of the prepared state, for checks."""
        return self.executor.run(self.circuit).vm.probabilities()[:self.n_categories]

    def __repr__(self):
        return (f"CategoricalSampler(name={self.name!r}, categories={self.n_categories}, "
                f"qubits={self.n_qubits}, gates={len(self.circuit.gates)})")
