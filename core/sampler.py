"""
Measurement Sampler: turns amplitudes into classical bits.

All randomness in the generator enters here, through an explicit
RandomSource. Sampling is CDF inversion against a single uniform draw, so a
fixed seed always reproduces the same sequence of outcomes.

Full measurement collapses the register to one basis state. Partial
measurement samples the marginal over a subset of qubits, zeroes every
amplitude that disagrees with the outcome and rescales the rest by 1/√p.
"""

from dataclasses import dataclass

import numpy as np

from core.errors import ConfigurationError, SamplingDegenerateDistribution
from core.quantum_vm import QuantumVM

DEGENERATE_TOTAL = 1e-12


class RandomSource:
    """Seedable uniform-variate stream.

    Built on a numpy SeedSequence so that independent child streams can be
    spawned for parallel work without sharing generator state.
    """

    def __init__(self, seed: int | np.random.SeedSequence | None = None):
        if isinstance(seed, np.random.SeedSequence):
            self._seq = seed
        else:
            self._seq = np.random.SeedSequence(seed)
        self._rng = np.random.default_rng(self._seq)
        self.draws = 0

    @property
    def entropy(self):
        return self._seq.entropy

    def next_uniform(self) -> float:
        """One float in [0, 1)."""
        self.draws += 1
        return float(self._rng.random())

    def next_int(self, high: int) -> int:
        """One integer in [0, high)."""
        self.draws += 1
        return int(self._rng.integers(0, high))

    def next_bits(self, n_bits: int) -> int:
        """An n_bits-wide random integer, assembled from 32-bit words."""
        value = 0
        for shift in range(0, n_bits, 32):
            width = min(32, n_bits - shift)
            value |= self.next_int(2 ** width) << shift
        return value

    def spawn(self, n: int) -> list["RandomSource"]:
        """n independent child streams. Calling again yields fresh children."""
        return [RandomSource(child) for child in self._seq.spawn(n)]

    def __repr__(self):
        return f"RandomSource(entropy={self._seq.entropy}, draws={self.draws})"


@dataclass(frozen=True)
class MeasurementResult:
    """Classical bits read from a register.

    bits[k] is the value read from qubits[k]; the first listed qubit is the
    least significant bit of `value`.
    """
    bits: tuple[int, ...]
    qubits: tuple[int, ...]

    @staticmethod
    def from_index(index: int, qubits: tuple[int, ...]) -> "MeasurementResult":
        bits = tuple((index >> k) & 1 for k in range(len(qubits)))
        return MeasurementResult(bits=bits, qubits=tuple(qubits))

    @property
    def value(self) -> int:
        return sum(bit << k for k, bit in enumerate(self.bits))

    @property
    def bitstring(self) -> str:
        """Most significant bit first, like format(value, '0nb')."""
        return "".join(str(b) for b in reversed(self.bits))

    def __int__(self):
        return self.value

    def __len__(self):
        return len(self.bits)


def invert_cdf(probs: np.ndarray, u: float) -> int:
    """Index i such that CDF[i-1] <= u * total < CDF[i]."""
    cdf = np.cumsum(probs)
    total = float(cdf[-1]) if len(cdf) else 0.0
    if total < DEGENERATE_TOTAL:
        raise SamplingDegenerateDistribution(
            f"Total probability {total:.3e} is degenerate", total=total
        )
    idx = int(np.searchsorted(cdf, u * total, side="right"))
    # u * total can round up to the last cumulative value
    last_nonzero = int(np.flatnonzero(probs)[-1])
    return min(idx, last_nonzero)


class MeasurementSampler:
    """Draws classical outcomes from a QuantumVM."""

    def marginal(self, vm: QuantumVM, qubits: tuple[int, ...]) -> np.ndarray:
        """P(assignment) for every assignment of `qubits` (first = LSB)."""
        sub_index = self._sub_index(vm, qubits)
        return np.bincount(sub_index, weights=vm.probabilities(),
                           minlength=2 ** len(qubits))

    def measure(self, vm: QuantumVM, source: RandomSource) -> MeasurementResult:
        """Measure every qubit and collapse to the sampled basis state."""
        probs = vm.probabilities()
        index = invert_cdf(probs, source.next_uniform())
        vm.state[:] = 0.0
        vm.state[index] = 1.0
        return MeasurementResult.from_index(index, tuple(range(vm.n_qubits)))

    def measure_partial(self, vm: QuantumVM, qubits: tuple[int, ...],
                        source: RandomSource) -> MeasurementResult:
        """Measure a subset of qubits; the rest stay coherent.

        Phase 1 samples the marginal, phase 2 collapses and renormalizes.
        """
        qubits = tuple(int(q) for q in qubits)
        sub_index = self._sub_index(vm, qubits)
        marginal = np.bincount(sub_index, weights=vm.probabilities(),
                               minlength=2 ** len(qubits))
        outcome = invert_cdf(marginal, source.next_uniform())

        keep = sub_index == outcome
        vm.state[~keep] = 0.0
        vm.state[keep] /= np.sqrt(marginal[outcome])
        vm.check_norm(f"partial measurement of {qubits}")
        return MeasurementResult.from_index(outcome, qubits)

    def measure_shots(self, vm: QuantumVM, n_shots: int, source: RandomSource,
                      qubits: tuple[int, ...] | None = None) -> np.ndarray:
        """Repeated draws without collapse. Returns outcome values."""
        if qubits is None:
            probs = vm.probabilities()
        else:
            probs = self.marginal(vm, qubits)
        return np.array([invert_cdf(probs, source.next_uniform())
                         for _ in range(n_shots)], dtype=np.int64)

    @staticmethod
    def _sub_index(vm: QuantumVM, qubits: tuple[int, ...]) -> np.ndarray:
        if not qubits:
            raise ConfigurationError("Cannot measure an empty set of qubits")
        if len(set(qubits)) != len(qubits):
            raise ConfigurationError(f"Duplicate qubits in measurement: {qubits}")
        for q in qubits:
            if not 0 <= q < vm.n_qubits:
                raise ConfigurationError(
                    f"Qubit {q} out of range for {vm.n_qubits}-qubit register"
                )
        idx = np.arange(vm.dim)
        sub_index = np.zeros(vm.dim, dtype=np.int64)
        for k, q in enumerate(qubits):
            sub_index |= ((idx >> q) & 1) << k
        return sub_index
