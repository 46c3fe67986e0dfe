"""
Correlation Encoder: make feature B's distribution depend on feature A.

One parameterized pattern replaces every conditional-probability table:

  1. Encode A into "encoding" qubits, either by bit-loading its discrete
     value (X on each set bit) or by rotating each encoding qubit by
     Ry(π·a), where a is A normalized to [0, 1].
  2. Controlled Ry(strength·a·max_angle) from encoding qubits onto B's
     qubits. This is the soft bias: B's bits lean towards 1 as a grows.
  3. Optionally CNOT from encoding to target qubits for hard parity
     correlation on top of the bias.

Callers supply the source range, strength, encoding, wiring and whether to
entangle. The encoder never looks at what the features mean.
"""

import math
from dataclasses import dataclass
from enum import Enum

from core import gates as g
from core.errors import ConfigurationError
from core.gates import Axis, Gate


class Encoding(Enum):
    ROTATION = "rotation"
    BITS = "bits"


class Wiring(Enum):
    PAIRWISE = "pairwise"  # encoding[i % m] → target[i]
    FAN_OUT = "fan_out"    # every encoding qubit → every target qubit


@dataclass(frozen=True)
class Coupling:
    """How strongly, and through which wires, a source drives a target."""
    source_range: tuple[float, float]
    strength: float = 0.5
    encoding: Encoding = Encoding.ROTATION
    wiring: Wiring = Wiring.FAN_OUT
    entangle: bool = False
    max_angle: float = math.pi / 2

    def __post_init__(self):
        lo, hi = self.source_range
        if not hi > lo:
            raise ConfigurationError(f"Empty source range {self.source_range}")
        if not 0.0 <= self.strength <= 1.0:
            raise ConfigurationError(f"Coupling strength {self.strength} outside [0, 1]")
        if not 0.0 <= self.max_angle <= math.pi:
            raise ConfigurationError(f"max_angle {self.max_angle} outside [0, π]")

    def normalize(self, value: float) -> float:
        lo, hi = self.source_range
        return min(1.0, max(0.0, (float(value) - lo) / (hi - lo)))

    def bias_angle(self, value: float) -> float:
        """Monotonic in value: 0 at the bottom of the range."""
        return self.strength * self.normalize(value) * self.max_angle


class CorrelationEncoder:
    """Builds the gate subsequence that couples a source to a target."""

    def wires(self, wiring: Wiring, encoding_qubits: tuple[int, ...],
              target_qubits: tuple[int, ...]) -> list[tuple[int, int]]:
        if wiring is Wiring.PAIRWISE:
            m = len(encoding_qubits)
            return [(encoding_qubits[i % m], t) for i, t in enumerate(target_qubits)]
        return [(e, t) for e in encoding_qubits for t in target_qubits]

    def encode_source(self, coupling: Coupling, value: float,
                      encoding_qubits: tuple[int, ...]) -> list[Gate]:
        """Step 1: load the source value onto the encoding qubits."""
        if coupling.encoding is Encoding.BITS:
            discrete = int(round(float(value) - coupling.source_range[0]))
            if discrete < 0 or discrete >= 2 ** len(encoding_qubits):
                raise ConfigurationError(
                    f"Value {value} does not fit in {len(encoding_qubits)} encoding qubits"
                )
            return [g.pauli_x(q) for k, q in enumerate(encoding_qubits)
                    if (discrete >> k) & 1]
        theta = math.pi * coupling.normalize(value)
        return [g.ry(q, theta) for q in encoding_qubits]

    def couple(self, coupling: Coupling, encoding_qubits: tuple[int, ...],
               target_qubits: tuple[int, ...], value: float | None = None) -> list[Gate]:
        """Steps 2 and 3 only, for encoding qubits that already hold the source.

        With no classical value (e.g. the source was measured earlier in the
        same circuit) the bias uses the full strength·max_angle and all of the
        dependence comes through the controls.
        """
        encoding_qubits = tuple(encoding_qubits)
        target_qubits = tuple(target_qubits)
        if not encoding_qubits or not target_qubits:
            raise ConfigurationError("Coupling needs encoding and target qubits")
        if set(encoding_qubits) & set(target_qubits):
            raise ConfigurationError(
                f"Encoding {encoding_qubits} and target {target_qubits} qubits overlap"
            )

        pairs = self.wires(coupling.wiring, encoding_qubits, target_qubits)
        if value is None:
            angle = coupling.strength * coupling.max_angle
        else:
            angle = coupling.bias_angle(value)

        seq = []
        if angle > 0.0:
            seq.extend(g.rotation(Axis.Y, angle, t, (e,)) for e, t in pairs)
        if coupling.entangle:
            seq.extend(g.cnot(e, t) for e, t in pairs)
        return seq

    def encode(self, coupling: Coupling, value: float,
               encoding_qubits: tuple[int, ...],
               target_qubits: tuple[int, ...]) -> list[Gate]:
        """Full encode → bias → (entangle) subsequence."""
        bias = self.couple(coupling, encoding_qubits, target_qubits, value)
        return self.encode_source(coupling, value, tuple(encoding_qubits)) + bias
