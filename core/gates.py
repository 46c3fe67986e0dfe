"""
Gate Library: immutable descriptions of unitary operations.

A Gate is a 2x2 unitary, the qubit it acts on, and the (possibly empty) set
of control qubits that must all read 1 for it to act. Multi-qubit gates used
by the generator (CNOT, CZ, Toffoli-style MCX, controlled rotations) are all
expressed this way, so the register only needs one application path.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np

from core.errors import ConfigurationError


class GateKind(Enum):
    H = "h"
    X = "x"
    Y = "y"
    Z = "z"
    S = "s"
    T = "t"
    PHASE = "phase"
    RX = "rx"
    RY = "ry"
    RZ = "rz"


class Axis(Enum):
    X = "x"
    Y = "y"
    Z = "z"


_PARAMETERIZED = {GateKind.PHASE, GateKind.RX, GateKind.RY, GateKind.RZ}

_AXIS_KIND = {Axis.X: GateKind.RX, Axis.Y: GateKind.RY, Axis.Z: GateKind.RZ}


# ── 2x2 matrices ────────────────────────────────────────────────────

H_MATRIX = np.array([[1, 1], [1, -1]], dtype=np.complex128) / np.sqrt(2)
X_MATRIX = np.array([[0, 1], [1, 0]], dtype=np.complex128)
Y_MATRIX = np.array([[0, -1j], [1j, 0]], dtype=np.complex128)
Z_MATRIX = np.array([[1, 0], [0, -1]], dtype=np.complex128)


def phase_matrix(phi: float) -> np.ndarray:
    """Applies e^(i*phi) to |1⟩."""
    return np.array([[1, 0], [0, np.exp(1j * phi)]], dtype=np.complex128)


def rx_matrix(theta: float) -> np.ndarray:
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return np.array([[c, -1j * s], [-1j * s, c]], dtype=np.complex128)


def ry_matrix(theta: float) -> np.ndarray:
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return np.array([[c, -s], [s, c]], dtype=np.complex128)


def rz_matrix(theta: float) -> np.ndarray:
    return np.array([
        [np.exp(-1j * theta / 2), 0],
        [0, np.exp(1j * theta / 2)]
    ], dtype=np.complex128)


def rotation_matrix(axis: Axis, theta: float) -> np.ndarray:
    if axis is Axis.X:
        return rx_matrix(theta)
    if axis is Axis.Y:
        return ry_matrix(theta)
    return rz_matrix(theta)


def is_unitary(matrix: np.ndarray, atol: float = 1e-10) -> bool:
    """True for a 2x2 matrix U with U†U = I."""
    if matrix.shape != (2, 2):
        return False
    return bool(np.allclose(matrix.conj().T @ matrix, np.eye(2), atol=atol))


# ── Gate ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Gate:
    """One unitary operation. Constructed once, applied once, never mutated."""
    kind: GateKind
    target: int
    controls: tuple[int, ...] = ()
    param: float | None = None

    def __post_init__(self):
        if self.kind in _PARAMETERIZED and self.param is None:
            raise ConfigurationError(f"{self.kind.value} gate needs an angle")
        if self.target < 0 or any(c < 0 for c in self.controls):
            raise ConfigurationError(f"Negative qubit index in {self}")
        if self.target in self.controls:
            raise ConfigurationError(f"Qubit {self.target} is both target and control")
        if len(set(self.controls)) != len(self.controls):
            raise ConfigurationError(f"Duplicate control qubits: {self.controls}")

    @property
    def qubits(self) -> tuple[int, ...]:
        return self.controls + (self.target,)

    def matrix(self) -> np.ndarray:
        kind = self.kind
        if kind is GateKind.H:
            return H_MATRIX
        if kind is GateKind.X:
            return X_MATRIX
        if kind is GateKind.Y:
            return Y_MATRIX
        if kind is GateKind.Z:
            return Z_MATRIX
        if kind is GateKind.S:
            return phase_matrix(np.pi / 2)
        if kind is GateKind.T:
            return phase_matrix(np.pi / 4)
        if kind is GateKind.PHASE:
            return phase_matrix(self.param)
        if kind is GateKind.RX:
            return rx_matrix(self.param)
        if kind is GateKind.RY:
            return ry_matrix(self.param)
        return rz_matrix(self.param)

    def apply(self, vm) -> None:
        vm.apply_controlled(self.matrix(), self.target, self.controls)

    def __str__(self):
        name = ("c" * len(self.controls)) + self.kind.value
        arg = f"({self.param:.4f})" if self.param is not None else ""
        wires = ",".join(str(q) for q in self.qubits)
        return f"{name}{arg}[{wires}]"


# ── Constructors ────────────────────────────────────────────────────

def hadamard(target: int) -> Gate:
    return Gate(GateKind.H, target)


def pauli_x(target: int) -> Gate:
    return Gate(GateKind.X, target)


def pauli_y(target: int) -> Gate:
    return Gate(GateKind.Y, target)


def pauli_z(target: int) -> Gate:
    return Gate(GateKind.Z, target)


def s_gate(target: int) -> Gate:
    return Gate(GateKind.S, target)


def t_gate(target: int) -> Gate:
    return Gate(GateKind.T, target)


def phase(target: int, phi: float) -> Gate:
    return Gate(GateKind.PHASE, target, param=float(phi))


def rotation(axis: Axis, theta: float, target: int, controls: tuple[int, ...] = ()) -> Gate:
    """Rotation about X, Y or Z. Empty controls means unconditional."""
    return Gate(_AXIS_KIND[axis], target, tuple(controls), float(theta))


def rx(target: int, theta: float) -> Gate:
    return rotation(Axis.X, theta, target)


def ry(target: int, theta: float) -> Gate:
    return rotation(Axis.Y, theta, target)


def rz(target: int, theta: float) -> Gate:
    return rotation(Axis.Z, theta, target)


def cnot(control: int, target: int) -> Gate:
    return Gate(GateKind.X, target, (control,))


def cz(qubit_a: int, qubit_b: int) -> Gate:
    return Gate(GateKind.Z, qubit_b, (qubit_a,))


def mcx(controls: tuple[int, ...], target: int) -> Gate:
    """Multi-controlled NOT."""
    return Gate(GateKind.X, target, tuple(controls))


def controlled(gate: Gate, *controls: int) -> Gate:
    """Add control qubits to an existing gate."""
    return Gate(gate.kind, gate.target, gate.controls + tuple(controls), gate.param)
