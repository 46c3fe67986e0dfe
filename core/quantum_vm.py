"""
Quantum VM: exact state vector register for feature circuits.

1-24 qubits, numpy only. No approximations.
Allocate → apply gates → measure → discard. Registers are never reset or
reused; every feature generation gets a fresh one.

Bit order: qubit q is bit q of the basis-state index, so qubit 0 is the
least significant bit. |q2 q1 q0⟩ = |110⟩ is index 6.
"""

import numpy as np

from core.errors import ConfigurationError, NumericalInvariantViolation
from core.gates import (
    Axis, H_MATRIX, X_MATRIX, Y_MATRIX, Z_MATRIX,
    is_unitary, phase_matrix, rotation_matrix,
)

MAX_QUBITS = 24
NORM_TOLERANCE = 1e-9


class QuantumVM:
    """Exact state vector quantum register."""

    def __init__(self, n_qubits: int, name: str = "register"):
        if not isinstance(n_qubits, (int, np.integer)) or n_qubits <= 0:
            raise ConfigurationError(f"n_qubits must be a positive integer, got {n_qubits!r}")
        if n_qubits > MAX_QUBITS:
            raise ConfigurationError(
                f"n_qubits={n_qubits} exceeds limit of {MAX_QUBITS} "
                f"(2^{MAX_QUBITS} = {2 ** MAX_QUBITS} amplitudes)"
            )
        self.n_qubits = int(n_qubits)
        self.dim = 2 ** self.n_qubits
        self.name = name
        self.state = np.zeros(self.dim, dtype=np.complex128)
        self.state[0] = 1.0  # |000...0⟩

    # ── Invariant ───────────────────────────────────────────────────

    def norm(self) -> float:
        return float(np.vdot(self.state, self.state).real)

    def check_norm(self, operation: str = "") -> None:
        """Raise if Σ|amplitude|² has drifted from 1."""
        norm = self.norm()
        if abs(norm - 1.0) > NORM_TOLERANCE:
            raise NumericalInvariantViolation(
                f"{self.name}: norm {norm:.12f} after {operation or 'mutation'}",
                circuit=self.name,
                norm=norm,
            )

    def _axis(self, qubit: int) -> int:
        # reshape([2] * n) puts the most significant bit on axis 0
        return self.n_qubits - 1 - qubit

    def _validate_wires(self, target: int, controls: tuple[int, ...]):
        for q in (target,) + tuple(controls):
            if not 0 <= q < self.n_qubits:
                raise ConfigurationError(
                    f"Qubit {q} out of range for {self.n_qubits}-qubit register"
                )
        if target in controls:
            raise ConfigurationError(f"Qubit {target} is both target and control")
        if len(set(controls)) != len(controls):
            raise ConfigurationError(f"Duplicate control qubits: {controls}")

    # ── Gate application ────────────────────────────────────────────

    def apply_controlled(self, gate: np.ndarray, target: int,
                         controls: tuple[int, ...] = ()):
        """Apply a 2x2 unitary to target wherever every control bit is 1.

        Indexing the control axes with 1 selects that subspace as a view;
        the gate is applied along the target axis inside it and written back.
        """
        controls = tuple(int(c) for c in controls)
        self._validate_wires(target, controls)
        gate = np.asarray(gate, dtype=np.complex128)
        if not is_unitary(gate):
            raise ConfigurationError(f"Gate is not a 2x2 unitary:\n{gate}")

        psi = self.state.reshape([2] * self.n_qubits)
        idx = [slice(None)] * self.n_qubits
        for c in controls:
            idx[self._axis(c)] = 1
        sub = psi[tuple(idx)]

        t_axis = self._axis(target)
        t_idx = t_axis - sum(1 for c in controls if self._axis(c) < t_axis)
        sub = np.moveaxis(sub, t_idx, 0)
        sub_shape = sub.shape
        sub_flat = gate @ sub.reshape(2, -1)
        sub = np.moveaxis(sub_flat.reshape(sub_shape), 0, t_idx)
        psi[tuple(idx)] = sub
        self.state = psi.reshape(self.dim)
        self.check_norm(f"gate on qubit {target} controls={controls}")

    def apply_single(self, gate: np.ndarray, target: int):
        """Apply a 2x2 gate to a single qubit."""
        self.apply_controlled(gate, target, ())

    def apply_rotation(self, axis: Axis, theta: float, target: int,
                       controls: tuple[int, ...] = ()):
        """R_axis(θ) on target, conditioned on controls (empty = unconditional)."""
        self.apply_controlled(rotation_matrix(axis, theta), target, controls)

    # ── Named gates ─────────────────────────────────────────────────

    def h(self, qubit: int):
        """Hadamard."""
        self.apply_single(H_MATRIX, qubit)

    def x(self, qubit: int):
        """Pauli-X (NOT)."""
        self.apply_single(X_MATRIX, qubit)

    def y(self, qubit: int):
        self.apply_single(Y_MATRIX, qubit)

    def z(self, qubit: int):
        """Pauli-Z, phase flip."""
        self.apply_single(Z_MATRIX, qubit)

    def phase(self, qubit: int, phi: float):
        """Phase gate, applies e^(i*phi) to |1⟩."""
        self.apply_single(phase_matrix(phi), qubit)

    def s(self, qubit: int):
        self.phase(qubit, np.pi / 2)

    def t(self, qubit: int):
        self.phase(qubit, np.pi / 4)

    def rx(self, qubit: int, theta: float):
        self.apply_rotation(Axis.X, theta, qubit)

    def ry(self, qubit: int, theta: float):
        """Rotation around Y axis by angle theta."""
        self.apply_rotation(Axis.Y, theta, qubit)

    def rz(self, qubit: int, theta: float):
        self.apply_rotation(Axis.Z, theta, qubit)

    def cx(self, control: int, target: int):
        """CNOT."""
        self.apply_controlled(X_MATRIX, target, (control,))

    def cz(self, qubit_a: int, qubit_b: int):
        """Controlled-Z, phase flip on |11⟩."""
        self.apply_controlled(Z_MATRIX, qubit_b, (qubit_a,))

    def mcx(self, controls: tuple[int, ...], target: int):
        self.apply_controlled(X_MATRIX, target, tuple(controls))

    def superpose_all(self):
        """Put all qubits into equal superposition."""
        for q in range(self.n_qubits):
            self.h(q)

    # ── State inspection ────────────────────────────────────────────

    def probabilities(self) -> np.ndarray:
        """Born rule: |ψ|²."""
        return np.abs(self.state) ** 2

    def entropy(self) -> float:
        """Shannon entropy of the probability distribution (bits)."""
        probs = self.probabilities()
        probs = probs[probs > 0]
        return float(-np.sum(probs * np.log2(probs)))

    def __repr__(self):
        return (f"QuantumVM(name={self.name!r}, n_qubits={self.n_qubits}, "
                f"entropy={self.entropy():.2f} bits)")
