"""
Register and gate library tests.

  1. Allocation and limits
  2. Bit order (qubit 0 = least significant bit)
  3. Single, controlled and rotation gates
  4. Normalization after random gate sequences on 1-12 qubits
"""

import numpy as np
import pytest

from core import gates as g
from core.errors import ConfigurationError
from core.gates import Axis, Gate, GateKind
from core.quantum_vm import MAX_QUBITS, NORM_TOLERANCE, QuantumVM


def test_allocation_starts_in_zero_state():
    vm = QuantumVM(3)
    assert vm.dim == 8
    assert vm.state[0] == 1.0
    assert np.all(vm.state[1:] == 0)
    assert abs(vm.norm() - 1.0) < NORM_TOLERANCE


@pytest.mark.parametrize("n", [0, -1, MAX_QUBITS + 1])
def test_allocation_rejects_bad_qubit_counts(n):
    with pytest.raises(ConfigurationError):
        QuantumVM(n)


def test_bit_order_qubit_zero_is_lsb():
    vm = QuantumVM(3)
    vm.x(1)
    probs = vm.probabilities()
    assert abs(probs[2] - 1.0) < 1e-12, "X on qubit 1 should give index 2 (|010⟩)"

    vm = QuantumVM(3)
    vm.h(0)
    probs = vm.probabilities()
    assert abs(probs[0] - 0.5) < 1e-10
    assert abs(probs[1] - 0.5) < 1e-10


def test_bell_state():
    vm = QuantumVM(2)
    vm.h(0)
    vm.cx(0, 1)
    probs = vm.probabilities()
    assert abs(probs[0] - 0.5) < 1e-10, "Bell state: |00⟩ component"
    assert abs(probs[3] - 0.5) < 1e-10, "Bell state: |11⟩ component"
    assert probs[1] < 1e-12 and probs[2] < 1e-12


def test_controlled_gate_needs_every_control():
    vm = QuantumVM(3)
    vm.x(0)
    vm.mcx((0, 1), 2)
    assert abs(vm.probabilities()[1] - 1.0) < 1e-12, "Qubit 1 is 0, target must not flip"

    vm.x(1)
    vm.mcx((0, 1), 2)
    assert abs(vm.probabilities()[7] - 1.0) < 1e-12


def test_controlled_gate_with_target_below_controls():
    vm = QuantumVM(3)
    vm.x(2)
    vm.cx(2, 0)
    assert abs(vm.probabilities()[5] - 1.0) < 1e-12


def test_ry_matrix_matches_definition():
    theta = 0.7
    expected = np.array([[np.cos(theta / 2), -np.sin(theta / 2)],
                         [np.sin(theta / 2), np.cos(theta / 2)]])
    assert np.allclose(g.ry_matrix(theta), expected)


def test_rotation_probability():
    p = 0.3
    vm = QuantumVM(1)
    vm.apply_rotation(Axis.Y, 2 * np.arcsin(np.sqrt(p)), 0)
    assert abs(vm.probabilities()[1] - p) < 1e-12


def test_controlled_rotation_dispatch():
    theta = 1.1
    vm = QuantumVM(2)
    vm.apply_rotation(Axis.Y, theta, 1, controls=(0,))
    assert abs(vm.probabilities()[0] - 1.0) < 1e-12, "Control is 0, no rotation"

    vm = QuantumVM(2)
    vm.x(0)
    vm.apply_rotation(Axis.Y, theta, 1, controls=(0,))
    probs = vm.probabilities()
    assert abs(probs[3] - np.sin(theta / 2) ** 2) < 1e-12


def test_rz_and_phase_do_not_change_probabilities():
    vm = QuantumVM(2)
    vm.h(0)
    vm.h(1)
    before = vm.probabilities().copy()
    vm.rz(0, 0.9)
    vm.phase(1, 2.1)
    vm.s(0)
    vm.t(1)
    vm.cz(0, 1)
    assert np.allclose(vm.probabilities(), before)


def test_invalid_wiring_is_rejected():
    vm = QuantumVM(2)
    with pytest.raises(ConfigurationError):
        vm.h(2)
    with pytest.raises(ConfigurationError):
        vm.cx(1, 1)
    with pytest.raises(ConfigurationError):
        vm.apply_controlled(np.eye(2), 0, (1, 1))


def test_non_unitary_matrix_is_rejected():
    vm = QuantumVM(1)
    with pytest.raises(ConfigurationError):
        vm.apply_single(np.array([[1, 0], [0, 2]]), 0)


def test_gate_descriptions():
    gate = g.controlled(g.ry(2, 0.5), 0, 1)
    assert gate.kind is GateKind.RY
    assert gate.controls == (0, 1)
    assert gate.qubits == (0, 1, 2)
    assert str(gate) == "ccry(0.5000)[0,1,2]"

    with pytest.raises(ConfigurationError):
        Gate(GateKind.RY, 0)  # missing angle
    with pytest.raises(ConfigurationError):
        g.cnot(1, 1)


def test_gate_apply_matches_vm_method():
    a = QuantumVM(3)
    b = QuantumVM(3)
    for gate in (g.hadamard(0), g.cnot(0, 2), g.rotation(Axis.X, 0.4, 1, (2,)), g.pauli_y(1)):
        gate.apply(a)
    b.h(0)
    b.cx(0, 2)
    b.apply_rotation(Axis.X, 0.4, 1, (2,))
    b.y(1)
    assert np.allclose(a.state, b.state)


@pytest.mark.parametrize("n", range(1, 13))
def test_normalization_after_random_sequences(n):
    """Σ|amplitude|² stays 1 within 1e-9 for every supported width."""
    rng = np.random.default_rng(1000 + n)
    vm = QuantumVM(n)
    for _ in range(40):
        kind = rng.choice(["h", "x", "ry", "rx", "rz", "phase", "cx", "cry", "mcx"])
        q = int(rng.integers(0, n))
        angle = float(rng.uniform(0, 2 * np.pi))
        if kind in ("cx", "cry", "mcx") and n < 2:
            kind = "h"
        if kind == "mcx" and n < 3:
            kind = "cx"
        if kind == "h":
            vm.h(q)
        elif kind == "x":
            vm.x(q)
        elif kind == "ry":
            vm.ry(q, angle)
        elif kind == "rx":
            vm.rx(q, angle)
        elif kind == "rz":
            vm.rz(q, angle)
        elif kind == "phase":
            vm.phase(q, angle)
        else:
            wires = [int(w) for w in rng.choice(n, size=3 if kind == "mcx" else 2, replace=False)]
            if kind == "cx":
                vm.cx(wires[0], wires[1])
            elif kind == "cry":
                vm.apply_rotation(Axis.Y, angle, wires[1], (wires[0],))
            else:
                vm.mcx((wires[0], wires[1]), wires[2])
        assert abs(vm.norm() - 1.0) < NORM_TOLERANCE
