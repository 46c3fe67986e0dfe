"""
Circuit Executor: one feature's generation cycle.

    Allocate → apply gates (and mid-circuit measurements) → measure → discard

A Circuit is a reusable template: the qubit count, an ordered list of steps
and a name for log lines. The executor owns the register for the duration of
one call. Gate application is deterministic; randomness only enters through
Measure steps and the final measurement.
"""

import logging
from dataclasses import dataclass, field

from core import gates as g
from core.errors import (
    ConfigurationError, NumericalInvariantViolation, SamplingDegenerateDistribution,
)
from core.gates import Axis, Gate
from core.quantum_vm import MAX_QUBITS, QuantumVM
from core.sampler import MeasurementResult, MeasurementSampler, RandomSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Measure:
    """Mid-circuit partial measurement of `qubits`, recorded under `label`."""
    qubits: tuple[int, ...]
    label: str


@dataclass
class Circuit:
    """Ordered gate sequence plus the qubit count it needs."""
    n_qubits: int
    name: str = "circuit"
    steps: list[Gate | Measure] = field(default_factory=list)

    def __post_init__(self):
        if not 0 < self.n_qubits <= MAX_QUBITS:
            raise ConfigurationError(
                f"{self.name}: n_qubits={self.n_qubits} outside [1, {MAX_QUBITS}]"
            )
        steps, self.steps = self.steps, []
        self.extend(steps)

    def _check(self, qubits):
        for q in qubits:
            if not 0 <= q < self.n_qubits:
                raise ConfigurationError(
                    f"{self.name}: qubit {q} out of range (n_qubits={self.n_qubits})"
                )

    def append(self, step: Gate | Measure) -> "Circuit":
        if isinstance(step, Gate):
            self._check(step.qubits)
        elif isinstance(step, Measure):
            self._check(step.qubits)
            if step.label in self.measure_labels:
                raise ConfigurationError(f"{self.name}: duplicate measure label {step.label!r}")
        else:
            raise ConfigurationError(f"{self.name}: unsupported step {step!r}")
        self.steps.append(step)
        return self

    def extend(self, steps) -> "Circuit":
        for step in steps:
            self.append(step)
        return self

    # Builder shorthands, mirroring QuantumVM's gate names
    def h(self, qubit: int) -> "Circuit":
        return self.append(g.hadamard(qubit))

    def x(self, qubit: int) -> "Circuit":
        return self.append(g.pauli_x(qubit))

    def ry(self, qubit: int, theta: float, controls: tuple[int, ...] = ()) -> "Circuit":
        return self.append(g.rotation(Axis.Y, theta, qubit, controls))

    def cx(self, control: int, target: int) -> "Circuit":
        return self.append(g.cnot(control, target))

    def measure(self, qubits: tuple[int, ...], label: str) -> "Circuit":
        return self.append(Measure(tuple(qubits), label))

    @property
    def gates(self) -> list[Gate]:
        return [s for s in self.steps if isinstance(s, Gate)]

    @property
    def measure_labels(self) -> list[str]:
        return [s.label for s in self.steps if isinstance(s, Measure)]

    @property
    def depth(self) -> int:
        return len(self.steps)

    def __str__(self):
        body = " ".join(str(s) if isinstance(s, Gate) else f"M{s.qubits}->{s.label}"
                        for s in self.steps)
        return f"{self.name}({self.n_qubits}q): {body}"


@dataclass
class Execution:
    """A register after running a circuit, plus any mid-circuit results."""
    circuit: Circuit
    vm: QuantumVM
    mid: dict[str, MeasurementResult] = field(default_factory=dict)


@dataclass
class CircuitOutcome:
    """Final measurement of one circuit run."""
    circuit_name: str
    result: MeasurementResult
    mid: dict[str, MeasurementResult] = field(default_factory=dict)
    retries: int = 0

    @property
    def value(self) -> int:
        return self.result.value


class CircuitExecutor:
    """Runs circuits on freshly allocated registers."""

    def __init__(self, sampler: MeasurementSampler | None = None):
        self.sampler = sampler or MeasurementSampler()
        self.circuits_run = 0

    def run(self, circuit: Circuit, source: RandomSource | None = None) -> Execution:
        """Apply every step of `circuit` to a new |0...0⟩ register."""
        vm = QuantumVM(circuit.n_qubits, name=circuit.name)
        execution = Execution(circuit=circuit, vm=vm)
        try:
            for step in circuit.steps:
                if isinstance(step, Measure):
                    if source is None:
                        raise ConfigurationError(
                            f"{circuit.name}: mid-circuit measurement needs a RandomSource"
                        )
                    execution.mid[step.label] = self.sampler.measure_partial(
                        vm, step.qubits, source)
                else:
                    step.apply(vm)
        except NumericalInvariantViolation as err:
            logger.error("Invariant violated in circuit %s: %s", circuit.name, err)
            raise
        self.circuits_run += 1
        return execution

    def sample(self, circuit: Circuit, source: RandomSource,
               qubits: tuple[int, ...] | None = None) -> CircuitOutcome:
        """Run then measure `qubits` (all qubits if None).

        A degenerate distribution, whether from a mid-circuit Measure step
        or the final measurement, is retried once on a fresh register; a
        second failure means the gates themselves are broken.
        """
        try:
            return self._sample_once(circuit, source, qubits, retries=0)
        except SamplingDegenerateDistribution as err:
            logger.warning("Degenerate distribution in circuit %s, retrying: %s",
                           circuit.name, err)
        try:
            return self._sample_once(circuit, source, qubits, retries=1)
        except SamplingDegenerateDistribution as err:
            logger.error("Degenerate distribution in circuit %s after retry", circuit.name)
            raise NumericalInvariantViolation(
                f"{circuit.name}: degenerate distribution after retry ({err})",
                circuit=circuit.name,
            ) from err

    def _sample_once(self, circuit: Circuit, source: RandomSource,
                     qubits: tuple[int, ...] | None, retries: int) -> CircuitOutcome:
        execution = self.run(circuit, source)
        if qubits is None:
            result = self.sampler.measure(execution.vm, source)
        else:
            result = self.sampler.measure_partial(execution.vm, tuple(qubits), source)
        return CircuitOutcome(
            circuit_name=circuit.name,
            result=result,
            mid=execution.mid,
            retries=retries,
        )
