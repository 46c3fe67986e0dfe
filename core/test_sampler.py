"""
Measurement sampler tests: CDF inversion, Born-rule frequencies, partial
measurement collapse and RandomSource reproducibility.
"""

import numpy as np
import pytest

from core.circuit import Circuit, CircuitExecutor
from core.errors import ConfigurationError, SamplingDegenerateDistribution
from core.quantum_vm import NORM_TOLERANCE, QuantumVM
from core.sampler import MeasurementResult, MeasurementSampler, RandomSource, invert_cdf


def test_random_source_is_reproducible():
    a = RandomSource(42)
    b = RandomSource(42)
    assert [a.next_uniform() for _ in range(20)] == [b.next_uniform() for _ in range(20)]
    assert a.draws == 20

    assert RandomSource(42).next_uniform() != RandomSource(43).next_uniform()


def test_random_source_spawn_is_deterministic_and_independent():
    kids_a = RandomSource(7).spawn(3)
    kids_b = RandomSource(7).spawn(3)
    seq_a = [[k.next_uniform() for _ in range(5)] for k in kids_a]
    seq_b = [[k.next_uniform() for _ in range(5)] for k in kids_b]
    assert seq_a == seq_b
    assert seq_a[0] != seq_a[1] != seq_a[2]


def test_next_bits_width():
    source = RandomSource(1)
    for _ in range(50):
        assert 0 <= source.next_bits(128) < 2 ** 128
        assert 0 <= source.next_bits(5) < 32


def test_measurement_result_conversion():
    result = MeasurementResult.from_index(6, (0, 1, 2))
    assert result.bits == (0, 1, 1)
    assert result.value == 6
    assert int(result) == 6
    assert result.bitstring == "110"
    assert len(result) == 3


def test_invert_cdf_boundaries():
    probs = np.array([0.0, 0.25, 0.0, 0.75])
    assert invert_cdf(probs, 0.0) == 1, "Zero-probability states are never chosen"
    assert invert_cdf(probs, 0.2499) == 1
    assert invert_cdf(probs, 0.25) == 3
    assert invert_cdf(probs, 0.9999999999) == 3


def test_invert_cdf_degenerate():
    with pytest.raises(SamplingDegenerateDistribution):
        invert_cdf(np.zeros(4), 0.5)


def test_full_measurement_collapses():
    vm = QuantumVM(2)
    vm.h(0)
    vm.h(1)
    result = MeasurementSampler().measure(vm, RandomSource(3))
    probs = vm.probabilities()
    assert abs(probs[result.value] - 1.0) < 1e-12
    assert result.qubits == (0, 1)


def test_marginal_ordering():
    p = 0.3
    vm = QuantumVM(2)
    vm.ry(1, 2 * np.arcsin(np.sqrt(p)))
    sampler = MeasurementSampler()
    assert np.allclose(sampler.marginal(vm, (1,)), [0.7, 0.3])
    assert np.allclose(sampler.marginal(vm, (0,)), [1.0, 0.0])
    # First listed qubit is the least significant bit of the outcome
    assert np.allclose(sampler.marginal(vm, (0, 1)), [0.7, 0.0, 0.3, 0.0])
    assert np.allclose(sampler.marginal(vm, (1, 0)), [0.7, 0.3, 0.0, 0.0])


def test_partial_measurement_collapses_entangled_partner():
    sampler = MeasurementSampler()
    source = RandomSource(11)
    for _ in range(50):
        vm = QuantumVM(3)
        vm.h(0)
        vm.cx(0, 1)
        vm.cx(0, 2)  # GHZ
        result = sampler.measure_partial(vm, (1,), source)
        assert abs(vm.norm() - 1.0) < NORM_TOLERANCE
        b = result.bits[0]
        expected_index = 7 if b else 0
        assert abs(vm.probabilities()[expected_index] - 1.0) < 1e-12


def test_partial_measurement_keeps_rest_coherent():
    sampler = MeasurementSampler()
    vm = QuantumVM(2)
    vm.h(0)
    vm.h(1)
    sampler.measure_partial(vm, (1,), RandomSource(5))
    # Qubit 0 is still in |+⟩: H brings it back to |0⟩
    vm.h(0)
    assert sampler.marginal(vm, (0,))[0] == pytest.approx(1.0)


def test_partial_measurement_rejects_bad_qubits():
    vm = QuantumVM(2)
    sampler = MeasurementSampler()
    with pytest.raises(ConfigurationError):
        sampler.measure_partial(vm, (), RandomSource(0))
    with pytest.raises(ConfigurationError):
        sampler.measure_partial(vm, (2,), RandomSource(0))
    with pytest.raises(ConfigurationError):
        sampler.measure_partial(vm, (0, 0), RandomSource(0))


@pytest.mark.parametrize("p", [0.1, 0.3, 0.5, 0.85])
def test_rotation_frequency_matches_probability(p):
    """Ry(2·arcsin√p) measured as 1 with frequency p ± 1% over 100k shots."""
    vm = QuantumVM(1)
    vm.ry(0, 2 * np.arcsin(np.sqrt(p)))
    shots = MeasurementSampler().measure_shots(vm, 100_000, RandomSource(2024))
    freq = shots.mean()
    assert abs(freq - p) < 0.01, f"Observed {freq:.4f}, expected {p}"


@pytest.mark.slow
def test_rotation_frequency_full_cycle():
    """Same property with a fresh register per sample."""
    p = 0.3
    circuit = Circuit(1, name="bernoulli").ry(0, 2 * np.arcsin(np.sqrt(p)))
    executor = CircuitExecutor()
    source = RandomSource(99)
    ones = sum(executor.sample(circuit, source).value for _ in range(100_000))
    assert abs(ones / 100_000 - p) < 0.01


def test_bell_circuit_frequencies():
    circuit = Circuit(2, name="bell").h(0).cx(0, 1)
    executor = CircuitExecutor()
    source = RandomSource(8)
    counts = np.bincount([executor.sample(circuit, source).value for _ in range(4000)],
                         minlength=4) / 4000
    assert abs(counts[0] - 0.5) < 0.03
    assert abs(counts[3] - 0.5) < 0.03
    assert counts[1] == 0 and counts[2] == 0
