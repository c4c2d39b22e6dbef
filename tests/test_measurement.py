"""Tests for measurement and sampling."""

import numpy as np
import pytest

from qcsim.circuit import MeasurementAssignment
from qcsim.engine import measurement as m
from qcsim.exceptions import DegenerateCollapseError, IndexOutOfRangeError
from qcsim.state import QuantumState


def plus_state(n=1):
    return QuantumState.from_amplitudes(np.full(2 ** n, 1 / np.sqrt(2 ** n)))


# ---------------------------------------------------------------------------
# Projective measurement
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("bits", ["0", "1", "101", "0110"])
def test_basis_state_measurement_is_deterministic(bits, rng):
    """Basis states always measure to their own bits."""
    state = QuantumState.from_bitstring(bits)
    for qubit in range(len(bits)):
        expected = int(bits[-1 - qubit])
        for _ in range(1000 // len(bits)):
            after, outcome = m.measure(state, qubit, rng)
            assert outcome == expected
            assert after.allclose(state)


def test_measure_collapses_and_renormalizes(rng):
    """Measuring |+⟩ leaves a normalized basis state."""
    bell = QuantumState.from_amplitudes(np.array([1, 0, 0, 1]) / np.sqrt(2))
    after, outcome = m.measure(bell, 0, rng)
    expected_index = 3 if outcome else 0
    assert after.probabilities[expected_index] == pytest.approx(1.0)
    assert after.is_normalized()
    # the partner qubit is now determined
    _, second = m.measure(after, 1, rng)
    assert second == outcome


def test_measure_statistics(rng):
    """|+⟩ measures 1 about half the time."""
    ones = sum(m.measure(plus_state(), 0, rng)[1] for _ in range(4000))
    assert 0.45 < ones / 4000 < 0.55


def test_probability_of_one():
    """P(1) read from the probability vector."""
    state = QuantumState.from_amplitudes([np.sqrt(0.2), 0, np.sqrt(0.8), 0])
    assert m.probability_of_one(state, 1) == pytest.approx(0.8)
    assert m.probability_of_one(state, 0) == pytest.approx(0.0)


def test_collapse_specific_outcome():
    """Forced collapse onto a chosen outcome."""
    state = QuantumState.from_amplitudes([np.sqrt(0.2), np.sqrt(0.8)])
    after = m.collapse(state, 0, 1)
    np.testing.assert_allclose(after.amplitudes, [0, 1], atol=1e-12)


def test_collapse_onto_zero_mass_raises():
    """Collapse onto an empty branch is an error."""
    with pytest.raises(DegenerateCollapseError) as info:
        m.collapse(QuantumState.zero(2), 1, 1)
    assert info.value.qubit == 1
    assert info.value.outcome == 1


def test_collapse_bad_outcome():
    """Outcomes are 0 or 1."""
    with pytest.raises(ValueError):
        m.collapse(QuantumState.zero(1), 0, 2)


def test_measure_out_of_range(rng):
    """Qubit index past the register."""
    with pytest.raises(IndexOutOfRangeError):
        m.measure(QuantumState.zero(2), 2, rng)


def test_measure_never_reports_impossible_outcome():
    """A draw landing on a (numerically) empty branch flips to the other one."""

    class AlwaysLow:
        def random(self, size=None):
            return 0.0

    # P(1) is ~1e-20: the draw 0.0 < p1 picks outcome 1, which has no mass
    state = QuantumState.from_amplitudes([1.0, 1e-10])
    after, outcome = m.measure(state, 0, AlwaysLow())
    assert outcome == 0
    assert after.probabilities[0] == pytest.approx(1.0)


def test_seed_reproducible():
    """Reseeding the default generator repeats outcomes."""
    m.seed(123)
    first = [m.measure(plus_state(), 0)[1] for _ in range(20)]
    m.seed(123)
    second = [m.measure(plus_state(), 0)[1] for _ in range(20)]
    assert first == second


# ---------------------------------------------------------------------------
# Multi-shot sampling
# ---------------------------------------------------------------------------

def test_sampling_converges(rng):
    """Frequencies of |+⟩ converge to 1/2."""
    results = m.sample_measurements(plus_state(), 10_000, rng)
    assert set(results) == {"0", "1"}
    for key, res in results.items():
        assert res.state == key
        assert res.probability == pytest.approx(0.5)
        assert 0.47 <= res.frequency <= 0.53


def test_frequencies_sum_to_one(rng):
    """Frequencies always sum to 1."""
    results = m.sample_measurements(plus_state(3), 777, rng)
    assert sum(r.frequency for r in results.values()) == pytest.approx(1.0)


def test_sampling_only_observes_support(rng):
    """Zero-probability strings never appear."""
    bell = QuantumState.from_amplitudes(np.array([1, 0, 0, 1]) / np.sqrt(2))
    results = m.sample_measurements(bell, 500, rng)
    assert set(results) <= {"00", "11"}


def test_sampling_does_not_collapse(rng):
    """Sampling leaves the state untouched."""
    state = plus_state(2)
    m.sample_measurements(state, 100, rng)
    np.testing.assert_allclose(state.probabilities, [0.25] * 4)


def test_sample_indices_clamped_to_last_nonzero():
    """Draws past the rounded total land on the last non-empty index."""
    class AlmostOne:
        def random(self, size):
            return np.full(size, np.nextafter(1.0, 0.0))

    # a draw at the top of [0, 1) can run past the rounded cumulative sum
    state = QuantumState.from_amplitudes([np.sqrt(0.1)] * 3 + [np.sqrt(0.7)] + [0] * 4)
    indices = m.sample_indices(state, 5, AlmostOne())
    assert set(indices.tolist()) == {3}


def test_sample_requires_positive_shots(rng):
    """Zero shots is rejected."""
    with pytest.raises(ValueError):
        m.sample_indices(plus_state(), 0, rng)


# ---------------------------------------------------------------------------
# Classical register projection
# ---------------------------------------------------------------------------

def test_register_bits_maps_qubits_to_bits():
    """Column c of a row holds the qubit assigned to classical bit c."""
    state = QuantumState.zero(3)
    bits = m.register_bits(state, [MeasurementAssignment(2, 0), MeasurementAssignment(0, 1)])
    assert bits.shape == (8, 2)
    # index 0b100 (qubit 2 set) -> classical bit 0 set
    assert bits[4].tolist() == [1, 0]
    # index 0b001 (qubit 0 set) -> classical bit 1 set
    assert bits[1].tolist() == [0, 1]
    assert bits[0].tolist() == [0, 0]


def test_sample_register_marginals(rng):
    """Unmeasured qubits are summed out of the register probability."""
    # qubit 0 in |+⟩, qubit 1 fixed to 1; only qubit 1 is read out
    state = QuantumState.from_amplitudes(np.array([0, 0, 1, 1]) / np.sqrt(2))
    results = m.sample_register(state, 200, [MeasurementAssignment(1, 0)], rng)
    assert list(results) == ["1"]
    assert results["1"].probability == pytest.approx(1.0)
    assert results["1"].frequency == 1.0


def test_sample_register_wider_than_machine_word(rng):
    """A 70-bit register fed from one qubit yields only all-0 or all-1 strings."""
    state = plus_state()
    assignments = [MeasurementAssignment(0, c) for c in range(70)]
    results = m.sample_register(state, 10, assignments, rng)
    assert set(results) <= {"0" * 70, "1" * 70}
    for result in results.values():
        assert result.probability == pytest.approx(0.5)
    assert sum(r.frequency for r in results.values()) == pytest.approx(1.0)


def test_sample_register_bit_order(rng):
    """Classical bit 0 is the rightmost character of the register string."""
    state = QuantumState.from_bitstring("001")
    assignments = [MeasurementAssignment(0, 2), MeasurementAssignment(1, 0), MeasurementAssignment(2, 1)]
    results = m.sample_register(state, 20, assignments, rng)
    assert list(results) == ["100"]
    assert results["100"].probability == pytest.approx(1.0)


def test_sample_register_requires_assignments(rng):
    """An empty register has nothing to read out."""
    with pytest.raises(ValueError):
        m.sample_register(plus_state(), 10, [], rng)
