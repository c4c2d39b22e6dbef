"""Tests for the dense state representation."""

import pickle

import numpy as np
import pytest

from qcsim.complex import Complex
from qcsim.exceptions import IndexOutOfRangeError, InvalidDimensionError
from qcsim.state import QuantumState


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("n", [1, 2, 5, 10])
def test_zero_state(n):
    state = QuantumState.zero(n)
    assert state.qubits == n
    assert state.dim == 2 ** n
    assert state.vector.shape == (2 * 2 ** n,)
    expected = np.zeros(2 ** n, dtype=np.complex128)
    expected[0] = 1.0
    np.testing.assert_allclose(state.amplitudes, expected)
    assert state.is_normalized()


def test_buffer_is_interleaved():
    state = QuantumState.from_amplitudes([0.6, 0.8j])
    np.testing.assert_allclose(state.vector, [0.6, 0.0, 0.0, 0.8])
    assert state.amplitude(1) == Complex(0.0, 0.8)


def test_basis_state():
    state = QuantumState.basis(3, 5)
    assert state.probabilities[5] == 1.0
    assert state.norm_squared() == 1.0


def test_from_bitstring_qubit_zero_rightmost():
    state = QuantumState.from_bitstring("10")
    assert state.probabilities[2] == 1.0


@pytest.mark.parametrize("bits", ["", "012", "ab"])
def test_from_bitstring_invalid(bits):
    with pytest.raises(ValueError):
        QuantumState.from_bitstring(bits)


def test_invalid_qubit_count():
    with pytest.raises(InvalidDimensionError):
        QuantumState.zero(0)


def test_wrong_buffer_length():
    with pytest.raises(InvalidDimensionError):
        QuantumState(2, np.zeros(6))


def test_amplitude_count_not_power_of_two():
    with pytest.raises(InvalidDimensionError):
        QuantumState.from_amplitudes([1, 0, 0])


def test_basis_index_out_of_range():
    with pytest.raises(InvalidDimensionError):
        QuantumState.basis(2, 4)


# ---------------------------------------------------------------------------
# Immutability
# ---------------------------------------------------------------------------

def test_buffer_is_read_only():
    state = QuantumState.zero(2)
    with pytest.raises(ValueError):
        state.vector[0] = 0.0
    with pytest.raises(ValueError):
        state.amplitudes[0] = 0.0
    with pytest.raises(ValueError):
        state.probabilities[0] = 0.0


def test_constructor_copies_input():
    buf = np.zeros(4)
    buf[0] = 1.0
    state = QuantumState(1, buf)
    buf[0] = 0.0
    assert state.vector[0] == 1.0


def test_probabilities_are_cached():
    state = QuantumState.from_amplitudes(np.full(4, 0.5))
    assert state.probabilities is state.probabilities
    np.testing.assert_allclose(state.probabilities, [0.25] * 4)


def test_pickle_round_trip_keeps_lock():
    state = QuantumState.from_amplitudes([0.6, 0.8])
    clone = pickle.loads(pickle.dumps(state))
    assert clone == state
    assert not clone.vector.flags.writeable


# ---------------------------------------------------------------------------
# Queries and display
# ---------------------------------------------------------------------------

def test_check_qubit():
    state = QuantumState.zero(2)
    state.check_qubit(1)
    with pytest.raises(IndexOutOfRangeError):
        state.check_qubit(2)
    with pytest.raises(IndexOutOfRangeError):
        state.check_qubit(-1)


def test_bitstring_padding():
    assert QuantumState.zero(3).bitstring(1) == "001"


def test_is_normalized_detects_drift():
    state = QuantumState.from_amplitudes([1.0, 0.1])
    assert not state.is_normalized()


def test_to_ket_zero():
    assert QuantumState.zero(2).to_ket() == "1.0|00⟩"


def test_to_ket_skips_small_terms():
    state = QuantumState.from_amplitudes([0.6, 0, 0, 0.8j])
    assert state.to_ket() == "0.6|00⟩ + 0.8i|11⟩"


def test_to_ket_all_below_threshold():
    state = QuantumState.from_amplitudes([1e-12, 1e-12])
    assert state.to_ket() == "0|0⟩"


def test_allclose():
    a = QuantumState.from_amplitudes([1, 0])
    b = QuantumState.from_amplitudes([1 + 1e-12, 0])
    assert a.allclose(b)
    assert a != b
