"""Tests for the gate catalog."""

import numpy as np
import pytest

from qcsim import gates as g
from qcsim.exceptions import InvalidDimensionError, NonUnitaryGateError


# ---------------------------------------------------------------------------
# Unitarity: every gate must satisfy U†U = I
# ---------------------------------------------------------------------------

FIXED_GATES = [
    g.identity, g.pauli_x, g.pauli_y, g.pauli_z, g.hadamard,
    g.s_gate, g.s_dagger, g.t_gate, g.t_dagger,
    g.cnot, g.cz, g.swap, g.toffoli, g.fredkin,
]


@pytest.mark.parametrize("gate", FIXED_GATES, ids=lambda gate: gate.name)
def test_fixed_gate_unitary(gate):
    """Every fixed gate must be unitary: U†U = I."""
    product = gate.matrix.conj().T @ gate.matrix
    np.testing.assert_allclose(product, np.eye(gate.dim), atol=1e-12,
                               err_msg=f"{gate.name} is not unitary")


@pytest.mark.parametrize("gate", FIXED_GATES, ids=lambda gate: gate.name)
def test_fixed_gate_shape(gate):
    assert gate.matrix.shape == (1 << gate.qubits, 1 << gate.qubits)


@pytest.mark.parametrize("factory", [g.rx, g.ry, g.rz, g.phase])
@pytest.mark.parametrize("theta", [0, 0.5, np.pi, 2 * np.pi, -1.3])
def test_param_gate_unitary(factory, theta):
    """Parameterized single-param gates must be unitary for all angles."""
    assert g.is_unitary(factory(theta).matrix, tol=1e-12)


@pytest.mark.parametrize("theta", [0, 0.7, np.pi, -0.3])
def test_u_unitary(theta):
    assert g.is_unitary(g.unitary(theta, 0.5, -0.2).matrix, tol=1e-12)


# ---------------------------------------------------------------------------
# Specific matrix values
# ---------------------------------------------------------------------------

def test_hadamard_involution():
    np.testing.assert_allclose(g.hadamard.matrix @ g.hadamard.matrix, np.eye(2), atol=1e-12)


def test_s_squared_is_z():
    np.testing.assert_allclose(g.s_gate.matrix @ g.s_gate.matrix, g.pauli_z.matrix, atol=1e-12)


def test_t_squared_is_s():
    np.testing.assert_allclose(g.t_gate.matrix @ g.t_gate.matrix, g.s_gate.matrix, atol=1e-12)


def test_daggers_invert():
    np.testing.assert_allclose(g.s_gate.matrix @ g.s_dagger.matrix, np.eye(2), atol=1e-12)
    np.testing.assert_allclose(g.t_gate.matrix @ g.t_dagger.matrix, np.eye(2), atol=1e-12)


def test_cnot_first_target_is_msb():
    """Rows |10⟩ and |11⟩ are exchanged: the first operand is the control."""
    expected = np.array([
        [1, 0, 0, 0],
        [0, 1, 0, 0],
        [0, 0, 0, 1],
        [0, 0, 1, 0],
    ])
    np.testing.assert_allclose(g.cnot.matrix, expected)


def test_toffoli_flips_last_row_pair():
    expected = np.eye(8)
    expected[[6, 7]] = expected[[7, 6]]
    np.testing.assert_allclose(g.toffoli.matrix, expected)


def test_rotation_at_pi_matches_pauli_up_to_phase():
    np.testing.assert_allclose(g.rx(np.pi).matrix, -1j * g.pauli_x.matrix, atol=1e-12)
    np.testing.assert_allclose(g.ry(np.pi).matrix, -1j * g.pauli_y.matrix, atol=1e-12)
    np.testing.assert_allclose(g.rz(np.pi).matrix, -1j * g.pauli_z.matrix, atol=1e-12)


def test_u_reduces_to_hadamard():
    np.testing.assert_allclose(g.unitary(np.pi / 2, 0, np.pi).matrix,
                               g.hadamard.matrix, atol=1e-12)


def test_phase_pi_is_z():
    np.testing.assert_allclose(g.phase(np.pi).matrix, g.pauli_z.matrix, atol=1e-12)


def test_parametrized_names_embed_angles():
    assert g.rx(np.pi / 2).name == "RX(1.571)"
    assert g.phase(0.25).name == "P(0.250)"
    assert g.unitary(1, 2, 3).name == "U(1.000,2.000,3.000)"
    assert g.ry(0.5).params == (0.5,)


def test_rotation_bad_axis():
    with pytest.raises(ValueError):
        g.rotation("W", 1.0)


# ---------------------------------------------------------------------------
# Gate construction
# ---------------------------------------------------------------------------

def test_matrix_is_read_only():
    with pytest.raises(ValueError):
        g.hadamard.matrix[0, 0] = 0


def test_wrong_shape_rejected():
    with pytest.raises(InvalidDimensionError):
        g.Gate("bad", np.eye(4), "B", qubits=1)


def test_bad_arity_rejected():
    with pytest.raises(InvalidDimensionError):
        g.Gate("bad", np.eye(16), "B", qubits=4)


def test_non_unitary_rejected():
    with pytest.raises(NonUnitaryGateError):
        g.Gate("bad", np.array([[1, 1], [0, 1]]), "B")


def test_adjoint():
    adj = g.t_gate.adjoint()
    np.testing.assert_allclose(adj.matrix, g.t_dagger.matrix, atol=1e-12)
    assert adj.symbol == "T†"


def test_gate_equality():
    assert g.rx(0.5) == g.rx(0.5)
    assert g.rx(0.5) != g.rx(0.6)
    assert hash(g.rx(0.5)) == hash(g.rx(0.5))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def test_registry_lookup_by_name_symbol_alias():
    reg = g.STANDARD_GATES
    assert reg["hadamard"] is g.hadamard
    assert reg["H"] is g.hadamard
    assert reg["h"] is g.hadamard
    assert reg["cx"] is g.cnot
    assert reg["CCX"] is g.toffoli
    assert reg["sdg"] is g.s_dagger


def test_registry_keys_are_names():
    assert set(g.STANDARD_GATES) == {gate.name for gate in FIXED_GATES}
    assert len(g.STANDARD_GATES) == len(FIXED_GATES)


def test_registry_containment_matches_item_access():
    """`in` holds exactly for names that `registry[name]` resolves."""
    reg = g.STANDARD_GATES
    for name in ["hadamard", "H", "cx", "ccnot", "rx", "U", "nope"]:
        try:
            reg[name]
            resolvable = True
        except KeyError:
            resolvable = False
        assert (name in reg) == resolvable, name
    assert "rx" not in reg
    assert "cx" in reg


def test_registry_factories():
    """Parametrized names are reported separately and built via get_gate."""
    reg = g.STANDARD_GATES
    assert reg.has_factory("rx")
    assert reg.has_factory("U")
    assert not reg.has_factory("hadamard")
    assert reg.parametrized == ("p", "rx", "ry", "rz", "u")


def test_mapping_get_never_builds_gates():
    """Mapping.get keeps its (key, default) meaning; parameters go to get_gate."""
    reg = g.STANDARD_GATES
    assert reg.get("hadamard") is g.hadamard
    assert reg.get("rx") is None
    assert isinstance(reg.get_gate("rx", 0.5), g.Gate)


def test_get_gate_builds_parametrized():
    gate = g.get_gate("rz", 0.3)
    assert gate == g.rz(0.3)
    assert g.get_gate("u", 0.1, 0.2, 0.3) == g.unitary(0.1, 0.2, 0.3)
    assert g.get_gate("x") is g.pauli_x


def test_get_gate_errors():
    with pytest.raises(KeyError):
        g.get_gate("nope")
    with pytest.raises(ValueError):
        g.get_gate("rx")
    with pytest.raises(ValueError):
        g.get_gate("x", 1.0)
