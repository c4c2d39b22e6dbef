"""
Quantum gate catalog.

Every gate is an immutable :class:`Gate` carrying its unitary matrix
(complex128 numpy array), arity, display symbol and a description.
Parametrized gates are built by constructor functions.

Gate categories:
    - Single-qubit: identity, X, Y, Z, H, S, S†, T, T†
    - Parametrized: RX, RY, RZ (rotation), P (phase), U (generic unitary)
    - Two-qubit: CNOT, CZ, SWAP
    - Three-qubit: Toffoli (CCNOT), Fredkin (CSWAP)

Matrix convention: for a k-qubit gate applied to targets (q0, ..., qk-1),
row/column index bit k-1 is q0 (first target is the most significant bit).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterator, Mapping, Sequence

import numpy as np
from numpy import ndarray

from qcsim import complex as cx
from qcsim.complex import Complex
from qcsim.exceptions import InvalidDimensionError, NonUnitaryGateError

UNITARY_TOLERANCE = 1e-9

# ---------------------------------------------------------------------------
# Gate type
# ---------------------------------------------------------------------------

def _pack(rows: Sequence[Sequence[Complex]]) -> ndarray:
    """Pack a nested list of Complex pairs into a complex128 matrix."""
    return np.array(
        [[cx.to_builtin(entry) for entry in row] for row in rows],
        dtype=np.complex128,
    )


def is_unitary(matrix: ndarray, tol: float = UNITARY_TOLERANCE) -> bool:
    """Check U†U = I within ``tol``."""
    product = matrix.conj().T @ matrix
    return np.allclose(product, np.eye(len(matrix)), atol=tol)


@dataclass(frozen=True, eq=False)
class Gate:
    """
    A named unitary acting on 1, 2 or 3 qubits.

    Attributes
    ----------
    name : str
        Catalog name (``"hadamard"``, ``"cnot"``, ``"RX(1.571)"``, ...).
    matrix : ndarray
        2^qubits × 2^qubits unitary, read-only.
    symbol : str
        Short display symbol (``"H"``, ``"CNOT"``).
    description : str
        Human-readable description.
    qubits : int
        Arity.
    params : tuple of float
        Parameters the gate was built from (empty for fixed gates).
    """

    name: str
    matrix: ndarray = field(repr=False)
    symbol: str
    description: str = ""
    qubits: int = 1
    params: tuple[float, ...] = ()

    def __post_init__(self) -> None:
        if self.qubits not in (1, 2, 3):
            raise InvalidDimensionError(
                f"Gate '{self.name}' arity must be 1, 2 or 3, got {self.qubits}"
            )
        matrix = np.array(self.matrix, dtype=np.complex128)
        dim = 1 << self.qubits
        if matrix.shape != (dim, dim):
            raise InvalidDimensionError(
                f"Gate '{self.name}' acts on {self.qubits} qubit(s) and needs a "
                f"{dim}x{dim} matrix, got shape {matrix.shape}"
            )
        if not is_unitary(matrix):
            raise NonUnitaryGateError(f"Gate '{self.name}' matrix is not unitary")
        matrix.flags.writeable = False
        object.__setattr__(self, "matrix", matrix)

    @property
    def dim(self) -> int:
        return 1 << self.qubits

    @property
    def is_parameterized(self) -> bool:
        return bool(self.params)

    def adjoint(self) -> Gate:
        """Return the inverse gate (conjugate transpose)."""
        return Gate(
            name=f"{self.name}†",
            matrix=self.matrix.conj().T,
            symbol=f"{self.symbol}†",
            description=f"Adjoint of {self.name}",
            qubits=self.qubits,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Gate):
            return NotImplemented
        return (
            self.name == other.name
            and self.qubits == other.qubits
            and np.array_equal(self.matrix, other.matrix)
        )

    def __hash__(self) -> int:
        return hash((self.name, self.qubits))


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_SQRT2_INV = 1.0 / math.sqrt(2.0)
_0 = cx.ZERO
_1 = cx.ONE


def _permutation(dim: int, swaps: Sequence[tuple[int, int]]) -> list[list[Complex]]:
    """Identity with the given basis pairs exchanged."""
    rows = [[_1 if r == c else _0 for c in range(dim)] for r in range(dim)]
    for a, b in swaps:
        rows[a][a], rows[b][b] = _0, _0
        rows[a][b], rows[b][a] = _1, _1
    return rows


# ---------------------------------------------------------------------------
# Single-qubit fixed gates
# ---------------------------------------------------------------------------

identity = Gate(
    "identity",
    _pack([[_1, _0], [_0, _1]]),
    "I",
    "Identity gate - leaves the qubit state unchanged",
)

pauli_x = Gate(
    "pauliX",
    _pack([[_0, _1], [_1, _0]]),
    "X",
    "Pauli-X gate - flips the qubit state (quantum NOT gate)",
)

pauli_y = Gate(
    "pauliY",
    _pack([[_0, Complex(0, -1)], [Complex(0, 1), _0]]),
    "Y",
    "Pauli-Y gate - rotates the qubit state around the Y-axis of the Bloch sphere",
)

pauli_z = Gate(
    "pauliZ",
    _pack([[_1, _0], [_0, Complex(-1, 0)]]),
    "Z",
    "Pauli-Z gate - flips the phase of the |1⟩ state",
)

hadamard = Gate(
    "hadamard",
    _pack([
        [Complex(_SQRT2_INV, 0), Complex(_SQRT2_INV, 0)],
        [Complex(_SQRT2_INV, 0), Complex(-_SQRT2_INV, 0)],
    ]),
    "H",
    "Hadamard gate - creates an equal superposition of |0⟩ and |1⟩",
)

s_gate = Gate(
    "sGate",
    _pack([[_1, _0], [_0, cx.I]]),
    "S",
    "S gate (phase gate) - rotates the qubit state by 90° around the Z-axis",
)

s_dagger = Gate(
    "sDagger",
    _pack([[_1, _0], [_0, cx.conjugate(cx.I)]]),
    "S†",
    "S-dagger gate - rotates the qubit state by -90° around the Z-axis",
)

t_gate = Gate(
    "tGate",
    _pack([[_1, _0], [_0, cx.from_polar(1.0, math.pi / 4)]]),
    "T",
    "T gate - rotates the qubit state by 45° around the Z-axis",
)

t_dagger = Gate(
    "tDagger",
    _pack([[_1, _0], [_0, cx.from_polar(1.0, -math.pi / 4)]]),
    "T†",
    "T-dagger gate - rotates the qubit state by -45° around the Z-axis",
)

# ---------------------------------------------------------------------------
# Multi-qubit fixed gates
# ---------------------------------------------------------------------------

cnot = Gate(
    "cnot",
    _pack(_permutation(4, [(2, 3)])),
    "CNOT",
    "Controlled-NOT gate - flips the target qubit if the control qubit is |1⟩",
    qubits=2,
)

cz = Gate(
    "cz",
    _pack([
        [_1, _0, _0, _0],
        [_0, _1, _0, _0],
        [_0, _0, _1, _0],
        [_0, _0, _0, Complex(-1, 0)],
    ]),
    "CZ",
    "Controlled-Z gate - flips the phase of |11⟩",
    qubits=2,
)

swap = Gate(
    "swap",
    _pack(_permutation(4, [(1, 2)])),
    "SWAP",
    "SWAP gate - exchanges the state of two qubits",
    qubits=2,
)

toffoli = Gate(
    "toffoli",
    _pack(_permutation(8, [(6, 7)])),
    "CCNOT",
    "Toffoli gate (CCNOT) - flips the target qubit if both control qubits are |1⟩",
    qubits=3,
)

fredkin = Gate(
    "fredkin",
    _pack(_permutation(8, [(5, 6)])),
    "CSWAP",
    "Fredkin gate (CSWAP) - swaps the two targets if the control qubit is |1⟩",
    qubits=3,
)

# ---------------------------------------------------------------------------
# Parametrized gates
# ---------------------------------------------------------------------------

def rotation(axis: str, theta: float) -> Gate:
    """
    Rotation about the X, Y or Z axis of the Bloch sphere by ``theta``.

    RX = [[c, -is], [-is, c]], RY = [[c, -s], [s, c]],
    RZ = diag(e^(-iθ/2), e^(iθ/2)) with c = cos(θ/2), s = sin(θ/2).
    """
    axis = axis.upper()
    c = math.cos(theta / 2)
    s = math.sin(theta / 2)
    if axis == "X":
        rows = [[Complex(c, 0), Complex(0, -s)], [Complex(0, -s), Complex(c, 0)]]
    elif axis == "Y":
        rows = [[Complex(c, 0), Complex(-s, 0)], [Complex(s, 0), Complex(c, 0)]]
    elif axis == "Z":
        rows = [
            [cx.from_polar(1.0, -theta / 2), _0],
            [_0, cx.from_polar(1.0, theta / 2)],
        ]
    else:
        raise ValueError(f"Rotation axis must be 'X', 'Y' or 'Z', got {axis!r}")
    return Gate(
        name=f"R{axis}({theta:.3f})",
        matrix=_pack(rows),
        symbol=f"R{axis}",
        description=f"Rotation around {axis}-axis by {theta:.3f} radians",
        params=(float(theta),),
    )


def rx(theta: float) -> Gate:
    return rotation("X", theta)


def ry(theta: float) -> Gate:
    return rotation("Y", theta)


def rz(theta: float) -> Gate:
    return rotation("Z", theta)


def phase(phi: float) -> Gate:
    """Phase gate: diag(1, e^(iφ))."""
    return Gate(
        name=f"P({phi:.3f})",
        matrix=_pack([[_1, _0], [_0, cx.from_polar(1.0, phi)]]),
        symbol="P",
        description=f"Phase gate - adds a phase of {phi:.3f} radians to the |1⟩ state",
        params=(float(phi),),
    )


def unitary(theta: float, phi: float, lam: float) -> Gate:
    """
    Generic single-qubit unitary.

    U(θ, φ, λ) = [[cos(θ/2), -e^(iλ) sin(θ/2)],
                  [e^(iφ) sin(θ/2), e^(i(φ+λ)) cos(θ/2)]]
    """
    c = math.cos(theta / 2)
    s = math.sin(theta / 2)
    rows = [
        [Complex(c, 0), cx.scale(cx.from_polar(1.0, lam), -s)],
        [cx.scale(cx.from_polar(1.0, phi), s), cx.scale(cx.from_polar(1.0, phi + lam), c)],
    ]
    return Gate(
        name=f"U({theta:.3f},{phi:.3f},{lam:.3f})",
        matrix=_pack(rows),
        symbol="U",
        description=(
            f"Unitary gate with parameters theta={theta:.3f}, "
            f"phi={phi:.3f}, lambda={lam:.3f}"
        ),
        params=(float(theta), float(phi), float(lam)),
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class GateRegistry(Mapping[str, Gate]):
    """
    Immutable catalog of fixed gates plus parametrized constructors.

    Lookups are case-insensitive and accept either the gate name or its
    symbol (``registry["hadamard"] is registry["h"]``). Mapping access covers
    fixed gates only; parametrized names such as ``"rx"`` are built through
    :meth:`get_gate` (see :meth:`has_factory`).
    """

    def __init__(
        self,
        gates: Sequence[Gate],
        factories: Mapping[str, tuple[Callable[..., Gate], int]] | None = None,
        aliases: Mapping[str, str] | None = None,
    ) -> None:
        by_name: dict[str, Gate] = {}
        lookup: dict[str, Gate] = {}
        for gate in gates:
            by_name[gate.name] = gate
            lookup[gate.name.lower()] = gate
            lookup.setdefault(gate.symbol.lower(), gate)
        for alias, target in (aliases or {}).items():
            lookup[alias.lower()] = lookup[target.lower()]
        self._gates = MappingProxyType(by_name)
        self._lookup = MappingProxyType(lookup)
        self._factories = MappingProxyType(
            {k.lower(): v for k, v in (factories or {}).items()}
        )

    def __getitem__(self, name: str) -> Gate:
        try:
            return self._lookup[name.lower()]
        except KeyError:
            raise KeyError(
                f"Unknown gate: '{name}'. Available: {sorted(self._gates)}"
            ) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._gates)

    def __len__(self) -> int:
        return len(self._gates)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._lookup

    def has_factory(self, name: str) -> bool:
        """True if ``name`` is a parametrized gate built by :meth:`get_gate`."""
        return name.lower() in self._factories

    @property
    def parametrized(self) -> tuple[str, ...]:
        return tuple(sorted(self._factories))

    def get_gate(self, name: str, *params: float) -> Gate:
        """
        Look up a gate by name, building parametrized gates on demand.

        Raises
        ------
        KeyError
            If the name is unknown.
        ValueError
            If the wrong number of parameters is given.
        """
        key = name.lower()
        if key in self._factories:
            factory, n_params = self._factories[key]
            if len(params) != n_params:
                raise ValueError(
                    f"Gate '{name}' requires {n_params} parameter(s), got {len(params)}"
                )
            return factory(*params)
        gate = self[name]
        if params:
            raise ValueError(f"Gate '{name}' takes no parameters, got {len(params)}")
        return gate


STANDARD_GATES = GateRegistry(
    [
        identity, pauli_x, pauli_y, pauli_z, hadamard,
        s_gate, s_dagger, t_gate, t_dagger,
        cnot, cz, swap, toffoli, fredkin,
    ],
    factories={
        "rx": (rx, 1),
        "ry": (ry, 1),
        "rz": (rz, 1),
        "p": (phase, 1),
        "u": (unitary, 3),
    },
    aliases={
        "x": "pauliX",
        "y": "pauliY",
        "z": "pauliZ",
        "sdg": "sDagger",
        "tdg": "tDagger",
        "cx": "cnot",
        "ccx": "toffoli",
        "ccnot": "toffoli",
        "cswap": "fredkin",
    },
)
"""Process-wide gate catalog, built once at import."""


def get_gate(name: str, *params: float) -> Gate:
    """Look up ``name`` in :data:`STANDARD_GATES`."""
    return STANDARD_GATES.get_gate(name, *params)
