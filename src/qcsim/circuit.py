"""
Circuit description consumed by the simulator.

A :class:`QuantumCircuit` is an immutable record: id, qubit count, ordered
operations and ordered measurement assignments. Editors and algorithm
builders produce it; the engine only reads it. :class:`CircuitBuilder` offers
a fluent API for constructing one.

Example
-------
>>> from qcsim.circuit import CircuitBuilder
>>> circuit = CircuitBuilder(2).h(0).cx(0, 1).measure_all().build()
>>> circuit.num_gates
2
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Sequence

from qcsim import gates as g
from qcsim.exceptions import (
    IndexOutOfRangeError,
    InvalidDimensionError,
    UnsupportedOperationError,
)
from qcsim.gates import Gate


# ---------------------------------------------------------------------------
# Operation / measurement records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CircuitOperation:
    """A gate applied to ordered targets, optionally conditioned on controls."""

    gate: Gate
    targets: tuple[int, ...]
    controls: tuple[int, ...] = ()
    params: tuple[float, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "targets", tuple(int(q) for q in self.targets))
        object.__setattr__(self, "controls", tuple(int(q) for q in self.controls))
        object.__setattr__(self, "params", tuple(float(p) for p in self.params))

    @property
    def qubits(self) -> tuple[int, ...]:
        """Every qubit the operation touches, controls first."""
        return self.controls + self.targets

    def validate(self, num_qubits: int) -> None:
        """Check indices and shape against an ``num_qubits`` register."""
        if not self.targets:
            raise UnsupportedOperationError(f"Gate '{self.gate.name}' has no targets")
        for q in self.qubits:
            if not 0 <= q < num_qubits:
                raise IndexOutOfRangeError(q, num_qubits)
        if len(set(self.qubits)) != len(self.qubits):
            raise UnsupportedOperationError(
                f"Gate '{self.gate.name}' has overlapping or duplicate qubits "
                f"(targets={self.targets}, controls={self.controls})"
            )

    def __str__(self) -> str:
        ctrl = f" ctrl={list(self.controls)}" if self.controls else ""
        return f"{self.gate.symbol} {list(self.targets)}{ctrl}"


@dataclass(frozen=True)
class MeasurementAssignment:
    """Store the outcome of ``qubit`` in classical bit ``classical``."""

    qubit: int
    classical: int


# ---------------------------------------------------------------------------
# Circuit
# ---------------------------------------------------------------------------

def _new_id() -> str:
    return f"circuit-{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class QuantumCircuit:
    """
    Immutable circuit description.

    Attributes
    ----------
    num_qubits : int
        Register size.
    operations : tuple of CircuitOperation
        Applied in order.
    measurements : tuple of MeasurementAssignment
        Qubit → classical bit assignments, in measurement order.
    id : str
        Identifier echoed into the simulation result.
    """

    num_qubits: int
    operations: tuple[CircuitOperation, ...] = ()
    measurements: tuple[MeasurementAssignment, ...] = ()
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "operations", tuple(self.operations))
        object.__setattr__(
            self,
            "measurements",
            tuple(
                m if isinstance(m, MeasurementAssignment) else MeasurementAssignment(*m)
                for m in self.measurements
            ),
        )

    @property
    def num_gates(self) -> int:
        return len(self.operations)

    @property
    def num_clbits(self) -> int:
        return len(self.measurements)

    @property
    def depth(self) -> int:
        """Circuit depth (longest path through any qubit)."""
        if not self.operations:
            return 0
        qubit_depth = [0] * self.num_qubits
        for op in self.operations:
            max_d = max(qubit_depth[q] for q in op.qubits)
            for q in op.qubits:
                qubit_depth[q] = max_d + 1
        return max(qubit_depth)

    def validate(self) -> None:
        """
        Check everything the simulator relies on before any state exists.

        Raises
        ------
        InvalidDimensionError
            Non-positive qubit count, classical bit out of range or assigned twice.
        IndexOutOfRangeError
            A qubit index outside ``[0, num_qubits)``.
        UnsupportedOperationError
            An operation with overlapping targets and controls.
        """
        if self.num_qubits < 1:
            raise InvalidDimensionError(f"Need at least 1 qubit, got {self.num_qubits}")
        for op in self.operations:
            op.validate(self.num_qubits)
        seen: set[int] = set()
        n_clbits = self.num_clbits
        for m in self.measurements:
            if not 0 <= m.qubit < self.num_qubits:
                raise IndexOutOfRangeError(m.qubit, self.num_qubits)
            if not 0 <= m.classical < n_clbits:
                raise InvalidDimensionError(
                    f"Classical bit {m.classical} out of range for {n_clbits} "
                    f"measurement assignment(s)"
                )
            if m.classical in seen:
                raise InvalidDimensionError(
                    f"Classical bit {m.classical} is assigned more than once"
                )
            seen.add(m.classical)

    def __repr__(self) -> str:
        return (
            f"QuantumCircuit(id={self.id!r}, num_qubits={self.num_qubits}, "
            f"gates={self.num_gates}, measurements={self.num_clbits})"
        )


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class CircuitBuilder:
    """
    Fluent builder for :class:`QuantumCircuit`.

    Parameters
    ----------
    num_qubits : int
        Number of quantum bits.
    circuit_id : str, optional
        Identifier; a random one is generated if omitted.
    """

    def __init__(self, num_qubits: int, circuit_id: str | None = None) -> None:
        if num_qubits < 1:
            raise InvalidDimensionError(f"Need at least 1 qubit, got {num_qubits}")
        self.num_qubits = num_qubits
        self.circuit_id = circuit_id or _new_id()
        self._operations: list[CircuitOperation] = []
        self._measurements: list[MeasurementAssignment] = []

    # -- Internal helpers ---------------------------------------------------

    def apply(self, operation: CircuitOperation) -> CircuitBuilder:
        """Append a prepared operation."""
        operation.validate(self.num_qubits)
        self._operations.append(operation)
        return self

    def _add(
        self,
        gate: Gate,
        targets: Sequence[int],
        controls: Sequence[int] = (),
    ) -> CircuitBuilder:
        return self.apply(
            CircuitOperation(
                gate=gate,
                targets=tuple(targets),
                controls=tuple(controls),
                params=gate.params,
            )
        )

    # -- Single-qubit gates -------------------------------------------------

    def i(self, qubit: int) -> CircuitBuilder:
        return self._add(g.identity, (qubit,))

    def x(self, qubit: int) -> CircuitBuilder:
        return self._add(g.pauli_x, (qubit,))

    def y(self, qubit: int) -> CircuitBuilder:
        return self._add(g.pauli_y, (qubit,))

    def z(self, qubit: int) -> CircuitBuilder:
        return self._add(g.pauli_z, (qubit,))

    def h(self, qubit: int) -> CircuitBuilder:
        return self._add(g.hadamard, (qubit,))

    def s(self, qubit: int) -> CircuitBuilder:
        return self._add(g.s_gate, (qubit,))

    def sdg(self, qubit: int) -> CircuitBuilder:
        return self._add(g.s_dagger, (qubit,))

    def t(self, qubit: int) -> CircuitBuilder:
        return self._add(g.t_gate, (qubit,))

    def tdg(self, qubit: int) -> CircuitBuilder:
        return self._add(g.t_dagger, (qubit,))

    # -- Parametrized single-qubit gates ------------------------------------

    def rx(self, theta: float, qubit: int) -> CircuitBuilder:
        return self._add(g.rx(theta), (qubit,))

    def ry(self, theta: float, qubit: int) -> CircuitBuilder:
        return self._add(g.ry(theta), (qubit,))

    def rz(self, theta: float, qubit: int) -> CircuitBuilder:
        return self._add(g.rz(theta), (qubit,))

    def p(self, phi: float, qubit: int) -> CircuitBuilder:
        return self._add(g.phase(phi), (qubit,))

    def u(self, theta: float, phi: float, lam: float, qubit: int) -> CircuitBuilder:
        return self._add(g.unitary(theta, phi, lam), (qubit,))

    # -- Multi-qubit gates --------------------------------------------------

    def cx(self, control: int, target: int) -> CircuitBuilder:
        """CNOT as a named gate with one control and one target."""
        return self._add(g.cnot, (target,), (control,))

    def cnot(self, control: int, target: int) -> CircuitBuilder:
        return self.cx(control, target)

    def cz(self, q0: int, q1: int) -> CircuitBuilder:
        return self._add(g.cz, (q0, q1))

    def swap(self, q0: int, q1: int) -> CircuitBuilder:
        return self._add(g.swap, (q0, q1))

    def ccx(self, c0: int, c1: int, target: int) -> CircuitBuilder:
        """Toffoli gate."""
        return self._add(g.toffoli, (c0, c1, target))

    def toffoli(self, c0: int, c1: int, target: int) -> CircuitBuilder:
        return self.ccx(c0, c1, target)

    def cswap(self, control: int, q0: int, q1: int) -> CircuitBuilder:
        """Fredkin gate."""
        return self._add(g.fredkin, (control, q0, q1))

    def controlled(
        self, gate: Gate, controls: Sequence[int], targets: Sequence[int]
    ) -> CircuitBuilder:
        """Apply ``gate`` to ``targets`` only where every control qubit is 1."""
        return self._add(gate, targets, controls)

    # -- Measurement --------------------------------------------------------

    def measure(self, qubit: int, classical: int | None = None) -> CircuitBuilder:
        """
        Assign ``qubit``'s outcome to a classical bit.

        The next free classical bit is used when ``classical`` is omitted.
        """
        if not 0 <= qubit < self.num_qubits:
            raise IndexOutOfRangeError(qubit, self.num_qubits)
        if classical is None:
            classical = len(self._measurements)
        self._measurements.append(MeasurementAssignment(qubit, classical))
        return self

    def measure_all(self) -> CircuitBuilder:
        """Measure qubit i into classical bit i for every qubit."""
        for q in range(self.num_qubits):
            self.measure(q, q)
        return self

    def build(self) -> QuantumCircuit:
        circuit = QuantumCircuit(
            num_qubits=self.num_qubits,
            operations=tuple(self._operations),
            measurements=tuple(self._measurements),
            id=self.circuit_id,
        )
        circuit.validate()
        return circuit
