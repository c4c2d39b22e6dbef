"""
Gate application engine.

Every function takes a :class:`QuantumState` and returns a new one; the
input buffer is only read. Per-gate cost is O(2^n · 2^k) for a k-qubit
gate, never O(4^n): the full 2^n × 2^n operator is never built.

Dispatch order in :func:`apply_gate`:
    1. one-qubit gate, one target, no controls  -> pairwise update
    2. two-qubit gate, two targets, no controls -> 4x4 block update
    3. ``cnot`` with one control and one target -> amplitude swap
    4. anything else                            -> controlled k-qubit block update
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

import numpy as np
from numpy import ndarray

from qcsim.circuit import CircuitOperation
from qcsim.exceptions import IndexOutOfRangeError, UnsupportedOperationError
from qcsim.state import QuantumState

logger = logging.getLogger(__name__)


def apply_gate(state: QuantumState, operation: CircuitOperation) -> QuantumState:
    """
    Apply one circuit operation and return the resulting state.

    Raises
    ------
    IndexOutOfRangeError
        A target or control lies outside ``[0, state.qubits)``.
    UnsupportedOperationError
        Duplicate/overlapping qubits, or a target count that cannot be
        reconciled with the gate's arity.
    """
    operation.validate(state.qubits)
    gate = operation.gate
    targets = operation.targets
    controls = operation.controls
    amps = state.amplitudes

    if gate.qubits == 1 and len(targets) == 1 and not controls:
        out = _single_qubit(amps, gate.matrix, targets[0])
    elif gate.qubits == 2 and len(targets) == 2 and not controls:
        out = _block_update(amps, gate.matrix, targets)
    elif gate.name == "cnot" and len(targets) == 1 and len(controls) == 1:
        out = _cnot(amps, controls[0], targets[0])
    else:
        operands, conditions = _resolve_general(operation)
        logger.debug(
            "General path for %s: operands=%s controls=%s",
            gate.name, operands, conditions,
        )
        out = _block_update(amps, gate.matrix, operands, conditions)

    return QuantumState._adopt(state.qubits, out)


def apply_matrix(
    state: QuantumState,
    matrix: ndarray,
    targets: Sequence[int],
    controls: Sequence[int] = (),
) -> QuantumState:
    """
    Apply a raw 2^k × 2^k matrix to ``targets``, conditioned on ``controls``.

    The first target is the most significant bit of the matrix index.
    """
    matrix = np.asarray(matrix, dtype=np.complex128)
    if not targets:
        raise UnsupportedOperationError("apply_matrix needs at least one target")
    qubits = tuple(targets) + tuple(controls)
    for q in qubits:
        state.check_qubit(q)
    if len(set(qubits)) != len(qubits):
        raise UnsupportedOperationError(f"Overlapping qubits in {qubits}")
    dim = 1 << len(targets)
    if matrix.shape != (dim, dim):
        raise UnsupportedOperationError(
            f"{len(targets)} target(s) need a {dim}x{dim} matrix, got {matrix.shape}"
        )
    out = _block_update(state.amplitudes, matrix, tuple(targets), tuple(controls))
    return QuantumState._adopt(state.qubits, out)


def apply_operations(
    state: QuantumState, operations: Iterable[CircuitOperation]
) -> QuantumState:
    """Apply ``operations`` in order."""
    for op in operations:
        state = apply_gate(state, op)
    return state


# ---------------------------------------------------------------------------
# Shape resolution
# ---------------------------------------------------------------------------

def _resolve_general(
    operation: CircuitOperation,
) -> tuple[tuple[int, ...], tuple[int, ...]]:
    """
    Split an operation into (matrix operands, extra control qubits).

    A gate whose matrix already encodes ``j`` controls (e.g. Toffoli given as
    2 controls + 1 target) takes its missing operands from the end of the
    control list; any remaining controls condition the whole gate.
    """
    gate = operation.gate
    targets = operation.targets
    controls = operation.controls
    missing = gate.qubits - len(targets)
    if missing < 0 or missing > len(controls):
        raise UnsupportedOperationError(
            f"Gate '{gate.name}' acts on {gate.qubits} qubit(s) but got "
            f"{len(targets)} target(s) and {len(controls)} control(s)"
        )
    split = len(controls) - missing
    return controls[split:] + targets, controls[:split]


# ---------------------------------------------------------------------------
# Kernels
# ---------------------------------------------------------------------------

def _single_qubit(amps: ndarray, m: ndarray, target: int) -> ndarray:
    """
    Pairwise update of every (|..0..⟩, |..1..⟩) pair on ``target``.

    Each pair is read once and both of its output slots are written once.
    """
    bit = 1 << target
    idx = np.arange(amps.shape[0])
    i0 = idx[(idx & bit) == 0]
    i1 = i0 | bit
    a0 = amps[i0]
    a1 = amps[i1]
    out = np.empty_like(amps)
    out[i0] = m[0, 0] * a0 + m[0, 1] * a1
    out[i1] = m[1, 0] * a0 + m[1, 1] * a1
    return out


def _cnot(amps: ndarray, control: int, target: int) -> ndarray:
    """Swap the target-0/target-1 amplitudes wherever the control bit is 1."""
    cbit = 1 << control
    tbit = 1 << target
    out = amps.copy()
    idx = np.arange(amps.shape[0])
    lo = idx[((idx & cbit) != 0) & ((idx & tbit) == 0)]
    hi = lo | tbit
    out[lo], out[hi] = amps[hi], amps[lo]
    return out


def _block_update(
    amps: ndarray,
    matrix: ndarray,
    targets: Sequence[int],
    controls: Sequence[int] = (),
) -> ndarray:
    """
    Apply a 2^k × 2^k matrix to ``targets`` where every control bit is 1.

    The indices with all target bits cleared ("bases") each own a block of
    2^k amplitudes, one per target pattern p. Output pattern q of a block
    accumulates ``matrix[q, p] * amp[base | offset(p)]`` over every p.
    Indices whose controls are not all 1 are copied through unchanged.
    """
    k = len(targets)
    target_mask = 0
    for q in targets:
        target_mask |= 1 << q
    control_mask = 0
    for q in controls:
        control_mask |= 1 << q

    idx = np.arange(amps.shape[0])
    bases = idx[((idx & target_mask) == 0) & ((idx & control_mask) == control_mask)]

    # offsets[p]: pattern p scattered onto the target bits, first target = MSB
    offsets = np.zeros(1 << k, dtype=idx.dtype)
    for p in range(1 << k):
        for pos, q in enumerate(targets):
            if (p >> (k - 1 - pos)) & 1:
                offsets[p] |= 1 << q

    block_idx = offsets[:, None] | bases[None, :]
    if controls:
        out = amps.copy()
    else:
        out = np.zeros_like(amps)
    out[block_idx] = matrix @ amps[block_idx]
    return out
