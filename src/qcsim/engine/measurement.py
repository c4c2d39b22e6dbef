"""
Measurement and sampling.

- :func:`measure` performs a single-qubit projective measurement: draw an
  outcome, zero the inconsistent amplitudes, renormalize.
- :func:`sample_measurements` draws many shots from the full basis
  distribution without collapsing: one O(2^n) cumulative sum, then an
  O(n) binary search per shot.

Randomness comes from a numpy ``Generator``. Callers may pass their own;
otherwise a process-wide default generator is used (see :func:`seed`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy import ndarray

from qcsim.circuit import MeasurementAssignment
from qcsim.exceptions import DegenerateCollapseError
from qcsim.state import QuantumState

logger = logging.getLogger(__name__)

COLLAPSE_EPSILON = 1e-12

_default_rng = np.random.default_rng()


def seed(value: int | None) -> None:
    """Reseed the process-wide measurement generator."""
    global _default_rng
    _default_rng = np.random.default_rng(value)


def default_rng() -> np.random.Generator:
    return _default_rng


@dataclass
class MeasurementResult:
    """
    Statistics for one observed bit-string.

    Attributes
    ----------
    state : str
        Bit-string, bit 0 rightmost.
    probability : float
        Theoretical probability of the bit-string in the measured state.
    frequency : float | None
        Observed fraction of shots (``None`` when nothing was sampled).
    """

    state: str
    probability: float
    frequency: float | None = None


# ---------------------------------------------------------------------------
# Single-qubit measurement
# ---------------------------------------------------------------------------

def _bit_mask(state: QuantumState, qubit: int) -> ndarray:
    idx = np.arange(state.dim)
    return ((idx >> qubit) & 1).astype(bool)


def probability_of_one(state: QuantumState, qubit: int) -> float:
    """P(qubit = 1), from the state's cached probabilities."""
    state.check_qubit(qubit)
    return float(state.probabilities[_bit_mask(state, qubit)].sum())


def collapse(state: QuantumState, qubit: int, outcome: int) -> QuantumState:
    """
    Project ``qubit`` onto ``outcome`` and renormalize.

    Raises
    ------
    DegenerateCollapseError
        If the retained probability mass is below ``COLLAPSE_EPSILON``.
    """
    state.check_qubit(qubit)
    if outcome not in (0, 1):
        raise ValueError(f"Outcome must be 0 or 1, got {outcome}")
    keep = _bit_mask(state, qubit)
    if outcome == 0:
        keep = ~keep
    mass = float(state.probabilities[keep].sum())
    if mass < COLLAPSE_EPSILON:
        raise DegenerateCollapseError(qubit, outcome, mass)
    out = np.zeros(state.dim, dtype=np.complex128)
    out[keep] = state.amplitudes[keep] / np.sqrt(mass)
    return QuantumState._adopt(state.qubits, out)


def measure(
    state: QuantumState,
    qubit: int,
    rng: np.random.Generator | None = None,
) -> tuple[QuantumState, int]:
    """
    Projective measurement of one qubit.

    Returns the collapsed state and the outcome (0 or 1). Outcome 1 is
    chosen when a uniform draw falls below P(1). If rounding makes the drawn
    outcome's mass vanish, the complementary outcome is reported instead, so
    a zero-probability result is never produced.
    """
    rng = rng or _default_rng
    p1 = probability_of_one(state, qubit)
    p0 = float(state.probabilities.sum()) - p1
    outcome = 1 if rng.random() < p1 else 0
    if (p1 if outcome else p0) < COLLAPSE_EPSILON:
        logger.warning(
            "Outcome %d on qubit %d has negligible mass (p1=%.3e); reporting %d",
            outcome, qubit, p1, 1 - outcome,
        )
        outcome = 1 - outcome
    return collapse(state, qubit, outcome), outcome


# ---------------------------------------------------------------------------
# Multi-shot sampling
# ---------------------------------------------------------------------------

def sample_indices(
    state: QuantumState,
    shots: int,
    rng: np.random.Generator | None = None,
) -> ndarray:
    """
    Draw ``shots`` basis indices from the state's distribution.

    Each draw r ∈ [0, 1) maps to the smallest index whose prefix sum exceeds
    r. Draws past the final prefix sum (rounding) map to the last index with
    non-zero probability.
    """
    if shots < 1:
        raise ValueError(f"shots must be >= 1, got {shots}")
    rng = rng or _default_rng
    probs = state.probabilities
    cdf = np.cumsum(probs)
    draws = rng.random(shots)
    found = np.searchsorted(cdf, draws, side="right")
    last = int(np.flatnonzero(probs)[-1])
    return np.minimum(found, last)


def sample_measurements(
    state: QuantumState,
    shots: int,
    rng: np.random.Generator | None = None,
) -> dict[str, MeasurementResult]:
    """
    Sample every qubit jointly ``shots`` times.

    Returns
    -------
    dict[str, MeasurementResult]
        Observed basis bit-strings (qubit 0 rightmost) with their
        probability and observed frequency. Frequencies sum to 1.
    """
    outcomes = sample_indices(state, shots, rng)
    unique, counts = np.unique(outcomes, return_counts=True)
    probs = state.probabilities
    results = {}
    for index, count in zip(unique.tolist(), counts.tolist()):
        key = state.bitstring(index)
        results[key] = MeasurementResult(
            state=key,
            probability=float(probs[index]),
            frequency=count / shots,
        )
    return results


def register_bits(
    state: QuantumState, measurements: Sequence[MeasurementAssignment]
) -> ndarray:
    """
    Classical register bits for every basis index.

    Row ``i`` holds the register read out from basis index ``i``; column
    ``c`` is classical bit ``c``. Bits are kept unpacked so registers wider
    than a machine word stay exact.
    """
    idx = np.arange(state.dim)
    bits = np.zeros((state.dim, len(measurements)), dtype=np.uint8)
    for m in measurements:
        bits[:, m.classical] = (idx >> m.qubit) & 1
    return bits


def sample_register(
    state: QuantumState,
    shots: int,
    measurements: Sequence[MeasurementAssignment],
    rng: np.random.Generator | None = None,
) -> dict[str, MeasurementResult]:
    """
    Sample the whole state jointly, then read out the classical register.

    Classical bit ``c`` takes the sampled value of the qubit assigned to it.
    Probabilities are the marginals of each observed register value; only
    the distinct register values present in the state are tabulated.
    """
    if not measurements:
        raise ValueError("sample_register needs at least one measurement assignment")
    bits = register_bits(state, measurements)
    rows, inverse = np.unique(bits, axis=0, return_inverse=True)
    inverse = inverse.reshape(-1)
    marginals = np.bincount(inverse, weights=state.probabilities, minlength=len(rows))
    counts = np.bincount(inverse[sample_indices(state, shots, rng)], minlength=len(rows))
    results = {}
    for row, count, probability in zip(rows, counts.tolist(), marginals.tolist()):
        if not count:
            continue
        key = "".join("1" if b else "0" for b in row[::-1])
        results[key] = MeasurementResult(
            state=key,
            probability=probability,
            frequency=count / shots,
        )
    return results
