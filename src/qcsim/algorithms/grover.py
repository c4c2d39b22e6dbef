"""
Grover search circuits.

The search register holds ``n`` qubits; one extra ancilla (the last qubit)
is prepared in |−⟩ so a multi-controlled X onto it flips the phase of the
selected basis state. Marked items are ket labels with qubit 0 rightmost,
matching the bit-strings the simulator reports.

Usage:
    from qcsim.algorithms import grover_circuit, search

    circuit = grover_circuit(3, "101", iterations=2)
    print(search("101").found)   # '101'
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional

import numpy as np

from qcsim import gates as g
from qcsim.circuit import CircuitBuilder, QuantumCircuit
from qcsim.engine.simulator import SimulationResult, run_circuit

_BITS = re.compile(r"[01]+")


@dataclass
class GroverResult:
    """Outcome of a Grover search run."""
    marked: str
    found: str
    success_probability: float
    iterations: int
    result: SimulationResult

    @property
    def success(self) -> bool:
        return self.found == self.marked

    def __str__(self) -> str:
        return (f"Grover: searched for {self.marked}, found {self.found} "
                f"(p={self.success_probability:.3f}, iterations={self.iterations})")


def optimal_iterations(num_qubits: int) -> int:
    """floor(π/4 · √(2^n)), at least 1."""
    return max(1, math.floor(math.pi / 4 * math.sqrt(2 ** num_qubits)))


def _mcx_on_ancilla(builder: CircuitBuilder, num_qubits: int) -> None:
    builder.controlled(g.pauli_x, controls=range(num_qubits), targets=(num_qubits,))


def _apply_oracle(builder: CircuitBuilder, num_qubits: int, marked: str) -> None:
    """Phase-flip |marked⟩ by mapping it onto |1...1⟩ around an MCX."""
    flips = [q for q in range(num_qubits) if marked[-1 - q] == "0"]
    for q in flips:
        builder.x(q)
    _mcx_on_ancilla(builder, num_qubits)
    for q in flips:
        builder.x(q)


def _apply_diffusion(builder: CircuitBuilder, num_qubits: int) -> None:
    """Inversion about the mean: H X (MCX) X H on the search register."""
    for q in range(num_qubits):
        builder.h(q)
    for q in range(num_qubits):
        builder.x(q)
    _mcx_on_ancilla(builder, num_qubits)
    for q in range(num_qubits):
        builder.x(q)
    for q in range(num_qubits):
        builder.h(q)


def grover_circuit(num_qubits: int, marked: str, iterations: int = 1) -> QuantumCircuit:
    """
    Build a Grover search circuit over ``num_qubits`` search qubits.

    Raises
    ------
    ValueError
        Non-positive width or iterations, or ``marked`` not a bit-string of
        length ``num_qubits``.
    """
    if num_qubits <= 0:
        raise ValueError("Number of qubits must be positive")
    if len(marked) != num_qubits:
        raise ValueError(f"Marked item must be a binary string of length {num_qubits}")
    if not _BITS.fullmatch(marked):
        raise ValueError("Marked item must be a binary string (0s and 1s only)")
    if iterations < 1:
        raise ValueError(f"iterations must be >= 1, got {iterations}")

    builder = CircuitBuilder(num_qubits + 1, f"grover-{num_qubits}-{marked}-{iterations}")
    for q in range(num_qubits):
        builder.h(q)
    builder.x(num_qubits).h(num_qubits)

    for _ in range(iterations):
        _apply_oracle(builder, num_qubits, marked)
        _apply_diffusion(builder, num_qubits)

    for q in range(num_qubits):
        builder.measure(q, q)
    return builder.build()


def search(marked: str, iterations: Optional[int] = None, shots: int = 1024,
           rng: Optional[np.random.Generator] = None) -> GroverResult:
    """Run Grover search for ``marked`` and report the most frequent outcome."""
    if shots < 2:
        raise ValueError(f"search needs at least 2 shots, got {shots}")
    n = len(marked)
    if iterations is None:
        iterations = optimal_iterations(n)
    circuit = grover_circuit(n, marked, iterations)
    result = run_circuit(circuit, shots=shots, rng=rng)
    found = result.most_frequent()
    probs = result.final_state.probabilities
    search_bits = np.arange(probs.shape[0]) & ((1 << n) - 1)
    success = float(probs[search_bits == int(marked, 2)].sum())
    return GroverResult(
        marked=marked,
        found=found,
        success_probability=success,
        iterations=iterations,
        result=result,
    )
