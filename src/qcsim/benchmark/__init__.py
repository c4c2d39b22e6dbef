"""
Simulator Benchmark Harness
===========================
Time the engine on generated circuits of growing width.

Usage:
    from qcsim.benchmark import benchmark, scaling_sweep, summary

    print(benchmark(12, 30))
    results = scaling_sweep(range(2, 16, 2))
    print(summary(results))

    from qcsim.benchmark.plot import plot_scaling
    plot_scaling(results, "scaling.png")
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Iterable, List

from qcsim.circuit import CircuitBuilder, QuantumCircuit
from qcsim.engine.simulator import run_circuit


@dataclass
class BenchmarkResult:
    """Timing of one generated circuit."""
    execution_time: float   # milliseconds, best of the repeats
    qubits: int
    gates: int
    repeats: int = 1

    @property
    def amplitudes(self) -> int:
        return 1 << self.qubits

    def __str__(self) -> str:
        return (f"{self.qubits:3d} qubits  {self.gates:4d} gates  "
                f"{self.execution_time:10.3f} ms")


def benchmark_circuit(num_qubits: int, num_gates: int) -> QuantumCircuit:
    """
    Hadamard on every qubit, then CNOTs down the chain.

    At most ``num_qubits - 1`` CNOTs are added, so the circuit may hold fewer
    than ``num_gates`` operations.
    """
    builder = CircuitBuilder(num_qubits, f"benchmark-{num_qubits}-{num_gates}")
    for q in range(num_qubits):
        builder.h(q)
    remaining = num_gates - num_qubits
    for q in range(min(remaining, num_qubits - 1)):
        builder.cx(q, q + 1)
    return builder.build()


def benchmark(num_qubits: int, num_gates: int, repeats: int = 1) -> BenchmarkResult:
    """Build and run the benchmark circuit without measurement."""
    if repeats < 1:
        raise ValueError(f"repeats must be >= 1, got {repeats}")
    circuit = benchmark_circuit(num_qubits, num_gates)
    best = float("inf")
    for _ in range(repeats):
        start = time.perf_counter()
        run_circuit(circuit, shots=0)
        best = min(best, (time.perf_counter() - start) * 1000.0)
    return BenchmarkResult(
        execution_time=best,
        qubits=num_qubits,
        gates=circuit.num_gates,
        repeats=repeats,
    )


def scaling_sweep(qubit_counts: Iterable[int], gates_per_qubit: int = 2,
                  repeats: int = 3) -> List[BenchmarkResult]:
    """Benchmark each width in ``qubit_counts``."""
    return [benchmark(n, n * gates_per_qubit, repeats) for n in qubit_counts]


def summary(results: List[BenchmarkResult]) -> str:
    lines = [
        "=" * 44,
        "  State-vector scaling",
        "=" * 44,
        f"  {'Qubits':>6s} {'Gates':>6s} {'Amplitudes':>12s} {'Time(ms)':>12s}",
        "-" * 44,
    ]
    for r in results:
        lines.append(
            f"  {r.qubits:>6d} {r.gates:>6d} {r.amplitudes:>12d} "
            f"{r.execution_time:>12.3f}"
        )
    lines.append("=" * 44)
    return "\n".join(lines)


__all__ = [
    "BenchmarkResult",
    "benchmark",
    "benchmark_circuit",
    "scaling_sweep",
    "summary",
]
