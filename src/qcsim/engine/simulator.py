"""
Circuit execution.

:func:`run_circuit` validates a circuit, applies its operations in order
starting from |0...0⟩, then measures according to ``shots``:

    shots == 0   final state only, no measurement
    shots == 1   measure each assigned qubit in order, collapsing as it goes
    shots  > 1   sample the final, unmeasured state ``shots`` times

Example
-------
>>> from qcsim import CircuitBuilder, run_circuit
>>> bell = CircuitBuilder(2).h(0).cx(0, 1).measure_all().build()
>>> result = run_circuit(bell, shots=1000)
>>> sorted(result.measurements)
['00', '11']
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Protocol

import numpy as np
from numpy import ndarray

from qcsim.circuit import QuantumCircuit
from qcsim.config import DEFAULT_CONFIG, SimulatorConfig
from qcsim.engine import measurement as _measure
from qcsim.engine.apply import apply_gate
from qcsim.engine.measurement import MeasurementResult
from qcsim.exceptions import SimulationCancelledError, SimulationError
from qcsim.state import QuantumState

logger = logging.getLogger(__name__)


class CancelToken(Protocol):
    """Anything with ``is_set()``, e.g. ``threading.Event``."""

    def is_set(self) -> bool: ...


@dataclass
class SimulationResult:
    """
    Result of one circuit run.

    Attributes
    ----------
    circuit_id : str
        Id of the simulated circuit.
    final_state : QuantumState
        State after all operations (and, for ``shots == 1``, after collapse).
    measurements : dict[str, MeasurementResult]
        Bit-string → statistics. Empty when ``shots == 0``.
    execution_time : float
        Wall-clock milliseconds.
    shots : int
        Shot count the run used.
    """

    circuit_id: str
    final_state: QuantumState
    measurements: dict[str, MeasurementResult] = field(default_factory=dict)
    execution_time: float = 0.0
    shots: int = 0

    def probabilities(self) -> ndarray:
        """Probability of every basis state of the final state."""
        return probabilities(self)

    def state_string(self, threshold: float | None = None) -> str:
        return state_string(self, threshold)

    def frequencies(self) -> dict[str, float]:
        return {
            key: (m.frequency if m.frequency is not None else m.probability)
            for key, m in sorted(self.measurements.items())
        }

    def most_frequent(self) -> str:
        """Return the most frequently observed bit-string."""
        if not self.measurements:
            raise ValueError("No measurements recorded (shots=0)")
        return max(self.frequencies().items(), key=lambda kv: kv[1])[0]


def run_circuit(
    circuit: QuantumCircuit,
    shots: int | None = None,
    rng: np.random.Generator | None = None,
    config: SimulatorConfig | None = None,
    cancel: CancelToken | None = None,
) -> SimulationResult:
    """
    Simulate ``circuit``.

    Parameters
    ----------
    circuit : QuantumCircuit
        Circuit to run; validated before any state is built.
    shots : int, optional
        0, 1 or more (see module docstring). Defaults to ``config.shots``.
    rng : numpy.random.Generator, optional
        Measurement randomness. Defaults to a generator seeded from
        ``config.seed`` or, without a seed, the process-wide generator.
    config : SimulatorConfig, optional
        Timeout, tolerances and defaults.
    cancel : CancelToken, optional
        Checked between gate applications.

    Raises
    ------
    SimulationError
        Any validation failure, cancellation, or normalization drift.
    ValueError
        Negative ``shots``.
    """
    config = config or DEFAULT_CONFIG
    if shots is None:
        shots = config.shots
    if shots < 0:
        raise ValueError(f"shots must be >= 0, got {shots}")
    if rng is None:
        rng = config.make_rng() if config.seed is not None else _measure.default_rng()

    circuit.validate()
    start = time.perf_counter()
    deadline = start + config.timeout if config.timeout is not None else None
    logger.debug(
        "Running %s: %d qubit(s), %d operation(s), shots=%d",
        circuit.id, circuit.num_qubits, circuit.num_gates, shots,
    )

    state = QuantumState.zero(circuit.num_qubits)
    for step, op in enumerate(circuit.operations):
        if cancel is not None and cancel.is_set():
            raise SimulationCancelledError(
                f"Circuit {circuit.id} cancelled after {step} operation(s)", step
            )
        if deadline is not None and time.perf_counter() > deadline:
            raise SimulationCancelledError(
                f"Circuit {circuit.id} exceeded {config.timeout}s after "
                f"{step} operation(s)",
                step,
            )
        state = apply_gate(state, op)
        if config.check_normalization and not state.is_normalized(config.norm_tolerance):
            raise SimulationError(
                f"Norm drifted to {state.norm_squared():.12f} after operation "
                f"{step} ({op})"
            )

    measurements: dict[str, MeasurementResult] = {}
    if shots == 1:
        state, measurements = _single_shot(state, circuit, rng)
    elif shots > 1:
        if circuit.measurements:
            measurements = _measure.sample_register(
                state, shots, circuit.measurements, rng
            )
        else:
            measurements = _measure.sample_measurements(state, shots, rng)

    elapsed = (time.perf_counter() - start) * 1000.0
    logger.debug("Finished %s in %.3f ms", circuit.id, elapsed)
    return SimulationResult(
        circuit_id=circuit.id,
        final_state=state,
        measurements=measurements,
        execution_time=elapsed,
        shots=shots,
    )


def _single_shot(
    state: QuantumState,
    circuit: QuantumCircuit,
    rng: np.random.Generator,
) -> tuple[QuantumState, dict[str, MeasurementResult]]:
    if not circuit.measurements:
        return state, {}
    classical = [0] * circuit.num_clbits
    for m in circuit.measurements:
        state, outcome = _measure.measure(state, m.qubit, rng)
        classical[m.classical] = outcome
    key = "".join(str(bit) for bit in reversed(classical))
    return state, {key: MeasurementResult(state=key, probability=1.0, frequency=1.0)}


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------

def state_string(result: SimulationResult, threshold: float | None = None) -> str:
    """Ket notation of the final state, e.g. ``0.707...|00⟩ + 0.707...|11⟩``."""
    if threshold is None:
        threshold = DEFAULT_CONFIG.display_threshold
    return result.final_state.to_ket(threshold)


def probabilities(result: SimulationResult) -> ndarray:
    """Plain probability array of the final state (a copy)."""
    return np.array(result.final_state.probabilities)
