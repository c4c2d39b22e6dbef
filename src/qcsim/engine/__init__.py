"""State-vector engine: gate application, measurement and circuit execution."""

from qcsim.engine.apply import apply_gate, apply_matrix, apply_operations
from qcsim.engine.measurement import (
    MeasurementResult,
    collapse,
    measure,
    probability_of_one,
    sample_measurements,
    sample_register,
)
from qcsim.engine.simulator import (
    SimulationResult,
    probabilities,
    run_circuit,
    state_string,
)

__all__ = [
    "apply_gate",
    "apply_matrix",
    "apply_operations",
    "MeasurementResult",
    "collapse",
    "measure",
    "probability_of_one",
    "sample_measurements",
    "sample_register",
    "SimulationResult",
    "probabilities",
    "run_circuit",
    "state_string",
]
