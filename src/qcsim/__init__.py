"""
qcsim: a dense state-vector quantum circuit simulator.

Features:
- Interleaved float64 state buffer, immutable states
- Gate application in O(2^n · 2^k) without building full operators
- Projective measurement and multi-shot sampling
- Fluent circuit builder: CircuitBuilder(2).h(0).cx(0, 1).measure_all()
- Worker pool, benchmark harness and Grover search builder

Quick Start:
    >>> from qcsim import CircuitBuilder, run_circuit
    >>> bell = CircuitBuilder(2).h(0).cx(0, 1).measure_all().build()
    >>> result = run_circuit(bell, shots=1000)
    >>> sorted(result.measurements)  # ['00', '11']
"""
__version__ = "0.1.0"

from . import gates
from .circuit import CircuitBuilder, CircuitOperation, MeasurementAssignment, QuantumCircuit
from .complex import Complex
from .config import DEFAULT_CONFIG, SimulatorConfig
from .engine import MeasurementResult, SimulationResult, run_circuit
from .exceptions import (
    DegenerateCollapseError,
    IndexOutOfRangeError,
    InvalidDimensionError,
    NonUnitaryGateError,
    SimulationCancelledError,
    SimulationError,
    UnsupportedOperationError,
)
from .gates import STANDARD_GATES, Gate, get_gate
from .state import QuantumState

__all__ = [
    # Core
    'Complex',
    'gates',
    'Gate',
    'STANDARD_GATES',
    'get_gate',
    'QuantumState',
    'CircuitBuilder',
    'CircuitOperation',
    'MeasurementAssignment',
    'QuantumCircuit',
    'run_circuit',
    'SimulationResult',
    'MeasurementResult',
    'SimulatorConfig',
    'DEFAULT_CONFIG',
    # Errors
    'SimulationError',
    'InvalidDimensionError',
    'IndexOutOfRangeError',
    'UnsupportedOperationError',
    'DegenerateCollapseError',
    'NonUnitaryGateError',
    'SimulationCancelledError',
]
