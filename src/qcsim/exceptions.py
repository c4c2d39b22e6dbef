"""
Error types raised by the simulation engine.

Every error derives from :class:`SimulationError`, so execution boundaries
can catch the whole family at once. Dimension and index errors also derive
from the matching builtin (``ValueError`` / ``IndexError``) so callers that
only know about the builtins keep working.
"""

from __future__ import annotations


class SimulationError(Exception):
    """Base class for all engine errors."""


class InvalidDimensionError(SimulationError, ValueError):
    """Qubit count, buffer length, matrix shape or register layout is invalid."""


class IndexOutOfRangeError(SimulationError, IndexError):
    """A qubit index lies outside ``[0, num_qubits)``."""

    def __init__(self, qubit: int, num_qubits: int) -> None:
        super().__init__(
            f"Qubit {qubit} out of range for {num_qubits}-qubit state"
        )
        self.qubit = qubit
        self.num_qubits = num_qubits

    def __reduce__(self):
        return (type(self), (self.qubit, self.num_qubits))


class UnsupportedOperationError(SimulationError):
    """The operation's shape does not match any gate application path."""


class DegenerateCollapseError(SimulationError, ArithmeticError):
    """Projection onto an outcome whose probability mass is ~0."""

    def __init__(self, qubit: int, outcome: int, mass: float) -> None:
        super().__init__(
            f"Cannot collapse qubit {qubit} onto |{outcome}⟩: "
            f"retained probability {mass:.3e} is zero"
        )
        self.qubit = qubit
        self.outcome = outcome
        self.mass = mass

    def __reduce__(self):
        return (type(self), (self.qubit, self.outcome, self.mass))


class NonUnitaryGateError(SimulationError, ValueError):
    """A gate matrix fails the U†U = I check."""


class SimulationCancelledError(SimulationError):
    """A run was cancelled or timed out between two gate applications."""

    def __init__(self, message: str, completed: int = 0) -> None:
        super().__init__(message)
        self.completed = completed

    def __reduce__(self):
        return (type(self), (self.args[0], self.completed))
