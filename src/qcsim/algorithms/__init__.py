"""Circuit builders for textbook algorithms."""

from .grover import GroverResult, grover_circuit, optimal_iterations, search

__all__ = ["GroverResult", "grover_circuit", "optimal_iterations", "search"]
