"""Shared fixtures."""

import numpy as np
import pytest

from qcsim import CircuitBuilder


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def bell_circuit():
    """H(0), CNOT(0 -> 1), both qubits measured."""
    return CircuitBuilder(2, "bell").h(0).cx(0, 1).measure_all().build()
