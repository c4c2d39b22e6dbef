"""
Dense quantum state representation.

A :class:`QuantumState` holds ``qubits`` and an interleaved float64 buffer of
length 2·2^n: ``[re_0, im_0, re_1, im_1, ...]``. Bit ``i`` of a basis index
is the value of qubit ``i``, so |q_{n-1} ... q_1 q_0⟩ prints with qubit 0 on
the right.

States are values: the buffer is write-locked on construction and every
engine operation returns a new state. Because the buffer cannot change, the
probability array is computed once and cached on the instance.

Memory: 16 bytes * 2^n.
    20 qubits = 16 MB, 25 qubits = 512 MB.
"""

from __future__ import annotations

from functools import cached_property

import numpy as np
from numpy import ndarray

from qcsim import complex as cx
from qcsim.exceptions import IndexOutOfRangeError, InvalidDimensionError

NORM_TOLERANCE = 1e-9
DISPLAY_THRESHOLD = 1e-10


class QuantumState:
    """
    Immutable n-qubit state vector.

    Parameters
    ----------
    qubits : int
        Number of qubits, at least 1.
    vector : array_like
        Interleaved (real, imag) float buffer of length 2·2^qubits.

    Example
    -------
    >>> state = QuantumState.zero(2)
    >>> state.amplitudes
    array([1.+0.j, 0.+0.j, 0.+0.j, 0.+0.j])
    """

    def __init__(self, qubits: int, vector: ndarray) -> None:
        if not isinstance(qubits, (int, np.integer)) or qubits < 1:
            raise InvalidDimensionError(f"Need at least 1 qubit, got {qubits}")
        buf = np.array(vector, dtype=np.float64).reshape(-1)
        expected = 2 << qubits
        if buf.shape != (expected,):
            raise InvalidDimensionError(
                f"Amplitude buffer for {qubits} qubit(s) must have length "
                f"{expected}, got {buf.shape[0]}"
            )
        buf.flags.writeable = False
        self.qubits = int(qubits)
        self.vector = buf

    # -- Construction -------------------------------------------------------

    @classmethod
    def zero(cls, qubits: int) -> QuantumState:
        """|00...0⟩."""
        return cls.basis(qubits, 0)

    @classmethod
    def basis(cls, qubits: int, index: int) -> QuantumState:
        """Computational basis state |index⟩."""
        if qubits < 1:
            raise InvalidDimensionError(f"Need at least 1 qubit, got {qubits}")
        if not 0 <= index < (1 << qubits):
            raise InvalidDimensionError(
                f"Basis index {index} out of range for {qubits} qubit(s)"
            )
        vector = np.zeros(2 << qubits, dtype=np.float64)
        vector[2 * index] = 1.0
        return cls(qubits, vector)

    @classmethod
    def from_bitstring(cls, bits: str) -> QuantumState:
        """Basis state from a ket label, qubit 0 rightmost (``"10"`` = qubit 1 set)."""
        if not bits or set(bits) - {"0", "1"}:
            raise ValueError(f"Not a bit-string: {bits!r}")
        return cls.basis(len(bits), int(bits, 2))

    @classmethod
    def from_amplitudes(cls, amplitudes: ndarray) -> QuantumState:
        """Build from a complex vector of length 2^n (not renormalized)."""
        amps = np.ascontiguousarray(amplitudes, dtype=np.complex128).reshape(-1)
        dim = amps.shape[0]
        if dim < 2 or dim & (dim - 1):
            raise InvalidDimensionError(
                f"Amplitude count must be a power of two >= 2, got {dim}"
            )
        return cls(dim.bit_length() - 1, amps.view(np.float64))

    @classmethod
    def _adopt(cls, qubits: int, amplitudes: ndarray) -> QuantumState:
        """Wrap a freshly computed complex128 buffer without copying it."""
        state = cls.__new__(cls)
        buf = amplitudes.view(np.float64)
        buf.flags.writeable = False
        state.qubits = qubits
        state.vector = buf
        return state

    # -- Views --------------------------------------------------------------

    @property
    def dim(self) -> int:
        return 1 << self.qubits

    @property
    def amplitudes(self) -> ndarray:
        """Read-only complex128 view of the buffer (length 2^n)."""
        return self.vector.view(np.complex128)

    def amplitude(self, index: int) -> cx.Complex:
        return cx.Complex(float(self.vector[2 * index]), float(self.vector[2 * index + 1]))

    @cached_property
    def probabilities(self) -> ndarray:
        """|amplitude|² per basis index, cached."""
        re = self.vector[0::2]
        im = self.vector[1::2]
        probs = re * re + im * im
        probs.flags.writeable = False
        return probs

    def norm_squared(self) -> float:
        return float(self.probabilities.sum())

    def is_normalized(self, tol: float = NORM_TOLERANCE) -> bool:
        return abs(self.norm_squared() - 1.0) <= tol

    def check_qubit(self, qubit: int) -> None:
        if not 0 <= qubit < self.qubits:
            raise IndexOutOfRangeError(qubit, self.qubits)

    def bitstring(self, index: int) -> str:
        return format(index, f"0{self.qubits}b")

    # -- Display ------------------------------------------------------------

    def to_ket(self, threshold: float = DISPLAY_THRESHOLD) -> str:
        """
        Ket-notation string of the non-negligible amplitudes.

        >>> QuantumState.zero(2).to_ket()
        '1.0|00⟩'
        """
        terms = []
        for i in range(self.dim):
            amp = self.amplitude(i)
            if abs(amp.real) > threshold or abs(amp.imag) > threshold:
                terms.append(f"{cx.to_string(amp)}|{self.bitstring(i)}⟩")
        return " + ".join(terms) if terms else f"0|{'0' * self.qubits}⟩"

    def __reduce__(self):
        # Rebuild through __init__ so the unpickled buffer is write-locked too.
        return (type(self), (self.qubits, np.array(self.vector)))

    def __repr__(self) -> str:
        return f"QuantumState(qubits={self.qubits}, dim={self.dim})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QuantumState):
            return NotImplemented
        return self.qubits == other.qubits and np.array_equal(self.vector, other.vector)

    def allclose(self, other: QuantumState, atol: float = 1e-9) -> bool:
        """Amplitude-wise comparison within ``atol``."""
        return self.qubits == other.qubits and np.allclose(
            self.vector, other.vector, atol=atol
        )
