"""
Complex arithmetic on explicit (real, imag) pairs.

The state buffer stores amplitudes as interleaved float64 pairs, so the gate
catalog builds its matrices from these primitives before packing them into
numpy arrays.

Example
-------
>>> from qcsim.complex import Complex, multiply, to_string
>>> to_string(multiply(Complex(1, 2), Complex(3, -1)))
'5.0 + 5.0i'
"""

from __future__ import annotations

import math
from typing import NamedTuple


class Complex(NamedTuple):
    """Immutable complex number as a pair of floats."""

    real: float
    imag: float = 0.0


ZERO = Complex(0.0, 0.0)
ONE = Complex(1.0, 0.0)
I = Complex(0.0, 1.0)


def create(real: float, imag: float = 0.0) -> Complex:
    return Complex(float(real), float(imag))


def add(a: Complex, b: Complex) -> Complex:
    return Complex(a.real + b.real, a.imag + b.imag)


def subtract(a: Complex, b: Complex) -> Complex:
    return Complex(a.real - b.real, a.imag - b.imag)


def multiply(a: Complex, b: Complex) -> Complex:
    """(a+bi)(c+di) = (ac-bd) + (ad+bc)i"""
    return Complex(
        a.real * b.real - a.imag * b.imag,
        a.real * b.imag + a.imag * b.real,
    )


def scale(a: Complex, scalar: float) -> Complex:
    return Complex(a.real * scalar, a.imag * scalar)


def conjugate(a: Complex) -> Complex:
    return Complex(a.real, -a.imag)


def mag_squared(a: Complex) -> float:
    return a.real * a.real + a.imag * a.imag


def magnitude(a: Complex) -> float:
    return math.sqrt(mag_squared(a))


def exp(a: Complex) -> Complex:
    """Complex exponential e^(x+iy) = e^x (cos y + i sin y)."""
    r = math.exp(a.real)
    return Complex(r * math.cos(a.imag), r * math.sin(a.imag))


def from_polar(r: float, theta: float) -> Complex:
    """Build r·e^(iθ)."""
    return Complex(r * math.cos(theta), r * math.sin(theta))


def to_builtin(a: Complex) -> complex:
    return complex(a.real, a.imag)


def from_builtin(z: complex) -> Complex:
    return Complex(float(z.real), float(z.imag))


def to_string(a: Complex) -> str:
    """
    Format for display, omitting a zero component.

    >>> to_string(Complex(0.5, 0))
    '0.5'
    >>> to_string(Complex(0, -1))
    '-1.0i'
    >>> to_string(Complex(1, -2))
    '1.0 - 2.0i'
    """
    if a.imag == 0:
        return repr(float(a.real))
    if a.real == 0:
        return f"{float(a.imag)!r}i"
    sign = "-" if a.imag < 0 else "+"
    return f"{float(a.real)!r} {sign} {abs(float(a.imag))!r}i"
