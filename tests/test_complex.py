"""Tests for complex primitives."""

import math

import pytest

from qcsim import complex as cx
from qcsim.complex import Complex


def test_add_subtract():
    a, b = Complex(1, 2), Complex(3, -1)
    assert cx.add(a, b) == Complex(4, 1)
    assert cx.subtract(a, b) == Complex(-2, 3)


def test_multiply():
    assert cx.multiply(Complex(1, 2), Complex(3, -1)) == Complex(5, 5)
    assert cx.multiply(cx.I, cx.I) == Complex(-1, 0)


def test_scale_and_conjugate():
    assert cx.scale(Complex(1, -2), 3) == Complex(3, -6)
    assert cx.conjugate(Complex(1, -2)) == Complex(1, 2)


def test_magnitude():
    z = Complex(3, 4)
    assert cx.mag_squared(z) == 25
    assert cx.magnitude(z) == 5


def test_exp_euler():
    """e^(iπ) = -1"""
    z = cx.exp(Complex(0, math.pi))
    assert z.real == pytest.approx(-1.0)
    assert z.imag == pytest.approx(0.0, abs=1e-15)


@pytest.mark.parametrize("theta", [0, 0.3, math.pi / 2, -2.0])
def test_from_polar_unit_circle(theta):
    z = cx.from_polar(1.0, theta)
    assert cx.mag_squared(z) == pytest.approx(1.0)
    assert cx.to_builtin(z) == pytest.approx(complex(math.cos(theta), math.sin(theta)))


def test_builtin_conversion():
    z = cx.from_builtin(2 - 3j)
    assert z == Complex(2.0, -3.0)
    assert cx.to_builtin(z) == 2 - 3j


def test_create_defaults_imag():
    assert cx.create(2) == Complex(2.0, 0.0)


@pytest.mark.parametrize("z,text", [
    (Complex(0.5, 0), "0.5"),
    (Complex(0, -1), "-1.0i"),
    (Complex(1, -2), "1.0 - 2.0i"),
    (Complex(1, 2), "1.0 + 2.0i"),
])
def test_to_string(z, text):
    assert cx.to_string(z) == text
