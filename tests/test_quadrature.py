import math

import numpy as np
import pytest

from nmrquant.errors import NotReadyError, UnsupportedParameterError
from nmrquant.quadrature import (
	IntegrationMethod,
	adaptive_simpson,
	composite_simpson,
	gauss_legendre,
	integrate,
	romberg,
)
from nmrquant.quadrature.gauss_legendre import NODES, WEIGHTS
from nmrquant.spline import CubicInterpolant

METHODS = list(IntegrationMethod)


class CountingExp:
	"""exp(x) evaluator that counts its calls."""

	def __init__(self):
		self.calls = 0

	def evaluate(self, x):
		self.calls += 1
		return float(np.exp(x))


class Counting:
	"""Wraps an evaluator and counts its calls."""

	def __init__(self, f):
		self.f = f
		self.calls = 0

	@property
	def is_computed(self):
		return getattr(self.f, "is_computed", True)

	def evaluate(self, x):
		self.calls += 1
		return self.f.evaluate(x)


class Kink:
	def evaluate(self, x):
		return abs(x - 1.0 / 3.0)


class Polynomial:
	def __init__(self, coeffs):
		self.coeffs = coeffs

	def evaluate(self, x):
		return np.polyval(self.coeffs, x)


@pytest.fixture
def line_spline():
	x = np.linspace(0.0, 10.0, 11)
	return CubicInterpolant(x, 2.0 * x + 1.0)


@pytest.fixture
def sine_spline():
	x = np.linspace(0.0, np.pi, 101)
	return CubicInterpolant(x, np.sin(x) + 2.0)


def test_gauss_legendre_table_is_a_valid_rule():
	assert NODES.size == WEIGHTS.size == 32
	assert 2.0 * WEIGHTS.sum() == pytest.approx(2.0, abs=1e-12)
	assert np.all(np.diff(NODES) > 0.0)
	assert not NODES.flags.writeable and not WEIGHTS.flags.writeable


@pytest.mark.parametrize("method", METHODS)
def test_straight_line_matches_trapezoid_area(line_spline, method):
	a, b = 1.5, 7.25
	expected = 0.5 * (b - a) * ((2.0 * a + 1.0) + (2.0 * b + 1.0))
	tolerance = 1e-8
	assert integrate(line_spline, a, b, method, tolerance) == pytest.approx(expected, abs=tolerance)


def test_methods_converge_to_gauss_legendre(sine_spline):
	a, b = 0.3, 2.9
	reference = gauss_legendre(sine_spline, a, b)
	tolerance = 1e-10
	assert composite_simpson(sine_spline, a, b, tolerance) == pytest.approx(reference, abs=1e-6)
	assert romberg(sine_spline, a, b, tolerance) == pytest.approx(reference, abs=1e-6)
	assert adaptive_simpson(sine_spline, a, b, tolerance) == pytest.approx(reference, abs=1e-6)

	analytic = (math.cos(a) - math.cos(b)) + 2.0 * (b - a)
	assert reference == pytest.approx(analytic, abs=1e-6)


def test_reversed_bounds_flip_the_sign(sine_spline):
	for method in METHODS:
		forward = integrate(sine_spline, 0.5, 2.0, method, 1e-10)
		backward = integrate(sine_spline, 2.0, 0.5, method, 1e-10)
		assert backward == pytest.approx(-forward, abs=1e-8)


def test_plain_evaluators_are_accepted():
	cubic = Polynomial([4.0, 0.0, 0.0, 0.0])  # 4x^3, integral over [0, 2] = 16
	for method in METHODS:
		assert integrate(cubic, 0.0, 2.0, method, 1e-10) == pytest.approx(16.0, abs=1e-8)


def test_gauss_legendre_is_exact_for_high_degree_polynomials():
	p = Polynomial([1.0] + [0.0] * 40)  # x^40 on [0, 1]
	assert gauss_legendre(p, 0.0, 1.0) == pytest.approx(1.0 / 41.0, rel=1e-12)


def test_adaptive_depth_cap_bounds_evaluations():
	f = CountingExp()
	value = adaptive_simpson(f, 0.0, 1.0, 0.0, max_depth=4)
	# 3 initial values + 2 per step for 1 + 2 + 4 + 8 + 16 steps
	assert f.calls == 65
	assert value == pytest.approx(math.e - 1.0, abs=1e-8)


def test_adaptive_zero_tolerance_terminates_on_straight_line():
	x = np.linspace(0.0, 1.0, 11)
	f = Counting(CubicInterpolant(x, x))
	assert adaptive_simpson(f, 0.0, 1.0, 0.0) == pytest.approx(0.5, abs=1e-14)
	assert f.calls <= 5


def test_adaptive_zero_tolerance_stops_at_rounding_noise():
	f = CountingExp()
	value = adaptive_simpson(f, 0.0, 1.0, 0.0)
	assert value == pytest.approx(math.e - 1.0, abs=1e-13)
	assert f.calls < 2 ** 13


def test_adaptive_default_depth_bounds_work_on_a_kink():
	# Only the interval holding the kink keeps splitting, down to the default depth
	f = Counting(Kink())
	value = adaptive_simpson(f, 0.0, 1.0, 0.0)
	assert value == pytest.approx(5.0 / 18.0, abs=1e-9)
	assert f.calls < 200


def test_adaptive_reuses_function_values():
	f = CountingExp()
	adaptive_simpson(f, 0.0, 1.0, 1e-12)
	# every step evaluates exactly two new points
	assert (f.calls - 3) % 2 == 0


@pytest.mark.parametrize("method", METHODS)
def test_uncomputed_spline_is_rejected(method):
	with pytest.raises(NotReadyError):
		integrate(CubicInterpolant(), 0.0, 1.0, method, 1e-6)


def test_unknown_method_code_is_rejected(line_spline):
	with pytest.raises(UnsupportedParameterError):
		integrate(line_spline, 0.0, 1.0, 4, 1e-6)


def test_integer_codes_dispatch(sine_spline):
	assert integrate(sine_spline, 0.1, 1.0, 3, 1e-8) == gauss_legendre(sine_spline, 0.1, 1.0)
	assert integrate(sine_spline, 0.1, 1.0, 1, 1e-8) == romberg(sine_spline, 0.1, 1.0, 1e-8)
	assert IntegrationMethod(2).label == "Adaptive Quadrature"
