import math

import numpy as np
import pytest

from nmrquant.errors import InvalidInputError, NotReadyError
from nmrquant.spline import CubicInterpolant


@pytest.fixture
def noisy_spline():
	rng = np.random.default_rng(42)
	x = np.cumsum(rng.uniform(0.1, 1.0, size=40))
	y = np.sin(x) + rng.normal(scale=0.1, size=x.size)
	return CubicInterpolant().fit(x, y), x, y


def test_interpolates_every_knot(noisy_spline):
	spline, x, y = noisy_spline
	np.testing.assert_allclose(spline.evaluate(x), y, rtol=0, atol=1e-9)
	for xi, yi in zip(x, y):
		assert spline.evaluate(float(xi)) == pytest.approx(yi, abs=1e-9)


def test_natural_boundary_conditions(noisy_spline):
	spline, x, _ = noisy_spline
	assert spline.evaluate_second_derivative(float(x[0])) == pytest.approx(0.0, abs=1e-9)
	assert spline.evaluate_second_derivative(float(x[-1])) == pytest.approx(0.0, abs=1e-9)


def test_first_and_second_derivatives_are_continuous(noisy_spline):
	spline, x, _ = noisy_spline
	coeffs = spline.coefficients
	h = np.diff(x)
	# Left polynomial evaluated at the right end of each interval vs right polynomial at its start
	d1_left = coeffs.b[:-2] + 2.0 * coeffs.c[:-2] * h[:-1] + 3.0 * coeffs.d[:-2] * h[:-1] ** 2
	d2_left = 2.0 * coeffs.c[:-2] + 6.0 * coeffs.d[:-2] * h[:-1]
	np.testing.assert_allclose(d1_left, coeffs.b[1:-1], atol=1e-8)
	np.testing.assert_allclose(d2_left, 2.0 * coeffs.c[1:-1], atol=1e-8)


def test_three_point_tent_second_derivative():
	spline = CubicInterpolant([0.0, 1.0, 2.0], [0.0, 1.0, 0.0])
	assert spline.evaluate_second_derivative(1.0) == pytest.approx(-3.0)
	assert spline.evaluate(0.5) == pytest.approx(1.5 * 0.5 - 0.5 * 0.5 ** 3)


def test_two_points_are_linear_and_extrapolate():
	spline = CubicInterpolant().fit([1.0, 3.0], [2.0, 6.0])
	assert spline.evaluate(2.0) == pytest.approx(4.0)
	assert spline.evaluate(5.0) == pytest.approx(10.0)
	assert spline.evaluate(-1.0) == pytest.approx(-2.0)
	assert spline.evaluate_derivative(2.5) == pytest.approx(2.0)
	np.testing.assert_array_equal(spline.coefficients.c, [0.0, 0.0])


def test_linear_data_give_a_straight_line():
	x = np.linspace(-3.0, 4.0, 15)
	spline = CubicInterpolant(x, 2.0 * x - 1.0)
	xs = np.linspace(-5.0, 6.0, 101)
	np.testing.assert_allclose(spline(xs), 2.0 * xs - 1.0, atol=1e-10)


def test_extrapolation_uses_end_interval_polynomial(noisy_spline):
	spline, x, y = noisy_spline
	coeffs = spline.coefficients
	dx = 0.5
	expected = y[-2] + coeffs.b[-2] * (x[-1] - x[-2] + dx) \
		+ coeffs.c[-2] * (x[-1] - x[-2] + dx) ** 2 + coeffs.d[-2] * (x[-1] - x[-2] + dx) ** 3
	assert spline.evaluate(float(x[-1] + dx)) == pytest.approx(expected)


@pytest.mark.parametrize("x, y", [
	([0.0, 1.0, 2.0], [1.0, 2.0]),
	([0.0], [1.0]),
	([0.0, 2.0, 1.0], [1.0, 2.0, 3.0]),
	([0.0, 1.0, 1.0], [1.0, 2.0, 3.0]),
	([0.0, np.nan, 1.0], [1.0, 2.0, 3.0]),
])
def test_invalid_input_is_rejected(x, y):
	with pytest.raises(InvalidInputError):
		CubicInterpolant().fit(x, y)


def test_failed_refit_keeps_previous_state():
	spline = CubicInterpolant([0.0, 1.0, 2.0], [0.0, 1.0, 0.0])
	before = spline.evaluate(0.5)
	with pytest.raises(InvalidInputError):
		spline.fit([0.0, 0.0, 1.0], [1.0, 2.0, 3.0])
	assert spline.is_computed
	assert spline.evaluate(0.5) == before


def test_queries_before_fit_raise():
	spline = CubicInterpolant()
	assert not spline.is_computed
	with pytest.raises(NotReadyError):
		spline.evaluate(1.0)
	with pytest.raises(NotReadyError):
		spline.find_crossings(0.0, 0.0, 1.0)
	with pytest.raises(NotReadyError):
		spline.sample(0.0, 1.0)


def test_fit_does_not_alias_caller_arrays():
	x = np.array([0.0, 1.0, 2.0, 3.0])
	y = np.array([0.0, 1.0, 0.0, 1.0])
	spline = CubicInterpolant(x, y)
	y[1] = 100.0
	assert spline.evaluate(1.0) == pytest.approx(1.0)


def test_crossings_of_tent_match_analytic_roots():
	# On [0, 1] the spline is 1.5x - 0.5x^3; S(x) = 0.5 at x = 2cos(80 deg)
	spline = CubicInterpolant([0.0, 1.0, 2.0], [0.0, 1.0, 0.0])
	crossings = spline.find_crossings(0.5, 0.0, 2.0)
	root = 2.0 * math.cos(math.radians(80.0))
	assert crossings.size == 2
	assert crossings[0] == pytest.approx(root, abs=1e-6)
	assert crossings[1] == pytest.approx(2.0 - root, abs=1e-6)


def test_rectangular_bump_gives_exactly_two_crossings():
	x = np.arange(9, dtype=float)
	y = np.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0, 0.0, 0.0, 0.0])
	spline = CubicInterpolant(x, y)
	crossings = spline.find_crossings(0.5, x[0], x[-1])
	assert crossings.size == 2
	assert 2.0 < crossings[0] < 3.0
	assert 5.0 < crossings[1] < 6.0
	# Symmetric about x = 4
	assert crossings[0] + crossings[1] == pytest.approx(8.0, abs=1e-6)
	np.testing.assert_allclose(spline.evaluate(crossings), 0.5, atol=1e-7)

	# Closed-form roots of the interval cubics y_i + b dx + c dx^2 + d dx^3 = 0.5
	coeffs = spline.coefficients
	for crossing, i in zip(crossings, (2, 5)):
		roots = np.roots([coeffs.d[i], coeffs.c[i], coeffs.b[i], y[i] - 0.5])
		real = roots[np.abs(roots.imag) < 1e-12].real
		dx = real[(real >= 0.0) & (real <= 1.0)]
		assert dx.size == 1
		assert crossing == pytest.approx(x[i] + dx[0], abs=1e-6)


def test_domain_spans_first_and_last_knot(noisy_spline):
	spline, x, _ = noisy_spline
	assert spline.domain == (x[0], x[-1])
	with pytest.raises(NotReadyError):
		CubicInterpolant().domain


def test_no_crossings_give_empty_array():
	spline = CubicInterpolant([0.0, 1.0, 2.0, 3.0], [1.0, 2.0, 1.5, 1.2])
	assert spline.find_crossings(10.0, 0.0, 3.0).size == 0
	assert spline.find_crossings(1.5, 2.0, 2.0).size == 0


def test_sample_returns_uniform_grid(noisy_spline):
	spline, x, _ = noisy_spline
	xs, ys = spline.sample(float(x[0]), float(x[-1]), 500)
	assert xs.size == ys.size == 500
	assert xs[0] == x[0] and xs[-1] == pytest.approx(x[-1])
	np.testing.assert_allclose(np.diff(xs), (x[-1] - x[0]) / 499)
	with pytest.raises(ValueError):
		spline.sample(0.0, 1.0, 1)
