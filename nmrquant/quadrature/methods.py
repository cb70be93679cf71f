# nmrquant/quadrature/methods.py
"""
Definite integration of a fitted interpolant over [a, b].

Every method only calls `f.evaluate(x)` (scalar or array x) and never looks at
spline coefficients, so any object with that method can be integrated. Objects
exposing `is_computed = False` are rejected with NotReadyError.

Running out of iterations is not an error: the best available estimate is returned
and the event is logged at DEBUG level.
"""
from __future__ import annotations

from enum import IntEnum
from typing import List, Protocol, Union

import numpy as np

from nmrquant.errors import NotReadyError, UnsupportedParameterError
from nmrquant.logging_utils import get_logger
from .gauss_legendre import NODES, WEIGHTS

logger = get_logger(__name__)

SIMPSON_MAX_ITER = 20
ROMBERG_MAX_LEVEL = 15
ADAPTIVE_MAX_DEPTH = 20
# |S2 - S1| within this many ulps of S2 is rounding noise and cannot shrink further
ADAPTIVE_ROUNDING_ULPS = 16.0
_EPS = float(np.finfo(float).eps)


class Evaluator(Protocol):
	def evaluate(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]: ...


class IntegrationMethod(IntEnum):
	"""Integration technique, numbered as in the configuration file."""
	NEWTON_COTES = 0
	ROMBERG = 1
	ADAPTIVE = 2
	GAUSS_LEGENDRE = 3

	@property
	def label(self) -> str:
		return _METHOD_LABELS[self]


_METHOD_LABELS = {
	IntegrationMethod.NEWTON_COTES: "Newton-Cotes",
	IntegrationMethod.ROMBERG: "Romberg",
	IntegrationMethod.ADAPTIVE: "Adaptive Quadrature",
	IntegrationMethod.GAUSS_LEGENDRE: "Gauss-Legendre Quadrature",
}


def _require_ready(f: Evaluator) -> None:
	if not getattr(f, "is_computed", True):
		raise NotReadyError("Cannot integrate: spline not computed.")


def _grid_values(f: Evaluator, a: float, b: float, n: int) -> np.ndarray:
	"""f at a + i*h for i = 0..n, with the last node pinned to b."""
	h = (b - a) / n
	xs = a + np.arange(n + 1) * h
	xs[-1] = b
	return np.asarray(f.evaluate(xs), dtype=float)


# --- Composite Simpson with interval doubling ---
def composite_simpson(f: Evaluator, a: float, b: float, tolerance: float) -> float:
	"""
	Composite Simpson's rule, I = (h/3)[f0 + 4f1 + 2f2 + ... + 4f_{n-1} + fn].

	Starts with 2 subintervals and doubles them until two successive estimates differ
	by less than `tolerance` (at most SIMPSON_MAX_ITER estimates).

	:param f: Evaluator (fitted spline).
	:param a: Lower bound.
	:param b: Upper bound.
	:param tolerance: Absolute convergence threshold.
	:return: Integral estimate.
	"""
	_require_ready(f)
	a, b = float(a), float(b)

	n = 2
	prev = 0.0
	integral = 0.0
	for it in range(SIMPSON_MAX_ITER):
		fx = _grid_values(f, a, b, n)
		h = (b - a) / n
		s = fx[0] + fx[-1] + 4.0 * fx[1:-1:2].sum() + 2.0 * fx[2:-1:2].sum()
		integral = float(h / 3.0 * s)

		if it > 0 and abs(integral - prev) < tolerance:
			return integral

		prev = integral
		n *= 2

	logger.debug("Composite Simpson did not converge to %g on [%g, %g].", tolerance, a, b)
	return integral


# --- Romberg ---
def romberg(f: Evaluator, a: float, b: float, tolerance: float) -> float:
	"""
	Romberg integration: trapezoid estimates with 2**i panels in column 0 and
	Richardson extrapolation R[i][j] = (4**j R[i][j-1] - R[i-1][j-1]) / (4**j - 1).

	Stops when two consecutive diagonal entries differ by less than `tolerance`,
	otherwise returns the deepest diagonal entry after ROMBERG_MAX_LEVEL rows.

	:param f: Evaluator (fitted spline).
	:param a: Lower bound.
	:param b: Upper bound.
	:param tolerance: Absolute convergence threshold.
	:return: Integral estimate.
	"""
	_require_ready(f)
	a, b = float(a), float(b)

	fa, fb = (float(v) for v in np.asarray(f.evaluate(np.array([a, b])), dtype=float))
	trap = 0.5 * (b - a) * (fa + fb)
	prev_row: List[float] = [trap]

	for i in range(1, ROMBERG_MAX_LEVEL):
		# Refine the trapezoid rule: only the new midpoints are evaluated
		n = 2 ** i
		h = (b - a) / n
		mids = a + (2 * np.arange(n // 2) + 1) * h
		trap = 0.5 * trap + h * float(np.sum(f.evaluate(mids)))

		row = [trap]
		for j in range(1, i + 1):
			factor = 4.0 ** j
			row.append((factor * row[j - 1] - prev_row[j - 1]) / (factor - 1.0))

		if abs(row[i] - prev_row[i - 1]) < tolerance:
			return float(row[i])
		prev_row = row

	logger.debug("Romberg did not converge to %g on [%g, %g].", tolerance, a, b)
	return float(prev_row[-1])


# --- Adaptive Simpson ---
def _adaptive_step(
		f: Evaluator,
		a: float,
		b: float,
		tolerance: float,
		fa: float,
		fb: float,
		fmid: float,
		depth: int,
		max_depth: int,
) -> float:
	mid = 0.5 * (a + b)
	h = b - a

	f_left_mid = float(f.evaluate(0.5 * (a + mid)))
	f_right_mid = float(f.evaluate(0.5 * (mid + b)))

	s_whole = h / 6.0 * (fa + 4.0 * fmid + fb)
	s_left = h / 12.0 * (fa + 4.0 * f_left_mid + fmid)
	s_right = h / 12.0 * (fmid + 4.0 * f_right_mid + fb)
	s_split = s_left + s_right

	diff = abs(s_split - s_whole)
	if diff / 15.0 < tolerance or diff <= ADAPTIVE_ROUNDING_ULPS * _EPS * abs(s_split):
		return s_split + (s_split - s_whole) / 15.0
	if depth >= max_depth:
		logger.debug("Adaptive Simpson hit depth %d on [%g, %g].", max_depth, a, b)
		return s_split + (s_split - s_whole) / 15.0

	left = _adaptive_step(f, a, mid, tolerance / 2.0, fa, fmid, f_left_mid, depth + 1, max_depth)
	right = _adaptive_step(f, mid, b, tolerance / 2.0, fmid, fb, f_right_mid, depth + 1, max_depth)
	return left + right


def adaptive_simpson(
		f: Evaluator,
		a: float,
		b: float,
		tolerance: float,
		*,
		max_depth: int = ADAPTIVE_MAX_DEPTH,
) -> float:
	"""
	Recursive adaptive Simpson quadrature.

	Each step compares Simpson on [a, b] (S1) with the sum over both halves (S2). If
	|S2 - S1| / 15 < tolerance, S2 + (S2 - S1)/15 is accepted; otherwise both halves are
	refined with half the tolerance. Endpoint and midpoint values are passed down, so
	each step costs two new evaluations.

	A step is also accepted once |S2 - S1| is down to rounding noise of S2, so a
	tolerance of 0 (or below machine precision) still terminates on smooth pieces.
	Recursion stops at `max_depth` regardless, which bounds the work on kinks.

	:param f: Evaluator (fitted spline).
	:param a: Lower bound.
	:param b: Upper bound.
	:param tolerance: Absolute error target.
	:param max_depth: Maximum recursion depth.
	:return: Integral estimate.
	"""
	_require_ready(f)
	a, b = float(a), float(b)

	fa = float(f.evaluate(a))
	fb = float(f.evaluate(b))
	fmid = float(f.evaluate(0.5 * (a + b)))
	return float(_adaptive_step(f, a, b, tolerance, fa, fb, fmid, 0, max_depth))


# --- Gauss-Legendre ---
def gauss_legendre(f: Evaluator, a: float, b: float) -> float:
	"""
	Fixed 64-point Gauss-Legendre quadrature, nodes mapped from [-1, 1] to [a, b].

	:param f: Evaluator (fitted spline).
	:param a: Lower bound.
	:param b: Upper bound.
	:return: Integral estimate.
	"""
	_require_ready(f)
	a, b = float(a), float(b)

	midpoint = 0.5 * (a + b)
	half_width = 0.5 * (b - a)
	f_pos = np.asarray(f.evaluate(midpoint + half_width * NODES), dtype=float)
	f_neg = np.asarray(f.evaluate(midpoint - half_width * NODES), dtype=float)
	return float(half_width * np.dot(WEIGHTS, f_pos + f_neg))


def integrate(
		f: Evaluator,
		a: float,
		b: float,
		method: Union[IntegrationMethod, int],
		tolerance: float,
) -> float:
	"""
	Integrate `f` over [a, b] with the selected method.

	:param f: Evaluator (fitted spline).
	:param a: Lower bound.
	:param b: Upper bound.
	:param method: IntegrationMethod or its integer code (0-3).
	:param tolerance: Convergence threshold (ignored by Gauss-Legendre).
	:raises UnsupportedParameterError: Unknown method code.
	:return: Integral estimate.
	"""
	try:
		method = IntegrationMethod(method)
	except ValueError as e:
		raise UnsupportedParameterError(f"Unknown integration type: {method!r}") from e

	if method is IntegrationMethod.NEWTON_COTES:
		return composite_simpson(f, a, b, tolerance)
	if method is IntegrationMethod.ROMBERG:
		return romberg(f, a, b, tolerance)
	if method is IntegrationMethod.ADAPTIVE:
		return adaptive_simpson(f, a, b, tolerance)
	return gauss_legendre(f, a, b)
