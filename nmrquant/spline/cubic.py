# nmrquant/spline/cubic.py
"""
Natural cubic spline interpolation.

On interval [x_i, x_{i+1}] the spline is

	S_i(x) = y_i + b_i*dx + c_i*dx^2 + d_i*dx^3,    dx = x - x_i

The second derivatives M_i at the knots solve a symmetric, diagonally dominant
tridiagonal system; the natural boundary condition fixes M_0 = M_{n-1} = 0, so only
the n-2 interior values are unknown.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np
from scipy.linalg import solveh_banded

from nmrquant.errors import InvalidInputError, NotReadyError
from nmrquant.logging_utils import get_logger

logger = get_logger(__name__)

ArrayLike = Union[float, np.ndarray]

CROSSING_SAMPLES = 1000
BISECTION_MAX_ITER = 50
BISECTION_FTOL = 1e-8
BISECTION_XTOL = 1e-10


@dataclass(frozen=True, slots=True)
class SplineCoefficients:
	"""
	Knots and per-interval coefficients. All arrays have length n; the last entry
	repeats interval n-2 and is never used for evaluation.
	"""
	x: np.ndarray
	y: np.ndarray
	b: np.ndarray  # linear
	c: np.ndarray  # quadratic
	d: np.ndarray  # cubic


def _readonly(a: np.ndarray) -> np.ndarray:
	a.setflags(write=False)
	return a


def _validate_knots(x: np.ndarray, y: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
	x = np.array(x, dtype=float)
	y = np.array(y, dtype=float)
	if x.ndim != 1 or y.ndim != 1:
		raise InvalidInputError(f"Spline knots must be 1D: got {x.ndim}D x and {y.ndim}D y.")
	if x.size != y.size:
		raise InvalidInputError(f"x and y must have the same length: {x.size} vs {y.size}.")
	if x.size < 2:
		raise InvalidInputError(f"At least 2 points are required, got {x.size}.")
	if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
		raise InvalidInputError("Spline knots must be finite.")
	if np.any(np.diff(x) <= 0.0):
		raise InvalidInputError("x values must be strictly increasing.")
	return x, y


def _second_derivatives(h: np.ndarray, y: np.ndarray) -> np.ndarray:
	"""
	Solve for M_0 ... M_{n-1} with M_0 = M_{n-1} = 0.

	Row i (interior knot): h_{i-1} M_{i-1} + 2(h_{i-1}+h_i) M_i + h_i M_{i+1}
	                       = 6[(y_{i+1}-y_i)/h_i - (y_i-y_{i-1})/h_{i-1}]
	"""
	n = y.size
	M = np.zeros(n, dtype=float)
	m = n - 2
	if m <= 0:
		return M

	slopes = np.diff(y) / h
	rhs = 6.0 * np.diff(slopes)
	diag = 2.0 * (h[:-1] + h[1:])

	if m == 1:
		M[1] = rhs[0] / diag[0]
		return M

	# Upper banded storage: row 0 holds the superdiagonal (first entry unused)
	ab = np.zeros((2, m), dtype=float)
	ab[0, 1:] = h[1:-1]
	ab[1, :] = diag
	M[1:-1] = solveh_banded(ab, rhs, check_finite=False)
	return M


class CubicInterpolant:
	"""
	Natural cubic spline through (x, y) samples.

	Lifecycle: uncomputed -> computed (`fit`) -> queryable. A new `fit` replaces the
	coefficients in one assignment; a failed `fit` leaves the previous state intact.
	Queries are read-only and can run concurrently once fitting has completed.
	"""

	def __init__(self, x: Optional[np.ndarray] = None, y: Optional[np.ndarray] = None) -> None:
		self._state: Optional[SplineCoefficients] = None
		if x is not None or y is not None:
			self.fit(x, y)

	def __repr__(self) -> str:
		if self._state is None:
			return f"{self.__class__.__name__}(uncomputed)"
		x = self._state.x
		return f"{self.__class__.__name__}(n={x.size}, x=[{x[0]:g}, {x[-1]:g}])"

	@property
	def is_computed(self) -> bool:
		return self._state is not None

	@property
	def coefficients(self) -> SplineCoefficients:
		return self._require_state()

	@property
	def domain(self) -> Tuple[float, float]:
		"""(first knot, last knot)."""
		state = self._require_state()
		return float(state.x[0]), float(state.x[-1])

	def _require_state(self) -> SplineCoefficients:
		state = self._state
		if state is None:
			raise NotReadyError("Spline not computed; call fit() first.")
		return state

	# --- Fitting ---
	def fit(self, x: np.ndarray, y: np.ndarray) -> CubicInterpolant:
		"""
		Compute natural cubic spline coefficients.

		:param x: Knot positions, strictly increasing.
		:param y: Knot values.
		:raises InvalidInputError: Length mismatch, fewer than 2 points, non-finite or non-increasing x.
		:return: self
		"""
		x, y = _validate_knots(x, y)
		n = x.size
		h = np.diff(x)

		if n == 2:
			b = np.full(n, (y[1] - y[0]) / h[0])
			c = np.zeros(n)
			d = np.zeros(n)
			logger.debug("Linear interpolation (2 points).")
		else:
			M = _second_derivatives(h, y)
			b = np.empty(n)
			c = np.empty(n)
			d = np.empty(n)
			d[:-1] = (M[1:] - M[:-1]) / (6.0 * h)
			c[:-1] = M[:-1] / 2.0
			b[:-1] = (y[1:] - y[:-1]) / h - h * (2.0 * M[:-1] + M[1:]) / 6.0
			b[-1], c[-1], d[-1] = b[-2], c[-2], d[-2]
			logger.debug("Tridiagonal system solved (%d unknowns), %d intervals.", n - 2, n - 1)

		self._state = SplineCoefficients(
			x=_readonly(x), y=_readonly(y),
			b=_readonly(b), c=_readonly(c), d=_readonly(d),
		)
		logger.info("Natural cubic spline computed for %d data points.", n)
		return self

	# --- Evaluation ---
	@staticmethod
	def _locate(state: SplineCoefficients, xv: np.ndarray) -> np.ndarray:
		"""Interval index per query; points outside the knots use the first/last interval."""
		i = np.searchsorted(state.x, xv, side="right") - 1
		return np.clip(i, 0, state.x.size - 2)

	def evaluate(self, x: ArrayLike) -> ArrayLike:
		"""
		Evaluate the spline (scalar in -> float out, array in -> array out).

		:raises NotReadyError: Before the first successful fit.
		"""
		state = self._require_state()
		xv = np.asarray(x, dtype=float)
		i = self._locate(state, xv)
		dx = xv - state.x[i]
		out = state.y[i] + dx * (state.b[i] + dx * (state.c[i] + dx * state.d[i]))
		return float(out) if out.ndim == 0 else out

	__call__ = evaluate

	def evaluate_derivative(self, x: ArrayLike) -> ArrayLike:
		"""S'(x) = b_i + 2 c_i dx + 3 d_i dx^2."""
		state = self._require_state()
		xv = np.asarray(x, dtype=float)
		i = self._locate(state, xv)
		dx = xv - state.x[i]
		out = state.b[i] + dx * (2.0 * state.c[i] + 3.0 * state.d[i] * dx)
		return float(out) if out.ndim == 0 else out

	def evaluate_second_derivative(self, x: ArrayLike) -> ArrayLike:
		"""S''(x) = 2 c_i + 6 d_i dx."""
		state = self._require_state()
		xv = np.asarray(x, dtype=float)
		i = self._locate(state, xv)
		dx = xv - state.x[i]
		out = 2.0 * state.c[i] + 6.0 * state.d[i] * dx
		return float(out) if out.ndim == 0 else out

	def sample(self, x_min: float, x_max: float, num_points: int = 2000) -> Tuple[np.ndarray, np.ndarray]:
		"""
		Evaluate the spline on a uniform grid (e.g. for plotting).

		:param x_min: First grid point.
		:param x_max: Last grid point.
		:param num_points: Number of grid points (>= 2).
		:return: (x_grid, y_grid)
		"""
		if num_points < 2:
			raise ValueError(f"num_points must be >= 2, got {num_points}.")
		self._require_state()
		xs = np.linspace(float(x_min), float(x_max), int(num_points))
		return xs, self.evaluate(xs)

	# --- Level crossings ---
	def _bisect(self, level: float, x_left: float, x_right: float, f_left: float) -> float:
		x_mid = 0.5 * (x_left + x_right)
		for _ in range(BISECTION_MAX_ITER):
			x_mid = 0.5 * (x_left + x_right)
			f_mid = self.evaluate(x_mid) - level
			if abs(f_mid) < BISECTION_FTOL or abs(x_right - x_left) < BISECTION_XTOL:
				return x_mid
			if f_left * f_mid < 0.0:
				x_right = x_mid
			else:
				x_left, f_left = x_mid, f_mid
		return 0.5 * (x_left + x_right)

	def find_crossings(self, level: float, x_min: float, x_max: float) -> np.ndarray:
		"""
		Find x where the spline crosses the horizontal line y = level.

		The range is sampled at CROSSING_SAMPLES equal steps; every strict sign change of
		S(x) - level between neighbours is refined by bisection. Two roots closer than one
		sampling step cancel out and are not reported.

		:param level: y value of the horizontal line.
		:param x_min: Start of the search range.
		:param x_max: End of the search range.
		:return: Ascending array of crossing positions (possibly empty).
		"""
		self._require_state()
		level = float(level)
		x_min, x_max = float(x_min), float(x_max)
		if not x_max > x_min:
			return np.array([], dtype=float)

		dx = (x_max - x_min) / CROSSING_SAMPLES
		xs = x_min + np.arange(CROSSING_SAMPLES + 1) * dx
		fs = self.evaluate(xs) - level

		brackets = np.flatnonzero(fs[:-1] * fs[1:] < 0.0)
		crossings = np.array(
			[self._bisect(level, float(xs[k]), float(xs[k + 1]), float(fs[k])) for k in brackets],
			dtype=float,
		)
		logger.debug("Found %d crossings of level %g.", crossings.size, level)
		return crossings
