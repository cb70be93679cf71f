# nmrquant/smoothing/filters.py
"""
Smoothing filters for 1D spectra.

Two kernel families are supported:
- boxcar (moving average) with an odd window
- quadratic Savitzky-Golay smoothing with fixed 5, 11 or 17 point kernels

Boundary handling
-----------------
Older documentation calls the boundary "cyclic", but samples outside the signal are
mirrored about the end points (d c b | a b c d | c b a), not wrapped around.
Windows wider than the signal are clamped to the nearest end point after the
mirror step.
"""
from __future__ import annotations

from enum import IntEnum
from types import MappingProxyType
from typing import Mapping, Tuple

import numpy as np

from nmrquant.errors import UnsupportedParameterError
from nmrquant.logging_utils import get_logger

logger = get_logger(__name__)


class FilterMode(IntEnum):
	"""Filter selector, numbered as in the configuration file."""
	NONE = 0
	MOVING_AVERAGE = 1
	QUADRATIC = 2

	@property
	def label(self) -> str:
		return _FILTER_LABELS[self]


_FILTER_LABELS = {
	FilterMode.NONE: "None, Filtering is Off",
	FilterMode.MOVING_AVERAGE: "Boxcar (Cyclic)",
	FilterMode.QUADRATIC: "Savitzky-Golay",
}


def _frozen(values: Tuple[float, ...]) -> np.ndarray:
	arr = np.asarray(values, dtype=float)
	arr.setflags(write=False)
	return arr


# Savitzky & Golay, Anal. Chem. 36, 1627 (1964): quadratic/cubic smoothing.
# size -> (integer coefficients, normalization)
QUADRATIC_KERNELS: Mapping[int, Tuple[np.ndarray, float]] = MappingProxyType({
	5: (_frozen((-3.0, 12.0, 17.0, 12.0, -3.0)), 35.0),
	11: (_frozen((-36.0, 9.0, 44.0, 69.0, 84.0, 89.0, 84.0, 69.0, 44.0, 9.0, -36.0)), 429.0),
	17: (_frozen((
		-21.0, -6.0, 7.0, 18.0, 27.0, 34.0, 39.0, 42.0, 43.0,
		42.0, 39.0, 34.0, 27.0, 18.0, 7.0, -6.0, -21.0,
	)), 323.0),
})

DEFAULT_QUADRATIC_SIZE = 5


def reflect_indices(n: int, half_window: int) -> np.ndarray:
	"""
	Index table of shape (n, 2*half_window + 1) with mirrored boundaries.

	Row i holds the sample indices i-half_window ... i+half_window after
	  - idx < 0   -> -idx
	  - idx >= n  -> 2n - idx - 2
	  - clamp into [0, n-1] for anything still out of range (window wider than signal)

	:param n: Signal length (> 0).
	:param half_window: Half-width of the window (>= 0).
	:return: Integer index array.
	"""
	offsets = np.arange(-half_window, half_window + 1)
	idx = np.arange(n)[:, None] + offsets[None, :]
	idx = np.where(idx < 0, -idx, idx)
	idx = np.where(idx >= n, 2 * n - idx - 2, idx)
	return np.clip(idx, 0, n - 1)


def _correlate_reflected(y: np.ndarray, kernel: np.ndarray, norm: float) -> np.ndarray:
	"""Single pass: out[i] = sum(kernel[j] * y[reflect(i + j)]) / norm."""
	idx = reflect_indices(y.size, (kernel.size - 1) // 2)
	return (y[idx] @ kernel) / norm


def _as_signal(y: np.ndarray) -> np.ndarray:
	y = np.asarray(y, dtype=float)
	if y.ndim != 1:
		raise ValueError(f"Filters expect a 1D signal, got shape {y.shape}.")
	return y


def moving_average(y: np.ndarray, size: int, passes: int = 1) -> np.ndarray:
	"""
	Boxcar filter: B(y_i) = sum(y[i-k] ... y[i+k]) / size, with k = (size-1)/2.

	:param y: 1D signal.
	:param size: Window size, should be odd. Even sizes are bumped to the next odd size.
	:param passes: Number of sequential passes; pass k+1 filters the output of pass k.
	:return: Filtered copy of `y` (same length). `size <= 0` or `passes <= 0` returns `y` unchanged.
	"""
	y = _as_signal(y)
	size = int(size)
	if size <= 0 or passes <= 0 or y.size == 0:
		return y.copy()
	if size % 2 == 0:
		logger.warning("Boxcar window should be odd. Adjusting from %d to %d.", size, size + 1)
		size += 1

	logger.info("Applying %d-pass boxcar filter (size %d).", passes, size)
	kernel = np.ones(size, dtype=float)
	out = y
	for p in range(passes):
		out = _correlate_reflected(out, kernel, float(size))
		logger.debug("Boxcar pass %d complete.", p + 1)
	return out


def quadratic_smooth(y: np.ndarray, size: int, passes: int = 1) -> np.ndarray:
	"""
	Savitzky-Golay quadratic smoothing with tabulated convolution coefficients.

	:param y: 1D signal.
	:param size: Kernel size: 5, 11 or 17. Any other positive size falls back to 5 with a warning.
	:param passes: Number of sequential passes.
	:return: Filtered copy of `y` (same length). `size <= 0` or `passes <= 0` returns `y` unchanged.
	"""
	y = _as_signal(y)
	size = int(size)
	if size <= 0 or passes <= 0 or y.size == 0:
		return y.copy()
	if size not in QUADRATIC_KERNELS:
		logger.warning(
			"Savitzky-Golay size should be one of %s. Using %d.",
			sorted(QUADRATIC_KERNELS), DEFAULT_QUADRATIC_SIZE
		)
		size = DEFAULT_QUADRATIC_SIZE

	kernel, norm = QUADRATIC_KERNELS[size]
	logger.info("Applying %d-pass Savitzky-Golay filter (size %d).", passes, size)
	out = y
	for p in range(passes):
		out = _correlate_reflected(out, kernel, norm)
		logger.debug("Savitzky-Golay pass %d complete.", p + 1)
	return out


def apply_filter(y: np.ndarray, mode: FilterMode | int, size: int, passes: int) -> np.ndarray:
	"""
	Dispatch to the selected filter.

	:param y: 1D signal.
	:param mode: FilterMode (or its integer code).
	:param size: Window / kernel size.
	:param passes: Number of passes.
	:raises UnsupportedParameterError: Unknown filter code.
	:return: Filtered copy of `y`.
	"""
	try:
		mode = FilterMode(mode)
	except ValueError as e:
		raise UnsupportedParameterError(f"Unknown filter mode: {mode!r}") from e

	if mode is FilterMode.MOVING_AVERAGE:
		return moving_average(y, size, passes)
	if mode is FilterMode.QUADRATIC:
		return quadratic_smooth(y, size, passes)

	logger.info("Filtering disabled (filter type = 0).")
	return _as_signal(y).copy()
