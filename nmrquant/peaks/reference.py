# nmrquant/peaks/reference.py
"""TMS calibration: shift the spectrum so the reference peak sits at x = 0."""
from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from nmrquant.logging_utils import get_logger

logger = get_logger(__name__)


def find_reference_peak(x: np.ndarray, y: np.ndarray, baseline: float) -> Optional[int]:
	"""
	Index of the TMS peak: the local maximum above `baseline` with the most positive x.

	A sample is a local maximum when it is not smaller than either neighbour.
	`x` must be sorted ascending.

	:param x: Sorted sample positions.
	:param y: Sample values.
	:param baseline: Threshold a reference candidate must exceed.
	:return: Index into x/y, or None if no sample qualifies.
	"""
	x = np.asarray(x, dtype=float)
	y = np.asarray(y, dtype=float)
	if x.size != y.size:
		raise ValueError(f"x and y must have the same length: {x.size} vs {y.size}.")
	if y.size < 2:
		return None

	rises = np.r_[True, y[1:] >= y[:-1]]
	falls = np.r_[y[:-1] >= y[1:], True]
	candidates = np.flatnonzero((y > baseline) & rises & falls)
	# The first sample is the fallback reference anyway
	candidates = candidates[candidates > 0]
	if candidates.size == 0:
		return None
	return int(candidates[-1])


def align_to_reference(x: np.ndarray, y: np.ndarray, baseline: float) -> Tuple[np.ndarray, float]:
	"""
	Shift `x` so the TMS peak lands on 0.0.

	Without a qualifying peak the first sample position is used as the reference.

	:param x: Sorted sample positions.
	:param y: Sample values.
	:param baseline: Threshold for reference candidates.
	:return: (shifted x, applied shift)
	"""
	x = np.asarray(x, dtype=float)
	if x.size == 0:
		raise ValueError("No data to process for TMS shift.")

	idx = find_reference_peak(x, y, baseline)
	if idx is None:
		logger.warning("No reference peak above baseline %g; using first x as reference.", baseline)
		idx = 0

	shift = float(x[idx])
	logger.info("TMS peak found at x = %g; applied shift of %g ppm.", shift, shift)
	return x - shift, shift
