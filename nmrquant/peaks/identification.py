# nmrquant/peaks/identification.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np

from nmrquant.errors import InvalidInputError, NotReadyError
from nmrquant.logging_utils import get_logger
from nmrquant.spline import CubicInterpolant

logger = get_logger(__name__)

# Peaks centred this close to 0 ppm are the TMS reference itself
ORIGIN_TOLERANCE = 0.02


# --- Peak data model ---
@dataclass(slots=True)
class Peak:
	"""
	A region where the spline rises above the baseline.

	begin     ... x where the spline crosses the baseline going up (or the left data edge)
	end       ... x of the next crossing (or the right data edge)
	location  ... (begin + end) / 2, intentionally the midpoint and not the argmax
	maximum   ... largest filtered sample y with begin <= x <= end
	apex      ... x of that sample

	`area` is filled by `integrate_peaks(...)`, `hydrogens` by `calculate_hydrogens(...)`.
	"""
	begin: float
	end: float
	location: float
	maximum: float
	area: float = 0.0
	hydrogens: int = 0
	apex: float = float("nan")

	@property
	def width(self) -> float:
		return self.end - self.begin


def _boundary_crossings(spline: CubicInterpolant, baseline: float, x_min: float, x_max: float) -> List[float]:
	"""
	Crossings of the baseline, plus the data edges where the spectrum starts or ends above
	the baseline (open peaks). Edges are only added next to at least one real crossing.
	"""
	crossings = [float(c) for c in spline.find_crossings(baseline, x_min, x_max)]

	if crossings and spline.evaluate(x_min) > baseline:
		crossings.insert(0, x_min)
	if crossings and spline.evaluate(x_max) > baseline:
		crossings.append(x_max)

	crossings.sort()
	return crossings


def detect_peaks(
		spline: CubicInterpolant,
		x: np.ndarray,
		y: np.ndarray,
		baseline: float,
		*,
		origin_tolerance: float = ORIGIN_TOLERANCE,
) -> List[Peak]:
	"""
	Detect peaks as regions between consecutive baseline crossings of the spline.

	Workflow
		- find crossings of y = baseline over [min(x), max(x)] (+ open edges)
		- skip pairs whose spline midpoint is not above the baseline (valleys)
		- take the maximum from the filtered samples inside the pair; skip pairs without
		  any sample above the baseline
		- skip peaks with |location| < origin_tolerance (TMS reference)

	:param spline: Fitted spline of the filtered spectrum.
	:param x: Sample positions used for the fit.
	:param y: Filtered sample values.
	:param baseline: Threshold a peak must exceed.
	:param origin_tolerance: Half-width of the suppressed window around x = 0. Use 0 to keep all peaks.
	:raises InvalidInputError: Empty or mismatched x/y.
	:raises NotReadyError: Spline not fitted.
	:return: Peaks ordered by `begin`.
	"""
	x = np.asarray(x, dtype=float)
	y = np.asarray(y, dtype=float)
	if x.ndim != 1 or y.ndim != 1:
		raise InvalidInputError(f"detect_peaks expects 1D x and 1D y: got {x.ndim}D x and {y.ndim}D y.")
	if x.size != y.size:
		raise InvalidInputError(f"x and y size mismatch: {x.size} vs {y.size}.")
	if x.size == 0:
		raise InvalidInputError("No data for peak detection.")
	if not spline.is_computed:
		raise NotReadyError("Spline not computed; cannot detect peaks.")

	baseline = float(baseline)
	logger.info("Detecting peaks above baseline %g.", baseline)

	crossings = _boundary_crossings(spline, baseline, float(x.min()), float(x.max()))
	if len(crossings) < 2:
		logger.info("No complete peaks found (need at least 2 crossings).")
		return []

	peaks: List[Peak] = []
	for begin, end in zip(crossings[:-1], crossings[1:]):
		mid = 0.5 * (begin + end)
		if spline.evaluate(mid) <= baseline:
			continue

		inside = np.flatnonzero((x >= begin) & (x <= end) & (y > baseline))
		if inside.size == 0:
			continue
		j = int(inside[np.argmax(y[inside])])

		if abs(mid) < origin_tolerance:
			logger.debug("Skipping reference peak at %g.", mid)
			continue

		peaks.append(Peak(
			begin=begin,
			end=end,
			location=mid,
			maximum=float(y[j]),
			apex=float(x[j]),
		))

	logger.info("Found %d peaks from %d crossings.", len(peaks), len(crossings))
	return peaks
