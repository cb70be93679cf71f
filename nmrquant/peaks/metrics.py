# nmrquant/peaks/metrics.py
from __future__ import annotations

import math
from typing import Sequence, Union

from tqdm import tqdm

from nmrquant.errors import InvalidInputError
from nmrquant.logging_utils import get_logger
from nmrquant.quadrature import Evaluator, IntegrationMethod, integrate
from .identification import Peak

logger = get_logger(__name__)


def _round_half_away(value: float) -> int:
	"""Round to nearest integer, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
	return int(math.copysign(math.floor(abs(value) + 0.5), value))


def integrate_peaks(
		peaks: Sequence[Peak],
		spline: Evaluator,
		method: Union[IntegrationMethod, int],
		tolerance: float,
		*,
		progress: bool = False,
) -> bool:
	"""
	Fill `Peak.area` in-place by integrating the spline over [begin, end].

	An unknown method code is logged as an error and leaves every area at 0.

	:param peaks: Peaks from `detect_peaks(...)`.
	:param spline: Fitted spline.
	:param method: IntegrationMethod or its integer code.
	:param tolerance: Convergence threshold (ignored by Gauss-Legendre).
	:param progress: Show a tqdm progress bar.
	:return: False if the method was rejected and no area was computed.
	"""
	try:
		method = IntegrationMethod(method)
	except ValueError:
		logger.error("Unknown integration type: %r", method)
		for p in peaks:
			p.area = 0.0
		return False

	logger.info("Integrating %d peaks (%s).", len(peaks), method.label)
	for p in tqdm(peaks, desc="Integrating peaks", disable=not progress):
		p.area = integrate(spline, p.begin, p.end, method, tolerance)
	return True


def calculate_hydrogens(peaks: Sequence[Peak]) -> None:
	"""
	Fill `Peak.hydrogens` in-place: the smallest positive area is one hydrogen.

	:param peaks: Integrated peaks.
	:raises InvalidInputError: No peak has a positive area.
	"""
	if not peaks:
		return

	positive = [p.area for p in peaks if p.area > 0.0]
	if not positive:
		raise InvalidInputError("Cannot normalize hydrogens: no peak has a positive area.")
	min_area = min(positive)

	for p in peaks:
		p.hydrogens = _round_half_away(p.area / min_area)

	logger.info("Calculated hydrogen ratios (smallest peak = 1 H).")
