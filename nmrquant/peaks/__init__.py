from __future__ import annotations

from .identification import ORIGIN_TOLERANCE, Peak, detect_peaks
from .metrics import calculate_hydrogens, integrate_peaks
from .reference import align_to_reference, find_reference_peak

__all__ = [
	"ORIGIN_TOLERANCE",
	"Peak",
	"detect_peaks",
	"integrate_peaks",
	"calculate_hydrogens",
	"find_reference_peak",
	"align_to_reference",
]
