from __future__ import annotations

from .common import SpectralData, load_xy
from .config import AnalysisConfig, load_config
from .writers import (
	format_peak_table,
	format_report,
	write_peaks,
	write_report,
	write_spline,
	write_xy,
)

__all__ = [
	"SpectralData",
	"load_xy",
	"AnalysisConfig",
	"load_config",
	"format_peak_table",
	"format_report",
	"write_peaks",
	"write_report",
	"write_spline",
	"write_xy",
]
