# nmrquant/__init__.py
from __future__ import annotations

__version__ = "1.0.0"

from .errors import NmrQuantError, InvalidInputError, NotReadyError, UnsupportedParameterError
from .smoothing import FilterMode, apply_filter, moving_average, quadratic_smooth
from .spline import CubicInterpolant
from .quadrature import (
	IntegrationMethod,
	adaptive_simpson,
	composite_simpson,
	gauss_legendre,
	integrate,
	romberg,
)
from .peaks import Peak, detect_peaks, integrate_peaks, calculate_hydrogens, align_to_reference
from .io import SpectralData, AnalysisConfig, load_xy, load_config
from .pipeline import AnalysisSettings, AnalysisResult, analyze, run

__all__ = [
	"NmrQuantError",
	"InvalidInputError",
	"NotReadyError",
	"UnsupportedParameterError",
	"FilterMode",
	"apply_filter",
	"moving_average",
	"quadratic_smooth",
	"CubicInterpolant",
	"IntegrationMethod",
	"adaptive_simpson",
	"composite_simpson",
	"gauss_legendre",
	"integrate",
	"romberg",
	"Peak",
	"detect_peaks",
	"integrate_peaks",
	"calculate_hydrogens",
	"align_to_reference",
	"SpectralData",
	"AnalysisConfig",
	"load_xy",
	"load_config",
	"AnalysisSettings",
	"AnalysisResult",
	"analyze",
	"run",
	"__version__",
]
