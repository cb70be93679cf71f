from __future__ import annotations

from .cubic import CubicInterpolant, SplineCoefficients


__all__ = [
	"CubicInterpolant",
	"SplineCoefficients",
]
