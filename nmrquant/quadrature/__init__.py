from __future__ import annotations

from .methods import (
	Evaluator,
	IntegrationMethod,
	adaptive_simpson,
	composite_simpson,
	gauss_legendre,
	integrate,
	romberg,
)


__all__ = [
	"Evaluator",
	"IntegrationMethod",
	"adaptive_simpson",
	"composite_simpson",
	"gauss_legendre",
	"integrate",
	"romberg",
]
