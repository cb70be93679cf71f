from __future__ import annotations

from .filters import (
	FilterMode,
	QUADRATIC_KERNELS,
	apply_filter,
	moving_average,
	quadratic_smooth,
	reflect_indices,
)


__all__ = [
	"FilterMode",
	"QUADRATIC_KERNELS",
	"apply_filter",
	"moving_average",
	"quadratic_smooth",
	"reflect_indices",
]
