# nmrquant/io/common.py
from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np

from nmrquant.logging_utils import get_logger
logger = get_logger(__name__)


@dataclass
class SpectralData:
	"""
	Container for a single 1D spectrum.

	x: spectral axis (ppm)
	y: intensities, same length as x
	meta: JSON-friendly metadata (source file, applied shift, ...)
	"""
	x: np.ndarray
	y: np.ndarray
	meta: Dict[str, Any] = field(default_factory=dict)

	def __post_init__(self) -> None:
		self.x = np.array(self.x, dtype=float)
		self.y = np.array(self.y, dtype=float)

		if self.x.ndim != 1 or self.y.ndim != 1:
			raise ValueError(f"`x` and `y` must be 1D, got shapes {self.x.shape} and {self.y.shape}")
		if self.x.shape != self.y.shape:
			raise ValueError(
				"`x` and `y` must have the same length: "
				f"len(x)={self.x.shape[0]} vs len(y)={self.y.shape[0]}"
			)

	@property
	def n_points(self) -> int:
		"""Number of spectral points."""
		return int(self.x.shape[0])

	@property
	def is_sorted(self) -> bool:
		"""True if x is in ascending (non-decreasing) order."""
		return bool(np.all(np.diff(self.x) >= 0.0))

	def sorted(self) -> SpectralData:
		"""
		Return the spectrum ordered by ascending x, keeping (x, y) pairs together.
		Already sorted data is returned as is.
		"""
		if self.is_sorted:
			logger.debug("Data is already sorted in ascending order.")
			return self
		order = np.argsort(self.x, kind="stable")
		logger.info("Data sorted in ascending order by x-values.")
		return SpectralData(x=self.x[order], y=self.y[order], meta=dict(self.meta))

	def with_x(self, x_new: np.ndarray, *, meta_update: Optional[Dict[str, Any]] = None) -> SpectralData:
		"""
		Return a new SpectralData with the same y and updated x (e.g. after calibration).

		:param x_new: New spectral axis with the length of y.
		:param meta_update: Metadata updates merged into a copy of existing meta.
		:return: New SpectralData object.
		"""
		meta = dict(self.meta)
		if meta_update:
			meta.update(meta_update)
		return SpectralData(x=x_new, y=self.y, meta=meta)


def load_xy(path: Union[str, Path]) -> SpectralData:
	"""
	Read a two-column (x, y) whitespace separated text file.

	Lines starting with '#' and lines that do not hold two numbers are skipped;
	extra columns are ignored. The result is sorted by x.

	:param path: Data file.
	:raises FileNotFoundError: Missing file.
	:raises ValueError: No data points could be read.
	:return: SpectralData sorted by x.
	"""
	p = Path(path)
	if not p.is_file():
		raise FileNotFoundError(f"Cannot open data file: {p}")

	with warnings.catch_warnings():
		# genfromtxt warns about skipped or empty lines; malformed lines are dropped on purpose
		warnings.simplefilter("ignore")
		raw = np.genfromtxt(p, comments="#", usecols=(0, 1), dtype=float, invalid_raise=False)

	if raw.size == 0:
		raise ValueError(f"No data points read from file: {p}")
	raw = np.atleast_2d(raw)
	raw = raw[np.all(np.isfinite(raw), axis=1)]
	if raw.shape[0] == 0:
		raise ValueError(f"No data points read from file: {p}")

	logger.info("Read %d data points from %s.", raw.shape[0], p)
	return SpectralData(x=raw[:, 0], y=raw[:, 1], meta={"source": str(p)}).sorted()
