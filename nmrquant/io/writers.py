# nmrquant/io/writers.py
"""Plain-text outputs: intermediate (x, y) files for plotting, peak tables and the analysis report."""
from __future__ import annotations

from pathlib import Path
from typing import Sequence, Union

import numpy as np

from nmrquant.logging_utils import get_logger
from nmrquant.peaks import Peak
from nmrquant.spline import CubicInterpolant

logger = get_logger(__name__)

PathLike = Union[str, Path]


def _prepare(path: PathLike) -> Path:
	p = Path(path)
	p.parent.mkdir(parents=True, exist_ok=True)
	return p


def write_xy(path: PathLike, x: np.ndarray, y: np.ndarray, header: str = "") -> Path:
	"""
	Write (x, y) pairs, one per line, with 6 decimals and an optional '# header' line.

	:raises ValueError: x and y lengths differ.
	:return: Written path.
	"""
	x = np.asarray(x, dtype=float)
	y = np.asarray(y, dtype=float)
	if x.shape != y.shape:
		raise ValueError(f"x and y data sizes don't match: {x.shape} vs {y.shape}")

	p = _prepare(path)
	np.savetxt(p, np.column_stack([x, y]), fmt="%.6f", delimiter=" ", header=header, comments="# ")
	logger.info("Data written to %s (%d points).", p, x.size)
	return p


def write_spline(
		path: PathLike,
		spline: CubicInterpolant,
		x_min: float,
		x_max: float,
		num_points: int = 1000,
) -> Path:
	"""Write the spline evaluated on a uniform grid of `num_points` over [x_min, x_max]."""
	xs, ys = spline.sample(x_min, x_max, num_points)
	p = _prepare(path)
	np.savetxt(
		p, np.column_stack([xs, ys]), fmt="%.6f", delimiter=" ",
		header=f"Cubic spline evaluated at {num_points} points", comments="# ",
	)
	logger.info("Spline data written to %s (%d points).", p, num_points)
	return p


def write_peaks(path: PathLike, peaks: Sequence[Peak], baseline: float) -> Path:
	"""Write one line per peak: number, begin, end, location, maximum, area, hydrogens."""
	header = "\n".join([
		"Peak data for plotting",
		"Format: peak_number, begin, end, location, maximum, area, hydrogens",
		f"Baseline: {baseline:g}",
	])
	p = _prepare(path)
	with p.open("w", encoding="utf-8") as fh:
		for line in header.splitlines():
			fh.write(f"# {line}\n")
		for i, peak in enumerate(peaks, start=1):
			fh.write(
				f"{i} {peak.begin:.12f} {peak.end:.12f} {peak.location:.12f} "
				f"{peak.maximum:.12f} {peak.area:.12e} {peak.hydrogens}\n"
			)
	logger.info("Peak data written to %s (%d peaks).", p, len(peaks))
	return p


def format_peak_table(peaks: Sequence[Peak]) -> str:
	"""Fixed-width peak table for the console and the report."""
	widths = (7, 16, 16, 16, 16, 16, 9)
	titles = ("Peak", "Begin", "End", "Location", "Top", "Area", "Hydrogens")

	lines = [
		" ".join(t.rjust(w) for t, w in zip(titles, widths)),
		" ".join("=" * w for w in widths),
	]
	for i, p in enumerate(peaks, start=1):
		lines.append(" ".join([
			f"{i:>7d}",
			f"{p.begin:>16.12f}",
			f"{p.end:>16.12f}",
			f"{p.location:>16.12f}",
			f"{p.maximum:>16.6f}",
			f"{p.area:>16.10e}",
			f"{p.hydrogens:>9d}",
		]))
	return "\n".join(lines) + "\n"


def format_report(
		*,
		options: str,
		technique: str,
		source: PathLike,
		shift: float,
		peaks: Sequence[Peak],
		elapsed: float,
) -> str:
	"""Full text of the analysis report."""
	return "\n".join([
		"-=> NMR ANALYSIS <=-",
		"",
		options,
		"",
		"Techniques",
		"===============================",
		f"{technique} Integration",
		"",
		"Plot File Data",
		"===============================",
		f"File: {source}",
		f"Plot shifted {shift:g} ppm for TMS calibration",
		"",
		format_peak_table(peaks),
		f"Analysis took {elapsed:.3f} seconds.",
		"",
	])


def write_report(path: PathLike, text: str) -> Path:
	p = _prepare(path)
	p.write_text(text, encoding="utf-8")
	logger.info("Results written to %s.", p)
	return p
