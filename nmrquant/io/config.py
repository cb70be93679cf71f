# nmrquant/io/config.py
"""
Reader for the line-oriented analysis configuration file (`nmr.in`).

File format (first token of each line is used, the rest may be a comment):
	Line 1: input data filename
	Line 2: baseline adjustment
	Line 3: tolerance for numerical algorithms
	Line 4: filter type (0=none, 1=boxcar, 2=Savitzky-Golay)
	Line 5: filter size (odd number)
	Line 6: number of filter passes
	Line 7: integration technique (0=Newton-Cotes, 1=Romberg, 2=Adaptive, 3=Gauss-Legendre)
	Line 8: output filename
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, List, TypeVar, Union

from nmrquant.logging_utils import get_logger
from nmrquant.quadrature import IntegrationMethod
from nmrquant.smoothing import FilterMode

logger = get_logger(__name__)

T = TypeVar("T")

CONFIG_LINES = 8
DEFAULT_CONFIG = "nmr.in"


@dataclass(frozen=True)
class AnalysisConfig:
	"""Settings of one analysis run, as read from the configuration file."""
	input_file: Path
	baseline: float = 0.0
	tolerance: float = 1e-8
	filter_type: int = 0
	filter_size: int = 0
	filter_passes: int = 0
	integration_type: int = 0
	output_file: Path = Path("analysis.txt")

	@property
	def filter_label(self) -> str:
		try:
			return FilterMode(self.filter_type).label
		except ValueError:
			return "Unknown"

	@property
	def integration_label(self) -> str:
		try:
			return IntegrationMethod(self.integration_type).label
		except ValueError:
			return "Unknown"

	def describe(self) -> str:
		"""Program options block, as printed at the top of the report."""
		lines = [
			"Program Options",
			"===============================",
			f"Baseline Adjustment : {self.baseline:g}",
			f"Tolerance           : {self.tolerance:g}",
			f"Filter Type         : {self.filter_label}",
		]
		if self.filter_type != FilterMode.NONE:
			lines.append(f"Filter Size         : {self.filter_size}")
			lines.append(f"Filter Passes       : {self.filter_passes}")
		lines.append(f"Integration Method  : {self.integration_label}")
		return "\n".join(lines)


def _first_token(line: str, lineno: int, convert: Callable[[str], T], name: str) -> T:
	tokens = line.split()
	if not tokens:
		raise ValueError(f"Line {lineno} ({name}) is empty.")
	try:
		return convert(tokens[0])
	except ValueError as e:
		raise ValueError(f"Line {lineno} ({name}): cannot parse {tokens[0]!r}.") from e


def load_config(path: Union[str, Path]) -> AnalysisConfig:
	"""
	Read an analysis configuration file.

	Relative data and output paths are resolved against the directory of the config file.
	An even filter size with filtering enabled is bumped to the next odd size.

	:param path: Configuration file (typically `nmr.in`).
	:raises FileNotFoundError: Missing file.
	:raises ValueError: Fewer than 8 lines or unparsable values.
	:return: AnalysisConfig
	"""
	p = Path(path)
	if not p.is_file():
		raise FileNotFoundError(f"Cannot open configuration file: {p}")

	lines: List[str] = p.read_text(encoding="utf-8").splitlines()[:CONFIG_LINES]
	if len(lines) < CONFIG_LINES:
		raise ValueError(
			f"Configuration file incomplete. Expected {CONFIG_LINES} lines, found {len(lines)}."
		)

	base_dir = p.parent
	config = AnalysisConfig(
		input_file=base_dir / _first_token(lines[0], 1, str, "input file"),
		baseline=_first_token(lines[1], 2, float, "baseline"),
		tolerance=_first_token(lines[2], 3, float, "tolerance"),
		filter_type=_first_token(lines[3], 4, int, "filter type"),
		filter_size=_first_token(lines[4], 5, int, "filter size"),
		filter_passes=_first_token(lines[5], 6, int, "filter passes"),
		integration_type=_first_token(lines[6], 7, int, "integration type"),
		output_file=base_dir / _first_token(lines[7], 8, str, "output file"),
	)

	if config.filter_type != FilterMode.NONE and config.filter_size % 2 == 0:
		logger.warning(
			"Filter size should be odd. Adjusting from %d to %d.",
			config.filter_size, config.filter_size + 1
		)
		config = replace(config, filter_size=config.filter_size + 1)

	logger.debug("Loaded configuration from %s: %s", p, config)
	return config
