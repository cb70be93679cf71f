"""Quantify NMR spectrum peaks as described by a configuration file (default: nmr.in)."""
from __future__ import annotations

import argparse
import sys
from typing import Sequence

from nmrquant.errors import NmrQuantError
from nmrquant.io import format_peak_table, load_config
from nmrquant.io.config import DEFAULT_CONFIG
from nmrquant.logging_utils import get_logger, setup_logging
from nmrquant.pipeline import run

logger = get_logger("nmrquant")


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
	parser = argparse.ArgumentParser(prog="nmrquant", description=__doc__)
	parser.add_argument(
		"config",
		nargs="?",
		default=DEFAULT_CONFIG,
		help=f"Configuration file (default: {DEFAULT_CONFIG}).",
	)
	parser.add_argument(
		"--output-dir",
		dest="output_dir",
		help="Directory for intermediate plot files (default: next to the report).",
	)
	parser.add_argument(
		"--log-level",
		dest="log_level",
		default="INFO",
		type=str.upper,
		choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
		help="Logging level (default: INFO).",
	)
	parser.add_argument(
		"--log-file",
		dest="log_file",
		help="Also write the log to this file.",
	)
	parser.add_argument(
		"--progress",
		action="store_true",
		help="Show a progress bar while integrating peaks.",
	)
	return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
	args = parse_args(sys.argv[1:] if argv is None else argv)
	setup_logging(level=args.log_level, log_file=args.log_file)

	try:
		config = load_config(args.config)
		result = run(config, output_dir=args.output_dir, progress=args.progress)
	except (NmrQuantError, OSError, ValueError) as e:
		logger.error("Analysis failed: %s", e)
		return 1

	sys.stdout.write(format_peak_table(result.peaks))
	return 0


if __name__ == "__main__":
	raise SystemExit(main())
