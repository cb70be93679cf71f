# nmrquant/logging_utils.py
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union


_DEFAULT_FMT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Union[int, str]) -> int:
	if isinstance(level, int):
		return level
	resolved = logging.getLevelName(level.strip().upper())
	if not isinstance(resolved, int):
		raise ValueError(f"Unknown logging level: {level!r}")
	return resolved


def setup_logging(
		*,
		level: Union[int, str] = "INFO",
		log_file: Optional[Union[str, Path]] = None,
		fmt: str = _DEFAULT_FMT,
		datefmt: str = _DEFAULT_DATEFMT,
		force: bool = False,
) -> None:
	"""
	Configure logging for an analysis run.

	Messages go to stderr so that stdout only carries the peak table.
	Python warnings (e.g. numpy runtime warnings) are routed into the log as well.

	:param level: Logging level, e.g. "INFO", "debug", or logging.INFO.
	:param log_file: Optional path to a log file, written next to the stderr output.
	:param fmt: Log message format.
	:param datefmt: Datetime format for log entries.
	:param force: If True, remove existing handlers and reconfigure logging.
	:raises ValueError: Unknown level name.
	"""
	formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)
	handlers: List[logging.Handler] = [logging.StreamHandler(stream=sys.stderr)]

	if log_file is not None:
		log_path = Path(log_file)
		log_path.parent.mkdir(parents=True, exist_ok=True)
		handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

	for handler in handlers:
		handler.setFormatter(formatter)

	logging.basicConfig(level=_resolve_level(level), handlers=handlers, force=force)
	logging.captureWarnings(True)


def get_logger(name: str) -> logging.Logger:
	"""
	Get a named logger.

	Note: Use module-level loggers: `logger = get_logger(__name__)`.

	:param name: Name of the logger.
	"""
	return logging.getLogger(name)
