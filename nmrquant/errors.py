# nmrquant/errors.py
from __future__ import annotations


class NmrQuantError(Exception):
	"""Base class for all nmrquant errors."""


class InvalidInputError(NmrQuantError, ValueError):
	"""
	Input arrays cannot be processed: mismatched lengths, fewer than two points,
	non-increasing x, or peak areas that cannot be normalized.
	"""


class NotReadyError(NmrQuantError, RuntimeError):
	"""The interpolant was queried or integrated before a successful fit."""


class UnsupportedParameterError(NmrQuantError, ValueError):
	"""A mode code (filter or integration method) outside the supported set."""
