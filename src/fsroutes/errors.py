"""Error types raised while generating a route table."""

from __future__ import annotations

from pathlib import Path


class FsRoutesError(RuntimeError):
	"""Base error for route table generation failures."""

	path: Path | None

	def __init__(self, message: str, *, path: Path | None = None) -> None:
		super().__init__(message)
		self.path = path


class ConfigurationError(FsRoutesError):
	"""Raised when loader options are invalid or the base directory is missing."""


class DiscoveryError(FsRoutesError):
	"""Raised when a glob pattern cannot be compiled."""


class ParseError(FsRoutesError):
	"""Raised when a route file is not a valid module."""

	rule: str
	line: int | None
	column: int | None

	def __init__(
		self,
		message: str,
		*,
		path: Path | None = None,
		rule: str = "syntax",
		line: int | None = None,
		column: int | None = None,
	) -> None:
		location = path if path is not None else "<source>"
		if line is not None:
			location = f"{location}:{line}:{column or 0}"
		super().__init__(f"{location}: {message} [{rule}]", path=path)
		self.rule = rule
		self.line = line
		self.column = column


class EmissionError(FsRoutesError):
	"""Raised when the emitted module would bind the same identifier twice."""
