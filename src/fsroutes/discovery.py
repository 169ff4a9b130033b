"""Route file discovery.

Walks the base directory and keeps the files whose POSIX relative path matches
one of the include globs and none of the ignore globs:

    pattern=("**/*.tsx",), ignore=("**/_*",)

    about/index.tsx       -> kept
    books/[id].tsx        -> kept
    books/_helpers.tsx    -> ignored
    .cache/page.tsx       -> not matched (wildcards skip dot segments)
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from fsroutes.config import LoaderOptions, resolve_base
from fsroutes.errors import DiscoveryError

logger = logging.getLogger(__name__)

# A wildcard may not start a segment with "." unless the pattern spells it out
_SEGMENT_START = r"(?!\.)"


@dataclass(frozen=True, slots=True)
class RouteFile:
	"""A discovered route module.

	Attributes:
	    index: Position in discovery order. Defines the route table order.
	    relative_path: POSIX path relative to the base, e.g. ``books/[id].tsx``.
	    absolute_path: Resolved filesystem path.
	"""

	index: int
	relative_path: str
	absolute_path: Path

	@property
	def dot_relative(self) -> str:
		"""Relative path in ``./books/[id].tsx`` form, as handed to path transforms."""
		return f"./{self.relative_path}"

	@property
	def specifier(self) -> str:
		"""Module specifier used by the emitted import statements."""
		return self.absolute_path.as_uri()


def _translate_class(pattern: str, start: int) -> tuple[str, int]:
	"""Translate a ``[...]`` class starting at `start`. Returns (regex, next index)."""
	i = start + 1
	negate = False
	if i < len(pattern) and pattern[i] in "!^":
		negate = True
		i += 1
	chars: list[str] = []
	# A leading "]" is a literal member
	if i < len(pattern) and pattern[i] == "]":
		chars.append(r"\]")
		i += 1
	while i < len(pattern) and pattern[i] != "]":
		ch = pattern[i]
		if ch == "/":
			raise DiscoveryError(f"Character class cannot contain '/': {pattern!r}")
		if ch == "-" and chars and i + 1 < len(pattern) and pattern[i + 1] != "]":
			chars.append("-")
		else:
			chars.append(re.escape(ch))
		i += 1
	if i >= len(pattern):
		raise DiscoveryError(f"Unterminated character class in glob {pattern!r}")
	if not chars:
		raise DiscoveryError(f"Empty character class in glob {pattern!r}")
	body = "".join(chars)
	return (f"[^/{body}]" if negate else f"[{body}]"), i + 1


def _translate(
	pattern: str, start: int = 0, in_brace: bool = False, segment_start: bool = True
) -> tuple[str, int]:
	"""Translate from `start` to the end, or to the `,`/`}` closing a brace option.

	`segment_start` tells whether `start` begins a path segment; brace options
	inherit it from the position of their `{`.
	"""
	out: list[str] = []
	i = start
	n = len(pattern)
	while i < n:
		ch = pattern[i]
		at_segment_start = segment_start if i == start else pattern[i - 1] == "/"
		if ch == "*":
			after = pattern[i + 2] if i + 2 < n else ""
			# "**" must fill a whole segment; a brace option may also end it
			ends_segment = after in ("", "/") or (in_brace and after in ",}")
			if pattern.startswith("**", i) and at_segment_start and ends_segment:
				if after != "/":
					# Trailing "**": anything below, never a dot segment
					out.append(r"(?:(?!\.)[^/]*(?:/(?!\.)[^/]*)*)")
					i += 2
				else:
					# "**/": zero or more whole segments
					out.append(r"(?:(?!\.)[^/]*/)*")
					i += 3
				continue
			while i < n and pattern[i] == "*":
				i += 1
			out.append((_SEGMENT_START if at_segment_start else "") + "[^/]*")
			continue
		if ch == "?":
			out.append((_SEGMENT_START if at_segment_start else "") + "[^/]")
		elif ch == "[":
			regex, i = _translate_class(pattern, i)
			out.append(regex)
			continue
		elif ch == "{":
			options: list[str] = []
			i += 1
			while True:
				regex, i = _translate(
					pattern, i, in_brace=True, segment_start=at_segment_start
				)
				options.append(regex)
				if i >= n:
					raise DiscoveryError(f"Unterminated '{{' in glob {pattern!r}")
				if pattern[i] == "}":
					i += 1
					break
				i += 1  # ","
			out.append("(?:" + "|".join(options) + ")")
			continue
		elif in_brace and ch in ",}":
			return "".join(out), i
		elif ch == "\\" and i + 1 < n:
			i += 1
			out.append(re.escape(pattern[i]))
		else:
			out.append(re.escape(ch))
		i += 1
	return "".join(out), i


def compile_glob(pattern: str) -> re.Pattern[str]:
	"""Compile a glob into a regex matching whole POSIX relative paths.

	Supports ``*``, ``**``, ``?``, ``[...]`` (``!``/``^`` negation) and
	``{a,b}`` alternation. Raises DiscoveryError on malformed patterns.
	"""
	if not pattern:
		raise DiscoveryError("Glob pattern cannot be empty")
	if pattern.startswith("./"):
		pattern = pattern[2:]
	regex, _ = _translate(pattern)
	try:
		return re.compile(rf"\A{regex}\Z")
	except re.error as exc:
		raise DiscoveryError(f"Invalid glob {pattern!r}: {exc}") from exc


def _compile_all(patterns: Iterable[str]) -> list[re.Pattern[str]]:
	return [compile_glob(p) for p in patterns]


def _walk(base: Path) -> list[str]:
	paths: list[str] = []
	for dirpath, dirnames, filenames in os.walk(base):
		# Traversal order is filesystem-dependent; sorted below
		dirnames.sort()
		rel_dir = Path(dirpath).relative_to(base).as_posix()
		for filename in filenames:
			paths.append(filename if rel_dir == "." else f"{rel_dir}/{filename}")
	return paths


def discover(
	options: LoaderOptions,
	*,
	root: Path | None = None,
	add_dependency: Callable[[Path], None] | None = None,
) -> list[RouteFile]:
	"""Return the route files under `options.base` in canonical order.

	Raises:
	    ConfigurationError: If the base directory is missing.
	    DiscoveryError: If a glob in `pattern` or `ignore` is malformed.
	"""
	base = resolve_base(options.base, root)
	if add_dependency is not None:
		add_dependency(base)

	include = _compile_all(options.pattern)
	exclude = _compile_all(options.ignore)

	matched = [
		path
		for path in _walk(base)
		if any(rx.match(path) for rx in include)
		and not any(rx.match(path) for rx in exclude)
	]
	matched.sort()
	logger.debug("Discovered %d route files under %s", len(matched), base)

	return [
		RouteFile(index=i, relative_path=path, absolute_path=base / path)
		for i, path in enumerate(matched)
	]
