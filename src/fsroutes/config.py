from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, TypeAlias
from urllib.parse import unquote, urlparse

from fsroutes.errors import ConfigurationError

SyncSelector: TypeAlias = Literal["all"] | tuple[str, ...]
PathTransform: TypeAlias = Callable[[str], str]

DEFAULT_BASE = "src/routes"
DEFAULT_PATTERN: tuple[str, ...] = ("**/*.js", "**/*.jsx", "**/*.ts", "**/*.tsx")
# Skips `_private.ts` as well as everything inside `_components/`
DEFAULT_IGNORE: tuple[str, ...] = ("**/_*", "**/_*/**")

# Loader option names as a host pipeline passes them -> dataclass fields
_OPTION_ALIASES: dict[str, str] = {
	"toPath": "to_path",
	"importSync": "import_sync",
	"importAsync": "import_async",
}


def _type_name(value: object) -> str:
	return type(value).__name__


def _as_globs(value: str | Sequence[str], option: str) -> tuple[str, ...]:
	if isinstance(value, str):
		return (value,)
	if not isinstance(value, (list, tuple)):
		raise ConfigurationError(
			f"'{option}' must be a glob or a list of globs, got {_type_name(value)}"
		)
	globs = tuple(value)
	for glob in globs:
		if not isinstance(glob, str):
			raise ConfigurationError(
				f"'{option}' must contain glob strings, got {_type_name(glob)}"
			)
	return globs


def _as_names(value: Sequence[str], option: str) -> tuple[str, ...]:
	if isinstance(value, str):
		raise ConfigurationError(
			f"'{option}' must be a list of export names, got the string {value!r}"
		)
	if not isinstance(value, (list, tuple)):
		raise ConfigurationError(
			f"'{option}' must be a list of export names, got {_type_name(value)}"
		)
	names: list[str] = []
	for name in value:
		if not isinstance(name, str) or not name:
			raise ConfigurationError(f"'{option}' contains an invalid name: {name!r}")
		if name not in names:
			names.append(name)
	return tuple(names)


@dataclass(frozen=True)
class LoaderOptions:
	"""
	Options for one route table generation pass.

	Attributes:
	    base: Directory searched for route files. Absolute, a `file://` URL, or
	        relative to the project root.
	    pattern: Glob(s) selecting route files, relative to `base`.
	    ignore: Glob(s) removed from the matches after inclusion.
	    to_path: Replacement for the default file path -> router path transform.
	    import_sync: `"all"` to bundle whole modules eagerly, or the export
	        names to import eagerly.
	    import_async: Export names loaded through the deferred `async()` thunk.
	"""

	base: str | Path = DEFAULT_BASE
	pattern: tuple[str, ...] = DEFAULT_PATTERN
	ignore: tuple[str, ...] = DEFAULT_IGNORE
	to_path: PathTransform | None = None
	import_sync: SyncSelector = "all"
	import_async: tuple[str, ...] = field(default_factory=tuple)

	def __post_init__(self) -> None:
		if not isinstance(self.base, (str, Path)):
			raise ConfigurationError(
				f"'base' must be a path string, got {_type_name(self.base)}"
			)
		# Frozen dataclass: normalize through object.__setattr__
		object.__setattr__(self, "pattern", _as_globs(self.pattern, "pattern"))
		object.__setattr__(self, "ignore", _as_globs(self.ignore, "ignore"))
		if self.import_sync in ("all", "*"):
			object.__setattr__(self, "import_sync", "all")
		else:
			object.__setattr__(
				self, "import_sync", _as_names(self.import_sync, "import_sync")
			)
		object.__setattr__(
			self, "import_async", _as_names(self.import_async, "import_async")
		)
		if self.to_path is not None and not callable(self.to_path):
			raise ConfigurationError("'to_path' must be callable")
		if not self.pattern:
			raise ConfigurationError("'pattern' must contain at least one glob")

	@classmethod
	def from_mapping(cls, options: Mapping[str, Any]) -> "LoaderOptions":
		"""Build options from a loader-style mapping (`importSync`, `toPath`, ...)."""
		known = {f.name for f in fields(cls)}
		kwargs: dict[str, Any] = {}
		for key, value in options.items():
			name = _OPTION_ALIASES.get(key, key)
			if name not in known:
				raise ConfigurationError(f"Unknown loader option: {key!r}")
			if name in kwargs:
				raise ConfigurationError(f"Loader option given twice: {key!r}")
			kwargs[name] = value
		return cls(**kwargs)

	@property
	def sync_all(self) -> bool:
		return self.import_sync == "all"


def resolve_base(base: str | Path, root: Path | None = None) -> Path:
	"""Resolve the `base` option to an absolute directory path.

	Relative paths are anchored at `root` (the current working directory when
	not provided). Raises ConfigurationError if the directory does not exist.
	"""
	if isinstance(base, str) and base.startswith("file:"):
		parsed = urlparse(base)
		path = Path(unquote(parsed.path))
	else:
		path = Path(base)
	if not path.is_absolute():
		path = (root or Path.cwd()) / path
	path = path.resolve()

	if not path.exists():
		raise ConfigurationError(f"Route directory not found: {path}", path=path)
	if not path.is_dir():
		raise ConfigurationError(f"Route base is not a directory: {path}", path=path)
	return path
