import re

from fsroutes.config import PathTransform
from fsroutes.discovery import RouteFile
from fsroutes.errors import ConfigurationError

_LEADING_DOT = re.compile(r"^\./")
_CATCH_ALL = re.compile(r"\[\.\.\.(.+?)\]")
_DYNAMIC = re.compile(r"\[(.+?)\]")
_EXTENSION = re.compile(r"\.[^./]+$")
_TRAILING_INDEX = re.compile(r"/index$")


def default_path_transform(filepath: str) -> str:
	"""
	Convert a relative route file path to a router path pattern.

	- `./about/index.tsx` -> `/about/`
	- `./books/[id].tsx` -> `/books/:id`
	- `./[...404].tsx` -> `/*`
	"""
	path = _LEADING_DOT.sub("/", filepath)
	if not path.startswith("/"):
		path = "/" + path
	path = _CATCH_ALL.sub("*", path)
	path = _DYNAMIC.sub(r":\1", path)
	path = _EXTENSION.sub("", path)
	return _TRAILING_INDEX.sub("/", path)


def to_route_path(file: RouteFile, transform: PathTransform | None = None) -> str:
	transform = transform or default_path_transform
	path = transform(file.dot_relative)
	if not isinstance(path, str):
		raise ConfigurationError(
			f"'to_path' returned {type(path).__name__} for {file.dot_relative}, expected str",
			path=file.absolute_path,
		)
	return path
