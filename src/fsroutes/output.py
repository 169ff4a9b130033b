import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def write_file_if_changed(path: Path, content: str) -> bool:
	"""Write content to file only if it has changed.

	Leaves identical files untouched so file watchers downstream don't rebuild.
	Returns True if the file was written.
	"""
	if path.exists():
		try:
			if path.read_text(encoding="utf-8") == content:
				logger.debug(f"{path} is up to date")
				return False
		except (OSError, UnicodeDecodeError):
			logger.warning(f"Can't read file {path.absolute()}, overwriting it")

	path.parent.mkdir(exist_ok=True, parents=True)
	path.write_text(content, encoding="utf-8")
	return True
