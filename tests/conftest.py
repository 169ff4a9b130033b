from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def make_routes(tmp_path: Path) -> Callable[..., Path]:
	"""Write `{relative path: source}` under `tmp_path/<base>` and return the base."""

	def _make(files: dict[str, str], base: str = "src/routes") -> Path:
		root = tmp_path / base
		root.mkdir(parents=True, exist_ok=True)
		for rel, content in files.items():
			path = root / rel
			path.parent.mkdir(parents=True, exist_ok=True)
			path.write_text(content, encoding="utf-8")
		return root.resolve()

	return _make
