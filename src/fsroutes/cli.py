"""
Command-line interface for fsroutes.
Generates the route table module without a host build pipeline.
"""
# typer relies on function calls used as default values
# pyright: reportCallInDefaultInitializer=false

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape

from fsroutes.config import LoaderOptions
from fsroutes.errors import ConfigurationError, FsRoutesError
from fsroutes.generator import generate as generate_route_table
from fsroutes.output import write_file_if_changed

cli = typer.Typer(
	name="fsroutes",
	help="fsroutes - file-system routes to a client-side route table",
	no_args_is_help=True,
)


@cli.callback()
def main() -> None:
	"""Generate route tables from a directory of route modules."""


def load_config_file(path: Path) -> dict[str, Any]:
	try:
		data = json.loads(path.read_text(encoding="utf-8"))
	except OSError as exc:
		raise ConfigurationError(f"Can't read config file {path}: {exc}", path=path) from exc
	except json.JSONDecodeError as exc:
		raise ConfigurationError(f"Invalid JSON in {path}: {exc}", path=path) from exc
	if not isinstance(data, dict):
		raise ConfigurationError(f"Config file {path} must contain a JSON object", path=path)
	return data


def build_options(
	config: Path | None,
	base: str | None,
	pattern: list[str] | None,
	ignore: list[str] | None,
	import_sync: list[str] | None,
	import_async: list[str] | None,
) -> LoaderOptions:
	"""Merge the config file with command-line flags; flags win."""
	raw: dict[str, Any] = load_config_file(config) if config else {}
	options = LoaderOptions.from_mapping(raw)
	overrides: dict[str, Any] = {}
	if base is not None:
		overrides["base"] = base
	if pattern:
		overrides["pattern"] = pattern
	if ignore:
		overrides["ignore"] = ignore
	if import_sync:
		wildcards = [name for name in import_sync if name in ("all", "*")]
		if wildcards and len(import_sync) > 1:
			raise ConfigurationError(
				f"'{wildcards[0]}' can't be combined with export names in --import-sync"
			)
		overrides["import_sync"] = "all" if wildcards else import_sync
	if import_async:
		overrides["import_async"] = import_async
	return replace(options, **overrides)


@cli.command("generate")
def generate(
	root: Path = typer.Option(
		Path("."), "--root", help="Project root that relative --base paths start from"
	),
	base: Optional[str] = typer.Option(
		None, "--base", help="Route directory (default: src/routes)"
	),
	pattern: Optional[list[str]] = typer.Option(
		None, "--pattern", help="Include glob, repeatable"
	),
	ignore: Optional[list[str]] = typer.Option(
		None, "--ignore", help="Exclude glob, repeatable"
	),
	import_sync: Optional[list[str]] = typer.Option(
		None, "--import-sync", help="Export to import eagerly, repeatable, or 'all'"
	),
	import_async: Optional[list[str]] = typer.Option(
		None, "--import-async", help="Export to load lazily, repeatable"
	),
	config: Optional[Path] = typer.Option(
		None, "--config", help="JSON file with loader options"
	),
	out: Optional[Path] = typer.Option(
		None, "--out", "-o", help="Output file (default: stdout)"
	),
	workers: Optional[int] = typer.Option(
		None, "--workers", min=1, help="Parallel file analysis workers"
	),
	verbose: bool = typer.Option(False, "--verbose", "-v"),
):
	"""Generate the route table module."""
	if verbose:
		logging.basicConfig(level=logging.DEBUG)
	console = Console(stderr=True)

	try:
		options = build_options(config, base, pattern, ignore, import_sync, import_async)
		source = generate_route_table(options, root=root.resolve(), workers=workers)
	except FsRoutesError as exc:
		console.print(
			f"[red]error:[/red] {escape(str(exc))}", highlight=False, soft_wrap=True
		)
		raise typer.Exit(1) from None

	if out is None:
		typer.echo(source, nl=False)
		return
	if write_file_if_changed(out, source):
		console.log(f"Wrote {out}")
	else:
		console.log(f"{out} unchanged")
