from __future__ import annotations

import logging
from dataclasses import dataclass

from fsroutes.analyzer import ExportInventory
from fsroutes.config import LoaderOptions
from fsroutes.discovery import RouteFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WholeModule:
	"""Namespace import: `import * as <alias> from ...`."""

	alias: str


@dataclass(frozen=True, slots=True)
class AliasedBinding:
	"""One selectively imported export: `import { <name> as <alias> } from ...`."""

	name: str
	alias: str


@dataclass(frozen=True, slots=True)
class BindingPlan:
	"""How one route file's exports reach the route table.

	`sync` is either a WholeModule or the (possibly empty) tuple of eager
	bindings. `async_names` restricts the deferred import; it never produces an
	import statement by itself.
	"""

	file: RouteFile
	sync: WholeModule | tuple[AliasedBinding, ...]
	async_names: tuple[str, ...] = ()

	@property
	def aliases(self) -> list[str]:
		if isinstance(self.sync, WholeModule):
			return [self.sync.alias]
		return [binding.alias for binding in self.sync]


def module_alias(file: RouteFile) -> str:
	return f"__{file.index}"


def binding_alias(file: RouteFile, position: int) -> str:
	# Distinct from every module_alias and from every other (index, position)
	return f"__{file.index}_{position}"


def plan(file: RouteFile, inventory: ExportInventory, options: LoaderOptions) -> BindingPlan:
	"""Split a file's exports into eager and deferred bindings."""
	async_names = tuple(name for name in options.import_async if name in inventory)

	if options.sync_all:
		return BindingPlan(file, WholeModule(module_alias(file)), async_names)

	selected = [name for name in options.import_sync if name in inventory]
	if len(selected) < len(options.import_sync):
		missing = [name for name in options.import_sync if name not in inventory]
		logger.debug("%s does not export %s", file.relative_path, ", ".join(missing))

	sync = tuple(
		AliasedBinding(name, binding_alias(file, i)) for i, name in enumerate(selected)
	)
	return BindingPlan(file, sync, async_names)
