import json
import re
from collections.abc import Sequence
from dataclasses import dataclass

from fsroutes.config import PathTransform
from fsroutes.discovery import RouteFile
from fsroutes.errors import EmissionError
from fsroutes.paths import to_route_path
from fsroutes.planner import AliasedBinding, BindingPlan, WholeModule
from fsroutes.templates.route_table import ROUTE_TABLE_TEMPLATE

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

# Deferred imports resolve to a separate module instance of the same file
ASYNC_QUERY = "?async"


@dataclass(frozen=True, slots=True)
class RouteDescriptor:
	"""JS source fragments for one entry of the route table."""

	path: str
	sync: str
	async_thunk: str


def js_string(value: str) -> str:
	return json.dumps(value, ensure_ascii=False)


def js_name(name: str) -> str:
	"""Export name as written in an import specifier or object key."""
	return name if _IDENTIFIER.match(name) else js_string(name)


class AliasRegistry:
	"""Tracks the identifiers bound by the module preamble."""

	def __init__(self) -> None:
		self._owners: dict[str, RouteFile] = {}

	def register(self, alias: str, file: RouteFile) -> str:
		if not _IDENTIFIER.match(alias):
			raise EmissionError(
				f"Alias {alias!r} for {file.relative_path} is not a valid identifier",
				path=file.absolute_path,
			)
		owner = self._owners.get(alias)
		if owner is not None:
			raise EmissionError(
				f"Alias {alias!r} bound twice: {owner.relative_path} and {file.relative_path}",
				path=file.absolute_path,
			)
		self._owners[alias] = file
		return alias


def import_statement(plan: BindingPlan) -> str | None:
	src = js_string(plan.file.specifier)
	if isinstance(plan.sync, WholeModule):
		return f"import * as {plan.sync.alias} from {src};"
	if not plan.sync:
		return None
	members = ", ".join(f"{js_name(b.name)} as {b.alias}" for b in plan.sync)
	return f"import {{ {members} }} from {src};"


def _sync_object(bindings: tuple[AliasedBinding, ...]) -> str:
	if not bindings:
		return "{}"
	entries = ", ".join(f"{js_name(b.name)}: {b.alias}" for b in bindings)
	return f"{{ {entries} }}"


def async_thunk(plan: BindingPlan) -> str:
	"""Deferred loader restricted to the planned export names."""
	if not plan.async_names:
		return "() => Promise.resolve({})"
	hint = json.dumps(list(plan.async_names), ensure_ascii=False)
	src = js_string(plan.file.specifier + ASYNC_QUERY)
	return f"() => import(/* webpackExports: {hint} */ {src})"


def describe(plan: BindingPlan, to_path: PathTransform | None = None) -> RouteDescriptor:
	if isinstance(plan.sync, WholeModule):
		sync = plan.sync.alias
	else:
		sync = _sync_object(plan.sync)
	return RouteDescriptor(
		path=js_string(to_route_path(plan.file, to_path)),
		sync=sync,
		async_thunk=async_thunk(plan),
	)


def emit(
	files: Sequence[RouteFile],
	plans: Sequence[BindingPlan],
	to_path: PathTransform | None = None,
) -> str:
	"""Render the aggregator module for `files`, in discovery order.

	Raises:
	    EmissionError: If plans don't line up with files or two bindings share an alias.
	"""
	if len(files) != len(plans):
		raise EmissionError(f"Got {len(plans)} binding plans for {len(files)} route files")

	registry = AliasRegistry()
	imports: list[str] = []
	routes: list[RouteDescriptor] = []
	for file, plan in zip(files, plans):
		if plan.file != file:
			raise EmissionError(
				f"Binding plan for {plan.file.relative_path} out of order at {file.relative_path}",
				path=file.absolute_path,
			)
		for alias in plan.aliases:
			registry.register(alias, file)
		statement = import_statement(plan)
		if statement is not None:
			imports.append(statement)
		routes.append(describe(plan, to_path))

	return str(ROUTE_TABLE_TEMPLATE.render_unicode(imports=imports, routes=routes))
