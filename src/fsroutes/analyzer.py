"""Export inventory of a route module.

Route files are parsed with tree-sitter and never executed. Only top-level
``export`` statements are inspected:

    export default function Page() {}        -> default
    export const loader = ..., action = ...  -> loader, action
    export { meta, handle as routeHandle }   -> meta, routeHandle
    export { shared } from "./shared"        -> shared (source not opened)
    export * as utils from "./utils"         -> utils
    export * from "./everything"             -> (nothing)
    export interface Props {}                -> (nothing, type only)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import tree_sitter_typescript as ts_typescript
from tree_sitter import Language, Node, Parser

from fsroutes.discovery import RouteFile
from fsroutes.errors import ParseError

logger = logging.getLogger(__name__)

TYPESCRIPT = Language(ts_typescript.language_typescript())
TSX = Language(ts_typescript.language_tsx())

# `<T>value` casts are only valid without JSX; everything else gets the TSX grammar
_TYPESCRIPT_SUFFIXES = frozenset({".ts", ".mts", ".cts"})

# Declarations that create a runtime binding when exported
_NAMED_DECLARATIONS = frozenset(
	{
		"function_declaration",
		"generator_function_declaration",
		"class_declaration",
		"abstract_class_declaration",
		"enum_declaration",
	}
)
_VARIABLE_DECLARATIONS = frozenset({"lexical_declaration", "variable_declaration"})
# Declarations erased at compile time, even behind `export default`
_TYPE_DECLARATIONS = frozenset(
	{
		"interface_declaration",
		"type_alias_declaration",
		"ambient_declaration",
		"function_signature",
	}
)


@dataclass(frozen=True, slots=True)
class ExportInventory:
	"""Names exported by one route module, in source order."""

	names: tuple[str, ...] = ()

	def __contains__(self, name: object) -> bool:
		return name in self.names

	def __iter__(self) -> Iterator[str]:
		return iter(self.names)

	def __len__(self) -> int:
		return len(self.names)

	@property
	def has_default(self) -> bool:
		return "default" in self.names


def language_for(filename: str | Path) -> Language:
	return TYPESCRIPT if Path(filename).suffix in _TYPESCRIPT_SUFFIXES else TSX


def _text(node: Node) -> str:
	return (node.text or b"").decode("utf-8")


def _export_name(node: Node) -> str:
	# `export { x as "kebab-name" }` uses a string literal as the name
	if node.type == "string":
		return _text(node)[1:-1]
	return _text(node)


def _first_error(node: Node) -> Node | None:
	if node.type == "ERROR" or node.is_missing:
		return node
	if not node.has_error:
		return None
	for child in node.children:
		found = _first_error(child)
		if found is not None:
			return found
	return node


def _pattern_names(node: Node) -> list[str]:
	"""Identifiers bound by a declarator name, including destructuring patterns."""
	match node.type:
		case "identifier" | "shorthand_property_identifier_pattern":
			return [_text(node)]
		case "pair_pattern":
			value = node.child_by_field_name("value")
			return _pattern_names(value) if value is not None else []
		case "assignment_pattern" | "object_assignment_pattern":
			left = node.child_by_field_name("left")
			return _pattern_names(left) if left is not None else []
		case "object_pattern" | "array_pattern" | "rest_pattern":
			names: list[str] = []
			for child in node.named_children:
				names.extend(_pattern_names(child))
			return names
		case _:
			return []


def _has_token(node: Node, token: str) -> bool:
	return any(not child.is_named and child.type == token for child in node.children)


def _declaration_names(declaration: Node) -> list[str]:
	if declaration.type in _NAMED_DECLARATIONS:
		name = declaration.child_by_field_name("name")
		return [_text(name)] if name is not None else []
	if declaration.type in _VARIABLE_DECLARATIONS:
		names: list[str] = []
		for declarator in declaration.named_children:
			if declarator.type != "variable_declarator":
				continue
			target = declarator.child_by_field_name("name")
			if target is not None:
				names.extend(_pattern_names(target))
		return names
	# interface, type alias, ambient `declare`, overload signatures, namespaces
	return []


def _statement_names(statement: Node) -> list[str]:
	declaration = statement.child_by_field_name("declaration")
	if _has_token(statement, "default"):
		if declaration is not None and declaration.type in _TYPE_DECLARATIONS:
			return []
		return ["default"]

	if declaration is not None:
		return _declaration_names(declaration)

	# `export type { A }` only re-exports types
	if _has_token(statement, "type"):
		return []

	names: list[str] = []
	for child in statement.named_children:
		if child.type == "export_clause":
			for specifier in child.named_children:
				if specifier.type != "export_specifier" or _has_token(specifier, "type"):
					continue
				alias = specifier.child_by_field_name("alias")
				name = specifier.child_by_field_name("name")
				target = alias if alias is not None else name
				if target is not None:
					names.append(_export_name(target))
		elif child.type == "namespace_export":
			exported = [c for c in child.children if c.type in ("identifier", "string")]
			if exported:
				names.append(_export_name(exported[-1]))
	return names


def inspect_exports(source: str | bytes, filename: str | Path = "<source>") -> ExportInventory:
	"""Parse module source and return its exported binding names.

	Raises:
	    ParseError: If the source has syntax errors, or exports a name twice.
	"""
	data = source.encode("utf-8") if isinstance(source, str) else source
	path = Path(filename)
	tree = Parser(language_for(path)).parse(data)
	root = tree.root_node

	error = _first_error(root)
	if error is not None:
		row, column = error.start_point
		what = f"missing {error.type!r}" if error.is_missing else "invalid syntax"
		raise ParseError(what, path=path, rule="syntax", line=row + 1, column=column + 1)

	names: list[str] = []
	for statement in root.named_children:
		if statement.type != "export_statement":
			continue
		for name in _statement_names(statement):
			if name in names:
				row, column = statement.start_point
				raise ParseError(
					f"duplicate export {name!r}",
					path=path,
					rule="duplicate-export",
					line=row + 1,
					column=column + 1,
				)
			names.append(name)
	return ExportInventory(tuple(names))


def analyze(file: RouteFile) -> ExportInventory:
	"""Read a discovered route file and return its export inventory."""
	source = file.absolute_path.read_bytes()
	inventory = inspect_exports(source, file.absolute_path)
	logger.debug("%s exports %s", file.relative_path, ", ".join(inventory) or "nothing")
	return inventory
