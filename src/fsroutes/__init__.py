from .analyzer import ExportInventory, analyze, inspect_exports
from .config import LoaderOptions
from .discovery import RouteFile, discover
from .emitter import emit
from .errors import (
	ConfigurationError,
	DiscoveryError,
	EmissionError,
	FsRoutesError,
	ParseError,
)
from .generator import generate
from .paths import default_path_transform
from .planner import AliasedBinding, BindingPlan, WholeModule, plan

__all__ = [
	"AliasedBinding",
	"BindingPlan",
	"ConfigurationError",
	"DiscoveryError",
	"EmissionError",
	"ExportInventory",
	"FsRoutesError",
	"LoaderOptions",
	"ParseError",
	"RouteFile",
	"WholeModule",
	"analyze",
	"default_path_transform",
	"discover",
	"emit",
	"generate",
	"inspect_exports",
	"plan",
]
