"""
End-to-end tests: route directory in, aggregator module source out.
"""

import threading
import time
from collections.abc import Callable
from pathlib import Path

import pytest
from fsroutes.analyzer import ExportInventory, analyze
from fsroutes.config import LoaderOptions
from fsroutes.discovery import RouteFile
from fsroutes.errors import ConfigurationError, ParseError
from fsroutes.generator import analyze_all, generate

PAGE = "export default function Page() { return <main />; }\n"


def test_loader_and_lazy_component_scenario(make_routes: Callable[..., Path]):
	base = make_routes(
		{
			"a/index.ts": "export default function A() {}\n",
			"b/[id].ts": (
				"export async function loader() { return null; }\n"
				"export default function B() {}\n"
			),
		}
	)
	options = LoaderOptions(base=base, import_sync=["loader"], import_async=["default"])
	source = generate(options)

	a = (base / "a" / "index.ts").as_uri()
	b = (base / "b" / "[id].ts").as_uri()
	assert source == (
		"// Generated by fsroutes. Do not edit.\n"
		f'import {{ loader as __1_0 }} from "{b}";\n'
		"\n"
		"export default [\n"
		"  {\n"
		'    path: "/a/",\n'
		"    sync: {},\n"
		f'    async: () => import(/* webpackExports: ["default"] */ "{a}?async"),\n'
		"  },\n"
		"  {\n"
		'    path: "/b/:id",\n'
		"    sync: { loader: __1_0 },\n"
		f'    async: () => import(/* webpackExports: ["default"] */ "{b}?async"),\n'
		"  },\n"
		"];\n"
	)


def test_import_all_binds_each_module_once(make_routes: Callable[..., Path]):
	base = make_routes(
		{
			"index.tsx": PAGE + "export const foo = 1;\n",
			"about.tsx": PAGE,
		}
	)
	source = generate(LoaderOptions(base=base))
	assert source.count("import * as ") == 2
	assert f'import * as __0 from "{(base / "about.tsx").as_uri()}";' in source
	assert f'import * as __1 from "{(base / "index.tsx").as_uri()}";' in source
	assert "sync: __1," in source
	assert "async: () => Promise.resolve({})," in source


def test_selected_name_missing_everywhere(make_routes: Callable[..., Path]):
	base = make_routes({"index.tsx": PAGE})
	source = generate(LoaderOptions(base=base, import_sync=["loader"]))
	assert "__0" not in source
	assert "sync: {}," in source


def test_repeated_generation_is_byte_identical(make_routes: Callable[..., Path]):
	base = make_routes(
		{
			"index.tsx": PAGE,
			"books/[id].tsx": PAGE + "export const loader = () => null;\n",
			"books/index.tsx": PAGE,
			"[...404].tsx": PAGE,
			"_layout.tsx": PAGE,
		}
	)
	options = LoaderOptions(base=base, import_sync=["loader"], import_async=["default"])
	first = generate(options, workers=4)
	assert generate(options, workers=1) == first
	assert generate(options, workers=8) == first
	assert '"/*"' in first
	assert "_layout" not in first


def test_relative_base_and_dependency_registration(
	make_routes: Callable[..., Path], tmp_path: Path
):
	base = make_routes({"index.tsx": PAGE}, base="web/routes")
	deps: list[Path] = []
	generate(LoaderOptions(base="web/routes"), root=tmp_path, add_dependency=deps.append)
	assert deps == [base]


def test_missing_base_aborts(tmp_path: Path):
	with pytest.raises(ConfigurationError):
		generate(LoaderOptions(base="missing"), root=tmp_path)


def test_parse_error_aborts_the_pass(make_routes: Callable[..., Path]):
	base = make_routes(
		{
			"good.tsx": PAGE,
			"bad.tsx": "export default function {",
		}
	)
	with pytest.raises(ParseError) as exc_info:
		generate(LoaderOptions(base=base), workers=2)
	assert exc_info.value.path == base / "bad.tsx"


class TestAnalyzeAll:
	def files(self, count: int) -> list[RouteFile]:
		return [RouteFile(i, f"r{i}.ts", Path(f"/routes/r{i}.ts")) for i in range(count)]

	def test_results_follow_discovery_order(self):
		files = self.files(6)

		def slow_analyzer(file: RouteFile) -> ExportInventory:
			# Later files finish first
			time.sleep(0.01 * (len(files) - file.index))
			return ExportInventory((f"export{file.index}",))

		results = analyze_all(files, analyzer=slow_analyzer, workers=6)
		assert [r.names for r in results] == [(f"export{i}",) for i in range(6)]

	def test_runs_in_parallel(self):
		files = self.files(4)
		barrier = threading.Barrier(4, timeout=5)

		def waiting_analyzer(file: RouteFile) -> ExportInventory:
			barrier.wait()
			return ExportInventory()

		assert len(analyze_all(files, analyzer=waiting_analyzer, workers=4)) == 4

	def test_single_worker_runs_inline(self):
		files = self.files(3)
		threads: set[str] = set()

		def recording_analyzer(file: RouteFile) -> ExportInventory:
			threads.add(threading.current_thread().name)
			return ExportInventory()

		analyze_all(files, analyzer=recording_analyzer, workers=1)
		assert threads == {threading.current_thread().name}

	def test_first_failure_propagates(self):
		files = self.files(5)

		def failing_analyzer(file: RouteFile) -> ExportInventory:
			if file.index == 2:
				raise ParseError("invalid syntax", path=file.absolute_path)
			return ExportInventory()

		with pytest.raises(ParseError, match="r2.ts"):
			analyze_all(files, analyzer=failing_analyzer, workers=3)

	def test_earliest_failure_in_discovery_order_wins(self):
		files = self.files(5)
		later_failed = threading.Event()

		def failing_analyzer(file: RouteFile) -> ExportInventory:
			if file.index == 3:
				later_failed.set()
				raise ParseError("invalid syntax", path=file.absolute_path)
			if file.index == 1:
				# Still running when r3.ts fails
				later_failed.wait(timeout=5)
				raise ParseError("invalid syntax", path=file.absolute_path)
			return ExportInventory()

		with pytest.raises(ParseError, match="r1.ts"):
			analyze_all(files, analyzer=failing_analyzer, workers=5)

	def test_default_analyzer_is_used(self, make_routes: Callable[..., Path]):
		base = make_routes({"index.tsx": PAGE})
		files = [RouteFile(0, "index.tsx", base / "index.tsx")]
		assert analyze_all(files) == [analyze(files[0])]
