from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from pathlib import Path

from fsroutes.analyzer import ExportInventory, analyze
from fsroutes.config import LoaderOptions
from fsroutes.discovery import RouteFile, discover
from fsroutes.emitter import emit
from fsroutes.planner import plan

logger = logging.getLogger(__name__)

Analyzer = Callable[[RouteFile], ExportInventory]


def default_workers() -> int:
	return min(32, (os.cpu_count() or 1) + 4)


def analyze_all(
	files: Sequence[RouteFile],
	*,
	analyzer: Analyzer = analyze,
	workers: int | None = None,
) -> list[ExportInventory]:
	"""Analyze every file, returning inventories in discovery order.

	The first failure cancels the files not yet started. Once the files already
	being analyzed finish, the failure of the earliest file in discovery order is
	re-raised.
	"""
	workers = workers or default_workers()
	if workers <= 1 or len(files) <= 1:
		return [analyzer(file) for file in files]

	with ThreadPoolExecutor(max_workers=min(workers, len(files))) as executor:
		futures: dict[Future[ExportInventory], int] = {
			executor.submit(analyzer, file): file.index for file in files
		}
		done, pending = wait(futures, return_when=FIRST_EXCEPTION)
		running = {future for future in pending if not future.cancel()}
		done |= wait(running).done

		results: dict[int, ExportInventory] = {}
		for future in sorted(done, key=futures.__getitem__):
			# result() re-raises the earliest failure; no partial table is built
			results[futures[future]] = future.result()

	return [results[file.index] for file in files]


def generate(
	options: LoaderOptions,
	*,
	root: Path | None = None,
	add_dependency: Callable[[Path], None] | None = None,
	analyzer: Analyzer = analyze,
	workers: int | None = None,
) -> str:
	"""Generate the aggregator module source for the route files under `options.base`.

	`add_dependency` receives the resolved base directory so the host can
	re-run generation when files are added or removed.
	"""
	start = time.perf_counter()
	files = discover(options, root=root, add_dependency=add_dependency)
	inventories = analyze_all(files, analyzer=analyzer, workers=workers)
	plans = [
		plan(file, inventory, options)
		for file, inventory in zip(files, inventories)
	]
	source = emit(files, plans, options.to_path)
	logger.info(
		"Generated route table with %d routes in %.1fms",
		len(files),
		(time.perf_counter() - start) * 1000,
	)
	return source
