"""
Runs N independent search loops on a bounded thread pool and keeps the best.

Runs share only the (read-only) problem: universe, datasets and oracles.
Each run owns its random stream, masks and grammars, so results do not
depend on scheduling. A failing run is recorded and never takes the batch
down.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Iterable, Optional, Sequence

from rulesearch.progress import BatchSummary, ProgressDispatcher, ProgressSink, RunCompleted, RunFailed
from rulesearch.search.config import SearchConfig
from rulesearch.search.errors import ProblemSetupError
from rulesearch.search.loop import SearchLoop
from rulesearch.search.problem import ProblemFactory, SearchProblem
from rulesearch.search.types import BatchResult, RunFailure, RunResult
from rulesearch.logger import SearchLogger


def best_result(results: Sequence[RunResult]) -> Optional[RunResult]:
	"""Lowest score wins; equal scores go to the lowest run number. None if empty."""
	if not results:
		return None
	return min(results, key=lambda r: (r.score, r.stats.run_number))


def _completed_event(result: RunResult) -> RunCompleted:
	stats = result.stats
	return RunCompleted(
		run_number=stats.run_number,
		seed=stats.seed,
		steps_taken=stats.steps_taken,
		total_neighbors_evaluated=stats.total_neighbors_evaluated,
		best_size=stats.best_size,
		best_score=stats.best_score,
	)


class Orchestrator:
	"""
	Multi-run driver.

	Usage:
		orchestrator = Orchestrator(problem_factory, config, sinks=[LoggingProgressSink(logger)])
		batch = orchestrator.run()
		if batch.best is not None:
			print(batch.best.stats)

	Run i (0-based) gets run number i + 1 and seed config.seed_for_run(i).
	The problem factory is called once per batch; its oracles must be safe
	to call from several threads.
	If the factory raises, the sinks are still closed and run() raises
	ProblemSetupError.
	"""

	def __init__(
		self,
		problem_factory: ProblemFactory,
		config: SearchConfig,
		sinks: Iterable[ProgressSink] = (),
		logger: Optional[Callable[[str], None]] = None,
		log_level: int = logging.INFO,
		close_sinks: bool = True,
	):
		self._problem_factory = problem_factory
		self._config = config
		self._sinks = list(sinks)
		self._close_sinks = close_sinks
		self._logger = logger
		self._log_level = log_level
		self._log = SearchLogger("Orchestrator", level=log_level, file_logger=logger)
		self._stop = threading.Event()
		self._futures: list[Future] = []
		self._lock = threading.Lock()

	@property
	def config(self) -> SearchConfig:
		return self._config

	@property
	def cancelled(self) -> bool:
		return self._stop.is_set()

	def cancel(self) -> None:
		"""Ask running loops to stop after their current step; drop queued runs."""
		self._stop.set()
		with self._lock:
			for future in self._futures:
				future.cancel()

	def run(self) -> BatchResult:
		config = self._config
		results: list[RunResult] = []
		failures: list[RunFailure] = []

		with ProgressDispatcher(self._sinks, close_sinks=self._close_sinks) as dispatcher:
			try:
				problem = self._problem_factory(config)
			except Exception as e:
				self._log.error(f"Problem factory failed: {e!r}")
				raise ProblemSetupError(e) from e
			self._log.info(
				f"Starting {config.num_runs} runs ({config.search_strategy.name}) "
				f"on {config.pool_size} workers, {len(problem.universe)} candidate rules"
			)

			with ThreadPoolExecutor(max_workers=config.pool_size, thread_name_prefix="search-run") as executor:
				futures = {}
				with self._lock:
					for i in range(config.num_runs):
						run_number = i + 1
						seed = config.seed_for_run(i)
						future = executor.submit(self._run_one, problem, run_number, seed, dispatcher)
						futures[future] = (run_number, seed)
						self._futures.append(future)
					if self._stop.is_set():
						for future in futures:
							future.cancel()

				try:
					for future in as_completed(futures):
						run_number, seed = futures[future]
						if future.cancelled():
							failure = RunFailure(run_number, seed, RuntimeError("cancelled before start"))
						else:
							try:
								results.append(future.result())
								continue
							except Exception as e:
								failure = RunFailure(run_number, seed, e)
						failures.append(failure)
						self._log.warning(f"Run {run_number} failed: {failure.message}")
						dispatcher.emit(RunFailed(run_number, seed, failure.message))
				except KeyboardInterrupt:
					self.cancel()
					raise

			results.sort(key=lambda r: r.stats.run_number)
			failures.sort(key=lambda f: f.run_number)
			best = best_result(results)

			dispatcher.emit(BatchSummary(
				completed=tuple(_completed_event(r) for r in results),
				failed=tuple(RunFailed(f.run_number, f.seed, f.message) for f in failures),
				best=_completed_event(best) if best is not None else None,
			))

		with self._lock:
			self._futures = []

		if best is None:
			self._log.warning("No run produced a result")
		else:
			self._log.info(f"Best run: {best!r}")
		return BatchResult(results=tuple(results), failures=tuple(failures), best=best)

	def _run_one(self, problem: SearchProblem, run_number: int, seed: int, dispatcher: ProgressDispatcher) -> RunResult:
		loop = SearchLoop(
			problem,
			self._config,
			run_number=run_number,
			seed=seed,
			total_runs=self._config.num_runs,
			channel=dispatcher.channel(run_number),
			shutdown_check=self._stop.is_set,
			logger=self._logger,
			log_level=self._log_level,
		)
		return loop.run()
