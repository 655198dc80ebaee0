"""
First- vs best-improvement comparison on the same problem and seeds.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from rulesearch.progress import ProgressSink
from rulesearch.search.config import SearchConfig
from rulesearch.search.enums import SearchStrategy
from rulesearch.search.orchestrator import Orchestrator
from rulesearch.search.problem import ProblemFactory
from rulesearch.search.types import BatchResult, RunResult
from rulesearch.logger import SearchLogger


FIRST_LABEL = "first-improvement"
BEST_LABEL = "best-improvement"
TIE_LABEL = "tie"


@dataclass(frozen=True)
class StrategyComparison:
	"""
	Outcome of running both acceptance strategies.

	delta is best-improvement score minus first-improvement score, so a
	positive delta means first-improvement found the better grammar.
	"""
	first: BatchResult
	best: BatchResult

	@property
	def first_best(self) -> Optional[RunResult]:
		return self.first.best

	@property
	def best_best(self) -> Optional[RunResult]:
		return self.best.best

	@property
	def delta(self) -> Optional[float]:
		if self.first_best is None or self.best_best is None:
			return None
		return self.best_best.score - self.first_best.score

	@property
	def winner(self) -> Optional[str]:
		delta = self.delta
		if delta is None:
			return None
		if delta > 0:
			return FIRST_LABEL
		if delta < 0:
			return BEST_LABEL
		return TIE_LABEL


def compare_strategies(
	problem_factory: ProblemFactory,
	config: SearchConfig,
	sinks: Iterable[ProgressSink] = (),
	logger: Optional[Callable[[str], None]] = None,
	log_level: int = logging.INFO,
) -> StrategyComparison:
	"""Run the batch once per strategy; everything else in config is shared."""
	log = SearchLogger("StrategyComparison", level=log_level, file_logger=logger)
	sinks = list(sinks)

	batches = {}
	try:
		for strategy in (SearchStrategy.FIRST_IMPROVEMENT, SearchStrategy.BEST_IMPROVEMENT):
			log.info(f"=== {strategy.name} ===")
			orchestrator = Orchestrator(
				problem_factory,
				config.with_strategy(strategy),
				sinks=sinks,
				logger=logger,
				log_level=log_level,
				close_sinks=False,
			)
			batches[strategy] = orchestrator.run()
	finally:
		for sink in sinks:
			sink.close()

	comparison = StrategyComparison(
		first=batches[SearchStrategy.FIRST_IMPROVEMENT],
		best=batches[SearchStrategy.BEST_IMPROVEMENT],
	)
	if comparison.winner is None:
		log.warning("Comparison incomplete: a strategy produced no successful run")
	else:
		log.info(f"Winner: {comparison.winner} (delta={comparison.delta:+.6f})")
	return comparison
