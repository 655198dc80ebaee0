"""
Acceptance strategies for one neighbor-search step.

The neighbor loop is written once; it offers every improving candidate to a
fresh strategy instance together with its 1-based evaluation index and
stops as soon as the strategy asks to.

	FirstImprovementStrategy  keeps the first candidate, then stops
	BestImprovementStrategy   keeps the lowest score, sees everything

Usage:
	tracker = AcceptanceStrategyFactory.create(SearchStrategy.BEST_IMPROVEMENT)
	for index, candidate in improving_candidates:
		tracker.consider(candidate, index)
		if tracker.should_stop_early():
			break
	if tracker.has_improvement:
		next_state = tracker.best
"""

from abc import ABC, abstractmethod
from typing import Optional

from rulesearch.search.enums import SearchStrategy
from rulesearch.search.types import SearchState


class AcceptanceStrategy(ABC):
	"""Tracks the candidate a step would adopt."""

	def __init__(self):
		self._best: Optional[SearchState] = None
		self._best_index = -1

	@property
	@abstractmethod
	def name(self) -> str:
		...

	@abstractmethod
	def accept(self, candidate: SearchState) -> bool:
		"""Whether the candidate should replace the tracked one."""
		...

	@abstractmethod
	def should_stop_early(self) -> bool:
		"""Whether the step can stop offering candidates."""
		...

	def consider(self, candidate: SearchState, index: int) -> bool:
		"""Offer a candidate; returns True if it is now the tracked one."""
		if self.accept(candidate):
			self._best = candidate
			self._best_index = index
			return True
		return False

	@property
	def has_improvement(self) -> bool:
		return self._best is not None

	@property
	def best(self) -> Optional[SearchState]:
		return self._best

	@property
	def best_index(self) -> int:
		return self._best_index

	def __repr__(self) -> str:
		return f"{self.__class__.__name__}(best_index={self._best_index})"


class FirstImprovementStrategy(AcceptanceStrategy):
	"""Accept the first candidate offered; stop right after."""

	@property
	def name(self) -> str:
		return "FirstImprovement"

	def accept(self, candidate: SearchState) -> bool:
		return not self.has_improvement

	def should_stop_early(self) -> bool:
		return self.has_improvement


class BestImprovementStrategy(AcceptanceStrategy):
	"""Accept strictly lower scores than the tracked one; never stop early."""

	@property
	def name(self) -> str:
		return "BestImprovement"

	def accept(self, candidate: SearchState) -> bool:
		return not self.has_improvement or candidate.score < self._best.score

	def should_stop_early(self) -> bool:
		return False


class AcceptanceStrategyFactory:
	"""Creates a fresh acceptance tracker for each step."""

	@staticmethod
	def create(strategy: SearchStrategy) -> AcceptanceStrategy:
		if strategy == SearchStrategy.FIRST_IMPROVEMENT:
			return FirstImprovementStrategy()
		elif strategy == SearchStrategy.BEST_IMPROVEMENT:
			return BestImprovementStrategy()
		else:
			raise ValueError(f"Unknown search strategy: {strategy}")
