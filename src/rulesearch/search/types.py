"""
Immutable value types of the search.

SearchState            (mask, grammar, score) of one point in rule-subset space
NeighborSearchOutcome  result of one neighbor-search step
RunStats               per-run summary
RunResult              best state of a finished run plus its stats and history
RunFailure             a run that ended with an error
BatchResult            all results and failures of a multi-run batch
"""

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from torch import Tensor

from rulesearch.grammar.oracles import Grammar
from rulesearch.search.enums import StopReason
from rulesearch.serialization import Serializable


@dataclass(frozen=True)
class SearchState:
	"""
	A rule mask, the grammar it materializes and its bits-per-symbol score.

	The mask is owned by the state and must never be mutated; moves always
	produce a new mask.
	"""
	mask: Tensor
	grammar: Grammar
	score: float

	@property
	def grammar_size(self) -> int:
		return self.grammar.size()

	@property
	def rule_count(self) -> int:
		return int(self.mask.sum().item())

	def __repr__(self) -> str:
		return f"SearchState(rules={self.rule_count}, size={self.grammar_size}, score={self.score:.4f})"


@dataclass(frozen=True)
class NeighborSearchOutcome:
	"""
	Outcome of evaluating neighbors for a single step.

	Attributes:
		next_state: Adopted neighbor, or None when nothing improved
		evaluated: Neighbors scored during the step
		improvement_index: 1-based index (among scored neighbors) of the
			adopted one, -1 when nothing improved
		previous_grammar_size: Size of the grammar the step started from
		previous_score: Score the step started from
		improved: Whether a neighbor was adopted
	"""
	next_state: Optional[SearchState]
	evaluated: int
	improvement_index: int
	previous_grammar_size: int
	previous_score: float
	improved: bool

	NO_IMPROVEMENT_INDEX = -1


@dataclass(frozen=True)
class RunStats(Serializable):
	"""Summary statistics for a single run."""
	run_number: int
	seed: int
	steps_taken: int
	total_neighbors_evaluated: int
	best_size: int
	best_score: float

	def serialize(self) -> dict[str, Any]:
		return {
			"run_number": self.run_number,
			"seed": self.seed,
			"steps_taken": self.steps_taken,
			"total_neighbors_evaluated": self.total_neighbors_evaluated,
			"best_size": self.best_size,
			"best_score": self.best_score,
		}

	@classmethod
	def deserialize(cls, data: dict[str, Any]) -> 'RunStats':
		return cls(**data)


@dataclass(frozen=True)
class RunResult:
	"""
	Best state and stats for a completed run.

	history holds (step, score) pairs: step 0 is the seed, then one entry
	per adopted neighbor.
	"""
	best: SearchState
	stats: RunStats
	history: tuple[tuple[int, float], ...] = ()
	stop_reason: Optional[StopReason] = None

	@property
	def score(self) -> float:
		return self.best.score

	def __repr__(self) -> str:
		return (
			f"RunResult(run={self.stats.run_number}, seed={self.stats.seed}, "
			f"steps={self.stats.steps_taken}, size={self.stats.best_size}, "
			f"score={self.stats.best_score:.4f})"
		)


@dataclass(frozen=True)
class RunFailure:
	"""A run that raised instead of producing a result."""
	run_number: int
	seed: int
	error: BaseException

	@property
	def message(self) -> str:
		return f"{type(self.error).__name__}: {self.error}"


@dataclass(frozen=True)
class BatchResult:
	"""
	Everything a multi-run batch produced.

	results are ordered by run number; best is None when every run failed.
	"""
	results: tuple[RunResult, ...] = ()
	failures: tuple[RunFailure, ...] = ()
	best: Optional[RunResult] = None

	@property
	def succeeded(self) -> int:
		return len(self.results)

	@property
	def failed(self) -> int:
		return len(self.failures)

	def serialize(self) -> dict[str, Any]:
		"""JSON-friendly summary (stats only; grammars are not serialized)."""
		best = None
		if self.best is not None:
			best = {
				"run_number": self.best.stats.run_number,
				"score": self.best.score if math.isfinite(self.best.score) else None,
				"mask": [int(b) for b in self.best.best.mask.tolist()],
			}
		return {
			"runs": [r.stats.serialize() for r in self.results],
			"failures": [
				{"run_number": f.run_number, "seed": f.seed, "error": f.message}
				for f in self.failures
			],
			"best": best,
		}
