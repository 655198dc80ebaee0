"""
Neighbor generation and selection for one hill-climbing step.
"""

import logging
import random
from typing import Callable, Optional

from rulesearch.search.acceptance import AcceptanceStrategyFactory
from rulesearch.search.codec import RuleMaskCodec
from rulesearch.search.enums import SearchStrategy
from rulesearch.search.evaluation import CandidateEvaluator
from rulesearch.search.moves import MoveGenerator, apply_move
from rulesearch.search.types import NeighborSearchOutcome, SearchState
from rulesearch.logger import SearchLogger

# A neighbor must beat the current score by at least this much
IMPROVEMENT_EPS = 1e-3


class NeighborSearcher:
	"""
	Evaluates a shuffled, budgeted subset of a state's neighbors.

	The algorithm per step:
	1. Enumerate add/remove moves and sampled swaps (MoveGenerator)
	2. Shuffle them with the run's random stream
	3. For each move, until a budget is hit:
	   - apply it to a copy of the mask
	   - skip if the grammar cannot be built or fails either corpus
	   - score it and count it as evaluated
	   - offer it to the acceptance strategy if score + eps < current score
	4. Return the strategy's pick, or a no-improvement outcome

	Budgets:
	- max_candidates_per_step: moves considered (negative: unlimited)
	- max_neighbor_evaluations: neighbors scored
	"""

	def __init__(
		self,
		codec: RuleMaskCodec,
		evaluator: CandidateEvaluator,
		rng: random.Random,
		improvement_eps: float = IMPROVEMENT_EPS,
		logger: Optional[Callable[[str], None]] = None,
		log_level: int = logging.INFO,
	):
		self._codec = codec
		self._evaluator = evaluator
		self._rng = rng
		self._move_generator = MoveGenerator(rng)
		self._improvement_eps = improvement_eps
		self._log = SearchLogger("NeighborSearcher", level=log_level, file_logger=logger)

	@property
	def improvement_eps(self) -> float:
		return self._improvement_eps

	def improves(self, candidate_score: float, current_score: float) -> bool:
		return candidate_score + self._improvement_eps < current_score

	def search(
		self,
		current: SearchState,
		max_swap_candidates: int,
		max_neighbor_evaluations: int,
		max_candidates_per_step: int,
		strategy: SearchStrategy,
	) -> NeighborSearchOutcome:
		"""
		Run one step from `current` and report the neighbor to adopt, if any.

		Returns:
			NeighborSearchOutcome; improvement_index is the 1-based position
			(among scored neighbors) of the adopted one, -1 without improvement.
		"""
		moves = self._move_generator.enumerate_moves(current.mask, max_swap_candidates)
		self._rng.shuffle(moves)

		tracker = AcceptanceStrategyFactory.create(strategy)
		evaluated = 0
		considered = 0

		for move in moves:
			if max_candidates_per_step >= 0 and considered >= max_candidates_per_step:
				break
			if evaluated >= max_neighbor_evaluations:
				break
			considered += 1

			candidate_mask = apply_move(current.mask, move)
			candidate_grammar = self._codec.build_grammar_if_valid(candidate_mask)
			if candidate_grammar is None:
				continue
			if not self._evaluator.is_parsable(candidate_grammar):
				continue

			score = self._evaluator.score(candidate_grammar)
			evaluated += 1
			self._log.debug(f"[Neighbors] #{evaluated} {move!r}: score={score:.4f}")

			if self.improves(score, current.score):
				tracker.consider(SearchState(candidate_mask, candidate_grammar, score), evaluated)
				if tracker.should_stop_early():
					break

		if tracker.has_improvement:
			return NeighborSearchOutcome(
				next_state=tracker.best,
				evaluated=evaluated,
				improvement_index=tracker.best_index,
				previous_grammar_size=current.grammar_size,
				previous_score=current.score,
				improved=True,
			)
		return NeighborSearchOutcome(
			next_state=None,
			evaluated=evaluated,
			improvement_index=NeighborSearchOutcome.NO_IMPROVEMENT_INDEX,
			previous_grammar_size=current.grammar_size,
			previous_score=current.score,
			improved=False,
		)
