"""
One independent hill-climbing run.

A run finds a random seed grammar that parses both corpora and has a finite
score, then repeatedly moves to an improving neighbor until no neighbor
improves or the step budget is spent. All randomness comes from the run's
own random.Random(seed), so a run is fully determined by (problem, config,
seed).
"""

import logging
import math
import random
from typing import Callable, Optional

from rulesearch.grammar.oracles import RandomGrammarGenerator
from rulesearch.progress import RunCompleted, RunEventChannel, RunStarted, ScoreTrajectory, SeedFound, StepCompleted
from rulesearch.search.codec import RandomMaskGrammarGenerator, RuleMaskCodec
from rulesearch.search.config import SearchConfig
from rulesearch.search.enums import StopReason
from rulesearch.search.errors import SearchCancelledError, SeedExhaustionError
from rulesearch.search.evaluation import CandidateEvaluator
from rulesearch.search.neighbors import NeighborSearcher
from rulesearch.search.problem import SearchProblem
from rulesearch.search.types import RunResult, RunStats, SearchState
from rulesearch.logger import SearchLogger


class SearchLoop:
	"""
	Seeding followed by the improvement loop for a single run.

	Usage:
		loop = SearchLoop(problem, config, run_number=1, seed=42)
		result = loop.run()

	Events (RunStarted, SeedFound, one StepCompleted per step, RunCompleted)
	go to the given channel; the loop itself never writes anywhere.
	"""

	def __init__(
		self,
		problem: SearchProblem,
		config: SearchConfig,
		run_number: int,
		seed: int,
		total_runs: int = 1,
		channel: Optional[RunEventChannel] = None,
		shutdown_check: Optional[Callable[[], bool]] = None,
		logger: Optional[Callable[[str], None]] = None,
		log_level: int = logging.INFO,
	):
		self._problem = problem
		self._config = config
		self._run_number = run_number
		self._seed = seed
		self._total_runs = total_runs
		self._channel = channel or RunEventChannel.null(run_number)
		self._shutdown_check = shutdown_check
		self._log = SearchLogger(f"SearchLoop.run{run_number}", level=log_level, file_logger=logger)

		self._rng = random.Random(seed)
		self._codec = RuleMaskCodec(problem.universe, problem.grammar_factory, logger=logger, log_level=log_level)
		self._evaluator = CandidateEvaluator(
			problem.parser,
			problem.scorer,
			problem.datasets,
			adaptive=config.adaptive_scoring,
			with_non_canonical_rules=config.with_non_canonical_rules,
			logger=logger,
			log_level=log_level,
		)
		self._searcher = NeighborSearcher(
			self._codec,
			self._evaluator,
			self._rng,
			improvement_eps=config.improvement_eps,
			logger=logger,
			log_level=log_level,
		)
		self._generator: RandomGrammarGenerator = problem.random_grammar or RandomMaskGrammarGenerator(
			self._codec, config.seed_inclusion_probability
		)

	@property
	def run_number(self) -> int:
		return self._run_number

	@property
	def seed(self) -> int:
		return self._seed

	@property
	def codec(self) -> RuleMaskCodec:
		return self._codec

	def _check_cancelled(self, steps_completed: int) -> None:
		if self._shutdown_check is not None and self._shutdown_check():
			raise SearchCancelledError(self._run_number, steps_completed)

	def find_seed(self) -> SearchState:
		"""
		Draw random grammars until one parses both corpora with a finite score.

		Raises:
			SeedExhaustionError: after max_seed_attempts rejected draws
		"""
		attempts = self._config.max_seed_attempts
		for attempt in range(1, attempts + 1):
			grammar = self._generator.random_grammar(self._rng, self._config.initial_rule_count)
			if grammar is None:
				continue
			if not self._evaluator.is_parsable(grammar):
				continue
			score = self._evaluator.score(grammar)
			if not math.isfinite(score):
				continue

			state = SearchState(self._codec.to_mask(grammar), grammar, score)
			self._log.debug(f"[Seed] Accepted attempt {attempt}: {state!r}")
			self._channel.emit(SeedFound(self._run_number, attempt, state.grammar_size, score))
			return state

		raise SeedExhaustionError(attempts)

	def run(self) -> RunResult:
		"""
		Execute the run.

		Raises:
			SeedExhaustionError: no admissible seed was found
			SearchCancelledError: shutdown was requested between steps
		"""
		config = self._config
		self._channel.emit(RunStarted(self._run_number, self._total_runs, self._seed))
		self._check_cancelled(0)

		current = self.find_seed()
		trajectory = ScoreTrajectory()
		trajectory.record(0, current.score)

		steps_taken = 0
		total_evaluated = 0
		stop_reason = StopReason.MAX_STEPS

		for step in range(1, config.max_steps + 1):
			self._check_cancelled(steps_taken)

			outcome = self._searcher.search(
				current,
				config.max_swap_candidates_per_step,
				config.max_neighbor_evaluations_per_step,
				config.max_candidates_per_step,
				config.search_strategy,
			)
			steps_taken += 1
			total_evaluated += outcome.evaluated

			if outcome.improved:
				current = outcome.next_state
				trajectory.record(step, current.score)

			self._channel.emit(StepCompleted(
				run_number=self._run_number,
				step=step,
				improved=outcome.improved,
				evaluated=outcome.evaluated,
				improvement_index=outcome.improvement_index,
				previous_grammar_size=outcome.previous_grammar_size,
				previous_score=outcome.previous_score,
				grammar_size=current.grammar_size,
				score=current.score,
				log_step=config.log_steps,
			))

			if not outcome.improved:
				stop_reason = StopReason.CONVERGED
				break

		stats = RunStats(
			run_number=self._run_number,
			seed=self._seed,
			steps_taken=steps_taken,
			total_neighbors_evaluated=total_evaluated,
			best_size=current.grammar_size,
			best_score=current.score,
		)
		self._log.debug(f"[Run] Finished ({stop_reason.name}): {current!r}")
		self._channel.emit(RunCompleted(
			run_number=stats.run_number,
			seed=stats.seed,
			steps_taken=stats.steps_taken,
			total_neighbors_evaluated=stats.total_neighbors_evaluated,
			best_size=stats.best_size,
			best_score=stats.best_score,
		))
		return RunResult(best=current, stats=stats, history=trajectory.as_tuple(), stop_reason=stop_reason)
