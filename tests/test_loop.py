"""
Tests for SearchLoop.

Tests:
1. Seeding accepts the first admissible grammar and reports the attempt
2. Seeding gives up with SeedExhaustionError after the attempt budget
3. Adopted scores strictly decrease by more than eps
4. Same seed -> identical events and final state
5. Cancellation between steps
"""

import math

import pytest
from torch import equal

from rulesearch.progress import CollectingProgressSink, ProgressDispatcher, RunCompleted, RunStarted, SeedFound, StepCompleted
from rulesearch.search import (
	SearchCancelledError,
	SearchLoop,
	SeedExhaustionError,
	StopReason,
)
from rulesearch.search.evaluation import passes_dataset

from tests.toy_grammar import (
	FailingScorer,
	NoneGenerator,
	ToyParser,
	branching_problem,
	branching_universe,
	make_problem,
	small_config,
	two_rule_problem,
	unseedable_problem,
	BRANCHING_OBJECTIVE,
	BRANCHING_SANITY,
)


def run_collecting(problem, config, seed, run_number=1):
	sink = CollectingProgressSink()
	with ProgressDispatcher([sink]) as dispatcher:
		result = SearchLoop(problem, config, run_number, seed, channel=dispatcher.channel(run_number)).run()
	return result, sink


def test_seed_is_admissible():
	config = small_config()
	problem = branching_problem(config)

	state = SearchLoop(problem, config, run_number=1, seed=42).find_seed()

	assert math.isfinite(state.score)
	assert passes_dataset(ToyParser(), state.grammar, problem.datasets.parsable_words)
	assert passes_dataset(ToyParser(), state.grammar, problem.datasets.objective_words)
	assert state.rule_count == config.initial_rule_count


def test_seed_exhaustion_without_grammars():
	config = small_config(max_seed_attempts=7)
	loop = SearchLoop(unseedable_problem(config), config, run_number=1, seed=42)

	with pytest.raises(SeedExhaustionError) as info:
		loop.run()
	assert info.value.attempts == 7


def test_seed_exhaustion_with_infinite_scores():
	config = small_config(max_seed_attempts=20)
	problem = make_problem(branching_universe(), BRANCHING_OBJECTIVE, BRANCHING_SANITY, config, scorer=FailingScorer())

	with pytest.raises(SeedExhaustionError):
		SearchLoop(problem, config, run_number=1, seed=42).run()


def test_custom_generator_is_used():
	config = small_config(max_seed_attempts=3)
	problem = make_problem(
		branching_universe(), BRANCHING_OBJECTIVE, BRANCHING_SANITY, config,
		random_grammar=NoneGenerator(),
	)
	with pytest.raises(SeedExhaustionError):
		SearchLoop(problem, config, run_number=1, seed=0).run()


@pytest.mark.parametrize("seed", [1, 2, 3, 4])
def test_scores_monotonic(seed):
	config = small_config()
	result, sink = run_collecting(branching_problem(config), config, seed)

	scores = [score for _, score in result.history]
	for previous, current in zip(scores, scores[1:]):
		assert current + config.improvement_eps < previous

	assert result.history[0][0] == 0
	assert result.score == scores[-1]
	assert result.stats.best_score == result.score
	assert result.stats.best_size == result.best.grammar_size
	assert len(result.history) - 1 == sum(1 for e in sink.of_type(StepCompleted) if e.improved)


def test_result_stays_parsable():
	config = small_config()
	problem = branching_problem(config)
	result = SearchLoop(problem, config, run_number=1, seed=11).run()

	parser = ToyParser()
	for word in problem.datasets.parsable_words + problem.datasets.objective_words:
		assert parser.parsable(result.best.grammar, word)


def test_event_sequence():
	config = small_config()
	result, sink = run_collecting(branching_problem(config), config, seed=5, run_number=2)

	events = sink.events
	assert isinstance(events[0], RunStarted)
	assert isinstance(events[1], SeedFound)
	assert isinstance(events[-1], RunCompleted)
	steps = sink.of_type(StepCompleted)
	assert [e.step for e in steps] == list(range(1, result.stats.steps_taken + 1))
	assert all(e.run_number == 2 for e in steps)
	assert sum(e.evaluated for e in steps) == result.stats.total_neighbors_evaluated
	assert events[-1].best_score == result.score


def test_converged_run_counts_final_step():
	config = small_config()
	result, sink = run_collecting(branching_problem(config), config, seed=3)

	assert result.stop_reason == StopReason.CONVERGED
	steps = sink.of_type(StepCompleted)
	assert not steps[-1].improved
	assert all(e.improved for e in steps[:-1])


def test_step_budget():
	config = small_config(max_steps=1, initial_rule_count=12)
	result = SearchLoop(branching_problem(config), config, run_number=1, seed=0).run()

	# The full universe always has an improving removal
	assert result.stats.steps_taken == 1
	assert result.stop_reason == StopReason.MAX_STEPS
	assert len(result.history) == 2


def test_zero_steps_returns_seed():
	config = small_config(max_steps=0)
	result = SearchLoop(branching_problem(config), config, run_number=1, seed=0).run()

	assert result.stats.steps_taken == 0
	assert result.stats.total_neighbors_evaluated == 0
	assert len(result.history) == 1


def test_deterministic_per_seed():
	"""Same seed, same problem, same budgets: identical events and final state."""
	config = small_config(max_swap_candidates_per_step=30)

	a, sink_a = run_collecting(branching_problem(config), config, seed=17)
	b, sink_b = run_collecting(branching_problem(config), config, seed=17)

	assert sink_a.events == sink_b.events
	assert equal(a.best.mask, b.best.mask)
	assert a.stats == b.stats
	assert a.history == b.history


def test_cancelled_before_start():
	config = small_config()
	loop = SearchLoop(branching_problem(config), config, run_number=4, seed=0, shutdown_check=lambda: True)

	with pytest.raises(SearchCancelledError) as info:
		loop.run()
	assert info.value.run_number == 4
	assert info.value.steps_completed == 0


def test_cancelled_between_steps():
	"""Both-rule seed improves at step 1; shutdown is seen before step 2."""
	config = small_config(initial_rule_count=2)
	checks = []

	def shutdown_check():
		checks.append(1)
		return len(checks) >= 3

	loop = SearchLoop(two_rule_problem(config), config, run_number=1, seed=0, shutdown_check=shutdown_check)
	with pytest.raises(SearchCancelledError) as info:
		loop.run()
	assert info.value.steps_completed == 1
