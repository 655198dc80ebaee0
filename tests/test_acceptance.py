"""
Tests for the acceptance strategies.

Candidates scoring [2.0, 1.0, 1.7] are offered against a current score
of 2.5: first-improvement keeps 2.0 and stops, best-improvement sees all
three and keeps 1.0.
"""

import pytest

from rulesearch.search import (
	AcceptanceStrategyFactory,
	BestImprovementStrategy,
	FirstImprovementStrategy,
	SearchState,
	SearchStrategy,
)

from tests.toy_grammar import DOT_RULE, bool_mask, build_grammar


def make_states(scores):
	grammar = build_grammar("g", "S", {"S": [DOT_RULE]})
	return [SearchState(bool_mask(1, 0), grammar, score) for score in scores]


def offer_all(tracker, states):
	"""Offer candidates like the neighbor loop does; returns how many were offered."""
	offered = 0
	for index, state in enumerate(states, start=1):
		offered += 1
		tracker.consider(state, index)
		if tracker.should_stop_early():
			break
	return offered


def test_first_improvement_contract():
	tracker = AcceptanceStrategyFactory.create(SearchStrategy.FIRST_IMPROVEMENT)
	assert isinstance(tracker, FirstImprovementStrategy)
	assert not tracker.should_stop_early()

	offered = offer_all(tracker, make_states([2.0, 1.0, 1.7]))

	assert offered == 1
	assert tracker.best.score == 2.0
	assert tracker.best_index == 1
	assert tracker.should_stop_early()


def test_best_improvement_contract():
	tracker = AcceptanceStrategyFactory.create(SearchStrategy.BEST_IMPROVEMENT)
	assert isinstance(tracker, BestImprovementStrategy)

	offered = offer_all(tracker, make_states([2.0, 1.0, 1.7]))

	assert offered == 3
	assert tracker.best.score == 1.0
	assert tracker.best_index == 2
	assert not tracker.should_stop_early()


def test_best_improvement_keeps_first_of_equal_scores():
	tracker = BestImprovementStrategy()
	a, b = make_states([1.5, 1.5])

	assert tracker.consider(a, 1)
	assert not tracker.consider(b, 2)
	assert tracker.best is a


def test_empty_tracker():
	for strategy in SearchStrategy:
		tracker = AcceptanceStrategyFactory.create(strategy)
		assert not tracker.has_improvement
		assert tracker.best is None
		assert tracker.best_index == -1


def test_factory_rejects_unknown():
	with pytest.raises(ValueError):
		AcceptanceStrategyFactory.create(99)
