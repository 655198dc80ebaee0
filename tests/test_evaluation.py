"""
Tests for CandidateEvaluator: the two-corpus parse gate and the scorer
that turns failures into +inf.
"""

import math

from rulesearch.grammar import DatasetBundle, ReferenceDataset
from rulesearch.search import CandidateEvaluator
from rulesearch.search.evaluation import passes_dataset

from tests.toy_grammar import (
	BRANCHING_RULES,
	DOT_RULE,
	FailingScorer,
	NanScorer,
	PAREN_RULE,
	RaisingParser,
	SizeScorer,
	ToyParser,
	build_grammar,
)


def bundle(objective, sanity):
	return DatasetBundle.from_datasets(
		ReferenceDataset.of("objective", objective),
		ReferenceDataset.of("sanity", sanity),
	)


def test_toy_parser():
	parser = ToyParser()
	grammar = build_grammar("g", "S", {
		"S": [BRANCHING_RULES[0], BRANCHING_RULES[1], BRANCHING_RULES[5]],  # S -> a | b | S S
	})

	assert parser.parsable(grammar, "a")
	assert parser.parsable(grammar, "abba")
	assert not parser.parsable(grammar, "")
	assert not parser.parsable(grammar, "abc")


def test_passes_dataset():
	parser = ToyParser()
	grammar = build_grammar("g", "S", {"S": [DOT_RULE]})

	assert passes_dataset(parser, grammar, [".", "."])
	assert not passes_dataset(parser, grammar, [".", "("])
	assert passes_dataset(parser, grammar, [])


def test_parse_gate_needs_both_corpora():
	dot_only = build_grammar("g", "S", {"S": [DOT_RULE]})
	both = build_grammar("g", "S", {"S": [DOT_RULE, PAREN_RULE]})

	evaluator = CandidateEvaluator(ToyParser(), SizeScorer(), bundle(objective=["("], sanity=["."]))

	assert not evaluator.is_parsable(dot_only)
	assert evaluator.is_parsable(both)


def test_parser_errors_mean_unparsable():
	grammar = build_grammar("g", "S", {"S": [DOT_RULE]})
	evaluator = CandidateEvaluator(RaisingParser(), SizeScorer(), bundle(["."], ["."]))
	assert evaluator.is_parsable(grammar) is False


def test_score_uses_limited_objective():
	grammar = build_grammar("g", "S", {"S": [DOT_RULE]})
	evaluator = CandidateEvaluator(ToyParser(), SizeScorer(), bundle(["..", "."], ["."]))

	# size 2 over 3 symbols
	assert math.isclose(evaluator.score(grammar), 2 / 3)


def test_scorer_failures_are_infinite():
	grammar = build_grammar("g", "S", {"S": [DOT_RULE]})

	failing = CandidateEvaluator(ToyParser(), FailingScorer(), bundle(["."], ["."]))
	assert failing.score(grammar) == math.inf

	nan = CandidateEvaluator(ToyParser(), NanScorer(), bundle(["."], ["."]))
	assert nan.score(grammar) == math.inf
