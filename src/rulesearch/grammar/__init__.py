"""
Grammar-side collaborators of the search: protocols, rule universe, corpora.
"""

from rulesearch.grammar.oracles import (
	Rule,
	Grammar,
	GrammarFactory,
	ParserOracle,
	ScoreOracle,
	RandomGrammarGenerator,
)
from rulesearch.grammar.universe import RuleUniverse
from rulesearch.grammar.datasets import ReferenceDataset, DatasetBundle


__all__ = [
	'Rule',
	'Grammar',
	'GrammarFactory',
	'ParserOracle',
	'ScoreOracle',
	'RandomGrammarGenerator',
	'RuleUniverse',
	'ReferenceDataset',
	'DatasetBundle',
]
