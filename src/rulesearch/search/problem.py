"""
A search problem: the rule universe plus the oracles that judge rule subsets.

Callers describe their grammar domain once, as a problem factory
`factory(config) -> SearchProblem`. The CLI loads such factories from
"package.module:attribute" strings.
"""

import importlib
from dataclasses import dataclass
from typing import Callable, Optional

from rulesearch.grammar.datasets import DatasetBundle
from rulesearch.grammar.oracles import GrammarFactory, ParserOracle, RandomGrammarGenerator, ScoreOracle
from rulesearch.grammar.universe import RuleUniverse
from rulesearch.search.config import SearchConfig


@dataclass(frozen=True)
class SearchProblem:
	"""
	Everything a run needs besides its config and random stream.

	Attributes:
		universe: Candidate rules and start symbol
		grammar_factory: Builds grammars from rule subsets (raises to reject)
		parser: Parsability oracle
		scorer: Bits-per-symbol oracle
		datasets: Sanity and (limited) objective corpora
		random_grammar: Seed generator; None uses the mask-based generator
	"""
	universe: RuleUniverse
	grammar_factory: GrammarFactory
	parser: ParserOracle
	scorer: ScoreOracle
	datasets: DatasetBundle
	random_grammar: Optional[RandomGrammarGenerator] = None


ProblemFactory = Callable[[SearchConfig], SearchProblem]


def load_problem_factory(spec: str) -> ProblemFactory:
	"""
	Resolve "package.module:attribute" to a problem factory.

	Raises:
		ValueError: malformed spec or attribute is not callable
		ImportError / AttributeError: module or attribute missing
	"""
	module_name, sep, attr = spec.partition(":")
	if not sep or not module_name or not attr:
		raise ValueError(f"Problem factory must look like 'package.module:factory', got '{spec}'")
	module = importlib.import_module(module_name)
	factory = module
	for part in attr.split("."):
		factory = getattr(factory, part)
	if not callable(factory):
		raise ValueError(f"'{spec}' is not callable")
	return factory
