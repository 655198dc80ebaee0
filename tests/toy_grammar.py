"""
Toy grammar domain for the tests.

Symbols starting with an uppercase letter are nonterminals, everything else
is a terminal matched against one element of the word. Grammars have no
empty productions, so every symbol consumes at least one element and
parsing always terminates.

Problems:
	two_rule_problem    S -> "." and S -> "(", both corpora ["."]
	branching_problem   12 rules over S/A with terminals a/b
"""

import math
import random
from dataclasses import dataclass
from typing import Hashable, Optional

from torch import Tensor, tensor
from torch import bool as tbool

from rulesearch.grammar import DatasetBundle, ReferenceDataset, RuleUniverse
from rulesearch.search import RandomMaskGrammarGenerator, RuleMaskCodec, SearchConfig, SearchProblem


@dataclass(frozen=True)
class Rule:
	left: str
	right: tuple[str, ...]

	def __repr__(self) -> str:
		return f"{self.left} -> {' '.join(self.right)}"


def bool_mask(*bits: int) -> Tensor:
	return tensor([bool(b) for b in bits], dtype=tbool)


def is_nonterminal(symbol: str) -> bool:
	return symbol[:1].isupper()


class ToyGrammar:
	"""Rules grouped by left side. size() counts every symbol of every rule."""

	def __init__(self, name: str, start_symbol: Hashable, rules: dict[Hashable, list[Rule]]):
		self.name = name
		self.start_symbol = start_symbol
		self.rules = {left: tuple(rs) for left, rs in rules.items()}

	def all_rules(self) -> list[Rule]:
		return [rule for rs in self.rules.values() for rule in rs]

	def size(self) -> int:
		return sum(1 + len(rule.right) for rule in self.all_rules())

	def __repr__(self) -> str:
		return f"ToyGrammar({self.name}, rules={len(self.all_rules())})"


def build_grammar(name: str, start_symbol: Hashable, rules: dict[Hashable, list[Rule]]) -> ToyGrammar:
	"""Rejects rule sets that leave the start symbol without productions."""
	if not rules.get(start_symbol):
		raise ValueError(f"Start symbol {start_symbol!r} has no rules")
	return ToyGrammar(name, start_symbol, rules)


class ToyParser:
	"""Top-down span parser memoised per (symbol, start, end)."""

	def parsable(self, grammar: ToyGrammar, word) -> bool:
		word = tuple(word)
		memo: dict[tuple[str, int, int], bool] = {}

		def derives(symbol: str, i: int, j: int) -> bool:
			if not is_nonterminal(symbol):
				return j == i + 1 and word[i] == symbol
			key = (symbol, i, j)
			if key not in memo:
				memo[key] = any(sequence(rule.right, i, j) for rule in grammar.rules.get(symbol, ()))
			return memo[key]

		def sequence(symbols: tuple[str, ...], i: int, j: int) -> bool:
			if not symbols:
				return i == j
			if len(symbols) > j - i:
				return False
			first, rest = symbols[0], symbols[1:]
			for k in range(i + 1, j - len(rest) + 1):
				if derives(first, i, k) and sequence(rest, k, j):
					return True
			return False

		return derives(grammar.start_symbol, 0, len(word))


class RaisingParser:
	def parsable(self, grammar, word) -> bool:
		raise RuntimeError("parser crashed")


class SizeScorer:
	"""Grammar size per symbol of the dataset: smaller grammars score lower."""

	def __init__(self):
		self.calls = 0

	def score(self, grammar: ToyGrammar, dataset, adaptive: bool, with_non_canonical_rules: bool) -> float:
		self.calls += 1
		total = sum(len(item) for item in dataset)
		return grammar.size() / max(1, total)


class FailingScorer:
	def score(self, grammar, dataset, adaptive, with_non_canonical_rules) -> float:
		raise RuntimeError("scorer crashed")


class NanScorer:
	def score(self, grammar, dataset, adaptive, with_non_canonical_rules) -> float:
		return math.nan


class NoneGenerator:
	"""Never produces a usable seed."""

	def random_grammar(self, rng: random.Random, rule_count: int) -> Optional[ToyGrammar]:
		return None


class ExplodingGenerator:
	"""
	Raises on the first draw of the run seeded with bad_seed, delegates
	otherwise. A run's stream is untouched before its first seed draw, so
	comparing states identifies the run.
	"""

	def __init__(self, bad_seed: int, delegate):
		self._bad_state = random.Random(bad_seed).getstate()
		self._delegate = delegate

	def random_grammar(self, rng: random.Random, rule_count: int) -> Optional[ToyGrammar]:
		if rng.getstate() == self._bad_state:
			raise RuntimeError("generator exploded")
		return self._delegate.random_grammar(rng, rule_count)


# =============================================================================
# Problems
# =============================================================================

DOT_RULE = Rule("S", (".",))
PAREN_RULE = Rule("S", ("(",))

BRANCHING_RULES = (
	Rule("S", ("a",)),
	Rule("S", ("b",)),
	Rule("S", ("a", "S")),
	Rule("S", ("b", "S")),
	Rule("S", ("A", "S")),
	Rule("S", ("S", "S")),
	Rule("A", ("a",)),
	Rule("A", ("b",)),
	Rule("A", ("a", "b")),
	Rule("S", ("a", "b")),
	Rule("A", ("A", "A")),
	Rule("S", ("b", "a")),
)
BRANCHING_SANITY = ("a", "b")
BRANCHING_OBJECTIVE = ("ab", "ba", "aab", "abab", "b")


def two_rule_universe() -> RuleUniverse:
	return RuleUniverse([DOT_RULE, PAREN_RULE], start_symbol="S")


def branching_universe() -> RuleUniverse:
	return RuleUniverse(BRANCHING_RULES, start_symbol="S")


def make_problem(
	universe: RuleUniverse,
	objective,
	sanity,
	config: SearchConfig,
	scorer=None,
	parser=None,
	random_grammar=None,
) -> SearchProblem:
	datasets = DatasetBundle.from_datasets(
		ReferenceDataset.of("objective", objective),
		ReferenceDataset.of("sanity", sanity),
		objective_limit=config.objective_limit,
	)
	return SearchProblem(
		universe=universe,
		grammar_factory=build_grammar,
		parser=parser or ToyParser(),
		scorer=scorer or SizeScorer(),
		datasets=datasets,
		random_grammar=random_grammar,
	)


def two_rule_problem(config: SearchConfig) -> SearchProblem:
	return make_problem(two_rule_universe(), ["."], ["."], config)


def branching_problem(config: SearchConfig) -> SearchProblem:
	return make_problem(branching_universe(), BRANCHING_OBJECTIVE, BRANCHING_SANITY, config)


def unseedable_problem(config: SearchConfig) -> SearchProblem:
	return make_problem(branching_universe(), BRANCHING_OBJECTIVE, BRANCHING_SANITY, config, random_grammar=NoneGenerator())


def exploding_problem_factory(bad_seed: int):
	"""Branching problem whose run seeded with bad_seed fails during seeding."""

	def factory(config: SearchConfig) -> SearchProblem:
		universe = branching_universe()
		delegate = RandomMaskGrammarGenerator(RuleMaskCodec(universe, build_grammar))
		return make_problem(
			universe, BRANCHING_OBJECTIVE, BRANCHING_SANITY, config,
			random_grammar=ExplodingGenerator(bad_seed, delegate),
		)

	return factory


def broken_problem(config: SearchConfig) -> SearchProblem:
	raise FileNotFoundError("corpus missing")


def small_config(**overrides) -> SearchConfig:
	"""Budgets sized for the toy problems."""
	values = dict(
		initial_rule_count=8,
		max_steps=25,
		max_swap_candidates_per_step=20,
		max_neighbor_evaluations_per_step=50,
		max_candidates_per_step=-1,
		max_seed_attempts=500,
		num_runs=3,
		pool_size=2,
		log_steps=False,
	)
	values.update(overrides)
	return SearchConfig(**values)
