"""
Protocols for the collaborators the search consumes as black boxes.

The search never looks inside a grammar, a parser or a scorer. It only
needs the small surface defined here:

	Rule                   hashable, exposes its left-hand nonterminal
	Grammar                all_rules() and size()
	GrammarFactory         builds a grammar from rules grouped by left side,
	                       raising on any rejection (e.g. start symbol
	                       without rules)
	ParserOracle           parsable(grammar, word)
	ScoreOracle            score(grammar, dataset, adaptive, with_non_canonical_rules)
	RandomGrammarGenerator random_grammar(rng, rule_count)

Implementations must be safe to call from several runs concurrently.
"""

import random
from typing import Any, Hashable, Iterable, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class Rule(Protocol):
	"""A production rule. Must be hashable and expose its left-hand side."""

	@property
	def left(self) -> Hashable: ...

	def __hash__(self) -> int: ...


@runtime_checkable
class Grammar(Protocol):
	"""A constructed grammar."""

	def all_rules(self) -> Iterable[Rule]: ...

	def size(self) -> int: ...


class GrammarFactory(Protocol):
	"""Builds a grammar; raises any exception to reject the rule set."""

	def __call__(
		self,
		name: str,
		start_symbol: Hashable,
		rules: dict[Hashable, list[Rule]],
	) -> Grammar: ...


@runtime_checkable
class ParserOracle(Protocol):
	"""Decides whether a grammar derives a word."""

	def parsable(self, grammar: Grammar, word: Sequence[Any]) -> bool: ...


@runtime_checkable
class ScoreOracle(Protocol):
	"""Compression cost (bits per symbol, lower is better) of a dataset under a grammar."""

	def score(
		self,
		grammar: Grammar,
		dataset: Any,
		adaptive: bool,
		with_non_canonical_rules: bool,
	) -> float: ...


@runtime_checkable
class RandomGrammarGenerator(Protocol):
	"""Draws a random grammar with about rule_count rules, or None when the draw is unusable."""

	def random_grammar(self, rng: random.Random, rule_count: int) -> Optional[Grammar]: ...
