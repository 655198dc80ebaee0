"""
The fixed, ordered universe of candidate rules a search chooses from.
"""

from typing import Hashable, Iterable, Iterator, Optional

from rulesearch.grammar.oracles import Rule


class RuleUniverse:
	"""
	Ordered collection of R distinct candidate rules plus a start symbol.

	Index i <-> rule is a stable bijection for the lifetime of the object,
	so a rule mask of length R identifies a rule subset. The universe is
	read-only and shared by all concurrent runs.

	Usage:
		universe = RuleUniverse(all_possible_rules, start_symbol="S")
		idx = universe.index_of(rule)   # None for rules outside the universe
		rule = universe.rule_at(idx)
	"""

	def __init__(self, rules: Iterable[Rule], start_symbol: Hashable):
		self._rules: tuple[Rule, ...] = tuple(rules)
		self._start_symbol = start_symbol
		self._index: dict[Rule, int] = {}
		for i, rule in enumerate(self._rules):
			if rule in self._index:
				raise ValueError(f"Duplicate rule in universe at index {i}: {rule!r}")
			self._index[rule] = i

	@property
	def start_symbol(self) -> Hashable:
		return self._start_symbol

	@property
	def rules(self) -> tuple[Rule, ...]:
		return self._rules

	def index_of(self, rule: Rule) -> Optional[int]:
		return self._index.get(rule)

	def rule_at(self, index: int) -> Rule:
		return self._rules[index]

	def __len__(self) -> int:
		return len(self._rules)

	def __iter__(self) -> Iterator[Rule]:
		return iter(self._rules)

	def __contains__(self, rule: object) -> bool:
		return rule in self._index

	def __repr__(self) -> str:
		return f"RuleUniverse(size={len(self._rules)}, start={self._start_symbol!r})"
