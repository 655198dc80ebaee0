"""
Encodes and decodes rule masks to and from grammars.

A rule mask is a 1-D bool tensor over the rule universe: bit i set means
rule i is part of the grammar. Masks are never modified in place by the
search, every edit clones.
"""

import logging
import random
from typing import Callable, Hashable, Optional

from torch import Tensor, tensor, zeros
from torch import bool as tbool

from rulesearch.grammar.oracles import Grammar, GrammarFactory, Rule
from rulesearch.grammar.universe import RuleUniverse
from rulesearch.logger import SearchLogger

# Moderately sized seed grammars
DEFAULT_INCLUSION_PROBABILITY = 0.30


def mask_to_string(mask: Tensor) -> str:
	return "".join("1" if b else "0" for b in mask.tolist())


class RuleMaskCodec:
	"""
	Bidirectional mapping between rule masks and grammars.

	Usage:
		codec = RuleMaskCodec(universe, grammar_factory)
		mask = codec.to_mask(grammar)
		grammar = codec.build_grammar_if_valid(mask)   # None if rejected
		seed_mask = codec.random_mask(rng)
	"""

	def __init__(
		self,
		universe: RuleUniverse,
		grammar_factory: GrammarFactory,
		logger: Optional[Callable[[str], None]] = None,
		log_level: int = logging.INFO,
	):
		self._universe = universe
		self._grammar_factory = grammar_factory
		self._log = SearchLogger("RuleMaskCodec", level=log_level, file_logger=logger)

	@property
	def universe(self) -> RuleUniverse:
		return self._universe

	@property
	def num_rules(self) -> int:
		return len(self._universe)

	def empty_mask(self) -> Tensor:
		return zeros(len(self._universe), dtype=tbool)

	def to_mask(self, grammar: Grammar) -> Tensor:
		"""Mask of the grammar's rules; rules outside the universe are ignored."""
		mask = self.empty_mask()
		for rule in grammar.all_rules():
			idx = self._universe.index_of(rule)
			if idx is not None:
				mask[idx] = True
		return mask

	def random_mask(
		self,
		rng: random.Random,
		inclusion_probability: float = DEFAULT_INCLUSION_PROBABILITY,
	) -> Tensor:
		"""
		Include each rule independently with the given probability.

		Draws exactly one rng.random() per rule in index order, so the same
		stream state always yields the same mask.
		"""
		return tensor(
			[rng.random() < inclusion_probability for _ in range(len(self._universe))],
			dtype=tbool,
		)

	def rules_by_left(self, mask: Tensor) -> dict[Hashable, list[Rule]]:
		"""Selected rules grouped by left-hand nonterminal, in index order."""
		rules: dict[Hashable, list[Rule]] = {}
		for idx in mask.nonzero().flatten().tolist():
			rule = self._universe.rule_at(idx)
			rules.setdefault(rule.left, []).append(rule)
		return rules

	def build_grammar_if_valid(self, mask: Tensor) -> Optional[Grammar]:
		"""
		Construct a grammar from exactly the selected rules.

		Returns None when the grammar constructor rejects the rule set,
		whatever the reason (typically: the start symbol lost all its rules).
		"""
		if mask.numel() != len(self._universe):
			raise ValueError(f"Mask length {mask.numel()} does not match universe size {len(self._universe)}")
		name = f"LocalSearch_{mask_to_string(mask)}"
		try:
			return self._grammar_factory(name, self._universe.start_symbol, self.rules_by_left(mask))
		except Exception as e:
			self._log.debug(f"[Codec] Rejected {name}: {e}")
			return None


class RandomMaskGrammarGenerator:
	"""
	Random grammar generator built on the codec.

	Without an inclusion probability it selects exactly
	min(rule_count, R) distinct rules; with one, it draws a random_mask and
	ignores rule_count. Returns None when the drawn mask is not a valid
	grammar, so the caller simply counts it as a failed seed attempt.
	"""

	def __init__(self, codec: RuleMaskCodec, inclusion_probability: Optional[float] = None):
		self._codec = codec
		self._inclusion_probability = inclusion_probability

	def random_grammar(self, rng: random.Random, rule_count: int) -> Optional[Grammar]:
		if self._inclusion_probability is not None:
			mask = self._codec.random_mask(rng, self._inclusion_probability)
		else:
			mask = self._codec.empty_mask()
			k = min(rule_count, self._codec.num_rules)
			for idx in rng.sample(range(self._codec.num_rules), k):
				mask[idx] = True
		return self._codec.build_grammar_if_valid(mask)

	def __repr__(self) -> str:
		return f"RandomMaskGrammarGenerator(inclusion_probability={self._inclusion_probability})"
