"""
Candidate evaluation against the two reference corpora.

A grammar is admissible only if it parses every word of the sanity corpus
and every word of the (limited) objective corpus. Admissible grammars are
scored on the objective corpus; scoring failures count as +inf so the
candidate can never be adopted.
"""

import logging
import math
from typing import Any, Callable, Optional, Sequence

from rulesearch.grammar.datasets import DatasetBundle
from rulesearch.grammar.oracles import Grammar, ParserOracle, ScoreOracle
from rulesearch.logger import SearchLogger


def passes_dataset(parser: ParserOracle, grammar: Grammar, words: Sequence[Sequence[Any]]) -> bool:
	"""True if the grammar parses every word."""
	for word in words:
		if not parser.parsable(grammar, word):
			return False
	return True


class CandidateEvaluator:
	"""
	Parse gate and score for candidate grammars.

	Both operations absorb oracle failures: a parser error means "not
	parsable", a scorer error or NaN means an infinite score.
	"""

	def __init__(
		self,
		parser: ParserOracle,
		scorer: ScoreOracle,
		datasets: DatasetBundle,
		adaptive: bool = True,
		with_non_canonical_rules: bool = False,
		logger: Optional[Callable[[str], None]] = None,
		log_level: int = logging.INFO,
	):
		self._parser = parser
		self._scorer = scorer
		self._datasets = datasets
		self._adaptive = adaptive
		self._with_non_canonical_rules = with_non_canonical_rules
		self._log = SearchLogger("CandidateEvaluator", level=log_level, file_logger=logger)

	@property
	def datasets(self) -> DatasetBundle:
		return self._datasets

	def is_parsable(self, grammar: Grammar) -> bool:
		"""Sanity corpus first, then the objective corpus."""
		try:
			if not passes_dataset(self._parser, grammar, self._datasets.parsable_words):
				return False
			return passes_dataset(self._parser, grammar, self._datasets.objective_words)
		except Exception as e:
			self._log.debug(f"[Eval] Parser failed, treating grammar as unparsable: {e}")
			return False

	def score(self, grammar: Grammar) -> float:
		"""Bits per symbol on the limited objective corpus, +inf on failure."""
		try:
			value = float(self._scorer.score(
				grammar,
				self._datasets.objective_limited,
				self._adaptive,
				self._with_non_canonical_rules,
			))
		except Exception as e:
			self._log.debug(f"[Eval] Scoring failed, treating as +inf: {e}")
			return math.inf
		if math.isnan(value):
			return math.inf
		return value
