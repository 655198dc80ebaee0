"""
Reference corpora used by the search.

Two read-only corpora drive every evaluation:
- the sanity corpus, which every accepted grammar must keep parsable
- the objective corpus, which must also parse and which is scored;
  it may be limited to its first N entries to keep scoring cheap
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence


@dataclass(frozen=True)
class ReferenceDataset:
	"""Named, immutable sequence of dataset entries."""
	name: str
	items: tuple[Any, ...]

	@classmethod
	def of(cls, name: str, items: Iterable[Any]) -> 'ReferenceDataset':
		return cls(name=name, items=tuple(items))

	def limited(self, limit: int) -> 'ReferenceDataset':
		"""First `limit` entries, renamed "<name>-limited". limit <= 0 means no limit."""
		if limit > 0 and limit < len(self.items):
			return ReferenceDataset(name=f"{self.name}-limited", items=self.items[:limit])
		return ReferenceDataset(name=f"{self.name}-limited", items=self.items)

	def __len__(self) -> int:
		return len(self.items)

	def __iter__(self) -> Iterator[Any]:
		return iter(self.items)


@dataclass(frozen=True)
class DatasetBundle:
	"""
	Prepared corpora plus their cached parse targets (words).

	Attributes:
		objective_limited: Objective dataset after applying the limit (scored)
		parsable_words: Words of the sanity corpus
		objective_words: Words of the limited objective corpus
	"""
	objective_limited: ReferenceDataset
	parsable_words: tuple[Sequence[Any], ...]
	objective_words: tuple[Sequence[Any], ...]

	@classmethod
	def from_datasets(
		cls,
		objective: ReferenceDataset,
		parsable: ReferenceDataset,
		objective_limit: int = -1,
		to_word: Optional[Callable[[Any], Sequence[Any]]] = None,
	) -> 'DatasetBundle':
		"""
		Build a bundle from raw datasets.

		Args:
			objective: Objective corpus (scored)
			parsable: Sanity corpus (must stay parsable)
			objective_limit: Keep only the first N objective entries (<= 0: all)
			to_word: Converts a dataset entry to the word handed to the parser
				(default: the entry itself)
		"""
		convert = to_word or (lambda item: item)
		limited = objective.limited(objective_limit)
		return cls(
			objective_limited=limited,
			parsable_words=tuple(convert(item) for item in parsable),
			objective_words=tuple(convert(item) for item in limited),
		)
