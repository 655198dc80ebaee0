"""
JSON persistence for configs and run summaries.

Documents are tagged with the class that wrote them, so a run-stats file
cannot be loaded as a config by mistake:

	{"_kind": "SearchConfig", "num_runs": 3, ..., "_metadata": {...}}
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, TypeVar

T = TypeVar('T', bound='Serializable')

KIND_KEY = "_kind"
METADATA_KEY = "_metadata"


class Serializable(ABC):
	"""Objects that round-trip through a plain dict and a tagged JSON document."""

	@abstractmethod
	def serialize(self) -> dict[str, Any]:
		pass

	@classmethod
	@abstractmethod
	def deserialize(cls: type[T], data: dict[str, Any]) -> T:
		pass

	def to_json(self, **metadata: Any) -> str:
		document = {KIND_KEY: type(self).__name__, **self.serialize()}
		if metadata:
			document[METADATA_KEY] = metadata
		return json.dumps(document, indent=2, default=str)

	@classmethod
	def from_json(cls: type[T], text: str) -> tuple[T, Optional[dict[str, Any]]]:
		"""
		Parse a document written by to_json().

		Raises:
			ValueError: the document was written by another class
		"""
		data = json.loads(text)
		kind = data.pop(KIND_KEY, cls.__name__)
		if kind != cls.__name__:
			raise ValueError(f"Expected a {cls.__name__} document, found {kind}")
		metadata = data.pop(METADATA_KEY, None)
		return cls.deserialize(data), metadata

	def save(self, filepath: str, **metadata: Any) -> None:
		"""Write to filepath, creating parent directories."""
		path = Path(filepath)
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(self.to_json(**metadata))

	@classmethod
	def load(cls: type[T], filepath: str) -> tuple[T, Optional[dict[str, Any]]]:
		"""Returns (object, metadata or None)."""
		return cls.from_json(Path(filepath).read_text())
