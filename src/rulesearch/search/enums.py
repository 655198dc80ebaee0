"""Enums for rule-subset local search."""

from enum import IntEnum, auto


class SearchStrategy(IntEnum):
	"""
	Neighbor acceptance strategy for one hill-climbing step.
	"""
	FIRST_IMPROVEMENT = auto()  # Adopt the first improving neighbor found
	BEST_IMPROVEMENT = auto()   # Scan the whole step budget, adopt the lowest score

	@classmethod
	def from_name(cls, name: str) -> 'SearchStrategy':
		"""Parse "first", "best", "first_improvement", "BEST-IMPROVEMENT", ..."""
		key = name.strip().upper().replace("-", "_")
		if key in ("FIRST", "BEST"):
			key = f"{key}_IMPROVEMENT"
		try:
			return cls[key]
		except KeyError:
			valid = ", ".join(m.name for m in cls)
			raise ValueError(f"Unknown search strategy '{name}' (expected one of: {valid})") from None


class MoveType(IntEnum):
	"""Single-step edit applied to a rule mask."""
	ADD = auto()     # Set one absent rule
	REMOVE = auto()  # Clear one present rule
	SWAP = auto()    # Clear one present rule and set one absent rule


class StopReason(IntEnum):
	"""Why a run's improvement loop ended."""
	CONVERGED = auto()       # No improving neighbor within the step budget
	MAX_STEPS = auto()       # Step budget exhausted while still improving
