"""
Single-step edits of a rule mask and their enumeration.

Neighborhood of a mask with P present and A absent rules:
- P remove moves and A add moves (complete, deterministic)
- a random sample of at most max_swap_candidates swap moves out of the
  P * A possible (source, target) pairs

The swap sample is drawn with replacement and deduplicated afterwards, so
it may hold fewer moves than requested. Swap neighborhoods are quadratic
in the universe size while add/remove are linear.
"""

import random
from dataclasses import dataclass

from torch import Tensor

from rulesearch.search.enums import MoveType


@dataclass(frozen=True)
class Move:
	"""
	One edit of a rule mask.

	ADD sets `target` (source is -1), REMOVE clears `target` (source ==
	target), SWAP clears `source` and sets `target`. Preconditions are not
	checked here; MoveGenerator only proposes consistent moves.
	"""
	type: MoveType
	source: int
	target: int

	@staticmethod
	def add(target: int) -> 'Move':
		return Move(MoveType.ADD, -1, target)

	@staticmethod
	def remove(target: int) -> 'Move':
		return Move(MoveType.REMOVE, target, target)

	@staticmethod
	def swap(source: int, target: int) -> 'Move':
		return Move(MoveType.SWAP, source, target)

	def __repr__(self) -> str:
		if self.type == MoveType.SWAP:
			return f"Swap({self.source}->{self.target})"
		return f"{self.type.name.capitalize()}({self.target})"


def apply_move(mask: Tensor, move: Move) -> Tensor:
	"""Return a copy of mask with the move applied; mask itself is untouched."""
	nxt = mask.clone()
	if move.type == MoveType.ADD:
		nxt[move.target] = True
	elif move.type == MoveType.REMOVE:
		nxt[move.target] = False
	elif move.type == MoveType.SWAP:
		nxt[move.source] = False
		nxt[move.target] = True
	else:
		raise ValueError(f"Unknown move type: {move.type}")
	return nxt


class MoveGenerator:
	"""
	Enumerates candidate moves for a mask.

	Swap sampling consumes the given random stream, so a run that passes its
	own rng gets a reproducible enumeration.
	"""

	def __init__(self, rng: random.Random):
		self._rng = rng

	def enumerate_moves(self, mask: Tensor, max_swap_candidates: int) -> list[Move]:
		"""
		All remove/add moves, then a deduplicated random sample of swaps.

		Args:
			mask: Current rule mask (not modified)
			max_swap_candidates: Upper bound on swap draws (0 disables swaps)
		"""
		present = mask.nonzero().flatten().tolist()
		absent = (~mask).nonzero().flatten().tolist()

		moves = [Move.remove(i) for i in present]
		moves.extend(Move.add(j) for j in absent)

		if present and absent and max_swap_candidates > 0:
			seen_pairs: set[tuple[int, int]] = set()
			swaps_to_generate = min(max_swap_candidates, len(present) * len(absent))
			for _ in range(swaps_to_generate):
				source = present[self._rng.randrange(len(present))]
				target = absent[self._rng.randrange(len(absent))]
				if (source, target) not in seen_pairs:
					seen_pairs.add((source, target))
					moves.append(Move.swap(source, target))

		return moves
