"""
Configuration for multi-run rule-subset local search.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from rulesearch.search.enums import SearchStrategy
from rulesearch.search.neighbors import IMPROVEMENT_EPS
from rulesearch.serialization import Serializable


@dataclass(frozen=True)
class SearchConfig(Serializable):
	"""
	Configuration parameters for local search runs.

	Seeding:
	- initial_rule_count: rules requested from the random grammar generator
	- max_seed_attempts: random draws before a run gives up
	- seed_inclusion_probability: if set, the built-in seed generator draws
	  each rule independently with this probability instead of picking
	  exactly initial_rule_count rules

	Per-step budgets:
	- max_swap_candidates_per_step: swap moves sampled per step
	- max_neighbor_evaluations_per_step: scored neighbors per step
	- max_candidates_per_step: moves considered per step (negative: unlimited)

	Orchestration:
	- num_runs runs with seeds base_seed, base_seed + 1, ...
	- pool_size worker threads
	"""
	n_nonterminals: int = 3
	initial_rule_count: int = 20
	base_seed: int = 42
	max_steps: int = 25
	max_swap_candidates_per_step: int = 100
	max_neighbor_evaluations_per_step: int = 150
	max_candidates_per_step: int = 100
	max_seed_attempts: int = 2000
	with_non_canonical_rules: bool = False
	adaptive_scoring: bool = True
	objective_limit: int = -1
	num_runs: int = 3
	pool_size: int = 3
	search_strategy: SearchStrategy = SearchStrategy.FIRST_IMPROVEMENT
	objective_dataset_name: str = "small-dataset"
	parsable_dataset_name: str = "minimal-parsable"
	improvement_eps: float = IMPROVEMENT_EPS
	seed_inclusion_probability: Optional[float] = None
	log_steps: bool = True

	def __post_init__(self):
		# Frozen: normalise the strategy in place
		if isinstance(self.search_strategy, str):
			object.__setattr__(self, "search_strategy", SearchStrategy.from_name(self.search_strategy))
		elif not isinstance(self.search_strategy, SearchStrategy):
			object.__setattr__(self, "search_strategy", SearchStrategy(self.search_strategy))

		for name in ("n_nonterminals", "initial_rule_count", "max_seed_attempts", "num_runs", "pool_size"):
			if getattr(self, name) < 1:
				raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
		for name in ("max_steps", "max_swap_candidates_per_step", "max_neighbor_evaluations_per_step"):
			if getattr(self, name) < 0:
				raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
		if self.improvement_eps < 0:
			raise ValueError(f"improvement_eps must be >= 0, got {self.improvement_eps}")
		p = self.seed_inclusion_probability
		if p is not None and not 0.0 <= p <= 1.0:
			raise ValueError(f"seed_inclusion_probability must be in [0, 1], got {p}")

	@classmethod
	def defaults(cls) -> 'SearchConfig':
		return cls()

	def with_strategy(self, strategy: SearchStrategy) -> 'SearchConfig':
		"""Copy of this config using another acceptance strategy."""
		return replace(self, search_strategy=strategy)

	def seed_for_run(self, run_index: int) -> int:
		"""Deterministic seed of the run at 0-based run_index."""
		return self.base_seed + run_index

	def serialize(self) -> dict[str, Any]:
		data = {f.name: getattr(self, f.name) for f in fields(self)}
		data["search_strategy"] = self.search_strategy.name
		return data

	@classmethod
	def deserialize(cls, data: dict[str, Any]) -> 'SearchConfig':
		known = {f.name for f in fields(cls)}
		unknown = sorted(set(data) - known)
		if unknown:
			raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
		return cls(**data)

	@classmethod
	def from_file(cls, filepath: str) -> 'SearchConfig':
		"""Load a config saved with save(), dropping metadata."""
		config, _ = cls.load(filepath)
		return config
