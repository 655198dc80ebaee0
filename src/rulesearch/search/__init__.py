"""
Hill-climbing local search over boolean rule masks.

Usage:
	from rulesearch.search import Orchestrator, SearchConfig, SearchStrategy

	config = SearchConfig(num_runs=4, search_strategy=SearchStrategy.BEST_IMPROVEMENT)
	batch = Orchestrator(problem_factory, config).run()
"""

from rulesearch.search.enums import SearchStrategy, MoveType, StopReason
from rulesearch.search.errors import SeedExhaustionError, SearchCancelledError, ProblemSetupError
from rulesearch.search.config import SearchConfig
from rulesearch.search.types import (
	SearchState,
	NeighborSearchOutcome,
	RunStats,
	RunResult,
	RunFailure,
	BatchResult,
)
from rulesearch.search.codec import RuleMaskCodec, RandomMaskGrammarGenerator, DEFAULT_INCLUSION_PROBABILITY
from rulesearch.search.moves import Move, MoveGenerator, apply_move
from rulesearch.search.acceptance import (
	AcceptanceStrategy,
	FirstImprovementStrategy,
	BestImprovementStrategy,
	AcceptanceStrategyFactory,
)
from rulesearch.search.evaluation import CandidateEvaluator
from rulesearch.search.neighbors import NeighborSearcher, IMPROVEMENT_EPS
from rulesearch.search.problem import SearchProblem, ProblemFactory, load_problem_factory
from rulesearch.search.loop import SearchLoop
from rulesearch.search.orchestrator import Orchestrator, best_result
from rulesearch.search.comparison import StrategyComparison, compare_strategies


__all__ = [
	# Enums and errors
	'SearchStrategy',
	'MoveType',
	'StopReason',
	'SeedExhaustionError',
	'SearchCancelledError',
	'ProblemSetupError',
	# Config and value types
	'SearchConfig',
	'SearchState',
	'NeighborSearchOutcome',
	'RunStats',
	'RunResult',
	'RunFailure',
	'BatchResult',
	# Components
	'RuleMaskCodec',
	'RandomMaskGrammarGenerator',
	'DEFAULT_INCLUSION_PROBABILITY',
	'Move',
	'MoveGenerator',
	'apply_move',
	'AcceptanceStrategy',
	'FirstImprovementStrategy',
	'BestImprovementStrategy',
	'AcceptanceStrategyFactory',
	'CandidateEvaluator',
	'NeighborSearcher',
	'IMPROVEMENT_EPS',
	# Runs
	'SearchProblem',
	'ProblemFactory',
	'load_problem_factory',
	'SearchLoop',
	'Orchestrator',
	'best_result',
	'StrategyComparison',
	'compare_strategies',
]
