"""rulesearch - local search over grammar rule subsets."""

from rulesearch.logger import Logger, create_logger, SearchLogger
from rulesearch.progress import (
	ProgressSink, LoggingProgressSink, CsvProgressSink, CollectingProgressSink,
	ProgressDispatcher, RunEventChannel, ScoreTrajectory,
)

__all__ = [
	'Logger', 'create_logger', 'SearchLogger',
	'ProgressSink', 'LoggingProgressSink', 'CsvProgressSink', 'CollectingProgressSink',
	'ProgressDispatcher', 'RunEventChannel', 'ScoreTrajectory',
]
