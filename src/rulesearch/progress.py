"""
Progress reporting for search runs.

Runs never do I/O themselves. Each run appends structured events to its own
RunEventChannel; all channels feed one queue that a single
ProgressDispatcher thread drains, forwarding events in arrival order to the
configured sinks (console/log text, CSV, ...).

	channel = dispatcher.channel(run_number=1)
	channel.emit(StepCompleted(...))     # from the worker thread
	...
	dispatcher.close()                   # drains what is left, stops the thread

Also provides ScoreTrajectory, the per-run record of adopted scores.
"""

import csv
import logging
import math
import os
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Optional, Union

from rulesearch.logger import run_label

_log = logging.getLogger("rulesearch.progress")


# =============================================================================
# Events
# =============================================================================

@dataclass(frozen=True)
class RunStarted:
	run_number: int
	total_runs: int
	seed: int


@dataclass(frozen=True)
class SeedFound:
	run_number: int
	attempt: int
	grammar_size: int
	score: float


@dataclass(frozen=True)
class StepCompleted:
	"""
	One neighbor-search step. When improved is False, grammar_size/score are
	those of the unchanged current state.
	"""
	run_number: int
	step: int
	improved: bool
	evaluated: int
	improvement_index: int
	previous_grammar_size: int
	previous_score: float
	grammar_size: int
	score: float
	log_step: bool = True


@dataclass(frozen=True)
class RunCompleted:
	run_number: int
	seed: int
	steps_taken: int
	total_neighbors_evaluated: int
	best_size: int
	best_score: float


@dataclass(frozen=True)
class RunFailed:
	run_number: int
	seed: int
	message: str


@dataclass(frozen=True)
class BatchSummary:
	completed: tuple[RunCompleted, ...]
	failed: tuple[RunFailed, ...]
	best: Optional[RunCompleted]


ProgressEvent = Union[RunStarted, SeedFound, StepCompleted, RunCompleted, RunFailed, BatchSummary]


# =============================================================================
# Sinks
# =============================================================================

class ProgressSink:
	"""
	Receives progress events. Subclasses override the hooks they care about.
	Called from the dispatcher thread only.
	"""

	def handle(self, event: ProgressEvent) -> None:
		if isinstance(event, RunStarted):
			self.on_run_started(event)
		elif isinstance(event, SeedFound):
			self.on_seed_found(event)
		elif isinstance(event, StepCompleted):
			self.on_step(event)
		elif isinstance(event, RunCompleted):
			self.on_run_completed(event)
		elif isinstance(event, RunFailed):
			self.on_run_failed(event)
		elif isinstance(event, BatchSummary):
			self.on_summary(event)

	def on_run_started(self, event: RunStarted) -> None:
		pass

	def on_seed_found(self, event: SeedFound) -> None:
		pass

	def on_step(self, event: StepCompleted) -> None:
		pass

	def on_run_completed(self, event: RunCompleted) -> None:
		pass

	def on_run_failed(self, event: RunFailed) -> None:
		pass

	def on_summary(self, event: BatchSummary) -> None:
		pass

	def close(self) -> None:
		pass


class LoggingProgressSink(ProgressSink):
	"""
	Renders events as text lines through a logger callable (Logger, print, ...).

	The log lines look like:
		Run 1 step 3: size 12 -> 11, bits/base 2.1043 -> 2.0871 (evaluated 14, improvement at #9)
	"""

	def __init__(self, logger: Optional[Callable[[str], None]] = None, color: bool = True):
		self._log = logger or print
		self._color = color

	def _label(self, run_number: int) -> str:
		return run_label(run_number, color=self._color)

	def on_run_started(self, event: RunStarted) -> None:
		self._log(f"{self._label(event.run_number)}/{event.total_runs} starting (seed={event.seed})")

	def on_seed_found(self, event: SeedFound) -> None:
		self._log(
			f"{self._label(event.run_number)} seed found after {event.attempt} attempts: "
			f"size={event.grammar_size} bits/base={event.score:.4f}"
		)

	def on_step(self, event: StepCompleted) -> None:
		if not event.log_step:
			return
		if event.improved:
			self._log(
				f"{self._label(event.run_number)} step {event.step}: "
				f"size {event.previous_grammar_size} -> {event.grammar_size}, "
				f"bits/base {event.previous_score:.4f} -> {event.score:.4f} "
				f"(evaluated {event.evaluated}, improvement at #{event.improvement_index})"
			)
		else:
			self._log(
				f"{self._label(event.run_number)} step {event.step}: no improving neighbor "
				f"(size={event.grammar_size}, bits/base={event.score:.4f}, evaluated {event.evaluated})"
			)

	def on_run_completed(self, event: RunCompleted) -> None:
		self._log(
			f"{self._label(event.run_number)} completed: steps={event.steps_taken}, "
			f"neighbors={event.total_neighbors_evaluated}, size={event.best_size}, "
			f"bits/base={event.best_score:.4f}"
		)

	def on_run_failed(self, event: RunFailed) -> None:
		self._log(f"{self._label(event.run_number)} failed (seed={event.seed}): {event.message}")

	def on_summary(self, event: BatchSummary) -> None:
		self._log("")
		self._log("=== Run summary ===")
		for run in event.completed:
			self._log(
				f"Run {run.run_number}: seed={run.seed} steps={run.steps_taken} "
				f"neighbors={run.total_neighbors_evaluated} size={run.best_size} "
				f"bits/base={run.best_score:.4f}"
			)
		for run in event.failed:
			self._log(f"Run {run.run_number}: FAILED ({run.message})")
		if event.best is not None:
			self._log(
				f"Best overall: run {event.best.run_number} (seed={event.best.seed}) "
				f"size={event.best.best_size} bits/base={event.best.best_score:.4f}"
			)
		else:
			self._log("No successful runs.")


class CsvProgressSink(ProgressSink):
	"""
	Writes one CSV row per seed and per step:
		Run,Step,BitsPerBase,GrammarSize,NeighborsEvaluated

	The seed is written as step 0 with 0 neighbors evaluated.
	"""

	HEADER = ("Run", "Step", "BitsPerBase", "GrammarSize", "NeighborsEvaluated")

	def __init__(self, path: str):
		self.path = path
		parent = os.path.dirname(path)
		if parent:
			os.makedirs(parent, exist_ok=True)
		self._file = open(path, "w", newline="")
		self._writer = csv.writer(self._file)
		self._writer.writerow(self.HEADER)
		self._file.flush()

	@classmethod
	def create(cls, results_dir: str = "results") -> 'CsvProgressSink':
		"""Timestamped file results/localsearch_YYYYMMDD_HHMMSS.csv."""
		timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
		return cls(os.path.join(results_dir, f"localsearch_{timestamp}.csv"))

	def _row(self, run_number: int, step: int, score: float, size: int, evaluated: int) -> None:
		score_str = f"{score:.6f}" if math.isfinite(score) else str(score)
		self._writer.writerow((run_number, step, score_str, size, evaluated))
		self._file.flush()

	def on_seed_found(self, event: SeedFound) -> None:
		self._row(event.run_number, 0, event.score, event.grammar_size, 0)

	def on_step(self, event: StepCompleted) -> None:
		self._row(event.run_number, event.step, event.score, event.grammar_size, event.evaluated)

	@property
	def closed(self) -> bool:
		return self._file.closed

	def close(self) -> None:
		if not self._file.closed:
			self._file.close()


class CollectingProgressSink(ProgressSink):
	"""Keeps every event in arrival order (for tests and post-hoc inspection)."""

	def __init__(self):
		self.events: list[ProgressEvent] = []

	def handle(self, event: ProgressEvent) -> None:
		self.events.append(event)

	def of_type(self, event_type: type) -> list:
		return [e for e in self.events if isinstance(e, event_type)]


# =============================================================================
# Channels and dispatcher
# =============================================================================

_STOP = object()


class RunEventChannel:
	"""Append-only event channel owned by one run."""

	def __init__(self, run_number: int, sink_queue: Optional["queue.SimpleQueue"] = None):
		self.run_number = run_number
		self._queue = sink_queue

	def emit(self, event: ProgressEvent) -> None:
		if self._queue is not None:
			self._queue.put(event)

	@classmethod
	def null(cls, run_number: int = 0) -> 'RunEventChannel':
		"""Channel that drops every event."""
		return cls(run_number, None)


class ProgressDispatcher:
	"""
	Single consumer that drains all run channels and feeds the sinks.

	Usage:
		with ProgressDispatcher([LoggingProgressSink(logger)]) as dispatcher:
			channel = dispatcher.channel(run_number)
			...
	"""

	def __init__(self, sinks: Iterable[ProgressSink] = (), close_sinks: bool = True):
		self._sinks = list(sinks)
		self._close_sinks = close_sinks
		self._queue: "queue.SimpleQueue" = queue.SimpleQueue()
		self._thread = threading.Thread(target=self._drain, name="progress-dispatcher", daemon=True)
		self._thread.start()
		self._closed = False

	@property
	def sinks(self) -> list[ProgressSink]:
		return list(self._sinks)

	def channel(self, run_number: int) -> RunEventChannel:
		return RunEventChannel(run_number, self._queue)

	def emit(self, event: ProgressEvent) -> None:
		self._queue.put(event)

	def _drain(self) -> None:
		while True:
			event = self._queue.get()
			if event is _STOP:
				return
			for sink in self._sinks:
				try:
					sink.handle(event)
				except Exception:
					_log.exception(f"Progress sink {type(sink).__name__} failed on {type(event).__name__}")

	def close(self) -> None:
		"""Deliver every queued event and stop the thread; closes the sinks if it owns them."""
		if self._closed:
			return
		self._closed = True
		self._queue.put(_STOP)
		self._thread.join()
		if self._close_sinks:
			for sink in self._sinks:
				sink.close()

	def __enter__(self) -> 'ProgressDispatcher':
		return self

	def __exit__(self, exc_type, exc, tb) -> None:
		self.close()


# =============================================================================
# Score trajectory
# =============================================================================

@dataclass
class ScoreTrajectory:
	"""
	Scores adopted by one run: the seed at step 0, then each improvement.

	Lower is better; every recorded score must not exceed the previous one.
	"""
	points: list[tuple[int, float]] = field(default_factory=list)

	def record(self, step: int, score: float) -> None:
		if self.points and score > self.points[-1][1]:
			raise ValueError(
				f"Score increased at step {step}: {self.points[-1][1]:.6f} -> {score:.6f}"
			)
		self.points.append((step, score))

	@property
	def initial(self) -> Optional[float]:
		return self.points[0][1] if self.points else None

	@property
	def final(self) -> Optional[float]:
		return self.points[-1][1] if self.points else None

	@property
	def improvements(self) -> int:
		return max(0, len(self.points) - 1)

	def improvement_pct(self) -> float:
		"""Relative improvement from seed to final score, in percent."""
		if not self.points or not self.initial or not math.isfinite(self.initial):
			return 0.0
		return (self.initial - self.final) / self.initial * 100

	def as_tuple(self) -> tuple[tuple[int, float], ...]:
		return tuple(self.points)
