"""
Logging utilities for rule-subset search.

Provides:
- Logger: callable session logger writing timestamped lines to
  logs/YYYY/MM/DD/<name>_<timestamp>.log and optionally the console
- SearchLogger: level-aware wrapper used inside search components, either
  forwarding to a logger callable or to the standard logging module
- run_label: coloured "Run N" label so interleaved runs stay readable
"""

import os
import re
import logging
from datetime import datetime
from typing import Optional, Callable


RUN_COLORS = (
	"\033[34m",  # blue
	"\033[32m",  # green
	"\033[36m",  # cyan
	"\033[35m",  # magenta
	"\033[33m",  # yellow
)
ANSI_RESET = "\033[0m"
ANSI_PATTERN = re.compile(r"\033\[[0-9;]*m")


def run_label(run_number: int, color: bool = True) -> str:
	"""Label for a run, coloured by run number (cycling through RUN_COLORS)."""
	base = f"Run {run_number}"
	if not color:
		return base
	return f"{RUN_COLORS[(run_number - 1) % len(RUN_COLORS)]}{base}{ANSI_RESET}"


def dated_log_dir(root: str, when: Optional[datetime] = None) -> str:
	"""<root>/logs/YYYY/MM/DD"""
	when = when or datetime.now()
	return os.path.join(root, "logs", f"{when:%Y}", f"{when:%m}", f"{when:%d}")


class PlainFormatter(logging.Formatter):
	"""Drops terminal colour codes; log files stay greppable."""

	def format(self, record: logging.LogRecord) -> str:
		return ANSI_PATTERN.sub("", super().format(record))


class Logger:
	"""
	Session logger for a search batch, callable like print.

	Components that accept Callable[[str], None] take it directly, and
	LoggingProgressSink renders progress events through it. The console
	keeps the coloured run labels, the file gets the same lines without
	colour codes.

	Usage:
		with Logger("localsearch") as logger:
			logger.header("3 runs, FIRST_IMPROVEMENT")
			Orchestrator(problem_factory, config, sinks=[LoggingProgressSink(logger)], logger=logger).run()

	Attributes:
		name: Session name (prefix of the log filename)
		log_file: Path to the log file
	"""

	def __init__(
		self,
		name: str = "localsearch",
		log_dir: Optional[str] = None,
		console: bool = True,
		timestamp_format: str = '%H:%M:%S',
	):
		"""
		Args:
			name: Session name, e.g. "localsearch" or "strategy_comparison"
			log_dir: Directory for the log file (default: ./logs/YYYY/MM/DD/)
			console: Also echo every line to stderr
			timestamp_format: strftime format of the line prefix
		"""
		self.name = name
		log_dir = log_dir or dated_log_dir(os.getcwd())
		os.makedirs(log_dir, exist_ok=True)

		started = datetime.now().strftime("%Y%m%d_%H%M%S")
		self.log_file = os.path.join(log_dir, f"{name}_{started}.log")

		# One logging.Logger per session, detached from the root logger
		self._logger = logging.getLogger(f"rulesearch.session.{name}.{started}.{id(self):x}")
		self._logger.setLevel(logging.INFO)
		self._logger.propagate = False

		file_handler = logging.FileHandler(self.log_file)
		file_handler.setFormatter(PlainFormatter('%(asctime)s | %(message)s', datefmt=timestamp_format))
		self._logger.addHandler(file_handler)

		if console:
			console_handler = logging.StreamHandler()
			console_handler.setFormatter(logging.Formatter('%(asctime)s | %(message)s', datefmt=timestamp_format))
			self._logger.addHandler(console_handler)

	def __call__(self, message: str = "") -> None:
		self._logger.info(message)

	def header(self, title: str, char: str = "=", width: int = 70) -> None:
		"""Blank line, then the title between two rules."""
		rule = char * width
		self("")
		self(rule)
		self(f"  {title}")
		self(rule)

	def close(self) -> None:
		"""Close and detach all handlers (releases the log file)."""
		for handler in list(self._logger.handlers):
			handler.close()
			self._logger.removeHandler(handler)

	def __enter__(self) -> 'Logger':
		return self

	def __exit__(self, exc_type, exc, tb) -> None:
		self.close()

	def __repr__(self) -> str:
		return f"Logger(name='{self.name}', log_file='{self.log_file}')"


def create_logger(
	name: str = "localsearch",
	log_dir: Optional[str] = None,
	console: bool = True,
) -> Logger:
	"""Factory function to create a Logger instance."""
	return Logger(name=name, log_dir=log_dir, console=console)


class SearchLogger:
	"""
	Logger wrapper with DEBUG, INFO, WARNING and ERROR levels.

	When a logger callable is given (e.g. a Logger instance) every enabled
	message is forwarded to it; otherwise messages go to the standard
	logging module under "rulesearch.<name>".

	Usage:
		log = SearchLogger("NeighborSearcher", level=logging.INFO)
		log.debug("Candidate rejected...")
		log.info("Step complete")
	"""

	def __init__(
		self,
		name: str,
		level: int = logging.INFO,
		file_logger: Optional[Callable[[str], None]] = None,
	):
		# Level is per instance; the shared logging.Logger is left as configured
		self._logger = logging.getLogger(f"rulesearch.{name}")
		self._level = level
		self._name = name
		self._file_logger = file_logger

	@property
	def name(self) -> str:
		return self._name

	@property
	def level(self) -> int:
		return self._level

	def _emit(self, level: int, msg: str) -> None:
		if level < self._level:
			return
		if self._file_logger:
			self._file_logger(msg)
		else:
			self._logger.log(level, msg)

	def debug(self, msg: str) -> None:
		self._emit(logging.DEBUG, msg)

	def info(self, msg: str) -> None:
		self._emit(logging.INFO, msg)

	def warning(self, msg: str) -> None:
		self._emit(logging.WARNING, msg)

	def error(self, msg: str) -> None:
		self._emit(logging.ERROR, msg)

	def __call__(self, msg: str) -> None:
		"""Default: INFO level (print-style logging)."""
		self.info(msg)

	def set_level(self, level: int) -> None:
		self._level = level
