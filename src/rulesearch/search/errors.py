"""Errors that may end a single search run."""


class SeedExhaustionError(RuntimeError):
	"""No parsable, finitely scored seed grammar was found within the attempt budget."""

	def __init__(self, attempts: int):
		super().__init__(f"Could not find a parsable seed grammar after {attempts} attempts")
		self.attempts = attempts


class SearchCancelledError(RuntimeError):
	"""The run was abandoned between two steps because a shutdown was requested."""

	def __init__(self, run_number: int, steps_completed: int):
		super().__init__(f"Run {run_number} cancelled after {steps_completed} steps")
		self.run_number = run_number
		self.steps_completed = steps_completed


class ProblemSetupError(RuntimeError):
	"""The problem factory raised before any run could start."""

	def __init__(self, cause: BaseException):
		super().__init__(f"Problem setup failed: {type(cause).__name__}: {cause}")
		self.cause = cause
