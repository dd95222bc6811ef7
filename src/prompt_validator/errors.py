"""
Error taxonomy for the validation pipeline.

Per-prompt errors are raised by the detector, collector and grader and
contained at the prompt runner boundary, where they become the
``failure_reason`` of a PromptResult or an ungraded report entry.
"""

from __future__ import annotations


class ValidationPipelineError(Exception):
	"""Base class for all pipeline errors."""


class SourceUnavailable(ValidationPipelineError):
	"""The target session cannot be sampled or queried at all."""


class TimeoutExceeded(ValidationPipelineError):
	"""A bounded wait elapsed before its condition was met.

	Attributes:
		partial_text: Last value observed before the timeout, if any.
	"""

	def __init__(self, message: str, partial_text: str | None = None) -> None:
		super().__init__(message)
		self.partial_text = partial_text


class MalformedInvocation(ValidationPipelineError):
	"""A tool marker could not be parsed into a ToolInvocation.

	Attributes:
		raw: The raw marker payload as reported by the target.
	"""

	def __init__(self, message: str, raw: object = None) -> None:
		super().__init__(message)
		self.raw = raw


class JudgmentUnavailable(ValidationPipelineError):
	"""The external judgment call failed or timed out."""


class RunCancelled(ValidationPipelineError):
	"""The run was cancelled (explicit signal or run-level deadline).

	Attributes:
		partial_text: Last value observed before cancellation, if any.
	"""

	def __init__(self, message: str = "cancelled",
	             partial_text: str | None = None) -> None:
		super().__init__(message)
		self.partial_text = partial_text


__all__ = [
    "ValidationPipelineError",
    "SourceUnavailable",
    "TimeoutExceeded",
    "MalformedInvocation",
    "JudgmentUnavailable",
    "RunCancelled",
]
