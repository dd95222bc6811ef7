"""
Run report models.

Defines the per-prompt ReportEntry pairing a raw PromptResult with its
optional Grade, and the RunReport snapshot whose summary counts are
always derived from its entries.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .grade import Grade
from .result import PromptResult


class ReportEntry(BaseModel):
	"""A prompt result plus its grade, if one was produced."""

	model_config = ConfigDict(frozen=True)

	result: PromptResult
	grade: Grade | None = None
	grading_error: str | None = Field(
	    default=None,
	    description="Why grading was attempted but produced no grade",
	)

	@property
	def graded(self) -> bool:
		return self.grade is not None

	def to_record(self) -> dict[str, Any]:
		"""Flatten into one structured record for report tooling."""
		r = self.result
		return {
		    "prompt": r.prompt.text,
		    "expected_tools": list(r.prompt.expected_tools),
		    "response_text": r.response_text,
		    "invocations": [inv.model_dump(mode="json") for inv in r.invocations],
		    "task_done": r.task_done,
		    "failure_reason": r.failure_reason,
		    "verdict": self.grade.verdict if self.grade else None,
		    "reason": self.grade.reason if self.grade else None,
		    "grading_error": self.grading_error,
		}


class ReportSummary(BaseModel):
	"""Tally of a run's entries."""

	total: int = 0
	passed: int = 0
	failed: int = 0
	ungraded: int = 0
	task_done: int = 0

	@classmethod
	def from_entries(cls, entries: Iterable[ReportEntry]) -> "ReportSummary":
		summary = cls()
		for entry in entries:
			summary.total += 1
			if entry.result.task_done:
				summary.task_done += 1
			if entry.grade is None:
				summary.ungraded += 1
			elif entry.grade.passed:
				summary.passed += 1
			else:
				summary.failed += 1
		return summary


class RunReport(BaseModel):
	"""Immutable snapshot of one run."""

	model_config = ConfigDict(frozen=True)

	run_id: str
	entries: tuple[ReportEntry, ...] = ()
	started_at: datetime | None = None
	finished_at: datetime | None = None

	@computed_field  # type: ignore[prop-decorator]
	@property
	def summary(self) -> ReportSummary:
		return ReportSummary.from_entries(self.entries)

	@property
	def ok(self) -> bool:
		"""True when every graded entry passed and no turn failed."""
		s = self.summary
		return s.failed == 0 and s.task_done == s.total

	def to_records(self) -> list[dict[str, Any]]:
		return [entry.to_record() for entry in self.entries]


__all__ = ["ReportEntry", "ReportSummary", "RunReport"]
