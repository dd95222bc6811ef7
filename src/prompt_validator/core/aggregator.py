"""
Run report aggregation.

Accumulates (result, grade) pairs as prompts complete and produces an
immutable RunReport when the run ends. Pure accumulation: it records
whatever it is handed and never raises.
"""

from __future__ import annotations

from datetime import datetime, timezone

from prompt_validator.models.grade import Grade
from prompt_validator.models.report import (
    ReportEntry,
    ReportSummary,
    RunReport,
)
from prompt_validator.models.result import PromptResult
from prompt_validator.utils.logging import get_logger

logger = get_logger(__name__)


class ReportAggregator:
	"""Append-only collection of one run's entries."""

	def __init__(self, run_id: str) -> None:
		self.run_id = run_id
		self._entries: list[ReportEntry] = []
		self._started_at = datetime.now(timezone.utc)
		self._report: RunReport | None = None

	@property
	def finalized(self) -> bool:
		return self._report is not None

	@property
	def entries(self) -> list[ReportEntry]:
		return list(self._entries)

	@property
	def summary(self) -> ReportSummary:
		"""Running tally, recomputed from the entries."""
		return ReportSummary.from_entries(self._entries)

	def add(
	    self,
	    result: PromptResult,
	    grade: Grade | None = None,
	    grading_error: str | None = None,
	) -> ReportEntry | None:
		"""Append one entry; ignored once the report is finalized."""
		if self._report is not None:
			logger.warning("run %s already finalized, dropping entry for %r",
			               self.run_id, result.prompt.text[:40])
			return None
		if grade is not None and not result.prompt.validate_response:
			logger.warning(
			    "run %s: dropping grade for prompt with validation disabled",
			    self.run_id)
			grade = None
		entry = ReportEntry(result=result, grade=grade,
		                    grading_error=grading_error)
		self._entries.append(entry)
		return entry

	def finalize(self) -> RunReport:
		"""Freeze the entries into a RunReport; repeated calls return it."""
		if self._report is None:
			self._report = RunReport(
			    run_id=self.run_id,
			    entries=tuple(self._entries),
			    started_at=self._started_at,
			    finished_at=datetime.now(timezone.utc),
			)
			s = self._report.summary
			logger.info(
			    "run %s finalized: total=%d passed=%d failed=%d ungraded=%d",
			    self.run_id, s.total, s.passed, s.failed, s.ungraded)
		return self._report


__all__ = ["ReportAggregator"]
