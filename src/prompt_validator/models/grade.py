"""
Grading models.

Defines the Judgment returned by the external judgment capability
and the Grade the grader attaches to a prompt result.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Verdict = Literal["pass", "fail"]


class Judgment(BaseModel):
	"""Verdict returned by the external judge for one turn."""

	verdict: Verdict
	reason: str = ""
	task_done: bool | None = Field(
	    default=None,
	    description="Judge's opinion on whether the task was completed",
	)

	@field_validator("verdict", mode="before")
	@classmethod
	def normalize_verdict(cls, v: Any) -> Any:
		if isinstance(v, str):
			return v.strip().lower()
		return v


class Grade(BaseModel):
	"""Pass/fail verdict with rationale attached to one prompt's result."""

	model_config = ConfigDict(frozen=True)

	verdict: Verdict
	reason: str
	task_done: bool

	@property
	def passed(self) -> bool:
		return self.verdict == "pass"


__all__ = ["Verdict", "Judgment", "Grade"]
