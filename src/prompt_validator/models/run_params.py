"""
Run parameters model.

Defines validated parameters for CLI invocation and run orchestration,
and derives filesystem-safe run identifiers from prompt file names.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_core.core_schema import ValidationInfo

SAFE_SLUG_RE = re.compile(r"[^A-Za-z0-9_.-]+")


class RunParams(BaseModel):
	"""Validated run parameters for CLI/runner.

	One run is executed per prompt file; each gets its own target
	session and report.
	"""

	prompt_files: list[Path] = Field(description="Prompt spec files")
	run_timeout: Optional[float] = Field(default=None,
	                                     description="Run deadline")
	stabilize_timeout: Optional[float] = Field(
	    default=None, description="Stabilization timeout")
	marker_timeout: Optional[float] = Field(default=None,
	                                        description="Per-marker timeout")
	judge_timeout: Optional[float] = Field(default=None,
	                                       description="Judge timeout")
	judge: Optional[bool] = Field(default=None,
	                              description="Enable/disable grading")
	show_invocations: Optional[bool] = Field(
	    default=None, description="Show tool invocations")

	@field_validator("prompt_files")
	@classmethod
	def validate_prompt_files(cls, v: list[Path]) -> list[Path]:
		if not v:
			raise ValueError("at least one prompt file is required")
		return v

	@field_validator("run_timeout", "stabilize_timeout", "marker_timeout",
	                 "judge_timeout")
	@classmethod
	def validate_positive(cls, v: Optional[float],
	                      info: ValidationInfo) -> Optional[float]:
		if v is None:
			return v
		if v <= 0:
			raise ValueError(f"{info.field_name} must be > 0")
		return v

	@staticmethod
	def _slugify(v: str) -> str:
		slug = SAFE_SLUG_RE.sub('_', v).strip('_')
		return slug or "run"

	@property
	def run_ids(self) -> list[str]:
		"""Return one unique, filesystem-safe run id per prompt file."""
		ids: list[str] = []
		for path in self.prompt_files:
			base = self._slugify(Path(path).stem)
			candidate = base
			n = 2
			while candidate in ids:
				candidate = f"{base}-{n}"
				n += 1
			ids.append(candidate)
		return ids


__all__ = ["RunParams"]
