from __future__ import annotations

from pathlib import Path
from typing import Any, TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_core.core_schema import ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

if TYPE_CHECKING:
	from .run_params import RunParams


def load_env(env_file: str | Path | None = None) -> None:
	"""Load environment variables from an `.env` file if present."""
	env_path = Path(env_file) if env_file else Path(".env")
	if env_path.exists():
		load_dotenv(env_path)


class Config(BaseSettings):
	"""Runtime configuration loaded from environment variables."""

	model_config = SettingsConfigDict(env_prefix="", case_sensitive=False)

	cli_url: str | None = Field(
	    default=None,
	    alias="COPILOT_CLI_URL",
	    description=
	    "External Copilot CLI server URL. If unset, spawns native CLI via stdio.",
	)
	model: str = Field(
	    "Claude Sonnet 4.5",
	    alias="COPILOT_MODEL",
	    description="Model driving the agent under test",
	)
	judge_model: str | None = Field(
	    default=None,
	    alias="JUDGE_MODEL",
	    description="Model used for grading (default=COPILOT_MODEL)",
	)
	github_token: str | None = Field(
	    default=None,
	    alias="GITHUB_TOKEN",
	    description="GitHub token for Copilot authentication",
	)
	log_level: str = Field("info", alias="LOG_LEVEL",
	                       description="Log level for app and Copilot client")
	sample_interval_seconds: float = Field(
	    1.0,
	    alias="SAMPLE_INTERVAL_SECONDS",
	    description="Delay between reply-text samples",
	)
	stable_repeat_count: int = Field(
	    3,
	    alias="STABLE_REPEAT_COUNT",
	    description="Identical consecutive samples required for stabilization",
	)
	stabilize_timeout_seconds: float = Field(
	    120,
	    alias="STABILIZE_TIMEOUT_SECONDS",
	    description="Overall timeout waiting for a reply to stabilize",
	)
	marker_timeout_seconds: float = Field(
	    30,
	    alias="MARKER_TIMEOUT_SECONDS",
	    description="Per-marker timeout waiting for a tool result",
	)
	submit_timeout_seconds: float = Field(
	    30,
	    alias="SUBMIT_TIMEOUT_SECONDS",
	    description="Timeout for submitting a prompt to the target",
	)
	judge_timeout_seconds: float = Field(
	    120,
	    alias="JUDGE_TIMEOUT_SECONDS",
	    description="Timeout for one judgment call",
	)
	run_timeout_seconds: float | None = Field(
	    default=None,
	    alias="RUN_TIMEOUT_SECONDS",
	    description="Overall run deadline; remaining prompts are skipped",
	)
	max_parallel_runs: int | None = Field(
	    default=None,
	    alias="MAX_PARALLEL_RUNS",
	    description="Maximum concurrent runs (default=number of prompt files)",
	)
	judge_enabled: bool = Field(
	    True,
	    alias="JUDGE_ENABLED",
	    description="Grade responses with the external judge",
	)
	show_invocations: bool = Field(
	    False,
	    alias="SHOW_INVOCATIONS",
	    description="Show per-prompt tool invocations in the summary",
	)
	output_dir: str = Field("reports", alias="OUTPUT_DIR",
	                        description="Directory for run reports")

	@field_validator("sample_interval_seconds", "stable_repeat_count",
	                 "stabilize_timeout_seconds", "marker_timeout_seconds",
	                 "submit_timeout_seconds", "judge_timeout_seconds",
	                 "run_timeout_seconds", "max_parallel_runs")
	@classmethod
	def validate_positive(cls, v: Any, info: ValidationInfo) -> Any:
		if v is None:
			return v
		if float(v) <= 0:
			raise ValueError(f"{info.field_name} must be > 0")
		return v

	@property
	def use_native_cli(self) -> bool:
		"""Return True when using native stdio mode (no external server)."""
		return not self.cli_url

	@property
	def output_path(self) -> Path:
		return Path(self.output_dir)

	@property
	def effective_judge_model(self) -> str:
		return self.judge_model or self.model

	def apply_overrides(self, run_params: "RunParams") -> None:
		"""Apply CLI overrides from RunParams onto this config.

		Only non-None fields in run_params are applied, preserving
		environment-based defaults for anything the user didn't set.

		Parameters:
			run_params: Validated run parameters with optional overrides.
		"""
		overrides: list[tuple[str, str]] = [
		    ("run_timeout", "run_timeout_seconds"),
		    ("stabilize_timeout", "stabilize_timeout_seconds"),
		    ("marker_timeout", "marker_timeout_seconds"),
		    ("judge_timeout", "judge_timeout_seconds"),
		    ("judge", "judge_enabled"),
		    ("show_invocations", "show_invocations"),
		]
		for param_field, config_field in overrides:
			value = getattr(run_params, param_field)
			if value is not None:
				setattr(self, config_field, value)


__all__ = ["Config", "load_env"]
