"""
Prompt Validator models.

This subpackage contains Pydantic models for configuration, prompt
specifications, tool invocations, per-prompt results, grades and
run reports.

Key models:
    - Config: Application configuration loaded from environment
    - RunParams: Parameters for a validation run
    - PromptSpec: One scripted prompt and its expectations
    - PromptResult: Raw outcome of one prompt turn
    - Grade: Pass/fail verdict attached to a result
    - RunReport: Immutable snapshot of a whole run
"""

from .config import Config, load_env
from .run_params import RunParams
from .prompt_spec import PromptSpec
from .invocation import (
    MarkerState,
    ToolMarker,
    ToolInvocation,
    UNRESOLVED_OUTPUT,
    UNPARSEABLE_OUTPUT,
    UNPARSEABLE_TOOL,
)
from .result import PromptResult, CANCELLED_REASON, NOT_STABILIZED_REASON
from .grade import Verdict, Judgment, Grade
from .report import ReportEntry, ReportSummary, RunReport

__all__ = [
    "Config",
    "load_env",
    "RunParams",
    "PromptSpec",
    "MarkerState",
    "ToolMarker",
    "ToolInvocation",
    "UNRESOLVED_OUTPUT",
    "UNPARSEABLE_OUTPUT",
    "UNPARSEABLE_TOOL",
    "PromptResult",
    "CANCELLED_REASON",
    "NOT_STABILIZED_REASON",
    "Verdict",
    "Judgment",
    "Grade",
    "ReportEntry",
    "ReportSummary",
    "RunReport",
]
