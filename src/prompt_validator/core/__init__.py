"""Core validation pipeline.

Key modules:
    - stabilizer: Wait for a streamed reply to stop changing
    - collector: Gather tool invocations made during a turn
    - prompt_runner: Execute scripted prompts sequentially
    - grader: Hybrid deterministic + judge grading
    - judge: Copilot-backed judgment capability
    - aggregator: Accumulate graded results into a RunReport
    - runner: Orchestrate one or more runs
"""

from prompt_validator.core.context import RunContext, ProgressCallback
from prompt_validator.core.stabilizer import wait_for_stable_text
from prompt_validator.core.collector import ToolCallCollector, parse_marker
from prompt_validator.core.prompt_runner import PromptRunner
from prompt_validator.core.grader import Grader, check_tool_match
from prompt_validator.core.judge import CopilotJudge, build_judge_prompt
from prompt_validator.core.aggregator import ReportAggregator
from prompt_validator.core.runner import run_suite, run_all

__all__ = [
    # context
    "RunContext",
    "ProgressCallback",
    # stabilizer
    "wait_for_stable_text",
    # collector
    "ToolCallCollector",
    "parse_marker",
    # prompt_runner
    "PromptRunner",
    # grader
    "Grader",
    "check_tool_match",
    # judge
    "CopilotJudge",
    "build_judge_prompt",
    # aggregator
    "ReportAggregator",
    # runner
    "run_suite",
    "run_all",
]
