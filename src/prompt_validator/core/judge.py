"""
Copilot-backed judgment capability.

Runs a short, non-streaming Copilot session per turn and parses the
JSON verdict from the reply. Any failure surfaces as
JudgmentUnavailable so the grader never invents a verdict.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Sequence

from pydantic import ValidationError

from prompt_validator.errors import JudgmentUnavailable
from prompt_validator.integrations.copilot_client import (
    build_session_config,
    destroy_session_safe,
    fetch_last_assistant_message,
)
from prompt_validator.loaders.prompts import load_prompt
from prompt_validator.models.config import Config
from prompt_validator.models.grade import Judgment
from prompt_validator.models.invocation import ToolInvocation
from prompt_validator.utils.logging import get_logger
from prompt_validator.utils.parsing import extract_json
from prompt_validator.utils.protocols import CopilotClientProtocol

logger = get_logger(__name__)

JUDGE_SYSTEM_MESSAGE = ("Respond ONLY with JSON in a fenced ```json``` block,"
                        " no prose. If uncertain, respond with"
                        ' {"verdict": "fail", "reason": "uncertain",'
                        ' "task_done": false}')

_MAX_FIELD_CHARS = 2000


def _clip(value: Any) -> str:
	text = value if isinstance(value, str) else json.dumps(value, default=str)
	if len(text) > _MAX_FIELD_CHARS:
		return text[:_MAX_FIELD_CHARS] + "...(truncated)"
	return text


def _format_invocations(invocations: Sequence[ToolInvocation]) -> str:
	if not invocations:
		return "(no tool calls)"
	lines = []
	for inv in invocations:
		lines.append(f"{inv.observed_at_offset + 1}. {inv.tool_name} "
		             f"[{inv.state.value}]\n   input: {_clip(inv.input)}\n"
		             f"   output: {_clip(inv.output)}")
	return "\n".join(lines)


def build_judge_prompt(
    instructions: str,
    prompt_text: str,
    expected_tools: Sequence[str],
    response_text: str,
    invocations: Sequence[ToolInvocation],
) -> str:
	"""Compose the full judge prompt for one turn."""
	expected = ", ".join(expected_tools) if expected_tools else "(none specified)"
	return (f"{instructions}\n\n## User prompt\n\n{prompt_text}\n\n"
	        f"## Expected tools\n\n{expected}\n\n"
	        f"## Tool calls made\n\n{_format_invocations(invocations)}\n\n"
	        f"## Agent reply\n\n{response_text or '(empty reply)'}\n")


class CopilotJudge:
	"""JudgmentProtocol implementation using a Copilot session per call."""

	def __init__(
	    self,
	    client: CopilotClientProtocol,
	    config: Config,
	    instructions: str | None = None,
	) -> None:
		self._client = client
		self._config = config
		self._instructions = instructions or load_prompt("judge_task.md")

	async def judge(
	    self,
	    prompt_text: str,
	    expected_tools: Sequence[str],
	    response_text: str,
	    invocations: Sequence[ToolInvocation],
	) -> Judgment:
		full_prompt = build_judge_prompt(self._instructions, prompt_text,
		                                 expected_tools, response_text,
		                                 invocations)
		raw: str | None = None
		session = None
		try:
			session = await self._client.create_session(
			    build_session_config(
			        model=self._config.effective_judge_model,
			        streaming=False,
			        system_message=JUDGE_SYSTEM_MESSAGE,
			    ))
			response = await session.send_and_wait(
			    {"prompt": full_prompt},
			    timeout=self._config.judge_timeout_seconds)
			if response and getattr(response, "data", None):
				raw = response.data.content
			if not raw:
				raw = await fetch_last_assistant_message(session)
		except asyncio.TimeoutError as exc:
			raise JudgmentUnavailable("judge session timed out") from exc
		except Exception as exc:
			logger.debug("judge session failed", exc_info=True)
			raise JudgmentUnavailable(f"judge session failed: {exc}") from exc
		finally:
			await destroy_session_safe(session, "judge")

		parsed = extract_json(raw)
		if not isinstance(parsed, dict):
			logger.warning("judge reply had no JSON verdict: %.200s", raw or "")
			raise JudgmentUnavailable("judge reply contained no JSON verdict")
		try:
			return Judgment.model_validate(parsed)
		except ValidationError as exc:
			raise JudgmentUnavailable(f"judge verdict invalid: {exc}") from exc


__all__ = ["CopilotJudge", "build_judge_prompt", "JUDGE_SYSTEM_MESSAGE"]
