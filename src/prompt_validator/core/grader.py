"""
Hybrid grading of prompt results.

The external judge decides whether a reply satisfies the prompt, but
whether the expected tools were called is a checkable fact: a tool
mismatch forces a fail whatever the judge says.
"""

from __future__ import annotations

import asyncio
from typing import Sequence

from pydantic import ValidationError

from prompt_validator.errors import JudgmentUnavailable
from prompt_validator.models.grade import Grade, Judgment
from prompt_validator.models.result import PromptResult
from prompt_validator.utils.logging import get_logger
from prompt_validator.utils.protocols import JudgmentProtocol

logger = get_logger(__name__)


def check_tool_match(expected: Sequence[str],
                     result: PromptResult) -> tuple[bool, str]:
	"""
	Compare expected tool names with the tools actually invoked.

	Parameters:
		expected: Tool names the prompt expects.
		result: The turn's result.

	Returns:
		(matched, message) where message explains a mismatch and is
		empty on a match.
	"""
	expected_set = set(expected)
	actual = result.invoked_tool_names
	actual_set = set(actual)
	if expected_set == actual_set:
		return True, ""
	parts = [
	    f"tool mismatch: expected [{', '.join(sorted(expected_set))}]"
	    f" but got [{', '.join(actual) or 'none'}]"
	]
	missing = sorted(expected_set - actual_set)
	unexpected = sorted(actual_set - expected_set)
	if missing:
		parts.append(f"missing: {', '.join(missing)}")
	if unexpected:
		parts.append(f"unexpected: {', '.join(unexpected)}")
	return False, "; ".join(parts)


class Grader:
	"""Produce a Grade for a PromptResult using an injected judge."""

	def __init__(self, judge: JudgmentProtocol, *,
	             timeout: float = 120.0) -> None:
		self._judge = judge
		self._timeout = timeout

	async def _call_judge(self, result: PromptResult) -> Judgment:
		spec = result.prompt
		try:
			raw = await asyncio.wait_for(
			    self._judge.judge(
			        spec.text,
			        list(spec.expected_tools),
			        result.response_text,
			        list(result.invocations),
			    ),
			    timeout=self._timeout,
			)
		except JudgmentUnavailable:
			raise
		except asyncio.TimeoutError as exc:
			raise JudgmentUnavailable(
			    f"judgment timed out after {self._timeout:g}s") from exc
		except Exception as exc:
			raise JudgmentUnavailable(f"judgment call failed: {exc}") from exc
		if isinstance(raw, Judgment):
			return raw
		try:
			return Judgment.model_validate(raw)
		except ValidationError as exc:
			raise JudgmentUnavailable(
			    f"judgment response invalid: {exc}") from exc

	async def grade(self, result: PromptResult) -> Grade | None:
		"""
		Grade one result.

		Parameters:
			result: The turn to grade.

		Returns:
			A Grade, or None when the prompt opts out of validation.

		Raises:
			JudgmentUnavailable: The judge failed and no deterministic
				tool mismatch decides the verdict on its own.
		"""
		spec = result.prompt
		if not spec.validate_response:
			return None

		tools_ok, mismatch = True, ""
		if spec.expected_tools:
			tools_ok, mismatch = check_tool_match(spec.expected_tools, result)

		try:
			judgment = await self._call_judge(result)
		except JudgmentUnavailable as exc:
			if tools_ok:
				raise
			logger.warning("judge unavailable, tool mismatch decides: %s", exc)
			return Grade(
			    verdict="fail",
			    reason=f"{mismatch}; judgment unavailable: {exc}",
			    task_done=False,
			)

		if not tools_ok:
			if judgment.verdict == "pass":
				logger.info("judge passed a turn with %s", mismatch)
			return Grade(
			    verdict="fail",
			    reason=f"{mismatch}; judge: {judgment.reason}",
			    task_done=False,
			)

		task_done = (judgment.task_done if judgment.task_done is not None else
		             result.task_done)
		return Grade(verdict=judgment.verdict, reason=judgment.reason,
		             task_done=task_done)


__all__ = ["Grader", "check_tool_match"]
