"""
Sequential prompt execution against one target session.

Each prompt is submitted, its reply is waited on until stable, and the
tool invocations of that turn are collected into a PromptResult.
Per-prompt failures are recorded on the result and the run moves on;
only cancellation stops the remaining prompts.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence

from prompt_validator.core.collector import ToolCallCollector
from prompt_validator.core.context import RunContext
from prompt_validator.core.stabilizer import wait_for_stable_text
from prompt_validator.errors import (
    RunCancelled,
    SourceUnavailable,
    TimeoutExceeded,
)
from prompt_validator.models.config import Config
from prompt_validator.models.invocation import ToolInvocation
from prompt_validator.models.prompt_spec import PromptSpec
from prompt_validator.models.result import (
    CANCELLED_REASON,
    NOT_STABILIZED_REASON,
    PromptResult,
)
from prompt_validator.utils.logging import get_logger
from prompt_validator.utils.protocols import TargetProtocol

logger = get_logger(__name__)

ResultCallback = Callable[[PromptResult], Awaitable[None]]


def _preview(text: str, limit: int = 60) -> str:
	flat = text.replace("\n", " ").strip()
	return flat if len(flat) <= limit else flat[:limit] + "..."


class PromptRunner:
	"""Run a scripted prompt sequence, strictly one prompt at a time."""

	def __init__(
	    self,
	    target: TargetProtocol,
	    config: Config,
	    context: RunContext,
	    collector: ToolCallCollector | None = None,
	    *,
	    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
	) -> None:
		self.target = target
		self.config = config
		self.context = context
		self._sleep = sleep
		self.collector = collector or ToolCallCollector(
		    target,
		    marker_timeout=config.marker_timeout_seconds,
		    poll_interval=min(config.sample_interval_seconds, 0.5),
		    clock=context.clock,
		    sleep=sleep,
		)

	async def run(
	    self,
	    prompts: Sequence[PromptSpec],
	    on_result: ResultCallback | None = None,
	) -> list[PromptResult]:
		"""
		Execute prompts in order and return one result per attempted prompt.

		Parameters:
			prompts: Scripted prompts for this run.
			on_result: Awaited with each result as soon as it is produced.

		Returns:
			Results for every prompt started before cancellation.
		"""
		ctx = self.context
		results: list[PromptResult] = []
		total = len(prompts)
		for index, prompt in enumerate(prompts):
			if ctx.is_cancelled():
				logger.info("run %s cancelled, skipping %d remaining prompt(s)",
				            ctx.run_id, total - index)
				break
			ctx.emit(f"prompt_started {index + 1}/{total}: {_preview(prompt.text)}")
			result = await self.run_prompt(prompt)
			results.append(result)
			if result.failure_reason:
				ctx.emit(f"prompt_failed {index + 1}/{total}: {result.failure_reason}")
			else:
				ctx.emit(f"prompt_completed {index + 1}/{total}")
			if on_result:
				await on_result(result)
			if result.cancelled:
				logger.info("run %s cancelled during prompt %d/%d", ctx.run_id,
				            index + 1, total)
				break
		return results

	async def run_prompt(self, prompt: PromptSpec) -> PromptResult:
		"""Execute a single prompt turn; never raises for per-prompt errors."""
		ctx = self.context
		cfg = self.config
		try:
			await self.collector.checkpoint()
		except SourceUnavailable as exc:
			logger.warning("run %s: %s", ctx.run_id, exc)
			return self._failed(prompt, f"source unavailable: {exc}")

		try:
			await asyncio.wait_for(self.target.submit(prompt.text),
			                       timeout=cfg.submit_timeout_seconds)
		except asyncio.TimeoutError:
			logger.warning("run %s: submit timed out after %ss", ctx.run_id,
			               cfg.submit_timeout_seconds)
			return self._failed(
			    prompt,
			    f"submit failed: timed out after {cfg.submit_timeout_seconds:g}s")
		except Exception as exc:
			logger.warning("run %s: submit failed: %s", ctx.run_id, exc)
			logger.debug("submit failure detail", exc_info=True)
			return self._failed(prompt, f"submit failed: {exc}")

		response_text = ""
		failure: str | None = None
		try:
			response_text = await wait_for_stable_text(
			    self.target.sample_reply_text,
			    interval=cfg.sample_interval_seconds,
			    repeat_count=cfg.stable_repeat_count,
			    timeout=cfg.stabilize_timeout_seconds,
			    is_cancelled=ctx.is_cancelled,
			    is_settled=getattr(self.target, "is_idle", None),
			    clock=ctx.clock,
			    sleep=self._sleep,
			)
		except TimeoutExceeded as exc:
			logger.warning("run %s: %s", ctx.run_id, exc)
			response_text = exc.partial_text or ""
			failure = NOT_STABILIZED_REASON
		except SourceUnavailable as exc:
			logger.warning("run %s: %s", ctx.run_id, exc)
			failure = f"source unavailable: {exc}"
		except RunCancelled as exc:
			response_text = exc.partial_text or ""
			failure = CANCELLED_REASON

		invocations: list[ToolInvocation] = self.collector.invocations
		if failure != CANCELLED_REASON:
			try:
				invocations = await self.collector.collect(
				    is_cancelled=ctx.is_cancelled)
			except RunCancelled:
				invocations = self.collector.invocations
				failure = CANCELLED_REASON
			except SourceUnavailable as exc:
				logger.warning("run %s: %s", ctx.run_id, exc)
				failure = failure or f"source unavailable: {exc}"

		return PromptResult(
		    prompt=prompt,
		    response_text=response_text,
		    invocations=tuple(invocations),
		    task_done=failure is None,
		    failure_reason=failure,
		)

	@staticmethod
	def _failed(prompt: PromptSpec, reason: str) -> PromptResult:
		return PromptResult(prompt=prompt, task_done=False,
		                    failure_reason=reason)


__all__ = ["PromptRunner", "ResultCallback"]
