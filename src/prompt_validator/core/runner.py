"""
Main orchestrator for validation runs.

A run is one prompt file executed against one target session. Runs
are independent and may execute concurrently; each owns its context,
prompt runner, collector, aggregator and target.
"""

from __future__ import annotations

import asyncio
from typing import Sequence

from prompt_validator.core.aggregator import ReportAggregator
from prompt_validator.core.context import ProgressCallback, RunContext
from prompt_validator.core.grader import Grader
from prompt_validator.core.judge import CopilotJudge
from prompt_validator.core.prompt_runner import PromptRunner
from prompt_validator.errors import JudgmentUnavailable
from prompt_validator.integrations.copilot_client import create_client
from prompt_validator.integrations.copilot_target import CopilotTarget
from prompt_validator.loaders.prompt_specs import load_prompt_specs
from prompt_validator.models.config import Config
from prompt_validator.models.prompt_spec import PromptSpec
from prompt_validator.models.report import RunReport
from prompt_validator.models.result import PromptResult
from prompt_validator.models.run_params import RunParams
from prompt_validator.ui.reporting import save_report_json, save_report_md
from prompt_validator.utils.logging import get_logger
from prompt_validator.utils.protocols import TargetProtocol

logger = get_logger(__name__)


async def run_suite(
    run_id: str,
    prompts: Sequence[PromptSpec],
    target: TargetProtocol,
    config: Config,
    grader: Grader | None = None,
    context: RunContext | None = None,
    runner: PromptRunner | None = None,
) -> RunReport:
	"""
	Execute one prompt sequence, grade each turn, and build the report.

	Parameters:
		run_id: Identifier for this run.
		prompts: Scripted prompts, executed in order.
		target: Session under test.
		config: Application configuration.
		grader: Grader to apply; None leaves every entry ungraded.
		context: Run context; created from config when omitted.
		runner: Prompt runner; created from target/config when omitted.

	Returns:
		Finalized RunReport, even when every prompt failed.
	"""
	ctx = context or RunContext.create(run_id, config.run_timeout_seconds)
	aggregator = ReportAggregator(run_id)
	runner = runner or PromptRunner(target, config, ctx)

	async def on_result(result: PromptResult) -> None:
		grade = None
		grading_error = None
		# a cancelled run makes no further external calls
		if grader and not result.cancelled:
			try:
				grade = await grader.grade(result)
			except JudgmentUnavailable as exc:
				logger.warning("run %s: prompt left ungraded: %s", run_id, exc)
				grading_error = str(exc)
		aggregator.add(result, grade, grading_error)
		if grade:
			ctx.emit(f"graded {grade.verdict}: {grade.reason[:120]}")
		elif grading_error:
			ctx.emit(f"grading_error: {grading_error}")

	logger.info("run %s start prompts=%d", run_id, len(prompts))
	ctx.emit("run_started")
	await runner.run(prompts, on_result=on_result)
	report = aggregator.finalize()
	ctx.emit("run_cancelled" if ctx.is_cancelled() else "run_completed")
	return report


def failed_report(run_id: str, prompts: Sequence[PromptSpec],
                  reason: str) -> RunReport:
	"""Report for a run whose target never became usable."""
	aggregator = ReportAggregator(run_id)
	for prompt in prompts:
		aggregator.add(
		    PromptResult(prompt=prompt, task_done=False,
		                 failure_reason=reason))
	return aggregator.finalize()


def persist_report(config: Config, report: RunReport) -> None:
	"""Write the JSON and markdown renditions of a report."""
	out = config.output_path
	save_report_json(out / f"report-{report.run_id}.json", report)
	save_report_md(out / f"report-{report.run_id}.md", report)


async def run_all(
    config: Config,
    run_params: RunParams,
    progress_cb: ProgressCallback | None = None,
) -> list[RunReport]:
	"""
	Run every prompt file concurrently, one Copilot session each.

	Parameters:
		config: Application configuration.
		run_params: Validated run parameters.
		progress_cb: Optional progress callback.

	Returns:
		One RunReport per prompt file, in argument order.
	"""
	run_ids = run_params.run_ids
	suites = [load_prompt_specs(p) for p in run_params.prompt_files]
	logger.info("run_all start runs=%d", len(suites))

	client = create_client(config)
	await client.start()
	try:
		grader = (Grader(CopilotJudge(client, config),
		                 timeout=config.judge_timeout_seconds)
		          if config.judge_enabled else None)
		sem = asyncio.Semaphore(config.max_parallel_runs or len(suites))

		async def run_one(run_id: str, prompts: list[PromptSpec]) -> RunReport:
			async with sem:
				ctx = RunContext.create(run_id, config.run_timeout_seconds,
				                        progress_cb)
				try:
					target = await CopilotTarget.open(client, config,
					                                  label=run_id)
				except Exception as exc:
					logger.error("run %s: target session unavailable: %s",
					             run_id, exc)
					ctx.emit(f"run_failed: {exc}")
					return failed_report(run_id, prompts,
					                     f"source unavailable: {exc}")
				try:
					return await run_suite(run_id, prompts, target, config,
					                       grader, ctx)
				finally:
					await target.close()

		raw = await asyncio.gather(
		    *(run_one(rid, prompts) for rid, prompts in zip(run_ids, suites)),
		    return_exceptions=True,
		)
	finally:
		await client.stop()

	reports: list[RunReport] = []
	for run_id, prompts, res in zip(run_ids, suites, raw):
		if isinstance(res, BaseException):
			logger.error("run %s crashed: %s", run_id, res)
			res = failed_report(run_id, prompts, f"run failed: {res}")
		persist_report(config, res)
		reports.append(res)
	logger.info("run_all done runs=%d", len(reports))
	return reports


__all__ = ["run_suite", "run_all", "failed_report", "persist_report"]
