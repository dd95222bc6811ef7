"""
Report rendering and persistence utilities.

Provides functions for rendering RunReport models to markdown and
JSON and saving them to disk.
"""

from __future__ import annotations

import json
from pathlib import Path
from string import Template
from typing import Any

from prompt_validator.models.report import ReportEntry, RunReport

REPORT_TEMPLATE = Template("""# Prompt Validation Report: ${run_id}

## Summary

| Item      | Value          |
| --------- | -------------- |
| Prompts   | ${total}       |
| Passed    | ${passed}      |
| Failed    | ${failed}      |
| Ungraded  | ${ungraded}    |
| Task Done | ${task_done}   |
| Started   | ${started_at}  |
| Finished  | ${finished_at} |

## Prompts

| # | Prompt | Tools | Task Done | Verdict | Reason |
| - | ------ | ----- | --------- | ------- | ------ |
${rows}
""")


def _cell(text: str | None, limit: int = 80) -> str:
	if not text:
		return ""
	flat = text.replace("\n", " ").replace("|", "\\|").strip()
	return flat if len(flat) <= limit else flat[:limit] + "..."


def _row(idx: int, entry: ReportEntry) -> str:
	r = entry.result
	tools = ", ".join(r.invoked_tool_names) or "-"
	if entry.grade:
		verdict = entry.grade.verdict.upper()
		reason = entry.grade.reason
	else:
		verdict = "UNGRADED"
		reason = entry.grading_error or r.failure_reason or ""
	if r.failure_reason and entry.grade:
		reason = f"{r.failure_reason}; {reason}"
	return (f"| {idx} | {_cell(r.prompt.text, 60)} | {_cell(tools, 40)} "
	        f"| {'yes' if r.task_done else 'no'} | {verdict} | {_cell(reason)} |")


def render_report_md(report: RunReport) -> str:
	"""
	Render a markdown summary from a RunReport.

	Parameters:
		report: The report to render.

	Returns:
		Rendered markdown string.
	"""
	s = report.summary
	rows = "\n".join(
	    _row(i, e) for i, e in enumerate(report.entries, start=1))
	return REPORT_TEMPLATE.safe_substitute(
	    run_id=report.run_id,
	    total=s.total,
	    passed=s.passed,
	    failed=s.failed,
	    ungraded=s.ungraded,
	    task_done=s.task_done,
	    started_at=report.started_at.isoformat() if report.started_at else "",
	    finished_at=report.finished_at.isoformat()
	    if report.finished_at else "",
	    rows=rows,
	)


def report_document(report: RunReport) -> dict[str, Any]:
	"""Structured document: run metadata, summary and one record per prompt."""
	return {
	    "run_id": report.run_id,
	    "started_at":
	    report.started_at.isoformat() if report.started_at else None,
	    "finished_at":
	    report.finished_at.isoformat() if report.finished_at else None,
	    "summary": report.summary.model_dump(),
	    "records": report.to_records(),
	}


def save_report_json(path: Path | str, report: RunReport) -> None:
	"""Persist the structured report document, ensuring parent directories."""
	Path(path).parent.mkdir(parents=True, exist_ok=True)
	Path(path).write_text(
	    json.dumps(report_document(report), indent=2, default=str),
	    encoding="utf-8")


def save_report_md(path: Path | str, report: RunReport) -> None:
	"""Persist the markdown rendition, ensuring parent directories."""
	Path(path).parent.mkdir(parents=True, exist_ok=True)
	Path(path).write_text(render_report_md(report), encoding="utf-8")


__all__ = [
    "render_report_md",
    "report_document",
    "save_report_json",
    "save_report_md",
]
