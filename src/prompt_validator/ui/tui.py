"""
Terminal UI for run progress visualization.

Provides a Rich-based TUI showing each run's progress in real time and
a summary of the run reports once everything has finished.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from rich import box
from rich.console import Console, Group
from rich.live import Live
from rich.table import Table
from rich.text import Text

from prompt_validator.models.report import RunReport

_MAX_MESSAGES = 8


@dataclass
class RunDisplayState:
	"""State for a single run column in the TUI."""

	run_id: str
	status: str = "pending"  # pending|running|completed|cancelled|failed
	current_prompt: str | None = None
	passed: int = 0
	failed: int = 0
	messages: deque[str] = field(
	    default_factory=lambda: deque(maxlen=_MAX_MESSAGES))

	def add_message(self, msg: str) -> None:
		self.messages.append(msg)

	def render_cell(self) -> Text:
		text = Text()
		text.append(f"status: {self.status}\n", style="bold")
		if self.current_prompt:
			text.append(f"prompt: {self.current_prompt}\n", style="magenta")
		if self.passed or self.failed:
			text.append(f"pass: {self.passed} ", style="green")
			text.append(f"fail: {self.failed}\n", style="red")
		for msg in self.messages:
			clean = msg.strip()
			if "error" in clean.lower() or "failed" in clean.lower():
				text.append(f"• {clean}\n", style="red")
			elif clean.startswith("graded pass"):
				text.append(f"• {clean}\n", style="green")
			else:
				text.append(f"• {clean}\n", style="dim")
		return text


class TUI:
	"""
	Rich-based TUI for streaming run progress.

	Uses Rich's Live display with auto-refresh to update in place.
	"""

	def __init__(self, run_ids: Sequence[str],
	             console: Console | None = None):
		self.console = console or Console()
		self.run_ids = list(run_ids)
		self.states: dict[str, RunDisplayState] = {
		    rid: RunDisplayState(run_id=rid)
		    for rid in self.run_ids
		}
		self.live: Live | None = None

	def _build_table(self) -> Group:
		table = Table(box=box.ROUNDED, expand=True, show_header=True)
		for rid in self.run_ids:
			table.add_column(f"Run {rid}", min_width=30)
		table.add_row(*(self.states[rid].render_cell() for rid in self.run_ids))
		return Group(table)

	def __enter__(self):
		self.live = Live(
		    self._build_table(),
		    console=self.console,
		    refresh_per_second=4,
		)
		self.live.start()
		return self

	def __exit__(self, exc_type, exc, tb):
		if self.live:
			self.live.stop()

	def update(self, run_id: str, msg: str) -> None:
		"""Update state for a run and refresh display."""
		state = self.states.get(run_id)
		if not state:
			return

		if msg.startswith("run_started"):
			state.status = "running"
		elif msg.startswith("run_completed"):
			state.status = "completed"
			state.current_prompt = None
		elif msg.startswith("run_cancelled"):
			state.status = "cancelled"
		elif msg.startswith("run_failed"):
			state.status = "failed"

		if msg.startswith("prompt_started"):
			state.current_prompt = msg.split(" ", 1)[1] if " " in msg else None
		elif msg.startswith("graded pass"):
			state.passed += 1
		elif msg.startswith("graded fail"):
			state.failed += 1
		state.add_message(msg)

		if self.live:
			self.live.update(self._build_table())

	def finalize(self):
		"""Stop the live display."""
		if self.live:
			self.live.stop()

	def _render_report_table(self, report: RunReport,
	                         show_invocations: bool) -> Table:
		table = Table(
		    title=f"Run {report.run_id}",
		    box=box.ROUNDED,
		    expand=True,
		    title_style="bold cyan",
		)
		table.add_column("#", justify="right")
		table.add_column("Prompt")
		table.add_column("Tools")
		table.add_column("Done")
		table.add_column("Verdict")
		table.add_column("Reason")
		for idx, entry in enumerate(report.entries, start=1):
			r = entry.result
			if show_invocations:
				tools = "\n".join(f"{inv.tool_name} [{inv.state.value}]"
				                  for inv in r.invocations) or "-"
			else:
				tools = ", ".join(r.invoked_tool_names) or "-"
			if entry.grade:
				style = "green" if entry.grade.passed else "red"
				verdict = Text(entry.grade.verdict.upper(), style=style)
				reason = entry.grade.reason
			else:
				verdict = Text("UNGRADED", style="yellow")
				reason = entry.grading_error or ""
			if r.failure_reason and reason:
				reason = f"{r.failure_reason}. {reason}"
			elif r.failure_reason:
				reason = r.failure_reason
			prompt = r.prompt.text
			if len(prompt) > 60:
				prompt = prompt[:60] + "..."
			table.add_row(str(idx), Text(prompt), Text(tools),
			              "yes" if r.task_done else "no", verdict, Text(reason))
		return table

	def print_summary(self, reports: Sequence[RunReport], output_dir: Path,
	                  show_invocations: bool = False) -> None:
		"""Print final per-run tables and totals after runs complete."""
		self.finalize()
		self.console.print()
		totals = Table(
		    title="Summary",
		    box=box.ROUNDED,
		    expand=True,
		    title_style="bold yellow",
		)
		for col in ("Run", "Prompts", "Passed", "Failed", "Ungraded",
		            "Task Done", "Report"):
			totals.add_column(col)
		for report in reports:
			self.console.print(
			    self._render_report_table(report, show_invocations))
			s = report.summary
			totals.add_row(
			    report.run_id,
			    str(s.total),
			    Text(str(s.passed), style="green"),
			    Text(str(s.failed), style="red" if s.failed else "dim"),
			    Text(str(s.ungraded), style="yellow" if s.ungraded else "dim"),
			    f"{s.task_done}/{s.total}",
			    Text(str(output_dir / f"report-{report.run_id}.md")),
			)
		self.console.print(totals)


__all__ = ["TUI", "RunDisplayState"]
