from pathlib import Path

from rich.console import Console

from prompt_validator.core.aggregator import ReportAggregator
from prompt_validator.models.grade import Grade
from prompt_validator.models.invocation import MarkerState, ToolInvocation
from prompt_validator.models.prompt_spec import PromptSpec
from prompt_validator.models.result import PromptResult
from prompt_validator.ui.tui import TUI


def make_report():
	agg = ReportAggregator("smoke")
	agg.add(
	    PromptResult(
	        prompt=PromptSpec(text="Create an issue",
	                          expectedTools=["create_issue"]),
	        response_text="Created #1",
	        invocations=(ToolInvocation(tool_name="create_issue",
	                                    observed_at_offset=0,
	                                    state=MarkerState.SUCCESS),),
	        task_done=True,
	    ), Grade(verdict="pass", reason="created", task_done=True))
	agg.add(PromptResult(prompt=PromptSpec(text="Say hi"), task_done=False,
	                     failure_reason="submit failed: down"),
	        grading_error="judgment call failed: offline")
	return agg.finalize()


def test_tui_tracks_status_and_counts():
	ui = TUI(["smoke"], console=Console(record=True))
	ui.update("smoke", "run_started")
	ui.update("smoke", "prompt_started 1/2: Create an issue")
	ui.update("smoke", "graded pass: created")
	ui.update("smoke", "graded fail: rude")
	state = ui.states["smoke"]
	assert state.status == "running"
	assert state.current_prompt == "1/2: Create an issue"
	assert (state.passed, state.failed) == (1, 1)
	ui.update("smoke", "run_completed")
	assert state.status == "completed"
	assert state.current_prompt is None


def test_tui_ignores_unknown_run():
	ui = TUI(["a"], console=Console(record=True))
	ui.update("b", "run_started")
	assert "b" not in ui.states


def test_tui_message_limit():
	ui = TUI(["a"], console=Console(record=True))
	for i in range(15):
		ui.update("a", f"prompt_completed {i}/15")
	state = ui.states["a"]
	assert len(state.messages) == 8
	bullets = [
	    ln for ln in state.render_cell().plain.splitlines()
	    if ln.startswith("• ")
	]
	assert len(bullets) == 8


def test_tui_live_context():
	console = Console(record=True, width=100)
	with TUI(["a", "b"], console=console) as ui:
		ui.update("a", "run_failed: no session")
	assert ui.states["a"].status == "failed"
	assert ui.states["b"].status == "pending"


def test_print_summary_lists_entries_and_totals():
	console = Console(record=True, width=200)
	ui = TUI(["smoke"], console=console)
	ui.print_summary([make_report()], Path("reports"))
	out = console.export_text()
	assert "Run smoke" in out
	assert "Create an issue" in out
	assert "PASS" in out
	assert "UNGRADED" in out
	assert "submit failed: down" in out
	assert "reports/report-smoke.md" in out


def test_print_summary_with_invocations():
	console = Console(record=True, width=200)
	ui = TUI(["smoke"], console=console)
	ui.print_summary([make_report()], Path("reports"), show_invocations=True)
	assert "create_issue [success]" in console.export_text()


def test_print_summary_keeps_bracketed_text():
	agg = ReportAggregator("brackets")
	agg.add(
	    PromptResult(prompt=PromptSpec(text="Label it [bug] please",
	                                   expectedTools=["create_issue"]),
	                 response_text="Listed", task_done=True),
	    Grade(verdict="fail",
	          reason="tool mismatch: expected [create_issue] but got"
	          " [list_issues]", task_done=False))
	console = Console(record=True, width=300)
	TUI(["brackets"], console=console).print_summary([agg.finalize()],
	                                                 Path("reports"))
	out = console.export_text()
	assert "[bug]" in out
	assert "[create_issue]" in out
	assert "[list_issues]" in out


def test_print_summary_keeps_trailing_punctuation():
	agg = ReportAggregator("punct")
	agg.add(PromptResult(prompt=PromptSpec(text="a"), task_done=False,
	                     failure_reason="submit failed: timed out after 30s."))
	agg.add(PromptResult(prompt=PromptSpec(text="b"), task_done=False,
	                     failure_reason="response did not stabilize"),
	        Grade(verdict="fail", reason="Reply ends mid-sentence.",
	              task_done=False))
	console = Console(record=True, width=300)
	TUI(["punct"], console=console).print_summary([agg.finalize()],
	                                              Path("reports"))
	out = console.export_text()
	assert "after 30s." in out
	assert "response did not stabilize. Reply ends mid-sentence." in out
