from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import typer
from typer.main import get_command

from prompt_validator.models.config import Config, load_env
from prompt_validator.models.run_params import RunParams
from prompt_validator.core.runner import run_all
from prompt_validator.ui.tui import TUI
from prompt_validator.utils.logging import configure_logging

cli = typer.Typer(add_completion=False, no_args_is_help=True)


@cli.callback()
def root() -> None:
	"""Root callback for the prompt-validator CLI."""
	return None


def run_impl(
    prompt_files: list[Path],
    run_timeout: float | None = None,
    stabilize_timeout: float | None = None,
    marker_timeout: float | None = None,
    judge_timeout: float | None = None,
    judge: bool | None = None,
    show_invocations: bool | None = None,
) -> bool:
	"""
	Run every prompt file against its own agent session and grade the turns.

	Parameters:
		prompt_files: YAML/JSON prompt files, one run each.
		run_timeout: Override for the run deadline in seconds.
		stabilize_timeout: Override for the stabilization timeout.
		marker_timeout: Override for the per-marker timeout.
		judge_timeout: Override for the judge timeout.
		judge: Enable or disable grading.
		show_invocations: Show each tool invocation in the summary.

	Returns:
		True when every run finished with no failed prompt.
	"""
	load_env()
	params = RunParams(
	    prompt_files=prompt_files,
	    run_timeout=run_timeout,
	    stabilize_timeout=stabilize_timeout,
	    marker_timeout=marker_timeout,
	    judge_timeout=judge_timeout,
	    judge=judge,
	    show_invocations=show_invocations,
	)
	config = Config()
	config.apply_overrides(params)
	configure_logging(config.log_level)
	typer.echo(f"Running with model={config.model}, "
	           f"judge={'on' if config.judge_enabled else 'off'}, "
	           f"runs={len(params.prompt_files)}, "
	           f"stabilize_timeout={config.stabilize_timeout_seconds:g}s, "
	           f"marker_timeout={config.marker_timeout_seconds:g}s")

	with TUI(params.run_ids) as ui:
		reports = asyncio.run(run_all(config, params, progress_cb=ui.update))
		ui.print_summary(reports, config.output_path,
		                 show_invocations=config.show_invocations)
	return all(r.ok for r in reports)


@cli.command()
def run(
    prompt_files: list[Path] = typer.Argument(
        ..., exists=True, dir_okay=False, help="Prompt spec files"),
    run_timeout: float = typer.Option(None, "--run-timeout",
                                      help="Override run deadline seconds"),
    stabilize_timeout: float = typer.Option(
        None, "--stabilize-timeout", help="Override stabilization timeout"),
    marker_timeout: float = typer.Option(
        None, "--marker-timeout", help="Override per-marker timeout"),
    judge_timeout: float = typer.Option(None, "--judge-timeout",
                                        help="Override judge timeout"),
    judge: bool = typer.Option(
        None,
        "--judge/--no-judge",
        help="Grade responses with the external judge",
    ),
    show_invocations: bool = typer.Option(
        None,
        "--show-invocations/--no-show-invocations",
        help="List each tool invocation in the summary",
    ),
) -> None:
	"""
	Run scripted prompts against an agent and grade each turn.

	Exits with status 1 when any prompt failed.
	"""
	ok = run_impl(prompt_files, run_timeout, stabilize_timeout,
	              marker_timeout, judge_timeout, judge, show_invocations)
	if ok is False:
		raise typer.Exit(code=1)


def entrypoint(argv=None, *, standalone_mode: bool = True):
	"""
	Typer entrypoint that defaults to `run` when appropriate.

	Allows calling 'prompt-validator prompts.yaml' without explicitly
	specifying the 'run' subcommand.
	"""
	args = sys.argv[1:] if argv is None else list(argv)

	_click_app = get_command(cli)
	commands = getattr(_click_app, "commands", {}).keys()
	if args and args[0] == "run":
		args = args[1:]
	if args and not args[0].startswith("-") and args[0] not in commands:
		args = ["run"] + args
	return _click_app.main(
	    args=args,
	    prog_name="prompt-validator",
	    standalone_mode=standalone_mode,
	)


if __name__ == "__main__":
	entrypoint()
