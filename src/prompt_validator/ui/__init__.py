"""User interface components.

Key modules:
    - tui: Rich-based terminal UI for progress display
    - reporting: Report rendering and persistence
"""

from prompt_validator.ui.tui import TUI, RunDisplayState
from prompt_validator.ui.reporting import (
    render_report_md,
    report_document,
    save_report_json,
    save_report_md,
)

__all__ = [
    "TUI",
    "RunDisplayState",
    "render_report_md",
    "report_document",
    "save_report_json",
    "save_report_md",
]
