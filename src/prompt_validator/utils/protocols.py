"""
Protocol definitions for dependency injection.

Defines Protocol classes for the Copilot client and session, the
interactive target under test, and the external judgment capability,
so each can be substituted with a stub in tests.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
	from prompt_validator.models.grade import Judgment
	from prompt_validator.models.invocation import ToolInvocation


class SessionProtocol(Protocol):
	"""Subset of the Copilot session interface used here."""

	async def send(self, options: dict) -> Any:
		...

	async def send_and_wait(self, options: dict,
	                        timeout: float | None = None) -> Any:
		...

	async def abort(self) -> Any:
		...

	async def destroy(self) -> Any:
		...

	def on(self, handler: Any) -> Any:
		...

	async def get_messages(self) -> Any:
		...


class CopilotClientProtocol(Protocol):
	"""Subset of the Copilot client interface used here."""

	async def start(self) -> Any:
		...

	async def stop(self) -> Any:
		...

	async def create_session(self, config: dict) -> SessionProtocol:
		...


class TargetProtocol(Protocol):
	"""
	Interactive session under test.

	Session creation, authentication and transport belong to whoever
	builds the target; the pipeline only submits and observes.
	"""

	async def submit(self, text: str) -> None:
		"""Submit prompt text to the agent."""
		...

	async def sample_reply_text(self) -> str | None:
		"""Return the current reply text, or None if no reply region exists yet."""
		...

	async def list_tool_markers(self) -> list[dict[str, Any]]:
		"""List tool-call markers with name, input, output and state."""
		...


class JudgmentProtocol(Protocol):
	"""External judgment capability returning a verdict for one turn."""

	async def judge(
	    self,
	    prompt_text: str,
	    expected_tools: Sequence[str],
	    response_text: str,
	    invocations: Sequence["ToolInvocation"],
	) -> "Judgment":
		...


__all__ = [
    "SessionProtocol",
    "CopilotClientProtocol",
    "TargetProtocol",
    "JudgmentProtocol",
]
