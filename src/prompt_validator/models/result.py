"""
Prompt result model.

Defines the PromptResult record assembled by the prompt runner
once a prompt's turn has ended.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .invocation import ToolInvocation, UNPARSEABLE_TOOL
from .prompt_spec import PromptSpec

CANCELLED_REASON = "cancelled"
NOT_STABILIZED_REASON = "response did not stabilize"


class PromptResult(BaseModel):
	"""
	Raw outcome of a single prompt turn.

	Never mutated after creation; grades are kept alongside in the
	report rather than merged in.
	"""

	model_config = ConfigDict(frozen=True)

	prompt: PromptSpec
	response_text: str = ""
	invocations: tuple[ToolInvocation, ...] = Field(default=())
	task_done: bool = False
	failure_reason: str | None = None

	@property
	def invoked_tool_names(self) -> list[str]:
		"""Names of the tools invoked, in observation order, without duplicates."""
		names: dict[str, None] = {}
		for inv in self.invocations:
			if inv.tool_name != UNPARSEABLE_TOOL:
				names.setdefault(inv.tool_name, None)
		return list(names)

	@property
	def cancelled(self) -> bool:
		return self.failure_reason == CANCELLED_REASON


__all__ = ["PromptResult", "CANCELLED_REASON", "NOT_STABILIZED_REASON"]
