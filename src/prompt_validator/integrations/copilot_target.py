"""
Copilot-backed target session.

Adapts a streaming Copilot agent session to the target interface the
prompt runner drives: prompts are sent without waiting, the reply text
is rebuilt from message events, and tool execution events are kept as
markers the collector can scrape.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from copilot.generated.session_events import SessionEventType

from prompt_validator.errors import SourceUnavailable
from prompt_validator.integrations.copilot_client import (
    build_session_config,
    destroy_session_safe,
)
from prompt_validator.models.config import Config
from prompt_validator.utils.logging import get_logger
from prompt_validator.utils.protocols import (
    CopilotClientProtocol,
    SessionProtocol,
)

logger = get_logger(__name__)


def _tool_output(data: Any) -> Any:
	"""Pull a displayable output from a tool completion event."""
	result = getattr(data, "result", None)
	if result is None:
		return None
	content = getattr(result, "content", None)
	return content if content is not None else result


def _tool_error(data: Any) -> Optional[str]:
	error = getattr(data, "error", None)
	if not error:
		return None
	return getattr(error, "message", None) or str(error)


class CopilotTarget:
	"""Interactive target backed by one Copilot session."""

	def __init__(self, session: SessionProtocol, label: str = "target") -> None:
		self._session = session
		self.label = label
		self._messages: List[str] = []
		self._chunks: List[str] = []
		self._markers: Dict[str, Dict[str, Any]] = {}
		self._error: Optional[str] = None
		self._busy = False
		self._unsubscribe = session.on(self.handler)

	@classmethod
	async def open(
	    cls,
	    client: CopilotClientProtocol,
	    config: Config,
	    label: str = "target",
	) -> "CopilotTarget":
		"""Create a streaming session for the agent under test."""
		session = await client.create_session(
		    build_session_config(model=config.model, streaming=True))
		logger.debug("opened target session for %s", label)
		return cls(session, label=label)

	def handler(self, event: Any) -> None:
		"""Handle a session event."""
		et = getattr(event, "type", None)
		data = getattr(event, "data", None)
		if et == SessionEventType.ASSISTANT_MESSAGE_DELTA:
			self._chunks.append(getattr(data, "delta_content", "") or "")
		elif et == SessionEventType.ASSISTANT_MESSAGE:
			content = getattr(data, "content", "") or ""
			self._chunks = []
			if content:
				self._messages.append(content)
		elif et == SessionEventType.TOOL_EXECUTION_START:
			call_id = getattr(data, "tool_call_id", None)
			if not call_id:
				return
			self._markers[str(call_id)] = {
			    "id": str(call_id),
			    "name": getattr(data, "tool_name", None)
			            or getattr(data, "name", None),
			    "input": getattr(data, "arguments", None),
			    "output": None,
			    "state": "pending",
			}
		elif et == SessionEventType.TOOL_EXECUTION_COMPLETE:
			call_id = getattr(data, "tool_call_id", None)
			marker = self._markers.get(str(call_id)) if call_id else None
			if marker is None:
				return
			error = _tool_error(data)
			success = getattr(data, "success", True)
			marker["state"] = "success" if success and not error else "error"
			marker["output"] = error if error else _tool_output(data)
		elif et == SessionEventType.SESSION_IDLE:
			self._busy = False
		elif et == SessionEventType.SESSION_ERROR:
			self._error = getattr(data, "message", None) or str(data)
			logger.warning("%s session error: %s", self.label, self._error)

	async def submit(self, text: str) -> None:
		"""Send a prompt without waiting for the turn to finish."""
		self._messages = []
		self._chunks = []
		self._error = None
		self._busy = True
		await self._session.send({"prompt": text})

	def is_idle(self) -> bool:
		"""True once the session reported idle after the last submit."""
		return not self._busy

	async def sample_reply_text(self) -> Optional[str]:
		"""Return the reply text so far, or None before anything arrived."""
		if self._error:
			raise SourceUnavailable(f"session error: {self._error}")
		parts = self._messages + (["".join(self._chunks)]
		                          if self._chunks else [])
		if not parts:
			return None
		return "\n\n".join(p for p in parts if p)

	async def list_tool_markers(self) -> list[dict[str, Any]]:
		return [dict(m) for m in self._markers.values()]

	async def close(self) -> None:
		if callable(self._unsubscribe):
			try:
				self._unsubscribe()
			except Exception:
				logger.debug("failed to unsubscribe %s", self.label,
				             exc_info=True)
		try:
			await self._session.abort()
		except Exception:
			logger.debug("failed to abort %s session", self.label,
			             exc_info=True)
		await destroy_session_safe(self._session, self.label)


__all__ = ["CopilotTarget"]
