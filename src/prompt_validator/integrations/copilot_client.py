"""
Copilot client factory and session helpers.

Creates configured CopilotClient instances (external server mode vs
native stdio mode) and wraps the session calls shared by the target
and judge adapters.
"""

from __future__ import annotations

from typing import Any, Optional

from copilot import CopilotClient
from copilot.generated.session_events import SessionEventType

from prompt_validator.models.config import Config
from prompt_validator.utils.logging import get_logger
from prompt_validator.utils.protocols import SessionProtocol

logger = get_logger(__name__)


def create_client(config: Config) -> CopilotClient:
	"""Factory for CopilotClient with configured connection mode."""
	opts: dict[str, Any] = {"log_level": config.log_level}
	if config.cli_url:
		opts["cli_url"] = config.cli_url
	elif config.github_token:
		opts["github_token"] = config.github_token
	return CopilotClient(opts)


def build_session_config(
    *,
    model: str,
    streaming: bool,
    system_message: str | None = None,
) -> dict:
	"""Build a session configuration dict for create_session()."""
	session_config: dict = {"model": model, "streaming": streaming}
	if system_message is not None:
		session_config["system_message"] = {"text": system_message}
	return session_config


async def fetch_last_assistant_message(session: Any) -> Optional[str]:
	"""Return the content of the session's last assistant message, if any."""
	try:
		messages = await session.get_messages()
	except Exception:
		logger.debug("failed to fetch session messages", exc_info=True)
		return None
	for ev in reversed(messages or []):
		if getattr(ev, "type", None) == SessionEventType.ASSISTANT_MESSAGE:
			return getattr(getattr(ev, "data", None), "content", None)
	return None


async def destroy_session_safe(
    session: SessionProtocol | None,
    label: str,
) -> None:
	"""Destroy a session, logging but not raising on failure."""
	if not session:
		return
	try:
		await session.destroy()
	except Exception:
		logger.debug("failed to destroy %s session", label, exc_info=True)


__all__ = [
    "create_client",
    "build_session_config",
    "fetch_last_assistant_message",
    "destroy_session_safe",
]
