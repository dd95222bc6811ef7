"""Integrations with external services.

Key modules:
    - copilot_client: Copilot client factory and session helpers
    - copilot_target: Copilot session adapted to the target interface
"""

from .copilot_client import (
    create_client,
    build_session_config,
    fetch_last_assistant_message,
    destroy_session_safe,
)
from .copilot_target import CopilotTarget

__all__ = [
    "create_client",
    "build_session_config",
    "fetch_last_assistant_message",
    "destroy_session_safe",
    "CopilotTarget",
]
