"""Shared utility functions.

This subpackage provides common utility functions used across
the application with no dependencies on other subpackages.

Key modules:
    - parsing: JSON extraction from model output
    - logging: Logging configuration
    - protocols: Protocol definitions for dependency injection
"""

from .parsing import extract_json, coerce_json
from .logging import configure_logging, get_logger
from .protocols import (
    SessionProtocol,
    CopilotClientProtocol,
    TargetProtocol,
    JudgmentProtocol,
)

__all__ = [
    # parsing
    "extract_json",
    "coerce_json",
    # logging
    "configure_logging",
    "get_logger",
    # protocols
    "SessionProtocol",
    "CopilotClientProtocol",
    "TargetProtocol",
    "JudgmentProtocol",
]
