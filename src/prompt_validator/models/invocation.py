"""
Tool invocation models.

Defines the parsed form of a raw tool marker reported by the target
and the ToolInvocation record the collector builds from it.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

UNRESOLVED_OUTPUT = "<unresolved>"
UNPARSEABLE_OUTPUT = "<unparseable>"
UNPARSEABLE_TOOL = "<unparseable>"


class MarkerState(str, Enum):
	"""Lifecycle state of a tool marker."""

	PENDING = "pending"
	SUCCESS = "success"
	ERROR = "error"
	TIMEOUT = "timeout"
	UNRESOLVED = "unresolved"
	UNPARSEABLE = "unparseable"

	@property
	def is_terminal(self) -> bool:
		return self is not MarkerState.PENDING


_STATE_ALIASES = {
    "running": MarkerState.PENDING,
    "in_progress": MarkerState.PENDING,
    "started": MarkerState.PENDING,
    "completed": MarkerState.SUCCESS,
    "complete": MarkerState.SUCCESS,
    "done": MarkerState.SUCCESS,
    "ok": MarkerState.SUCCESS,
    "failed": MarkerState.ERROR,
    "failure": MarkerState.ERROR,
    "timed_out": MarkerState.TIMEOUT,
}


class ToolMarker(BaseModel):
	"""A tool-call marker as listed by the target.

	Accepts ``id``/``toolCallId`` for the marker id, ``tool_name``/``toolName``
	for the name and ``result`` for the output, and maps common state
	spellings (``running``, ``completed``, ``failed``) onto MarkerState.
	"""

	model_config = ConfigDict(populate_by_name=True)

	marker_id: str | None = Field(default=None, alias="id")
	name: str = Field(min_length=1)
	input: Any = None
	output: Any = None
	state: MarkerState = MarkerState.PENDING

	@model_validator(mode="before")
	@classmethod
	def normalize_keys(cls, data: Any) -> Any:
		if not isinstance(data, dict):
			return data
		data = dict(data)
		for alias in ("toolCallId", "tool_call_id", "marker_id"):
			if alias in data and "id" not in data:
				data["id"] = data.pop(alias)
		for alias in ("tool_name", "toolName"):
			if alias in data and "name" not in data:
				data["name"] = data.pop(alias)
		if "result" in data and "output" not in data:
			data["output"] = data.pop("result")
		if "arguments" in data and "input" not in data:
			data["input"] = data.pop("arguments")
		if data.get("id") is not None:
			data["id"] = str(data["id"])
		return data

	@field_validator("state", mode="before")
	@classmethod
	def normalize_state(cls, v: Any) -> Any:
		if v is None:
			return MarkerState.PENDING
		if isinstance(v, str):
			key = v.strip().lower()
			return _STATE_ALIASES.get(key, key)
		return v


class ToolInvocation(BaseModel):
	"""
	Record of one external action taken by the agent during a turn.

	Attributes:
		tool_name: Name of the tool invoked.
		input: Arguments passed to the tool, as reported.
		output: Result of the tool, or a sentinel when unresolved/unparseable.
		observed_at_offset: 0-based observation order within the turn.
		state: Terminal state of the underlying marker.
	"""

	model_config = ConfigDict(frozen=True)

	tool_name: str
	input: Any = None
	output: Any = None
	observed_at_offset: int = Field(ge=0)
	state: MarkerState = MarkerState.SUCCESS


__all__ = [
    "MarkerState",
    "ToolMarker",
    "ToolInvocation",
    "UNRESOLVED_OUTPUT",
    "UNPARSEABLE_OUTPUT",
    "UNPARSEABLE_TOOL",
]
