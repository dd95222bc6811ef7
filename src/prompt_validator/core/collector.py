"""
Tool-call collection.

Scrapes the tool-call markers the target lists next to a reply and turns
them into ToolInvocation records. Markers can appear before their result
is ready, so each one is held until it reaches a terminal state or its
per-marker timeout expires.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from prompt_validator.errors import (
    MalformedInvocation,
    RunCancelled,
    SourceUnavailable,
)
from prompt_validator.models.invocation import (
    MarkerState,
    ToolInvocation,
    ToolMarker,
    UNPARSEABLE_OUTPUT,
    UNPARSEABLE_TOOL,
    UNRESOLVED_OUTPUT,
)
from prompt_validator.utils.logging import get_logger
from prompt_validator.utils.parsing import coerce_json
from prompt_validator.utils.protocols import TargetProtocol

logger = get_logger(__name__)


def parse_marker(raw: Any) -> ToolMarker:
	"""
	Parse one raw marker reported by the target.

	Parameters:
		raw: Marker payload, normally a dict.

	Returns:
		Validated ToolMarker with JSON-looking input/output decoded.

	Raises:
		MalformedInvocation: If the payload cannot be validated.
	"""
	if not isinstance(raw, dict):
		raise MalformedInvocation(
		    f"marker is {type(raw).__name__}, expected a mapping", raw=raw)
	try:
		marker = ToolMarker.model_validate(raw)
	except ValidationError as exc:
		raise MalformedInvocation(
		    f"invalid marker: {exc.errors()[0].get('msg', exc)}",
		    raw=raw) from exc
	return marker.model_copy(update={
	    "input": coerce_json(marker.input),
	    "output": coerce_json(marker.output),
	})


def _marker_key(raw: Any, index: int) -> str:
	"""Identify a marker by its id, falling back to list position."""
	if isinstance(raw, dict):
		for k in ("id", "toolCallId", "tool_call_id", "marker_id"):
			if raw.get(k) is not None:
				return f"id:{raw[k]}"
	return f"pos:{index}"


def _salvage_name(raw: Any) -> str:
	if isinstance(raw, dict):
		for k in ("name", "tool_name", "toolName"):
			v = raw.get(k)
			if isinstance(v, str) and v.strip():
				return v
	return UNPARSEABLE_TOOL


class ToolCallCollector:
	"""Collect tool invocations made during one turn at a time."""

	def __init__(
	    self,
	    target: TargetProtocol,
	    *,
	    marker_timeout: float = 30.0,
	    poll_interval: float = 0.5,
	    clock: Callable[[], float] = time.monotonic,
	    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
	) -> None:
		"""
		Initialize the collector.

		Parameters:
			target: Session listing tool markers.
			marker_timeout: Seconds a marker may stay pending before it is
				recorded as unresolved.
			poll_interval: Seconds between polls in collect().
			clock: Monotonic time source.
			sleep: Async sleep used between polls.
		"""
		self._target = target
		self._marker_timeout = marker_timeout
		self._poll_interval = poll_interval
		self._clock = clock
		self._sleep = sleep
		self._baseline: set[str] = set()
		self._offsets: dict[str, int] = {}
		self._first_seen: dict[str, float] = {}
		self._recorded: dict[str, ToolInvocation] = {}
		self._pending: set[str] = set()

	@property
	def invocations(self) -> list[ToolInvocation]:
		"""Invocations recorded since the last checkpoint, in call order."""
		return sorted(self._recorded.values(),
		              key=lambda inv: inv.observed_at_offset)

	@property
	def pending_count(self) -> int:
		return len(self._pending)

	async def _list_markers(self) -> list[Any]:
		try:
			markers = await self._target.list_tool_markers()
		except SourceUnavailable:
			raise
		except Exception as exc:
			raise SourceUnavailable(
			    f"tool markers could not be listed: {exc}") from exc
		return list(markers or [])

	async def checkpoint(self) -> None:
		"""Start a new turn; markers already present are never reported."""
		markers = await self._list_markers()
		self._baseline = {_marker_key(raw, i) for i, raw in enumerate(markers)}
		self._offsets.clear()
		self._first_seen.clear()
		self._recorded.clear()
		self._pending.clear()

	def _record(self, key: str, **fields: Any) -> None:
		self._recorded[key] = ToolInvocation(
		    observed_at_offset=self._offsets[key], **fields)
		self._first_seen.pop(key, None)

	async def poll(self) -> list[ToolInvocation]:
		"""
		Read markers once and record any that reached a terminal state.

		Safe to call repeatedly: a marker is recorded at most once.

		Returns:
			All invocations recorded since the last checkpoint.
		"""
		markers = await self._list_markers()
		now = self._clock()
		self._pending = set()
		for index, raw in enumerate(markers):
			key = _marker_key(raw, index)
			if key in self._baseline or key in self._recorded:
				continue
			self._offsets.setdefault(key, len(self._offsets))
			try:
				marker = parse_marker(raw)
			except MalformedInvocation as exc:
				logger.warning("unparseable tool marker %s: %s", key, exc)
				self._record(
				    key,
				    tool_name=_salvage_name(raw),
				    input=raw,
				    output=UNPARSEABLE_OUTPUT,
				    state=MarkerState.UNPARSEABLE,
				)
				continue

			if marker.state.is_terminal:
				self._record(
				    key,
				    tool_name=marker.name,
				    input=marker.input,
				    output=marker.output,
				    state=marker.state,
				)
				continue

			first_seen = self._first_seen.setdefault(key, now)
			if now - first_seen >= self._marker_timeout:
				logger.warning(
				    "tool marker %s (%s) unresolved after %.1fs",
				    key,
				    marker.name,
				    now - first_seen,
				)
				self._record(
				    key,
				    tool_name=marker.name,
				    input=marker.input,
				    output=UNRESOLVED_OUTPUT,
				    state=MarkerState.UNRESOLVED,
				)
			else:
				self._pending.add(key)
		return self.invocations

	async def collect(
	    self,
	    is_cancelled: Callable[[], bool] | None = None,
	) -> list[ToolInvocation]:
		"""Poll until no marker is pending; bounded by the per-marker timeout."""
		while True:
			invocations = await self.poll()
			if not self._pending:
				return invocations
			if is_cancelled and is_cancelled():
				raise RunCancelled()
			await self._sleep(self._poll_interval)


__all__ = ["ToolCallCollector", "parse_marker"]
