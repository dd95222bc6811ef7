"""Tests for tool-call collection."""

from __future__ import annotations

import pytest

from prompt_validator.core.collector import ToolCallCollector, parse_marker
from prompt_validator.errors import (
    MalformedInvocation,
    RunCancelled,
    SourceUnavailable,
)
from prompt_validator.models.invocation import (
    MarkerState,
    UNPARSEABLE_OUTPUT,
    UNPARSEABLE_TOOL,
    UNRESOLVED_OUTPUT,
)


class VirtualClock:

	def __init__(self) -> None:
		self.now = 0.0

	def __call__(self) -> float:
		return self.now

	async def sleep(self, seconds: float) -> None:
		self.now += seconds


class MarkerTarget:
	"""Target exposing a mutable list of raw markers."""

	def __init__(self, markers=None) -> None:
		self.markers = list(markers or [])
		self.list_calls = 0
		self.fail = False

	async def submit(self, text):
		return None

	async def sample_reply_text(self):
		return ""

	async def list_tool_markers(self):
		self.list_calls += 1
		if self.fail:
			raise RuntimeError("page crashed")
		return [dict(m) if isinstance(m, dict) else m for m in self.markers]


def make_collector(target, clock=None, marker_timeout=5.0):
	clock = clock or VirtualClock()
	return ToolCallCollector(
	    target,
	    marker_timeout=marker_timeout,
	    poll_interval=1.0,
	    clock=clock,
	    sleep=clock.sleep,
	)


class TestParseMarker:

	def test_parses_aliases_and_json_payloads(self) -> None:
		marker = parse_marker({
		    "toolCallId": 7,
		    "toolName": "create_issue",
		    "arguments": '{"title": "Test Issue"}',
		    "result": '{"issueId": 42}',
		    "state": "completed",
		})
		assert marker.marker_id == "7"
		assert marker.name == "create_issue"
		assert marker.input == {"title": "Test Issue"}
		assert marker.output == {"issueId": 42}
		assert marker.state is MarkerState.SUCCESS

	def test_running_maps_to_pending(self) -> None:
		marker = parse_marker({"name": "search", "state": "running"})
		assert marker.state is MarkerState.PENDING

	def test_missing_state_is_pending(self) -> None:
		assert parse_marker({"name": "search"}).state is MarkerState.PENDING

	def test_non_mapping_is_malformed(self) -> None:
		with pytest.raises(MalformedInvocation):
			parse_marker("create_issue")

	def test_missing_name_is_malformed(self) -> None:
		with pytest.raises(MalformedInvocation):
			parse_marker({"id": "1", "state": "success"})

	def test_unknown_state_is_malformed(self) -> None:
		with pytest.raises(MalformedInvocation):
			parse_marker({"name": "x", "state": "exploded"})


class TestToolCallCollector:

	@pytest.mark.asyncio
	async def test_poll_is_idempotent(self) -> None:
		target = MarkerTarget()
		collector = make_collector(target)
		await collector.checkpoint()
		target.markers.append({
		    "id": "a",
		    "name": "create_issue",
		    "output": {"issueId": 42},
		    "state": "success",
		})
		first = await collector.poll()
		second = await collector.poll()
		assert first == second
		assert len(second) == 1
		assert second[0].tool_name == "create_issue"
		assert second[0].observed_at_offset == 0

	@pytest.mark.asyncio
	async def test_checkpoint_excludes_earlier_markers(self) -> None:
		target = MarkerTarget([{"id": "old", "name": "list_issues",
		                        "state": "success"}])
		collector = make_collector(target)
		await collector.checkpoint()
		target.markers.append({"id": "new", "name": "create_issue",
		                       "state": "success"})
		invocations = await collector.poll()
		assert [i.tool_name for i in invocations] == ["create_issue"]

	@pytest.mark.asyncio
	async def test_checkpoint_clears_previous_turn(self) -> None:
		target = MarkerTarget()
		collector = make_collector(target)
		await collector.checkpoint()
		target.markers.append({"id": "1", "name": "a", "state": "success"})
		await collector.poll()
		await collector.checkpoint()
		assert collector.invocations == []
		assert await collector.poll() == []

	@pytest.mark.asyncio
	async def test_positional_identity_without_ids(self) -> None:
		target = MarkerTarget()
		collector = make_collector(target)
		await collector.checkpoint()
		target.markers.append({"name": "a", "state": "success"})
		await collector.poll()
		target.markers.append({"name": "b", "state": "success"})
		invocations = await collector.poll()
		assert [i.tool_name for i in invocations] == ["a", "b"]

	@pytest.mark.asyncio
	async def test_pending_marker_waits_for_terminal_state(self) -> None:
		target = MarkerTarget()
		collector = make_collector(target)
		await collector.checkpoint()
		target.markers.append({"id": "1", "name": "search",
		                       "state": "pending"})
		assert await collector.poll() == []
		assert collector.pending_count == 1
		target.markers[0] = {"id": "1", "name": "search", "output": "3 hits",
		                     "state": "success"}
		invocations = await collector.poll()
		assert invocations[0].output == "3 hits"
		assert collector.pending_count == 0

	@pytest.mark.asyncio
	async def test_unresolved_marker_gets_sentinel(self) -> None:
		clock = VirtualClock()
		target = MarkerTarget()
		collector = make_collector(target, clock=clock, marker_timeout=5.0)
		await collector.checkpoint()
		target.markers.append({"id": "1", "name": "slow_tool",
		                       "input": {"q": 1}, "state": "pending"})
		invocations = await collector.collect()
		assert len(invocations) == 1
		inv = invocations[0]
		assert inv.tool_name == "slow_tool"
		assert inv.output == UNRESOLVED_OUTPUT
		assert inv.state is MarkerState.UNRESOLVED
		assert clock.now == pytest.approx(5.0)

	@pytest.mark.asyncio
	async def test_error_state_is_terminal(self) -> None:
		target = MarkerTarget()
		collector = make_collector(target)
		await collector.checkpoint()
		target.markers.append({"id": "1", "name": "create_issue",
		                       "output": "403 Forbidden", "state": "failed"})
		invocations = await collector.collect()
		assert invocations[0].state is MarkerState.ERROR
		assert invocations[0].output == "403 Forbidden"

	@pytest.mark.asyncio
	async def test_malformed_marker_is_retained(self) -> None:
		target = MarkerTarget()
		collector = make_collector(target)
		await collector.checkpoint()
		target.markers.extend([
		    {"id": "1", "state": "success"},
		    {"id": "2", "name": "create_issue", "state": "??"},
		    {"id": "3", "name": "list_issues", "state": "success"},
		])
		invocations = await collector.poll()
		assert len(invocations) == 3
		assert invocations[0].tool_name == UNPARSEABLE_TOOL
		assert invocations[0].output == UNPARSEABLE_OUTPUT
		assert invocations[1].tool_name == "create_issue"
		assert invocations[1].state is MarkerState.UNPARSEABLE
		assert invocations[2].tool_name == "list_issues"

	@pytest.mark.asyncio
	async def test_order_follows_first_observation(self) -> None:
		"""A marker resolving late keeps its original position."""
		target = MarkerTarget()
		collector = make_collector(target)
		await collector.checkpoint()
		target.markers.append({"id": "1", "name": "first", "state": "pending"})
		await collector.poll()
		target.markers.append({"id": "2", "name": "second",
		                       "state": "success"})
		await collector.poll()
		target.markers[0]["state"] = "success"
		invocations = await collector.poll()
		assert [i.tool_name for i in invocations] == ["first", "second"]
		assert [i.observed_at_offset for i in invocations] == [0, 1]

	@pytest.mark.asyncio
	async def test_list_failure_is_source_unavailable(self) -> None:
		target = MarkerTarget()
		collector = make_collector(target)
		target.fail = True
		with pytest.raises(SourceUnavailable):
			await collector.checkpoint()

	@pytest.mark.asyncio
	async def test_collect_honours_cancellation(self) -> None:
		target = MarkerTarget()
		collector = make_collector(target)
		await collector.checkpoint()
		target.markers.append({"id": "1", "name": "slow", "state": "pending"})
		with pytest.raises(RunCancelled):
			await collector.collect(is_cancelled=lambda: True)
