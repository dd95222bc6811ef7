"""Tests for reply stabilization detection."""

from __future__ import annotations

import pytest

from prompt_validator.core.stabilizer import wait_for_stable_text
from prompt_validator.errors import (
    RunCancelled,
    SourceUnavailable,
    TimeoutExceeded,
)


class VirtualClock:
	"""Monotonic clock advanced only by sleep()."""

	def __init__(self) -> None:
		self.now = 0.0
		self.sleeps: list[float] = []

	def __call__(self) -> float:
		return self.now

	async def sleep(self, seconds: float) -> None:
		self.sleeps.append(seconds)
		self.now += seconds


def timed_source(clock: VirtualClock, schedule: dict[float, str | None]):
	"""Sampler returning the latest scheduled value at the current time."""
	reads: list[tuple[float, str | None]] = []

	async def sample():
		value = None
		for t in sorted(schedule):
			if t <= clock.now:
				value = schedule[t]
		reads.append((clock.now, value))
		return value

	return sample, reads


class TestStabilization:
	"""Timing and confirmation rules."""

	@pytest.mark.asyncio
	async def test_returns_after_third_identical_sample(self) -> None:
		"""Text changing at t=0,1,2 then holding is returned at t=4."""
		clock = VirtualClock()
		sample, reads = timed_source(clock, {0: "A", 1: "AB", 2: "ABC"})
		text = await wait_for_stable_text(
		    sample,
		    interval=1.0,
		    repeat_count=3,
		    timeout=30,
		    clock=clock,
		    sleep=clock.sleep,
		)
		assert text == "ABC"
		assert clock.now == pytest.approx(4.0)
		assert [t for t, _ in reads] == [0, 1, 2, 3, 4]

	@pytest.mark.asyncio
	async def test_stale_text_still_needs_full_confirmation(self) -> None:
		"""Unchanged leftover text is not accepted on the first read."""
		clock = VirtualClock()
		sample, reads = timed_source(clock, {0: "previous reply"})
		text = await wait_for_stable_text(sample, interval=1.0,
		                                  repeat_count=3, timeout=30,
		                                  clock=clock, sleep=clock.sleep)
		assert text == "previous reply"
		assert len(reads) == 3
		assert clock.now == pytest.approx(2.0)

	@pytest.mark.asyncio
	async def test_empty_text_is_confirmed_like_any_other(self) -> None:
		clock = VirtualClock()
		sample, reads = timed_source(clock, {0: ""})
		text = await wait_for_stable_text(sample, interval=1.0,
		                                  repeat_count=3, timeout=30,
		                                  clock=clock, sleep=clock.sleep)
		assert text == ""
		assert len(reads) == 3

	@pytest.mark.asyncio
	async def test_missing_region_resets_streak(self) -> None:
		"""A None read between identical values restarts the count."""
		clock = VirtualClock()
		sample, reads = timed_source(clock, {0: "x", 2: None, 3: "x"})
		text = await wait_for_stable_text(sample, interval=1.0,
		                                  repeat_count=3, timeout=30,
		                                  clock=clock, sleep=clock.sleep)
		assert text == "x"
		assert clock.now == pytest.approx(5.0)

	@pytest.mark.asyncio
	async def test_repeat_count_one_returns_first_value(self) -> None:
		clock = VirtualClock()
		sample, _ = timed_source(clock, {0: "done"})
		text = await wait_for_stable_text(sample, repeat_count=1,
		                                  clock=clock, sleep=clock.sleep)
		assert text == "done"
		assert clock.sleeps == []

	@pytest.mark.asyncio
	async def test_each_poll_sleeps_for_interval(self) -> None:
		clock = VirtualClock()
		sample, _ = timed_source(clock, {0: "a"})
		await wait_for_stable_text(sample, interval=0.25, repeat_count=3,
		                           clock=clock, sleep=clock.sleep)
		assert clock.sleeps == [0.25, 0.25]

	@pytest.mark.asyncio
	async def test_unsettled_reads_do_not_count(self) -> None:
		"""Identical text only counts once the source reports it is settled."""
		clock = VirtualClock()
		sample, _ = timed_source(clock, {0: "Let me check."})
		text = await wait_for_stable_text(sample, interval=1.0,
		                                  repeat_count=3, timeout=30,
		                                  is_settled=lambda: clock.now >= 5,
		                                  clock=clock, sleep=clock.sleep)
		assert text == "Let me check."
		assert clock.now == pytest.approx(7.0)

	@pytest.mark.asyncio
	async def test_unsettled_timeout_keeps_partial_text(self) -> None:
		clock = VirtualClock()
		sample, _ = timed_source(clock, {0: "half"})
		with pytest.raises(TimeoutExceeded) as exc_info:
			await wait_for_stable_text(sample, interval=1.0, repeat_count=2,
			                           timeout=4, is_settled=lambda: False,
			                           clock=clock, sleep=clock.sleep)
		assert exc_info.value.partial_text == "half"

	@pytest.mark.asyncio
	async def test_invalid_repeat_count(self) -> None:
		clock = VirtualClock()
		sample, _ = timed_source(clock, {0: "a"})
		with pytest.raises(ValueError):
			await wait_for_stable_text(sample, repeat_count=0, clock=clock,
			                           sleep=clock.sleep)


class TestStabilizationFailures:
	"""Timeout, unavailable source and cancellation."""

	@pytest.mark.asyncio
	async def test_timeout_carries_partial_text(self) -> None:
		clock = VirtualClock()
		counter = {"n": 0}

		async def sample():
			counter["n"] += 1
			return f"streaming {counter['n']}"

		with pytest.raises(TimeoutExceeded) as exc_info:
			await wait_for_stable_text(sample, interval=1.0, repeat_count=3,
			                           timeout=5, clock=clock,
			                           sleep=clock.sleep)
		assert exc_info.value.partial_text == f"streaming {counter['n']}"
		assert clock.now == pytest.approx(5.0)

	@pytest.mark.asyncio
	async def test_region_never_appears(self) -> None:
		clock = VirtualClock()

		async def sample():
			return None

		with pytest.raises(SourceUnavailable):
			await wait_for_stable_text(sample, interval=1.0, timeout=3,
			                           clock=clock, sleep=clock.sleep)

	@pytest.mark.asyncio
	async def test_sampler_error_becomes_source_unavailable(self) -> None:
		clock = VirtualClock()

		async def sample():
			raise ConnectionError("browser closed")

		with pytest.raises(SourceUnavailable) as exc_info:
			await wait_for_stable_text(sample, clock=clock, sleep=clock.sleep)
		assert "browser closed" in str(exc_info.value)

	@pytest.mark.asyncio
	async def test_cancellation_stops_at_sampling_boundary(self) -> None:
		clock = VirtualClock()
		flags = {"cancel": False}
		reads = []

		async def sample():
			reads.append(clock.now)
			flags["cancel"] = True
			return "partial"

		with pytest.raises(RunCancelled) as exc_info:
			await wait_for_stable_text(
			    sample,
			    interval=1.0,
			    timeout=30,
			    is_cancelled=lambda: flags["cancel"],
			    clock=clock,
			    sleep=clock.sleep,
			)
		assert exc_info.value.partial_text == "partial"
		assert reads == [0.0]
