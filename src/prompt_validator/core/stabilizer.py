"""
Reply stabilization detection.

A chat reply streams in without any completion signal, so the reply
region is sampled at a fixed interval until the same text has been read
a number of times in a row. The clock and sleep are injectable so the
wait composes with any scheduler and can run against a virtual clock.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional

from prompt_validator.errors import (
    RunCancelled,
    SourceUnavailable,
    TimeoutExceeded,
    ValidationPipelineError,
)
from prompt_validator.utils.logging import get_logger

logger = get_logger(__name__)

Sampler = Callable[[], Awaitable[Optional[str]]]

DEFAULT_INTERVAL = 1.0
DEFAULT_REPEAT_COUNT = 3


async def wait_for_stable_text(
    sample: Sampler,
    *,
    interval: float = DEFAULT_INTERVAL,
    repeat_count: int = DEFAULT_REPEAT_COUNT,
    timeout: float = 60.0,
    is_cancelled: Callable[[], bool] | None = None,
    is_settled: Callable[[], bool] | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> str:
	"""Sample until the text is identical across ``repeat_count`` reads.

	The first read never counts as stable on its own: empty text or text
	left over from the previous turn still needs the full confirmation.

	Parameters:
		sample: Async callable returning the current text, or None when
			the region does not exist yet.
		interval: Seconds to sleep between samples.
		repeat_count: Consecutive identical samples required.
		timeout: Overall bound in seconds.
		is_cancelled: Checked at every sampling boundary.
		is_settled: When given, a read only counts towards the streak while
			this returns True, e.g. once the session reports it is idle.
		clock: Monotonic time source.
		sleep: Async sleep used between samples.

	Returns:
		The stabilized text.

	Raises:
		TimeoutExceeded: Timeout elapsed after text was read; carries the
			last text seen as ``partial_text``.
		SourceUnavailable: The sampler failed, or never produced a value
			before the timeout.
		RunCancelled: Cancellation observed; carries ``partial_text``.
	"""
	if repeat_count < 1:
		raise ValueError("repeat_count must be >= 1")
	start = clock()
	last: str | None = None
	streak = 0
	samples = 0
	while True:
		if is_cancelled and is_cancelled():
			raise RunCancelled(partial_text=last)
		settled = is_settled is None or is_settled()
		try:
			current = await sample()
		except ValidationPipelineError:
			raise
		except Exception as exc:
			raise SourceUnavailable(f"reply text could not be sampled: {exc}") from exc
		samples += 1

		if current is None:
			streak = 0
		elif not settled:
			last = current
			streak = 0
		elif streak > 0 and current == last:
			streak += 1
		else:
			last = current
			streak = 1

		if streak >= repeat_count:
			logger.debug("text stable after %d samples (%.1fs)", samples,
			             clock() - start)
			return current

		if clock() - start >= timeout:
			if last is None:
				raise SourceUnavailable(
				    f"reply region did not appear within {timeout:g}s")
			raise TimeoutExceeded(
			    f"text did not stabilize within {timeout:g}s",
			    partial_text=last,
			)
		await sleep(interval)


__all__ = ["wait_for_stable_text", "Sampler"]
