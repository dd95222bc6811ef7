"""
Per-run context.

Carries the state one run needs across components (identity,
cancellation signal, deadline and progress reporting) explicitly,
so several runs can execute concurrently without shared globals.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

ProgressCallback = Callable[[str, str], None]


@dataclass
class RunContext:
	"""State owned by a single run."""

	run_id: str
	cancel_event: asyncio.Event = field(default_factory=asyncio.Event)
	deadline: Optional[float] = None
	progress_cb: Optional[ProgressCallback] = None
	clock: Callable[[], float] = time.monotonic

	@classmethod
	def create(
	    cls,
	    run_id: str,
	    run_timeout: float | None = None,
	    progress_cb: ProgressCallback | None = None,
	    clock: Callable[[], float] = time.monotonic,
	) -> "RunContext":
		"""Build a context whose deadline starts counting now."""
		deadline = clock() + run_timeout if run_timeout else None
		return cls(
		    run_id=run_id,
		    deadline=deadline,
		    progress_cb=progress_cb,
		    clock=clock,
		)

	def cancel(self) -> None:
		self.cancel_event.set()

	def is_cancelled(self) -> bool:
		"""Return True once cancelled explicitly or past the run deadline."""
		if self.cancel_event.is_set():
			return True
		return self.deadline is not None and self.clock() >= self.deadline

	def emit(self, msg: str) -> None:
		if self.progress_cb:
			self.progress_cb(self.run_id, msg)


__all__ = ["RunContext", "ProgressCallback"]
