"""Debounce free-text query input before dispatching a directory fetch."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from recipeshare.settings import settings


class QueryDebouncer:
	"""Delay ``on_settle`` until the query has been quiet for ``delay`` seconds.

	Each ``set_query`` cancels the pending timer, so only the last value in a
	burst of keystrokes is dispatched. ``on_settle`` receives the trimmed query,
	or ``None`` when it is blank (the browse listing).
	"""

	def __init__(self, on_settle: Callable[[Optional[str]], None], *, delay: Optional[float] = None) -> None:
		self.on_settle = on_settle
		self.delay = settings.search_debounce_seconds if delay is None else delay
		self.query = ""
		self._handle: Optional[asyncio.TimerHandle] = None

	@property
	def pending(self) -> bool:
		return self._handle is not None

	def set_query(self, text: str) -> None:
		self.query = text
		self.cancel()
		loop = asyncio.get_running_loop()
		self._handle = loop.call_later(self.delay, self._fire, text)

	def cancel(self) -> None:
		if self._handle is not None:
			self._handle.cancel()
			self._handle = None

	def close(self) -> None:
		self.cancel()

	def _fire(self, text: str) -> None:
		self._handle = None
		term = text.strip()
		self.on_settle(term or None)
