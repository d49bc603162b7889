"""Single-owner state container for the visible directory listing.

All mutations go through the reducer-style transitions on ``ListingStore``:
``replace_page``, ``append_page``, ``merge_flags`` and ``apply_toggle``. Each one
runs synchronously under the store lock, so callbacks resuming from different
network calls can never interleave a partial update.

Stale responses are handled with generations: every fresh browse/search bumps
the generation, and a page whose ticket carries an older generation is dropped.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Dict, Mapping, Optional

from recipeshare.domain.directory.models import (
	FetchMode,
	ResultPage,
	UserSummary,
	VisibleListing,
	exclude_actor,
	sort_by_display_name,
)


@dataclass(frozen=True, slots=True)
class FetchTicket:
	"""Tag attached to every outgoing page fetch."""

	generation: int
	mode: FetchMode
	page: int
	query: Optional[str] = None


class ListingStore:
	"""Owns the visible listing, the follow flags and the in-flight fetch ticket.

	Every transition is a synchronous method that never awaits, so a plain
	``threading.Lock`` is the only serialization point. Keep it that way: an
	``asyncio.Lock`` would turn transitions into coroutines and let other tasks
	interleave between a staleness check and the write it guards.
	"""

	def __init__(self, actor_id: Optional[str] = None) -> None:
		self._lock = threading.Lock()
		self._actor_id = str(actor_id) if actor_id is not None else None
		self._listing = VisibleListing()
		self._flags: Dict[str, bool] = {}
		self._generation = 0
		self._pending: Optional[FetchTicket] = None
		self._revision = 0
		self._toggled_at: Dict[str, int] = {}

	# -- reads ---------------------------------------------------------------

	@property
	def listing(self) -> VisibleListing:
		return self._listing

	@property
	def flags(self) -> Dict[str, bool]:
		with self._lock:
			return dict(self._flags)

	@property
	def is_loading(self) -> bool:
		return self._pending is not None

	def is_following(self, user_id: str) -> bool:
		return self._flags.get(str(user_id), False)

	def is_current(self, ticket: FetchTicket) -> bool:
		return ticket.generation == self._generation

	def set_actor(self, actor_id: Optional[str]) -> None:
		with self._lock:
			self._actor_id = str(actor_id) if actor_id is not None else None

	# -- fetch bookkeeping ---------------------------------------------------

	def begin_replace(self, query: Optional[str]) -> FetchTicket:
		"""Open a new query context; any older in-flight page becomes stale."""

		with self._lock:
			self._generation += 1
			mode = FetchMode.BROWSE if query is None else FetchMode.SEARCH
			ticket = FetchTicket(generation=self._generation, mode=mode, page=1, query=query)
			self._pending = ticket
			return ticket

	def begin_load_more(self) -> Optional[FetchTicket]:
		"""Return a ticket for the next page, or ``None`` when guarded.

		Guarded when nothing more is available or any fetch of the current
		context is still in flight.
		"""

		with self._lock:
			if not self._listing.has_more or self._pending is not None:
				return None
			ticket = FetchTicket(
				generation=self._generation,
				mode=FetchMode.LOAD_MORE,
				page=self._listing.current_page + 1,
				query=self._listing.query,
			)
			self._pending = ticket
			return ticket

	def finish(self, ticket: FetchTicket) -> None:
		with self._lock:
			if self._pending == ticket:
				self._pending = None

	# -- transitions ---------------------------------------------------------

	def replace_page(self, ticket: FetchTicket, page: ResultPage) -> Optional[list[UserSummary]]:
		"""Swap in a fresh, sorted first page. Returns the new items, or ``None`` if stale."""

		with self._lock:
			if ticket.generation != self._generation:
				return None
			items = sort_by_display_name(exclude_actor(page.items, self._actor_id))
			self._listing = VisibleListing(
				items=tuple(items),
				current_page=page.page_number,
				has_more=page.has_more,
				query=ticket.query,
			)
			return items

	def append_page(self, ticket: FetchTicket, page: ResultPage) -> Optional[list[UserSummary]]:
		"""Append a follow-up page in server order. Returns the appended items, or ``None`` if stale."""

		with self._lock:
			if ticket.generation != self._generation:
				return None
			appended = exclude_actor(page.items, self._actor_id)
			self._listing = replace(
				self._listing,
				items=self._listing.items + tuple(appended),
				current_page=page.page_number,
				has_more=page.has_more,
			)
			return appended

	def overlay_revision(self) -> int:
		"""Revision to hand to ``merge_flags`` once a lookup batch completes."""

		return self._revision

	def merge_flags(self, flags: Mapping[str, bool], *, since_revision: Optional[int] = None) -> None:
		"""Merge resolver output into the session flags.

		Ids toggled after ``since_revision`` keep their toggled value; a lookup
		issued before the toggle cannot undo it.
		"""

		with self._lock:
			for user_id, following in flags.items():
				key = str(user_id)
				if since_revision is not None and self._toggled_at.get(key, -1) > since_revision:
					continue
				self._flags[key] = bool(following)

	def apply_toggle(self, user_id: str, now_following: bool) -> None:
		"""Record a confirmed follow/unfollow and adjust the follower count."""

		key = str(user_id)
		with self._lock:
			previous = self._flags.get(key, False)
			self._revision += 1
			self._toggled_at[key] = self._revision
			self._flags[key] = now_following
			if previous == now_following:
				return
			delta = 1 if now_following else -1
			self._listing = replace(
				self._listing,
				items=tuple(
					item.with_follower_delta(delta) if item.id == key else item for item in self._listing.items
				),
			)
