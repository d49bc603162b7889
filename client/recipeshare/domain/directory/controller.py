"""Controller behind the "Search Users" view.

Wires the debouncer, the directory fetcher, the listing store and the follow
overlay together. Hosts call ``mount`` once, feed keystrokes to ``set_query``,
and call ``load_more`` / ``toggle_follow`` from the UI; everything they render
is read back from ``listing``, ``flags``, ``is_loading`` and ``error``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Dict, Optional, Protocol

import httpx

from recipeshare.domain.directory.debounce import QueryDebouncer
from recipeshare.domain.directory.exceptions import DirectoryError, ToggleFailure
from recipeshare.domain.directory.fetcher import DirectoryClient
from recipeshare.domain.directory.listing import FetchTicket, ListingStore
from recipeshare.domain.directory.models import FetchMode, ResultPage, VisibleListing
from recipeshare.domain.directory.relationships import FollowApi, FollowToggle, RelationshipResolver
from recipeshare.infra.auth import Session
from recipeshare.obs import metrics as obs_metrics
from recipeshare.obs.logging import bind_context, reset_context
from recipeshare.settings import settings

logger = logging.getLogger(__name__)

VIEW_NAME = "user_search"

_ERROR_MESSAGES = {
	FetchMode.BROWSE: "Failed to load users. Please try again.",
	FetchMode.SEARCH: "Failed to search users. Please try again.",
	FetchMode.LOAD_MORE: "Failed to load more users. Please try again.",
}


class DirectoryApi(FollowApi, Protocol):
	async def fetch_browse_page(self, page: int, size: Optional[int] = None) -> ResultPage: ...

	async def fetch_search_page(self, term: str, page: int, size: Optional[int] = None) -> ResultPage: ...


class UserSearchController:
	def __init__(
		self,
		session: Session,
		api: DirectoryApi,
		*,
		page_size: Optional[int] = None,
		debounce_delay: Optional[float] = None,
	) -> None:
		self.session = session
		self.api = api
		self.page_size = page_size or settings.page_size
		self.store = ListingStore(actor_id=session.user.id if session.user else None)
		self.resolver = RelationshipResolver(api)
		self.toggler = FollowToggle(api, self.store)
		self.debouncer = QueryDebouncer(self._on_query_settled, delay=debounce_delay)
		self.error: Optional[str] = None
		self._tasks: set[asyncio.Task] = set()
		self._closed = False

	@classmethod
	def for_session(cls, session: Session, http: httpx.AsyncClient, **kwargs) -> "UserSearchController":
		page_size = kwargs.get("page_size")
		return cls(session, DirectoryClient(session, http, page_size=page_size), **kwargs)

	# -- view state ----------------------------------------------------------

	@property
	def listing(self) -> VisibleListing:
		return self.store.listing

	@property
	def flags(self) -> Dict[str, bool]:
		return self.store.flags

	@property
	def is_loading(self) -> bool:
		return self.store.is_loading

	@property
	def query(self) -> str:
		return self.debouncer.query

	def is_following(self, user_id: str) -> bool:
		return self.store.is_following(user_id)

	# -- lifecycle -----------------------------------------------------------

	async def mount(self) -> bool:
		"""Load the first browse page immediately, without the debounce delay."""

		return await self.refresh(None)

	def close(self) -> None:
		"""Tear down the view: cancel any pending debounce timer.

		Requests already on the wire are left to finish; their results land in a
		store nobody reads any more.
		"""

		self._closed = True
		self.debouncer.close()

	async def aclose(self) -> None:
		self.close()
		await self.wait_idle()

	async def wait_idle(self) -> None:
		while self._tasks:
			await asyncio.gather(*list(self._tasks), return_exceptions=True)

	def _spawn(self, coro: Awaitable[bool]) -> None:
		task = asyncio.ensure_future(coro)
		self._tasks.add(task)
		task.add_done_callback(self._tasks.discard)

	# -- input ---------------------------------------------------------------

	def set_query(self, text: str) -> None:
		if self._closed:
			return
		self.debouncer.set_query(text)

	def _on_query_settled(self, term: Optional[str]) -> None:
		if self._closed:
			return
		self._spawn(self.refresh(term))

	# -- fetch pipeline ------------------------------------------------------

	def _actor_id(self) -> Optional[str]:
		return self.session.user.id if self.session.user else None

	async def _fetch(self, ticket: FetchTicket) -> ResultPage:
		if ticket.query:
			return await self.api.fetch_search_page(ticket.query, ticket.page, self.page_size)
		return await self.api.fetch_browse_page(ticket.page, self.page_size)

	async def refresh(self, term: Optional[str]) -> bool:
		"""Replace the listing with page 1 of ``term`` (browse when ``None``).

		Returns ``True`` when the fetched page was applied.
		"""

		if not self.session.is_authenticated:
			return False
		self.store.set_actor(self._actor_id())
		ticket = self.store.begin_replace(term or None)
		tokens = bind_context(
			user_id=self._actor_id(),
			view=VIEW_NAME,
			fetch_id=f"{ticket.generation}:{ticket.page}",
		)
		self.error = None
		try:
			try:
				page = await self._fetch(ticket)
			except DirectoryError as exc:
				if self.store.is_current(ticket):
					self.error = _ERROR_MESSAGES[ticket.mode]
				logger.warning("directory fetch failed", extra={"mode": ticket.mode.value, "reason": exc.reason})
				return False
			items = self.store.replace_page(ticket, page)
			if items is None:
				obs_metrics.inc_stale_response(ticket.mode.value)
				logger.debug("discarded superseded page", extra={"mode": ticket.mode.value})
				return False
			await self.resolver.overlay(self.store, items)
			return True
		finally:
			self.store.finish(ticket)
			reset_context(tokens)

	async def load_more(self) -> bool:
		"""Append the next page of the current context.

		A no-op (``False``) when nothing more is available or a fetch is in flight.
		"""

		if not self.session.is_authenticated:
			return False
		ticket = self.store.begin_load_more()
		if ticket is None:
			return False
		tokens = bind_context(
			user_id=self._actor_id(),
			view=VIEW_NAME,
			fetch_id=f"{ticket.generation}:{ticket.page}",
		)
		try:
			try:
				page = await self._fetch(ticket)
			except DirectoryError as exc:
				if self.store.is_current(ticket):
					self.error = _ERROR_MESSAGES[FetchMode.LOAD_MORE]
				logger.warning("load more failed", extra={"page": ticket.page, "reason": exc.reason})
				return False
			appended = self.store.append_page(ticket, page)
			if appended is None:
				obs_metrics.inc_stale_response(ticket.mode.value)
				logger.debug("discarded superseded page", extra={"mode": ticket.mode.value, "page": ticket.page})
				return False
			await self.resolver.overlay(self.store, appended)
			return True
		finally:
			self.store.finish(ticket)
			reset_context(tokens)

	# -- follow toggle -------------------------------------------------------

	async def toggle_follow(self, user_id: str) -> Optional[bool]:
		"""Follow or unfollow ``user_id``; returns the new flag or ``None`` if skipped/failed."""

		if not self.session.is_authenticated:
			return None
		try:
			return await self.toggler.toggle(user_id, actor_id=self._actor_id())
		except ToggleFailure as exc:
			self.error = str(exc)
			return None
