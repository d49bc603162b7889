"""Follow-state overlay and the follow/unfollow toggle."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, Optional, Protocol, Tuple

from recipeshare.domain.directory.exceptions import DirectoryError, LookupFailure, ToggleFailure
from recipeshare.domain.directory.listing import ListingStore
from recipeshare.domain.directory.models import UserSummary
from recipeshare.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class FollowApi(Protocol):
	async def is_following(self, user_id: str) -> bool: ...

	async def follow(self, user_id: str) -> None: ...

	async def unfollow(self, user_id: str) -> None: ...


class RelationshipResolver:
	"""Fan out one follow-status lookup per user and join them into a mapping.

	A failed lookup never fails the batch; it resolves to ``False``.
	"""

	def __init__(self, api: FollowApi) -> None:
		self.api = api

	async def _lookup(self, user_id: str) -> Tuple[str, bool]:
		try:
			following = await self.api.is_following(user_id)
		except Exception as exc:
			failure = LookupFailure(user_id, getattr(exc, "reason", None))
			logger.info(
				"follow status lookup failed",
				extra={"target_id": user_id, "reason": failure.reason},
			)
			obs_metrics.inc_relationship_lookup("error")
			return user_id, False
		obs_metrics.inc_relationship_lookup("ok")
		return user_id, bool(following)

	async def resolve(self, users: Iterable[UserSummary]) -> Dict[str, bool]:
		ids = list(dict.fromkeys(user.id for user in users))
		if not ids:
			return {}
		results = await asyncio.gather(*(self._lookup(user_id) for user_id in ids))
		return dict(results)

	async def overlay(self, store: ListingStore, users: Iterable[UserSummary]) -> Dict[str, bool]:
		"""Resolve ``users`` and merge the result into ``store``'s flags."""

		revision = store.overlay_revision()
		resolved = await self.resolve(users)
		store.merge_flags(resolved, since_revision=revision)
		return resolved


class FollowToggle:
	"""Issue one follow/unfollow call and reconcile local state after it succeeds."""

	def __init__(self, api: FollowApi, store: ListingStore) -> None:
		self.api = api
		self.store = store
		self._in_flight: set[str] = set()

	def is_pending(self, user_id: str) -> bool:
		return str(user_id) in self._in_flight

	async def toggle(self, user_id: str, *, actor_id: Optional[str]) -> Optional[bool]:
		"""Flip the follow state of ``user_id``.

		Returns the new flag, or ``None`` when the call was skipped (self-target,
		no actor, or a toggle for the same user already pending). Raises
		``ToggleFailure`` when the remote call fails; nothing is mutated then.
		"""

		key = str(user_id)
		if actor_id is None or str(actor_id) == key:
			return None
		if key in self._in_flight:
			return None
		currently_following = self.store.is_following(key)
		action = "unfollow" if currently_following else "follow"
		self._in_flight.add(key)
		try:
			if currently_following:
				await self.api.unfollow(key)
			else:
				await self.api.follow(key)
		except DirectoryError as exc:
			obs_metrics.inc_follow_toggle(action, "error")
			logger.warning("follow toggle failed", extra={"target_id": key, "action": action, "reason": exc.reason})
			raise ToggleFailure(key, action) from exc
		finally:
			self._in_flight.discard(key)
		obs_metrics.inc_follow_toggle(action, "ok")
		self.store.apply_toggle(key, not currently_following)
		return not currently_following
