"""Last-seen profile cache backing the navigation bar."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from pydantic import ValidationError
from redis.exceptions import RedisError

from recipeshare.domain.directory.exceptions import DirectoryError
from recipeshare.domain.directory.models import DEFAULT_AVATAR_URL
from recipeshare.domain.profile.schemas import ProfileResponse
from recipeshare.infra.auth import Session
from recipeshare.infra.redis import redis_client
from recipeshare.obs import metrics as obs_metrics
from recipeshare.settings import settings

logger = logging.getLogger(__name__)


class ProfileApi(Protocol):
	async def get_profile(self) -> Any: ...


class ProfileCache:
	"""Keep the current user's profile fresh and persisted between runs.

	A failed refresh is logged and the previously cached profile stays in place.
	"""

	def __init__(self, session: Session, api: ProfileApi, *, cache_key: Optional[str] = None) -> None:
		self.session = session
		self.api = api
		self.cache_key = cache_key or settings.profile_cache_key
		self.profile: Optional[ProfileResponse] = None

	async def refresh(self) -> Optional[ProfileResponse]:
		if not self.session.is_authenticated:
			return self.profile
		try:
			data = await self.api.get_profile()
			profile = ProfileResponse.model_validate(data)
		except (DirectoryError, ValidationError) as exc:
			obs_metrics.inc_profile_refresh("error")
			logger.error("Error fetching profile: %s", exc)
			return self.profile
		self.profile = profile
		obs_metrics.inc_profile_refresh("ok")
		await self._persist(profile)
		return profile

	async def _persist(self, profile: ProfileResponse) -> None:
		try:
			await redis_client.set(self.cache_key, profile.model_dump_json(by_alias=True))
		except RedisError:
			logger.warning("Profile cache write failed", exc_info=True)

	async def load_cached(self) -> Optional[ProfileResponse]:
		"""Restore the last persisted profile, if any."""

		try:
			raw = await redis_client.get(self.cache_key)
		except RedisError:
			logger.warning("Profile cache read failed", exc_info=True)
			return self.profile
		if not raw:
			return self.profile
		try:
			self.profile = ProfileResponse.model_validate_json(raw)
		except ValidationError:
			logger.warning("Discarding unreadable cached profile")
			await self._drop()
		return self.profile

	async def sync_user(self) -> None:
		"""Forget the cached profile once the session no longer has a user."""

		if self.session.user is None:
			await self.clear()

	async def clear(self) -> None:
		self.profile = None
		await self._drop()

	async def _drop(self) -> None:
		try:
			await redis_client.delete(self.cache_key)
		except RedisError:
			logger.warning("Profile cache delete failed", exc_info=True)

	async def logout(self) -> None:
		await self.clear()
		self.session.clear()

	def display_name(self) -> Optional[str]:
		if self.profile and self.profile.name:
			return self.profile.name
		user = self.session.user
		return user.display_name if user else None

	def avatar_url(self) -> str:
		if self.profile and self.profile.profile_picture:
			return self.profile.profile_picture
		user = self.session.user
		if user and user.avatar_url:
			return user.avatar_url
		return DEFAULT_AVATAR_URL
