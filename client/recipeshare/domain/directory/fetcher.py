"""HTTP access to the RecipeShare user directory and follow endpoints."""

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Mapping, Optional

import httpx
from pydantic import ValidationError

from recipeshare.domain.directory.exceptions import NotAuthenticated, TransportError
from recipeshare.domain.directory.models import FetchMode, ResultPage, UserSummary
from recipeshare.domain.directory.schemas import FollowStatusResponse, UserPageResponse
from recipeshare.infra.auth import Session
from recipeshare.obs import metrics as obs_metrics
from recipeshare.settings import settings

logger = logging.getLogger(__name__)

BROWSE_PATH = "/users/initial"
SEARCH_PATH = "/users/search"
PROFILE_PATH = "/users/profile"


def _follow_status_path(user_id: str) -> str:
	return f"/users/{user_id}/is-following"


def _follow_action_path(user_id: str, action: str) -> str:
	return f"/users/{user_id}/{action}"


class DirectoryClient:
	"""Thin async wrapper around the directory endpoints.

	Every call raises ``TransportError`` on a non-2xx status, a network failure or
	an unreadable body, and ``NotAuthenticated`` (before any I/O) when the session
	has no credential. Nothing is retried here.
	"""

	def __init__(self, session: Session, http: httpx.AsyncClient, *, page_size: Optional[int] = None) -> None:
		self.session = session
		self.http = http
		self.page_size = page_size or settings.page_size

	async def fetch_browse_page(self, page: int, size: Optional[int] = None) -> ResultPage:
		params = {"page": page, "limit": size or self.page_size}
		return await self._fetch_page(FetchMode.BROWSE, BROWSE_PATH, params)

	async def fetch_search_page(self, term: str, page: int, size: Optional[int] = None) -> ResultPage:
		params = {"query": term, "page": page, "limit": size or self.page_size}
		return await self._fetch_page(FetchMode.SEARCH, SEARCH_PATH, params)

	async def is_following(self, user_id: str) -> bool:
		data = await self._request("GET", _follow_status_path(user_id))
		try:
			return FollowStatusResponse.model_validate(data).is_following
		except ValidationError as exc:
			raise TransportError("bad_follow_status") from exc

	async def follow(self, user_id: str) -> None:
		await self._request("POST", _follow_action_path(user_id, "follow"), expect_json=False)

	async def unfollow(self, user_id: str) -> None:
		await self._request("POST", _follow_action_path(user_id, "unfollow"), expect_json=False)

	async def get_profile(self) -> Any:
		return await self._request("GET", PROFILE_PATH)

	async def _fetch_page(self, mode: FetchMode, path: str, params: Mapping[str, Any]) -> ResultPage:
		start = perf_counter()
		try:
			data = await self._request("GET", path, params=params)
			try:
				parsed = UserPageResponse.model_validate(data)
			except ValidationError as exc:
				raise TransportError("bad_page") from exc
		except TransportError:
			obs_metrics.inc_directory_fetch(mode.value, "error")
			raise
		obs_metrics.inc_directory_fetch(mode.value, "ok")
		obs_metrics.observe_fetch_latency(mode.value, perf_counter() - start)
		return ResultPage(
			items=tuple(UserSummary.from_payload(user) for user in parsed.users),
			page_number=parsed.current_page,
			has_more=parsed.has_more,
		)

	async def _request(
		self,
		method: str,
		path: str,
		*,
		params: Optional[Mapping[str, Any]] = None,
		expect_json: bool = True,
	) -> Any:
		if not self.session.is_authenticated:
			raise NotAuthenticated()
		try:
			response = await self.http.request(
				method,
				path,
				params=params,
				headers=self.session.auth_headers(),
			)
		except httpx.HTTPError as exc:
			logger.warning("directory request failed", extra={"method": method, "path": path, "error": str(exc)})
			raise TransportError("network") from exc
		if response.is_error:
			logger.warning(
				"directory request rejected",
				extra={"method": method, "path": path, "status": response.status_code},
			)
			raise TransportError(f"http_{response.status_code}", status_code=response.status_code)
		if not expect_json:
			return None
		try:
			return response.json()
		except ValueError as exc:
			raise TransportError("bad_json", status_code=response.status_code) from exc
