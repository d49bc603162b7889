"""Domain models for the user directory listing."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional, Tuple

from pyuca import Collator

from recipeshare.domain.directory.schemas import UserPayload
from recipeshare.settings import settings

DEFAULT_AVATAR_URL = settings.default_avatar_url

# Unicode Collation Algorithm over the default table; independent of the process locale.
_COLLATOR = Collator()


class FetchMode(str, Enum):
	"""How a fetched page enters the visible listing."""

	BROWSE = "browse"
	SEARCH = "search"
	LOAD_MORE = "load_more"


@dataclass(frozen=True, slots=True)
class UserSummary:
	"""A row in the directory; only ``follower_count`` ever changes, via copies."""

	id: str
	display_name: str
	contact_handle: str
	avatar_url: Optional[str] = None
	bio: Optional[str] = None
	follower_count: int = 0

	@property
	def avatar(self) -> str:
		return self.avatar_url or DEFAULT_AVATAR_URL

	def with_follower_delta(self, delta: int) -> "UserSummary":
		return replace(self, follower_count=max(0, self.follower_count + delta))

	@classmethod
	def from_payload(cls, payload: UserPayload) -> "UserSummary":
		return cls(
			id=str(payload.id),
			display_name=payload.name or "",
			contact_handle=payload.email or "",
			avatar_url=payload.profile_picture or None,
			bio=payload.bio or None,
			follower_count=max(0, payload.follower_count or 0),
		)


@dataclass(frozen=True, slots=True)
class ResultPage:
	items: Tuple[UserSummary, ...]
	page_number: int
	has_more: bool


@dataclass(frozen=True, slots=True)
class VisibleListing:
	"""Snapshot of what the view renders.

	``query`` is ``None`` for the browse listing, otherwise the active search term.
	"""

	items: Tuple[UserSummary, ...] = ()
	current_page: int = 1
	has_more: bool = False
	query: Optional[str] = None

	@property
	def is_browse(self) -> bool:
		return self.query is None

	def ids(self) -> list[str]:
		return [item.id for item in self.items]

	def get(self, user_id: str) -> Optional[UserSummary]:
		for item in self.items:
			if item.id == user_id:
				return item
		return None


def display_name_key(user: UserSummary) -> Tuple[int, ...]:
	"""Case-insensitive, locale-aware collation key.

	Accented and non-Latin names collate with their base letters (``Émile`` sorts
	between ``adam`` and ``Zoe``) rather than after every ASCII name.
	"""

	return _COLLATOR.sort_key(user.display_name.casefold())


def exclude_actor(items: Iterable[UserSummary], actor_id: Optional[str]) -> list[UserSummary]:
	if actor_id is None:
		return list(items)
	return [item for item in items if item.id != str(actor_id)]


def sort_by_display_name(items: Iterable[UserSummary]) -> list[UserSummary]:
	return sorted(items, key=display_name_key)
