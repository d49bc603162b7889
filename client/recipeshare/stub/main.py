"""In-memory FastAPI stand-in for the RecipeShare user endpoints.

Serves the same JSON shapes as the real API so the client can be exercised
locally and in tests without the Node backend. Not a production server.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


@dataclass(slots=True)
class StubUser:
	id: str
	name: str
	email: str
	profile_picture: Optional[str] = None
	bio: Optional[str] = None


@dataclass
class StubDirectory:
	users: Dict[str, StubUser] = field(default_factory=dict)
	follows: Set[Tuple[str, str]] = field(default_factory=set)
	tokens: Dict[str, str] = field(default_factory=dict)
	# Users whose follow-status lookup answers 500
	broken_status_ids: Set[str] = field(default_factory=set)

	def seed(
		self,
		users: Iterable[StubUser],
		*,
		follows: Iterable[Tuple[str, str]] = (),
		tokens: Optional[Dict[str, str]] = None,
	) -> None:
		for user in users:
			self.users[user.id] = user
		self.follows.update(follows)
		self.tokens.update(tokens or {})

	def reset(self) -> None:
		self.users.clear()
		self.follows.clear()
		self.tokens.clear()
		self.broken_status_ids.clear()

	def follower_count(self, user_id: str) -> int:
		return sum(1 for _, followee in self.follows if followee == user_id)

	def following_count(self, user_id: str) -> int:
		return sum(1 for follower, _ in self.follows if follower == user_id)

	def to_wire(self, user: StubUser) -> dict:
		return {
			"_id": user.id,
			"name": user.name,
			"email": user.email,
			"profilePicture": user.profile_picture,
			"bio": user.bio,
			"followerCount": self.follower_count(user.id),
		}

	def page(self, users: List[StubUser], page: int, limit: int) -> dict:
		start = (page - 1) * limit
		chunk = users[start : start + limit]
		return {
			"users": [self.to_wire(user) for user in chunk],
			"hasMore": start + limit < len(users),
			"currentPage": page,
		}

	def search(self, query: str) -> List[StubUser]:
		needle = query.strip().lower()
		return [
			user
			for user in self.users.values()
			if needle in user.name.lower() or needle in user.email.lower()
		]


directory = StubDirectory()
_bearer_scheme = HTTPBearer(auto_error=False)


def get_directory() -> StubDirectory:
	return directory


def get_current_user_id(
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
	store: StubDirectory = Depends(get_directory),
) -> str:
	if credentials is None:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="missing_token")
	user_id = store.tokens.get(credentials.credentials)
	if user_id is None or user_id not in store.users:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
	return user_id


def _require_user(store: StubDirectory, user_id: str) -> StubUser:
	user = store.users.get(user_id)
	if user is None:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user_not_found")
	return user


router = APIRouter(prefix="/users", tags=["users"])


@router.get("/initial")
async def list_initial(
	page: int = Query(1, ge=1),
	limit: int = Query(9, ge=1, le=100),
	_: str = Depends(get_current_user_id),
	store: StubDirectory = Depends(get_directory),
) -> dict:
	return store.page(list(store.users.values()), page, limit)


@router.get("/search")
async def search_users(
	query: str = Query(..., min_length=1),
	page: int = Query(1, ge=1),
	limit: int = Query(9, ge=1, le=100),
	_: str = Depends(get_current_user_id),
	store: StubDirectory = Depends(get_directory),
) -> dict:
	return store.page(store.search(query), page, limit)


@router.get("/profile")
async def get_profile(
	me: str = Depends(get_current_user_id),
	store: StubDirectory = Depends(get_directory),
) -> dict:
	payload = store.to_wire(_require_user(store, me))
	payload["followingCount"] = store.following_count(me)
	return payload


@router.get("/{user_id}/is-following")
async def is_following(
	user_id: str,
	me: str = Depends(get_current_user_id),
	store: StubDirectory = Depends(get_directory),
) -> dict:
	if user_id in store.broken_status_ids:
		raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="lookup_failed")
	_require_user(store, user_id)
	return {"isFollowing": (me, user_id) in store.follows}


@router.post("/{user_id}/follow")
async def follow(
	user_id: str,
	me: str = Depends(get_current_user_id),
	store: StubDirectory = Depends(get_directory),
) -> dict:
	_require_user(store, user_id)
	if user_id == me:
		raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="self_follow")
	if (me, user_id) in store.follows:
		raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="already_following")
	store.follows.add((me, user_id))
	logger.info("follow", extra={"follower": me, "followee": user_id})
	return {"message": "Successfully followed user"}


@router.post("/{user_id}/unfollow")
async def unfollow(
	user_id: str,
	me: str = Depends(get_current_user_id),
	store: StubDirectory = Depends(get_directory),
) -> dict:
	_require_user(store, user_id)
	if (me, user_id) not in store.follows:
		raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="not_following")
	store.follows.discard((me, user_id))
	logger.info("unfollow", extra={"follower": me, "followee": user_id})
	return {"message": "Successfully unfollowed user"}


def create_app() -> FastAPI:
	app = FastAPI(title="RecipeShare directory stub")
	app.include_router(router, prefix=API_PREFIX)
	return app


app = create_app()
