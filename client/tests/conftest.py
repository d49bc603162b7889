import asyncio
import sys
from pathlib import Path
from typing import Dict, Optional, Set, Tuple

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

# Ensure the client package is importable when tests run from repo root
CLIENT_ROOT = Path(__file__).resolve().parents[1]
if str(CLIENT_ROOT) not in sys.path:
	sys.path.insert(0, str(CLIENT_ROOT))

from recipeshare.domain.directory.exceptions import TransportError
from recipeshare.domain.directory.models import ResultPage, UserSummary
from recipeshare.infra.auth import AuthenticatedUser, Session
from recipeshare.stub.main import StubUser, app as stub_app, directory as stub_directory

ME = "u-me"


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from recipeshare.infra.redis import redis_client, set_redis_client

	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture
def session() -> Session:
	return Session(token="token-me", user=AuthenticatedUser(id=ME, display_name="Me Myself"))


def make_user(user_id: str, name: str, *, followers: int = 0, email: Optional[str] = None) -> UserSummary:
	return UserSummary(
		id=user_id,
		display_name=name,
		contact_handle=email or f"{user_id}@example.com",
		follower_count=followers,
	)


@pytest.fixture(name="make_user")
def make_user_fixture():
	return make_user


class FakeDirectoryApi:
	"""Scriptable stand-in for DirectoryClient.

	Pages are keyed by ``(query, page)`` with ``query=None`` for browse. A key in
	``gates`` holds its response until the event is set.
	"""

	def __init__(self) -> None:
		self.pages: Dict[Tuple[Optional[str], int], ResultPage] = {}
		self.failing_pages: Set[Tuple[Optional[str], int]] = set()
		self.gates: Dict[Tuple[Optional[str], int], asyncio.Event] = {}
		self.status: Dict[str, bool] = {}
		self.failing_status: Set[str] = set()
		self.failing_toggles: Set[str] = set()
		self.toggle_gate: Optional[asyncio.Event] = None
		self.calls: list[tuple] = []

	def add_page(self, query: Optional[str], page: int, items, *, has_more: bool = False) -> None:
		self.pages[(query, page)] = ResultPage(items=tuple(items), page_number=page, has_more=has_more)

	async def _page(self, query: Optional[str], page: int) -> ResultPage:
		key = (query, page)
		gate = self.gates.get(key)
		if gate is not None:
			await gate.wait()
		if key in self.failing_pages:
			raise TransportError("http_500", status_code=500)
		return self.pages.get(key, ResultPage(items=(), page_number=page, has_more=False))

	async def fetch_browse_page(self, page: int, size: Optional[int] = None) -> ResultPage:
		self.calls.append(("browse", page, size))
		return await self._page(None, page)

	async def fetch_search_page(self, term: str, page: int, size: Optional[int] = None) -> ResultPage:
		self.calls.append(("search", term, page, size))
		return await self._page(term, page)

	async def is_following(self, user_id: str) -> bool:
		self.calls.append(("is_following", user_id))
		await asyncio.sleep(0)
		if user_id in self.failing_status:
			raise TransportError("http_500", status_code=500)
		return self.status.get(user_id, False)

	async def _toggle(self, action: str, user_id: str) -> None:
		self.calls.append((action, user_id))
		if self.toggle_gate is not None:
			await self.toggle_gate.wait()
		if user_id in self.failing_toggles:
			raise TransportError("http_500", status_code=500)
		self.status[user_id] = action == "follow"

	async def follow(self, user_id: str) -> None:
		await self._toggle("follow", user_id)

	async def unfollow(self, user_id: str) -> None:
		await self._toggle("unfollow", user_id)

	def count(self, kind: str) -> int:
		return sum(1 for call in self.calls if call[0] == kind)


@pytest.fixture
def fake_api() -> FakeDirectoryApi:
	return FakeDirectoryApi()


@pytest.fixture
def stub():
	stub_directory.reset()
	stub_directory.seed(
		[
			StubUser(id=ME, name="Me Myself", email="me@example.com"),
			StubUser(id="u-charlie", name="Charlie Chaplin", email="charlie@example.com", bio="Silent chef"),
			StubUser(id="u-chad", name="chad", email="chad@example.com"),
			StubUser(id="u-ana", name="Ana Lopez", email="ana@example.com"),
			StubUser(id="u-richard", name="Richard Chan", email="rich@example.com"),
		],
		follows=[("u-ana", "u-charlie"), (ME, "u-ana")],
		tokens={"token-me": ME, "token-ana": "u-ana"},
	)
	try:
		yield stub_directory
	finally:
		stub_directory.reset()


@pytest_asyncio.fixture
async def http():
	transport = ASGITransport(app=stub_app)
	async with AsyncClient(transport=transport, base_url="http://testserver/api") as client:
		yield client
