import asyncio

import pytest

from recipeshare.domain.directory.exceptions import ToggleFailure
from recipeshare.domain.directory.listing import ListingStore
from recipeshare.domain.directory.models import ResultPage
from recipeshare.domain.directory.relationships import FollowToggle, RelationshipResolver

ME = "u-me"


def _store_with(users) -> ListingStore:
	store = ListingStore(actor_id=ME)
	ticket = store.begin_replace(None)
	store.replace_page(ticket, ResultPage(items=tuple(users), page_number=1, has_more=False))
	store.finish(ticket)
	return store


@pytest.mark.asyncio
async def test_resolver_maps_failed_lookup_to_false_without_failing_batch(fake_api, make_user):
	fake_api.status = {"u-1": True, "u-2": True, "u-3": False}
	fake_api.failing_status = {"u-2"}
	users = [make_user("u-1", "A"), make_user("u-2", "B"), make_user("u-3", "C")]

	resolved = await RelationshipResolver(fake_api).resolve(users)

	assert resolved == {"u-1": True, "u-2": False, "u-3": False}
	assert fake_api.count("is_following") == 3


@pytest.mark.asyncio
async def test_resolver_survives_unexpected_errors(make_user):
	class Exploding:
		async def is_following(self, user_id):
			if user_id == "u-1":
				raise RuntimeError("boom")
			return True

	resolved = await RelationshipResolver(Exploding()).resolve([make_user("u-1", "A"), make_user("u-2", "B")])
	assert resolved == {"u-1": False, "u-2": True}


@pytest.mark.asyncio
async def test_resolver_runs_lookups_concurrently(make_user):
	started: list = []
	release = asyncio.Event()

	class Slow:
		async def is_following(self, user_id):
			started.append(user_id)
			await release.wait()
			return True

	task = asyncio.ensure_future(RelationshipResolver(Slow()).resolve([make_user(f"u-{i}", "X") for i in range(4)]))
	for _ in range(5):
		await asyncio.sleep(0)
	assert sorted(started) == ["u-0", "u-1", "u-2", "u-3"]
	assert not task.done()

	release.set()
	assert await task == {f"u-{i}": True for i in range(4)}


@pytest.mark.asyncio
async def test_resolver_empty_batch_issues_no_requests(fake_api):
	assert await RelationshipResolver(fake_api).resolve([]) == {}
	assert fake_api.calls == []


@pytest.mark.asyncio
async def test_follow_increments_count_with_single_call(fake_api, make_user):
	store = _store_with([make_user("u-1", "Ana", followers=5)])
	store.merge_flags({"u-1": False})
	toggle = FollowToggle(fake_api, store)

	result = await toggle.toggle("u-1", actor_id=ME)

	assert result is True
	assert store.is_following("u-1")
	assert store.listing.get("u-1").follower_count == 6
	assert fake_api.calls == [("follow", "u-1")]


@pytest.mark.asyncio
async def test_unfollow_decrements_count(fake_api, make_user):
	store = _store_with([make_user("u-1", "Ana", followers=5)])
	store.merge_flags({"u-1": True})

	assert await FollowToggle(fake_api, store).toggle("u-1", actor_id=ME) is False
	assert store.listing.get("u-1").follower_count == 4
	assert fake_api.calls == [("unfollow", "u-1")]


@pytest.mark.asyncio
async def test_toggle_on_self_or_without_actor_is_noop(fake_api, make_user):
	store = _store_with([make_user("u-1", "Ana")])
	toggle = FollowToggle(fake_api, store)

	assert await toggle.toggle(ME, actor_id=ME) is None
	assert await toggle.toggle("u-1", actor_id=None) is None
	assert fake_api.calls == []


@pytest.mark.asyncio
async def test_failed_toggle_leaves_state_unchanged(fake_api, make_user):
	store = _store_with([make_user("u-1", "Ana", followers=5)])
	fake_api.failing_toggles = {"u-1"}
	toggle = FollowToggle(fake_api, store)

	with pytest.raises(ToggleFailure) as exc_info:
		await toggle.toggle("u-1", actor_id=ME)

	assert str(exc_info.value) == "Failed to follow user"
	assert exc_info.value.action == "follow"
	assert store.is_following("u-1") is False
	assert store.listing.get("u-1").follower_count == 5
	assert not toggle.is_pending("u-1")


@pytest.mark.asyncio
async def test_concurrent_toggle_on_same_user_is_dropped(fake_api, make_user):
	store = _store_with([make_user("u-1", "Ana", followers=2)])
	fake_api.toggle_gate = asyncio.Event()
	toggle = FollowToggle(fake_api, store)

	first = asyncio.ensure_future(toggle.toggle("u-1", actor_id=ME))
	await asyncio.sleep(0)
	assert toggle.is_pending("u-1")
	assert await toggle.toggle("u-1", actor_id=ME) is None

	fake_api.toggle_gate.set()
	assert await first is True
	assert store.listing.get("u-1").follower_count == 3
	assert fake_api.count("follow") == 1


@pytest.mark.asyncio
async def test_overlay_does_not_undo_a_later_toggle(fake_api, make_user):
	store = _store_with([make_user("u-1", "Ana", followers=1)])
	release = asyncio.Event()

	class SlowStatus:
		async def is_following(self, user_id):
			await release.wait()
			return False

	overlay = asyncio.ensure_future(RelationshipResolver(SlowStatus()).overlay(store, store.listing.items))
	await asyncio.sleep(0)
	await FollowToggle(fake_api, store).toggle("u-1", actor_id=ME)

	release.set()
	await overlay
	assert store.is_following("u-1") is True
