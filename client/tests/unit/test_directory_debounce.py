import asyncio

import pytest

from recipeshare.domain.directory.debounce import QueryDebouncer
from recipeshare.settings import settings

DELAY = 0.05


@pytest.mark.asyncio
async def test_debouncer_coalesces_rapid_input():
	settled: list = []
	debouncer = QueryDebouncer(settled.append, delay=DELAY)

	for text in ("c", "ch", "cha"):
		debouncer.set_query(text)
		await asyncio.sleep(DELAY / 10)
	assert settled == []
	assert debouncer.pending

	await asyncio.sleep(DELAY * 3)
	assert settled == ["cha"]
	assert not debouncer.pending


@pytest.mark.asyncio
async def test_debouncer_trims_and_maps_blank_to_browse():
	settled: list = []
	debouncer = QueryDebouncer(settled.append, delay=DELAY)

	debouncer.set_query("  pasta  ")
	await asyncio.sleep(DELAY * 3)
	debouncer.set_query("   ")
	await asyncio.sleep(DELAY * 3)

	assert settled == ["pasta", None]


@pytest.mark.asyncio
async def test_debouncer_fires_once_per_quiet_period():
	settled: list = []
	debouncer = QueryDebouncer(settled.append, delay=DELAY)

	debouncer.set_query("ta")
	await asyncio.sleep(DELAY * 3)
	debouncer.set_query("tac")
	debouncer.set_query("taco")
	await asyncio.sleep(DELAY * 3)

	assert settled == ["ta", "taco"]


@pytest.mark.asyncio
async def test_close_cancels_pending_dispatch():
	settled: list = []
	debouncer = QueryDebouncer(settled.append, delay=DELAY)

	debouncer.set_query("soup")
	debouncer.close()
	await asyncio.sleep(DELAY * 3)

	assert settled == []
	assert debouncer.query == "soup"


def test_default_delay_comes_from_settings():
	debouncer = QueryDebouncer(lambda _: None)
	assert debouncer.delay == settings.search_debounce_ms / 1000.0
	assert settings.search_debounce_ms == 300
