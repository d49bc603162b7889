"""Central registry for Prometheus metrics used by the directory client."""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram

log = logging.getLogger(__name__)


DIRECTORY_FETCHES = Counter(
	"recipeshare_directory_fetches_total",
	"Directory page fetches issued",
	["mode", "outcome"],
)

DIRECTORY_FETCH_LATENCY = Histogram(
	"recipeshare_directory_fetch_duration_seconds",
	"Directory page fetch latency in seconds",
	["mode"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

STALE_RESPONSES = Counter(
	"recipeshare_directory_stale_responses_total",
	"Directory pages discarded because a newer query superseded them",
	["mode"],
)

RELATIONSHIP_LOOKUPS = Counter(
	"recipeshare_relationship_lookups_total",
	"Per-user follow status lookups",
	["outcome"],
)

FOLLOW_TOGGLES = Counter(
	"recipeshare_follow_toggles_total",
	"Follow/unfollow calls issued from the directory view",
	["action", "outcome"],
)

PROFILE_REFRESHES = Counter(
	"recipeshare_profile_refreshes_total",
	"Navigation profile refresh attempts",
	["outcome"],
)


def inc_directory_fetch(mode: str, outcome: str) -> None:
	DIRECTORY_FETCHES.labels(mode=mode, outcome=outcome).inc()


def observe_fetch_latency(mode: str, latency_seconds: float) -> None:
	DIRECTORY_FETCH_LATENCY.labels(mode=mode).observe(latency_seconds)


def inc_stale_response(mode: str) -> None:
	STALE_RESPONSES.labels(mode=mode).inc()


def inc_relationship_lookup(outcome: str) -> None:
	RELATIONSHIP_LOOKUPS.labels(outcome=outcome).inc()


def inc_follow_toggle(action: str, outcome: str) -> None:
	FOLLOW_TOGGLES.labels(action=action, outcome=outcome).inc()


def inc_profile_refresh(outcome: str) -> None:
	PROFILE_REFRESHES.labels(outcome=outcome).inc()
