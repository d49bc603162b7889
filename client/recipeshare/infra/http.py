"""httpx client construction for the RecipeShare API."""

from __future__ import annotations

from typing import Optional

import httpx

from recipeshare.settings import settings


def build_http_client(
	*,
	base_url: Optional[str] = None,
	timeout: Optional[float] = None,
	transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
	"""Return an AsyncClient rooted at the API base URL.

	Credentials are attached per request from the current ``Session`` so a single
	client survives login/logout.
	"""
	return httpx.AsyncClient(
		base_url=base_url or settings.api_base_url,
		timeout=timeout if timeout is not None else settings.request_timeout_seconds,
		transport=transport,
		headers={"Accept": "application/json"},
	)
