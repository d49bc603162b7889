"""Command-line helper to browse or search the RecipeShare user directory."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Optional, Sequence, TextIO

import httpx

from recipeshare import obs
from recipeshare.domain.directory.controller import UserSearchController
from recipeshare.infra.auth import AuthenticatedUser, Session
from recipeshare.infra.http import build_http_client
from recipeshare.settings import settings


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(description="List RecipeShare users with their follow state")
	parser.add_argument("query", nargs="?", default="", help="name or username filter; omit to browse")
	parser.add_argument("--token", required=True, help="bearer token of the signed-in user")
	parser.add_argument("--user-id", required=True, help="id of the signed-in user")
	parser.add_argument("--pages", type=int, default=1, help="number of pages to load")
	parser.add_argument("--follow", action="append", default=[], metavar="USER_ID", help="toggle follow on a user")
	parser.add_argument("--api-url", default=None, help=f"defaults to {settings.api_base_url}")
	return parser


def _render(controller: UserSearchController, out: TextIO) -> None:
	for user in controller.listing.items:
		marker = "*" if controller.is_following(user.id) else " "
		print(f"[{marker}] {user.display_name} <{user.contact_handle}> followers={user.follower_count} id={user.id}", file=out)
	if controller.listing.has_more:
		print("(more available)", file=out)
	if controller.error:
		print(f"error: {controller.error}", file=out)


async def run(
	args: argparse.Namespace,
	*,
	out: TextIO,
	transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
	session = Session(token=args.token, user=AuthenticatedUser(id=args.user_id))
	async with build_http_client(base_url=args.api_url, transport=transport) as http:
		controller = UserSearchController.for_session(session, http)
		loaded = await controller.refresh(args.query.strip() or None)
		for _ in range(max(0, args.pages - 1)):
			if not await controller.load_more():
				break
		for target in args.follow:
			await controller.toggle_follow(target)
		_render(controller, out)
		await controller.aclose()
	return 0 if loaded else 1


def main(argv: Optional[Sequence[str]] = None) -> int:
	obs.init()
	args = build_parser().parse_args(argv)
	return asyncio.run(run(args, out=sys.stdout))


if __name__ == "__main__":
	raise SystemExit(main())
