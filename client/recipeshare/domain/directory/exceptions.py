"""Domain-level exceptions for the user directory view."""

from __future__ import annotations

from typing import Optional


class DirectoryError(Exception):
	"""Base class for directory feature errors."""

	reason: str = "unknown"

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class TransportError(DirectoryError):
	"""Non-success response, network failure or unreadable body on any fetch."""

	reason = "transport"

	def __init__(self, reason: str | None = None, *, status_code: Optional[int] = None) -> None:
		super().__init__(reason)
		self.status_code = status_code


class NotAuthenticated(DirectoryError):
	reason = "not_authenticated"


class LookupFailure(DirectoryError):
	"""A single follow-status lookup failed; resolved to ``False`` by the resolver."""

	reason = "lookup_failed"

	def __init__(self, user_id: str, reason: str | None = None) -> None:
		super().__init__(reason)
		self.user_id = user_id


class ToggleFailure(DirectoryError):
	"""Follow/unfollow call failed; local state is left untouched."""

	reason = "toggle_failed"

	def __init__(self, user_id: str, action: str, reason: str | None = None) -> None:
		super().__init__(reason or f"Failed to {action} user")
		self.user_id = user_id
		self.action = action
