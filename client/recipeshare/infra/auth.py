"""Credential context shared by every outgoing directory request.

Token acquisition and storage live outside this package; callers hand a
``Session`` to the controllers once the user has signed in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	display_name: Optional[str] = None
	handle: Optional[str] = None
	avatar_url: Optional[str] = None


@dataclass(slots=True)
class Session:
	token: Optional[str] = None
	user: Optional[AuthenticatedUser] = None
	extra_headers: Dict[str, str] = field(default_factory=dict)

	@property
	def is_authenticated(self) -> bool:
		return bool(self.token) and self.user is not None

	def auth_headers(self) -> Dict[str, str]:
		headers = dict(self.extra_headers)
		if self.token:
			headers["Authorization"] = f"Bearer {self.token}"
		return headers

	def clear(self) -> None:
		self.token = None
		self.user = None
