"""Pydantic schemas for the directory service wire format."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserPayload(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	id: str = Field(..., alias="_id")
	name: str = ""
	email: str = ""
	profile_picture: Optional[str] = Field(default=None, alias="profilePicture")
	bio: Optional[str] = None
	follower_count: Optional[int] = Field(default=None, alias="followerCount")


class UserPageResponse(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	users: List[UserPayload] = Field(default_factory=list)
	has_more: bool = Field(default=False, alias="hasMore")
	current_page: int = Field(default=1, alias="currentPage", ge=1)


class FollowStatusResponse(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	is_following: bool = Field(..., alias="isFollowing")
