"""Pydantic schema for the signed-in user's own profile."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProfileResponse(BaseModel):
	model_config = ConfigDict(populate_by_name=True, extra="ignore")

	id: Optional[str] = Field(default=None, alias="_id")
	name: Optional[str] = None
	email: Optional[str] = None
	profile_picture: Optional[str] = Field(default=None, alias="profilePicture")
	bio: Optional[str] = None
	follower_count: Optional[int] = Field(default=None, alias="followerCount")
	following_count: Optional[int] = Field(default=None, alias="followingCount")
