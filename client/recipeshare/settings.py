"""Settings for the RecipeShare directory client with observability configuration."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
	if env_names:
		alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
		return Field(default=default, validation_alias=alias)
	return Field(default=default)


class Settings(BaseSettings):
	api_base_url: str = _env_field("http://localhost:3000/api", "RECIPESHARE_API_URL", "API_BASE_URL")
	page_size: int = _env_field(9, "DIRECTORY_PAGE_SIZE")
	search_debounce_ms: int = _env_field(300, "SEARCH_DEBOUNCE_MS")
	request_timeout_seconds: float = _env_field(10.0, "REQUEST_TIMEOUT_SECONDS")
	default_avatar_url: str = _env_field(
		"https://cdn-icons-png.flaticon.com/512/2922/2922510.png",
		"DEFAULT_AVATAR_URL",
	)

	# Last-seen profile of the signed-in user (navigation bar)
	redis_url: str = _env_field("redis://localhost:6379/0", "REDIS_URL")
	profile_cache_key: str = _env_field("dev_profile", "PROFILE_CACHE_KEY")

	environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
	obs_enabled: bool = _env_field(True, "OBS_ENABLED")
	obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
	obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")
	service_name: str = _env_field("recipeshare-client", "SERVICE_NAME")
	git_commit: Optional[str] = _env_field(None, "GIT_COMMIT", "COMMIT_SHA")

	def is_prod(self) -> bool:
		return self.environment.lower() in ("prod", "production", "live")

	def is_dev(self) -> bool:
		return self.environment.lower() in ("dev", "development")

	@property
	def search_debounce_seconds(self) -> float:
		return max(0, self.search_debounce_ms) / 1000.0

	model_config = SettingsConfigDict(
		env_prefix="",
		env_file=".env",
		case_sensitive=False,
		extra="ignore",
	)

	@field_validator("api_base_url", mode="before")
	def _strip_trailing_slash(cls, value):  # type: ignore[override]
		if isinstance(value, str):
			return value.strip().rstrip("/")
		return value

	@field_validator("page_size")
	def _positive_page_size(cls, value: int) -> int:  # type: ignore[override]
		if value < 1:
			raise ValueError("page_size must be positive")
		return value


def _normalise_level(level: str) -> str:
	return level.upper()


settings = Settings()
settings.obs_log_level = _normalise_level(settings.obs_log_level)

