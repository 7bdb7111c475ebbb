"""Application settings loaded from environment variables."""

import os
from datetime import UTC, datetime
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Keepsake configuration. All values come from environment variables."""

    # HTTP
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    cors_allow_origin: str = Field(default="*")

    # Database
    database_path: Path = Field(default=Path("data/keepsake.db"))

    # Turso (hosted libSQL) — when set, overrides local database_path
    turso_database_url: str = Field(default="")
    turso_auth_token: str = Field(default="")

    # Uploaded photos
    uploads_dir: Path = Field(default=Path("uploads"))
    uploads_url_prefix: str = Field(default="/uploads")
    max_upload_bytes: int = Field(default=20 * 1024 * 1024)

    # Days-together counter
    love_day: datetime = Field(default=datetime(2025, 2, 11, tzinfo=UTC))

    # Memories
    recent_memories_limit: int = Field(default=2)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def get_uploads_url_prefix(self) -> str:
        """Normalize UPLOADS_URL_PREFIX to ``/name`` form (no trailing slash)."""
        prefix = "/" + self.uploads_url_prefix.strip().strip("/")
        return prefix if prefix != "/" else "/uploads"

    def get_love_day(self) -> datetime:
        """LOVE_DAY as an aware UTC datetime (naive values are taken as UTC)."""
        if self.love_day.tzinfo is None:
            return self.love_day.replace(tzinfo=UTC)
        return self.love_day.astimezone(UTC)


settings = Settings()
