"""Runtime configuration for the runtime library loader."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration values mapped from ``RUNTIME_LIBS_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RUNTIME_LIBS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field("runtime-libs", description="Host identity, used when the manifest has no name")
    version: str = "0.1.0"

    # Declaration source
    manifest_path: str = "runtime-libraries.yml"
    manifest_section: str = "runtime-libraries"

    # Cache location; libraries land in <storage_root>/<app name>/<libraries folder>
    storage_root: str = "~/.runtime-libs"

    # Remote repository access
    default_repository: str = "https://repo1.maven.org/maven2/"
    repository_username: Optional[str] = None
    repository_password: Optional[str] = None
    http_timeout: float = 30.0
    http_verify: bool = True

    log_level: str = "INFO"

    @property
    def storage_root_path(self) -> Path:
        return Path(self.storage_root).expanduser()


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance for dependency injection."""
    return Settings()
