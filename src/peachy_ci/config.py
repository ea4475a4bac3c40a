"""Peachy CI configuration using pydantic-settings.

Settings are read from environment variables with the PEACHY_ prefix
(e.g. PEACHY_GITHUB_TOKEN). The token and repository must be set.
"""

import logging
import re

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


REPOSITORY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class PeachySettings(BaseSettings):
    """Peachy CI configuration from environment variables.

    Required fields:
    - github_token: GitHub API token sent with every request
    - github_repository: Target repository as owner/name
    """

    model_config = SettingsConfigDict(
        env_prefix="PEACHY_",
        case_sensitive=False,
    )

    github_token: str

    github_repository: str

    # Root logger level for the CLI
    log_level: str = "INFO"

    @field_validator("github_token")
    @classmethod
    def validate_github_token(cls, v: str) -> str:
        """Validate that GitHub token is not empty."""
        if not v or not v.strip():
            raise ValueError("github_token cannot be empty")
        return v

    @field_validator("github_repository")
    @classmethod
    def validate_github_repository(cls, v: str) -> str:
        """Validate that the repository has owner/name form."""
        if not REPOSITORY_PATTERN.match(v.strip()):
            raise ValueError("github_repository must have the form owner/name")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def log_level_value(self) -> int:
        return logging.getLevelName(self.log_level)


def get_settings() -> PeachySettings:
    """Create and return a PeachySettings instance.

    Returns:
        PeachySettings: Configured settings instance.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    return PeachySettings()
