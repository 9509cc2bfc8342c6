"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set the API values explicitly.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MembershipSettings(BaseSettings):
    """Membership engine settings.

    Environment variables:
        TREASURY_CRITICAL_ROLE_KEYWORDS: Role name substrings marking roles
            required to manage members (default: ["governance", "admin"])
        TREASURY_EXCLUDED_ROLE_NAMES: Roles never offered for assignment (default: ["all"])
        TREASURY_ACCOUNT_SUFFIXES: Allowed named-account suffixes
        TREASURY_MAX_ACCOUNT_ID_LENGTH: Longest accepted account id (default: 64)
        TREASURY_PROPOSALS_API_URL: Base URL of the proposals API
        TREASURY_PROPOSALS_API_TIMEOUT_SECONDS: Request timeout (default: 10)
        TREASURY_LOG_LEVEL: Minimum log level (default: INFO)
        TREASURY_LOG_FORMAT: "console", "json" or "auto" (default: auto, console on a TTY)
    """

    model_config = SettingsConfigDict(
        env_prefix="TREASURY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    critical_role_keywords: list[str] = Field(
        default=["governance", "admin"],
        description="Role name substrings marking roles required to manage members",
    )
    excluded_role_names: list[str] = Field(
        default=["all"],
        description="Group roles never offered for assignment",
    )
    account_suffixes: list[str] = Field(
        default=[".near", ".aurora", ".tg"],
        description="Allowed named-account suffixes",
    )
    max_account_id_length: int = Field(
        default=64,
        description="Longest accepted account id",
        ge=2,
        le=64,
    )
    proposals_api_url: str = Field(
        default="http://localhost:3002/api",
        description="Base URL of the proposals API",
    )
    proposals_api_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for proposals API requests",
        gt=0,
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level of emitted log events",
    )
    log_format: Literal["auto", "console", "json"] = Field(
        default="auto",
        description="Log renderer; auto picks console output on a TTY",
    )

    @field_validator("critical_role_keywords")
    @classmethod
    def validate_keywords(cls, value: list[str]) -> list[str]:
        """Keywords are matched case-insensitively; empty ones would match every role."""
        if any(not keyword.strip() for keyword in value):
            raise ValueError("critical_role_keywords must not contain empty keywords")
        return [keyword.lower() for keyword in value]


@lru_cache
def get_settings() -> MembershipSettings:
    """Get cached membership settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return MembershipSettings()
