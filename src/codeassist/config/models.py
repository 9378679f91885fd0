"""Configuration models using Pydantic."""

from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator


class ConfigError(Exception):
    """Configuration error."""

    pass


class HttpOptions(BaseModel):
    """HTTP options applied to every request."""

    # Sent after Content-Type, so these win on conflict
    headers: dict[str, str] = Field(default_factory=dict)


class CodeAssistConfig(BaseModel):
    """Root configuration model.

    ``endpoint_override`` is read each time a method URL is built, so it can
    be changed on a live instance.
    """

    endpoint_override: str | None = None
    project_id: str | None = None
    access_token: SecretStr | None = None
    http_options: HttpOptions = Field(default_factory=HttpOptions)
    user_tier: Literal["free-tier", "legacy-tier", "standard-tier"] | None = None
    session_logging: bool = False
    timeout_seconds: float = 300.0

    @field_validator("endpoint_override")
    @classmethod
    def _empty_override_is_unset(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be positive")
        return value
