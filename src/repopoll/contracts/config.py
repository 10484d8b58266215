"""Configuration contracts."""

from __future__ import annotations

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_ENDPOINT = "https://api.github.com/graphql"


class RepoPollConfig(BaseModel):
    endpoint: str = DEFAULT_ENDPOINT
    auth: str = "env"
    auth_token: SecretStr | None = None
    max_retries: int = Field(default=3, ge=0)
    retry_backoff_base_ms: int = Field(default=500, gt=0)
    retry_backoff_max_ms: int = Field(default=4000, gt=0)
    request_timeout_ms: int = Field(default=30000, gt=0)
    page_cap: int = Field(default=1, ge=1)
    max_connections: int = Field(default=20, ge=1, le=100)
    repos: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True, extra="forbid")

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, value: str) -> str:
        parsed = urlparse(value.strip())
        if parsed.scheme != "https" or not parsed.netloc:
            raise ValueError("endpoint must be an https:// URL")
        return value.strip()

    @field_validator("repos")
    @classmethod
    def validate_repos(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        repos: list[str] = []
        for entry in value:
            parts = entry.strip().split("/")
            if len(parts) != 2 or not parts[0] or not parts[1]:
                raise ValueError(f"repos entries must be owner/name, got {entry!r}")
            repos.append("/".join(parts))
        return tuple(repos)

    @model_validator(mode="after")
    def validate_auth_token(self) -> RepoPollConfig:
        token = self.auth_token.get_secret_value().strip() if self.auth_token else ""
        if self.auth not in {"env", "token"}:
            raise ValueError("auth must be one of: env, token")
        if self.auth == "token":
            if not token:
                raise ValueError("token auth requires a non-empty authToken")
            return self
        if token:
            raise ValueError("authToken must be unset when auth is not 'token'")
        return self

    @property
    def request_timeout(self) -> float:
        return self.request_timeout_ms / 1000.0

    @property
    def retry_backoff_base(self) -> float:
        return self.retry_backoff_base_ms / 1000.0

    @property
    def retry_backoff_max(self) -> float:
        return self.retry_backoff_max_ms / 1000.0
