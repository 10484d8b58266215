"""Typed variable sets for the catalog queries.

Variables are validated here, before anything is sent, so malformed input
never reaches the remote API.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError, field_validator

from repopoll.contracts.exceptions import InvalidArgumentError

VariablesT = TypeVar("VariablesT", bound="RepositoryVariables")


def _format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


class RepositoryVariables(BaseModel):
    owner: str
    name: str

    model_config = {"frozen": True}

    @field_validator("owner", "name")
    @classmethod
    def validate_identifier(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must be a non-empty string")
        if "/" in value or any(ch.isspace() for ch in value):
            raise ValueError("must not contain '/' or whitespace")
        return value

    @classmethod
    def build(cls: type[VariablesT], **values: Any) -> VariablesT:
        """Validate *values*, raising :class:`InvalidArgumentError` on failure."""
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
            )
            raise InvalidArgumentError(f"invalid variables: {details}") from exc

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.name}"

    def to_graphql(self) -> dict[str, Any]:
        return {"owner": self.owner, "name": self.name}


class RecentIssuesVariables(RepositoryVariables):
    since: datetime

    @field_validator("since", mode="before")
    @classmethod
    def validate_since(cls, value: Any) -> Any:
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                raise ValueError("must be an ISO-8601 timestamp")
            try:
                return datetime.fromisoformat(raw.replace("Z", "+00:00"))
            except ValueError as exc:
                raise ValueError(f"malformed timestamp {value!r}") from exc
        if isinstance(value, datetime):
            return value
        raise ValueError("must be a datetime or an ISO-8601 timestamp string")

    @field_validator("since")
    @classmethod
    def default_to_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_graphql(self) -> dict[str, Any]:
        return {**super().to_graphql(), "since": _format_timestamp(self.since)}


class OpenPullRequestsVariables(RepositoryVariables):
    pass


def split_repository(value: str) -> tuple[str, str]:
    """Split an ``owner/name`` reference into its two parts."""
    parts = value.strip().split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise InvalidArgumentError(f"Invalid repository {value!r}. Expected owner/name.")
    return parts[0], parts[1]
