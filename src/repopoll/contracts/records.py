"""Normalized records produced by the response decoder."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar, overload

from pydantic import BaseModel, Field, model_validator


class ActorKind(str, Enum):
    """Actor ``__typename`` tags known at the time of writing.

    Records keep the raw tag as a string, so tags missing here still decode.
    """

    USER = "User"
    BOT = "Bot"
    ORGANIZATION = "Organization"
    MANNEQUIN = "Mannequin"
    ENTERPRISE_USER_ACCOUNT = "EnterpriseUserAccount"
    TEAM = "Team"
    UNKNOWN = "Unknown"


class Actor(BaseModel):
    kind: str
    login: str

    model_config = {"frozen": True}

    @property
    def is_user(self) -> bool:
        return self.kind == ActorKind.USER.value


class IssueRecord(BaseModel):
    number: int = Field(gt=0)
    title: str
    repository: str | None = None
    created_at: datetime
    updated_at: datetime
    closed_at: datetime | None = None
    author: Actor | None = None
    assignees: tuple[str, ...] = ()
    labels: tuple[str, ...] = ()

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_closed_after_created(self) -> IssueRecord:
        if self.closed_at is not None and self.closed_at < self.created_at:
            raise ValueError("closed_at must not precede created_at")
        return self


class ReviewRequest(BaseModel):
    reviewer_kind: str
    login: str | None = None
    """Reviewer login; ``None`` unless the reviewer is a ``User``."""

    model_config = {"frozen": True}


class PullRequestRecord(BaseModel):
    title: str
    number: int = Field(gt=0)
    repository: str | None = None
    """``owner/name`` of the repository the record was fetched from."""
    review_requests: tuple[ReviewRequest, ...] = ()
    assignees: tuple[str, ...] = ()

    model_config = {"frozen": True}


RecordT = TypeVar("RecordT")


@dataclass(frozen=True)
class DecodedPage(Generic[RecordT]):
    """One decoded response page plus its continuation state."""

    records: tuple[RecordT, ...]
    has_more: bool = False
    cursor: str | None = None


@dataclass(frozen=True)
class FetchResult(Sequence[RecordT], Generic[RecordT]):
    """Records returned by one fetch call.

    Behaves as an ordered, read-only sequence of records and also reports how
    many transport attempts and pages the fetch took.
    """

    records: tuple[RecordT, ...] = field(default_factory=tuple)
    attempts: int = 0
    pages: int = 0

    @overload
    def __getitem__(self, index: int) -> RecordT: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[RecordT]: ...

    def __getitem__(self, index: int | slice) -> RecordT | Sequence[RecordT]:
        return self.records[index]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[RecordT]:
        return iter(self.records)
