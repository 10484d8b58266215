"""Exception hierarchy for repopoll.

All repopoll exceptions inherit from :class:`RepoPollError`, so callers can
catch any library error with a single ``except`` clause while still handling
specific failure modes.
"""

from __future__ import annotations

from typing import Any


class RepoPollError(Exception):
    """Base exception for all repopoll errors.

    Attributes:
        query_name: Query being executed when the error occurred, if known.
        repository: ``owner/name`` of the target repository, if known.
        attempts: Transport attempts made before the error surfaced.
    """

    retryable = False

    def __init__(
        self,
        message: str,
        *,
        query_name: str | None = None,
        repository: str | None = None,
        attempts: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.query_name = query_name
        self.repository = repository
        self.attempts = attempts

    def annotate(
        self,
        *,
        query_name: str | None = None,
        repository: str | None = None,
        attempts: int | None = None,
    ) -> RepoPollError:
        """Fill in missing context and return ``self`` for re-raising."""
        if self.query_name is None:
            self.query_name = query_name
        if self.repository is None:
            self.repository = repository
        if attempts is not None:
            self.attempts = attempts
        return self

    def __str__(self) -> str:
        context: list[str] = []
        if self.query_name:
            context.append(f"query={self.query_name}")
        if self.repository:
            context.append(f"repository={self.repository}")
        if self.attempts is not None:
            context.append(f"attempts={self.attempts}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ConfigError(RepoPollError):
    """Configuration loading or validation failure."""


class InvalidArgumentError(RepoPollError):
    """Caller input is invalid (empty owner/name, malformed timestamp)."""


class UnknownQueryError(RepoPollError):
    """The requested query is not in the catalog."""


class VariableMismatchError(RepoPollError):
    """Variables do not match the query's declared variable set."""

    def __init__(
        self,
        message: str,
        *,
        missing: tuple[str, ...] = (),
        unexpected: tuple[str, ...] = (),
        **context: Any,
    ) -> None:
        super().__init__(message, **context)
        self.missing = missing
        self.unexpected = unexpected


class FetchError(RepoPollError):
    """Base for failures raised while talking to the GraphQL endpoint."""


class TransportFailureError(FetchError):
    """Connection failure, timeout or transient HTTP status. Retryable."""

    retryable = True

    def __init__(self, message: str, *, retry_after: float | None = None, **context: Any) -> None:
        super().__init__(message, **context)
        self.retry_after = retry_after


class AuthFailureError(FetchError):
    """Credentials were missing or rejected. Never retried."""


class GraphQLError(FetchError):
    """The server answered but reported errors.

    Attributes:
        messages: Server-provided error messages.
        errors: Raw ``errors`` array from the response.
        partial_data: The ``data`` object returned alongside the errors, if any.
        status_code: HTTP status when the error came from a non-2xx response.
    """

    def __init__(
        self,
        message: str,
        *,
        errors: list[dict[str, Any]] | None = None,
        partial_data: dict[str, Any] | None = None,
        status_code: int | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message, **context)
        self.errors = errors or []
        self.partial_data = partial_data
        self.status_code = status_code

    @property
    def messages(self) -> list[str]:
        return [str(error.get("message", "")) for error in self.errors if isinstance(error, dict)]


class MalformedResponseError(FetchError):
    """Response shape does not match the query's selection."""
