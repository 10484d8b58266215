"""HTTPS transport for GraphQL documents."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx

from repopoll import __version__
from repopoll.contracts.exceptions import (
    AuthFailureError,
    GraphQLError,
    InvalidArgumentError,
    MalformedResponseError,
    TransportFailureError,
    VariableMismatchError,
)
from repopoll.queries import declared_variables

_LOG = logging.getLogger(__name__)

USER_AGENT = f"repopoll/{__version__}"


class TransportClient:
    """Sends one GraphQL document per call over a pooled ``httpx.AsyncClient``.

    The client never retries; every failure is mapped onto the repopoll
    exception taxonomy and raised to the caller.
    """

    def __init__(
        self,
        *,
        token: str,
        timeout: float = 30.0,
        max_connections: int = 20,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._token = token
        self._timeout = timeout
        self._max_connections = max_connections
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> TransportClient:
        self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def send(self, endpoint: str, document: str, variables: Mapping[str, Any]) -> dict[str, Any]:
        """POST *document* with *variables* to *endpoint* and return the payload.

        Returns:
            The full response payload (``data`` plus any extensions).

        Raises:
            InvalidArgumentError: If the document is empty.
            VariableMismatchError: If *variables* do not match the declarations.
            TransportFailureError: Connection failure, timeout or transient status.
            AuthFailureError: Credentials were rejected.
            GraphQLError: The server reported errors.
            MalformedResponseError: The body is not a GraphQL response object.
        """
        if not document.strip():
            raise InvalidArgumentError("GraphQL document must not be empty")
        self._check_variables(document, variables)

        client = self._ensure_client()
        _LOG.debug("POST %s variables=%s", endpoint, sorted(variables))
        try:
            response = await client.post(endpoint, json={"query": document, "variables": dict(variables)})
        except httpx.TimeoutException as exc:
            raise TransportFailureError(f"GraphQL request timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise TransportFailureError(f"GraphQL request failed: {exc}") from exc

        self._check_status(response)
        return self._parse_payload(response)

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={
                    "Authorization": f"Bearer {self._token}",
                    "User-Agent": USER_AGENT,
                    "Accept": "application/json",
                },
                limits=httpx.Limits(
                    max_connections=self._max_connections,
                    max_keepalive_connections=max(1, self._max_connections // 2),
                ),
                timeout=httpx.Timeout(self._timeout),
            )
            self._owns_client = True
        return self._client

    @staticmethod
    def _check_variables(document: str, variables: Mapping[str, Any]) -> None:
        required, optional = declared_variables(document)
        supplied = set(variables)
        missing = tuple(sorted(required - supplied))
        unexpected = tuple(sorted(supplied - required - optional))
        if missing or unexpected:
            parts: list[str] = []
            if missing:
                parts.append(f"missing {', '.join(missing)}")
            if unexpected:
                parts.append(f"unexpected {', '.join(unexpected)}")
            raise VariableMismatchError(
                f"Variables do not match the query declaration: {'; '.join(parts)}",
                missing=missing,
                unexpected=unexpected,
            )

    @classmethod
    def _check_status(cls, response: httpx.Response) -> None:
        status = response.status_code
        if status < 300:
            return
        if status == 401:
            raise AuthFailureError("GitHub rejected the credentials (HTTP 401)")
        if status == 403 and not cls._is_rate_limited(response):
            raise AuthFailureError("GitHub denied access (HTTP 403)")
        if status in {403, 429} or status >= 500:
            raise TransportFailureError(
                f"GraphQL endpoint returned HTTP {status}",
                retry_after=cls._parse_retry_after(response),
            )
        raise GraphQLError(f"GraphQL endpoint returned HTTP {status}", status_code=status)

    @staticmethod
    def _is_rate_limited(response: httpx.Response) -> bool:
        return "Retry-After" in response.headers or response.headers.get("X-RateLimit-Remaining") == "0"

    @staticmethod
    def _parse_retry_after(response: httpx.Response) -> float | None:
        """Seconds to wait from ``Retry-After``, else from an exhausted quota's reset time."""
        raw = response.headers.get("Retry-After")
        if raw is not None:
            try:
                return max(0.0, float(raw))
            except ValueError:
                return None
        reset = response.headers.get("X-RateLimit-Reset")
        if reset is None or response.headers.get("X-RateLimit-Remaining") != "0":
            return None
        try:
            return max(0.0, float(reset) - time.time())
        except ValueError:
            return None

    @staticmethod
    def _parse_payload(response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedResponseError("GraphQL response body is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise MalformedResponseError("GraphQL response body is not a JSON object")

        data = payload.get("data")
        errors = payload.get("errors")
        if errors:
            error_list = errors if isinstance(errors, list) else [{"message": str(errors)}]
            messages = [str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in error_list]
            raise GraphQLError(
                f"GraphQL returned errors: {'; '.join(messages)}",
                errors=[e if isinstance(e, dict) else {"message": str(e)} for e in error_list],
                partial_data=data if isinstance(data, dict) else None,
            )
        if not isinstance(data, dict):
            raise MalformedResponseError("GraphQL response missing data payload")
        return payload
