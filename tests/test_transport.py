"""Tests for TransportClient - wire format and error mapping."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import patch

import httpx
import pytest

from repopoll.contracts.exceptions import (
    AuthFailureError,
    GraphQLError,
    InvalidArgumentError,
    MalformedResponseError,
    TransportFailureError,
    VariableMismatchError,
)
from repopoll.queries import OPEN_PULL_REQUESTS, RECENT_ISSUES
from repopoll.transport import USER_AGENT, TransportClient

ENDPOINT = "https://api.github.com/graphql"
PR_VARIABLES = {"owner": "octo", "name": "repo"}

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _client(handler: Any, token: str = "tok") -> TransportClient:
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        headers={"Authorization": f"Bearer {token}", "User-Agent": USER_AGENT},
    )
    return TransportClient(token=token, client=http)


def _respond(status_code: int = 200, payload: Any = None, headers: dict[str, str] | None = None) -> Any:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json=payload, headers=headers)

    return handler


# ---------------------------------------------------------------------------
# Request shape
# ---------------------------------------------------------------------------


class TestRequest:
    @pytest.mark.asyncio
    async def test_posts_query_and_variables_as_json(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": {"repository": None}})

        transport = _client(handler)
        payload = await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

        assert payload == {"data": {"repository": None}}
        assert len(seen) == 1
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == ENDPOINT
        assert request.headers["Authorization"] == "Bearer tok"
        assert json.loads(request.content) == {"query": OPEN_PULL_REQUESTS, "variables": PR_VARIABLES}

    @pytest.mark.asyncio
    async def test_optional_cursor_variable_is_accepted(self) -> None:
        transport = _client(_respond(payload={"data": {}}))

        await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, {**PR_VARIABLES, "before": "abc"})

    @pytest.mark.asyncio
    async def test_default_client_sets_auth_and_user_agent(self) -> None:
        transport = TransportClient(token="secret", timeout=5.0)
        async with transport:
            client = transport._ensure_client()
            assert client.headers["Authorization"] == "Bearer secret"
            assert client.headers["User-Agent"] == USER_AGENT
            assert client.timeout.read == 5.0
        assert transport._client is None


# ---------------------------------------------------------------------------
# Pre-flight validation
# ---------------------------------------------------------------------------


class TestPreflight:
    @pytest.mark.asyncio
    async def test_missing_variable_fails_before_network(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"data": {}})

        transport = _client(handler)
        with pytest.raises(VariableMismatchError) as exc_info:
            await transport.send(ENDPOINT, RECENT_ISSUES, PR_VARIABLES)

        assert exc_info.value.missing == ("since",)
        assert calls == []

    @pytest.mark.asyncio
    async def test_extra_variable_fails_before_network(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"data": {}})

        transport = _client(handler)
        with pytest.raises(VariableMismatchError, match="unexpected since") as exc_info:
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, {**PR_VARIABLES, "since": "2024-01-01T00:00:00Z"})

        assert exc_info.value.unexpected == ("since",)
        assert calls == []

    @pytest.mark.asyncio
    async def test_empty_document_is_invalid(self) -> None:
        transport = _client(_respond(payload={"data": {}}))

        with pytest.raises(InvalidArgumentError):
            await transport.send(ENDPOINT, "   ", {})


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrorMapping:
    @pytest.mark.asyncio
    async def test_connection_error_is_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection reset", request=request)

        with pytest.raises(TransportFailureError, match="connection reset"):
            await _client(handler).send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

    @pytest.mark.asyncio
    async def test_timeout_is_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(TransportFailureError, match="timed out"):
            await _client(handler).send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

    @pytest.mark.asyncio
    async def test_401_is_auth_failure(self) -> None:
        transport = _client(_respond(401, {"message": "Bad credentials"}))

        with pytest.raises(AuthFailureError):
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

    @pytest.mark.asyncio
    async def test_403_without_rate_limit_is_auth_failure(self) -> None:
        transport = _client(_respond(403, {"message": "Forbidden"}))

        with pytest.raises(AuthFailureError):
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

    @pytest.mark.asyncio
    async def test_403_secondary_rate_limit_is_transport_failure(self) -> None:
        transport = _client(_respond(403, {"message": "slow down"}, {"Retry-After": "7"}))

        with pytest.raises(TransportFailureError) as exc_info:
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

        assert exc_info.value.retry_after == 7.0

    @pytest.mark.asyncio
    async def test_403_exhausted_quota_is_transport_failure(self) -> None:
        transport = _client(_respond(403, {"message": "quota"}, {"X-RateLimit-Remaining": "0"}))

        with pytest.raises(TransportFailureError) as exc_info:
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

        assert exc_info.value.retry_after is None

    @pytest.mark.asyncio
    @patch("repopoll.transport.time.time", return_value=1_000.0)
    async def test_exhausted_quota_waits_until_reset(self, _mock_time: object) -> None:
        headers = {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1120"}
        transport = _client(_respond(403, {"message": "quota"}, headers))

        with pytest.raises(TransportFailureError) as exc_info:
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

        assert exc_info.value.retry_after == 120.0

    @pytest.mark.asyncio
    @patch("repopoll.transport.time.time", return_value=1_000.0)
    async def test_reset_in_the_past_waits_zero(self, _mock_time: object) -> None:
        headers = {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "900"}
        transport = _client(_respond(429, {}, headers))

        with pytest.raises(TransportFailureError) as exc_info:
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

        assert exc_info.value.retry_after == 0.0

    @pytest.mark.asyncio
    async def test_retry_after_takes_precedence_over_reset(self) -> None:
        headers = {"Retry-After": "3", "X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "99999999999"}
        transport = _client(_respond(403, {"message": "slow down"}, headers))

        with pytest.raises(TransportFailureError) as exc_info:
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

        assert exc_info.value.retry_after == 3.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    async def test_transient_status_is_transport_failure(self, status: int) -> None:
        transport = _client(_respond(status, {"message": "busy"}))

        with pytest.raises(TransportFailureError, match=str(status)):
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

    @pytest.mark.asyncio
    async def test_non_numeric_retry_after_is_ignored(self) -> None:
        transport = _client(_respond(429, {}, {"Retry-After": "soon"}))

        with pytest.raises(TransportFailureError) as exc_info:
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

        assert exc_info.value.retry_after is None

    @pytest.mark.asyncio
    async def test_other_client_error_is_graphql_error(self) -> None:
        transport = _client(_respond(400, {"message": "Problems parsing JSON"}))

        with pytest.raises(GraphQLError) as exc_info:
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_errors_array_is_graphql_error_with_partial_data(self) -> None:
        payload = {
            "data": {"repository": None},
            "errors": [{"type": "NOT_FOUND", "message": "Could not resolve to a Repository"}],
        }
        transport = _client(_respond(200, payload))

        with pytest.raises(GraphQLError, match="Could not resolve") as exc_info:
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

        assert exc_info.value.messages == ["Could not resolve to a Repository"]
        assert exc_info.value.partial_data == {"repository": None}
        assert exc_info.value.errors[0]["type"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_errors_without_data(self) -> None:
        transport = _client(_respond(200, {"errors": [{"message": "Something went wrong"}]}))

        with pytest.raises(GraphQLError) as exc_info:
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

        assert exc_info.value.partial_data is None

    @pytest.mark.asyncio
    async def test_invalid_json_is_malformed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        with pytest.raises(MalformedResponseError, match="not valid JSON"):
            await _client(handler).send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

    @pytest.mark.asyncio
    async def test_non_object_payload_is_malformed(self) -> None:
        transport = _client(_respond(200, [1, 2, 3]))

        with pytest.raises(MalformedResponseError, match="not a JSON object"):
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)

    @pytest.mark.asyncio
    async def test_missing_data_is_malformed(self) -> None:
        transport = _client(_respond(200, {"extensions": {}}))

        with pytest.raises(MalformedResponseError, match="missing data"):
            await transport.send(ENDPOINT, OPEN_PULL_REQUESTS, PR_VARIABLES)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_injected_client_is_left_open(self) -> None:
        http = httpx.AsyncClient(transport=httpx.MockTransport(_respond(payload={"data": {}})))
        transport = TransportClient(token="tok", client=http)

        await transport.aclose()

        assert http.is_closed is False
        await http.aclose()
