"""Fetch orchestration: variables, retry, pagination and decoding."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from types import TracebackType
from typing import Any, Protocol, TypeVar

from repopoll.contracts.config import RepoPollConfig
from repopoll.contracts.exceptions import InvalidArgumentError, RepoPollError, TransportFailureError
from repopoll.contracts.records import DecodedPage, FetchResult, IssueRecord, PullRequestRecord
from repopoll.contracts.variables import (
    OpenPullRequestsVariables,
    RecentIssuesVariables,
    RepositoryVariables,
    VariablesT,
    split_repository,
)
from repopoll.decoder import ResponseDecoder
from repopoll.paginator import Paginator
from repopoll.queries import DEFAULT_CATALOG, QueryCatalog
from repopoll.transport import TransportClient

_LOG = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")


class Transport(Protocol):
    async def send(self, endpoint: str, document: str, variables: dict[str, Any]) -> dict[str, Any]: ...

    async def aclose(self) -> None: ...


@dataclass
class _AttemptCounter:
    attempts: int = 0


class FetchService:
    """Fetches and normalizes the catalog queries for one endpoint.

    Each fetch call owns its paginator and attempt counter, so concurrent
    calls on one service never share mutable state. Use as an async context
    manager so the underlying connection pool is closed::

        async with FetchService(config, token=token) as service:
            issues = await service.fetch_issues("octo", "repo", since)
    """

    def __init__(
        self,
        config: RepoPollConfig,
        *,
        token: str = "",
        transport: Transport | None = None,
        catalog: QueryCatalog | None = None,
        decoder: ResponseDecoder | None = None,
    ) -> None:
        self._config = config
        self._transport: Transport = transport or TransportClient(
            token=token,
            timeout=config.request_timeout,
            max_connections=config.max_connections,
        )
        self._catalog = catalog or DEFAULT_CATALOG
        self._decoder = decoder or ResponseDecoder()

    async def __aenter__(self) -> FetchService:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self._transport.aclose()

    async def fetch_issues(self, owner: str, name: str, since: datetime | str) -> FetchResult[IssueRecord]:
        """Fetch issues updated since *since*, most recently updated first."""
        variables = self._build_variables(
            "RecentIssues", RecentIssuesVariables, owner=owner, name=name, since=since
        )
        result = await self._fetch("RecentIssues", variables, self._decoder.decode_issues)
        ordered = sorted(result.records, key=lambda record: record.updated_at, reverse=True)
        return replace(result, records=tuple(ordered))

    async def fetch_open_pull_requests(self, owner: str, name: str) -> FetchResult[PullRequestRecord]:
        """Fetch open pull requests in server order, one record per number."""
        variables = self._build_variables("OpenPullRequests", OpenPullRequestsVariables, owner=owner, name=name)
        result = await self._fetch("OpenPullRequests", variables, self._decoder.decode_pull_requests)
        seen: set[int] = set()
        unique: list[PullRequestRecord] = []
        for record in result.records:
            if record.number in seen:
                _LOG.debug("Dropping duplicate pull request #%d", record.number)
                continue
            seen.add(record.number)
            unique.append(record)
        return replace(result, records=tuple(unique))

    async def fetch_open_pull_requests_across(
        self, repositories: Sequence[str] | None = None
    ) -> FetchResult[PullRequestRecord]:
        """Fetch open pull requests for several ``owner/name`` repositories.

        Defaults to the configured ``repos``. Repositories are fetched
        concurrently; records are concatenated in the order the repositories
        are given and each record carries its ``repository``. The first
        failure cancels the remaining fetches and is raised as is.
        """
        targets = tuple(self._config.repos if repositories is None else repositories)
        if not targets:
            raise InvalidArgumentError("No repositories given and none configured in repos")
        pairs = [split_repository(target) for target in targets]

        try:
            async with asyncio.TaskGroup() as tg:
                tasks = [tg.create_task(self.fetch_open_pull_requests(owner, name)) for owner, name in pairs]
        except ExceptionGroup as group:
            first = group.exceptions[0]
            if isinstance(first, RepoPollError):
                raise first from None
            raise

        results = [task.result() for task in tasks]
        return FetchResult(
            records=tuple(record for result in results for record in result),
            attempts=sum(result.attempts for result in results),
            pages=sum(result.pages for result in results),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _build_variables(query_name: str, model: type[VariablesT], **values: Any) -> VariablesT:
        try:
            return model.build(**values)
        except RepoPollError as exc:
            owner, name = values.get("owner"), values.get("name")
            exc.annotate(query_name=query_name, repository=f"{owner}/{name}", attempts=0)
            raise

    async def _fetch(
        self,
        query_name: str,
        variables: RepositoryVariables,
        decode: Callable[..., DecodedPage[RecordT]],
    ) -> FetchResult[RecordT]:
        counter = _AttemptCounter()
        try:
            query = self._catalog.get(query_name)
            base_variables = variables.to_graphql()

            async def fetch_page(cursor: str | None) -> DecodedPage[RecordT]:
                page_variables = dict(base_variables)
                if cursor is not None:
                    page_variables[query.cursor_variable] = cursor
                raw = await self._call_with_retry(
                    query.name,
                    lambda: self._transport.send(self._config.endpoint, query.document, page_variables),
                    counter,
                )
                return decode(raw, repository=variables.repository)

            paginator: Paginator[RecordT] = Paginator(
                fetch_page, page_cap=self._config.page_cap, backward=query.backward
            )
            records = await paginator.run()
        except RepoPollError as exc:
            exc.annotate(query_name=query_name, repository=variables.repository, attempts=counter.attempts)
            raise

        _LOG.debug(
            "Fetched %d records for %s on %s (attempts=%d, pages=%d)",
            len(records),
            query_name,
            variables.repository,
            counter.attempts,
            paginator.pages,
        )
        return FetchResult(records=records, attempts=counter.attempts, pages=paginator.pages)

    async def _call_with_retry(
        self,
        operation: str,
        fn: Callable[[], Awaitable[dict[str, Any]]],
        counter: _AttemptCounter,
    ) -> dict[str, Any]:
        max_retries = self._config.max_retries
        for attempt in range(max_retries + 1):
            counter.attempts += 1
            try:
                return await fn()
            except TransportFailureError as exc:
                if attempt >= max_retries:
                    raise
                await self._sleep_backoff(attempt, operation, exc.retry_after)

        raise TransportFailureError(f"Operation failed after retries: {operation}")  # pragma: no cover

    async def _sleep_backoff(self, attempt: int, operation: str, retry_after: float | None = None) -> None:
        seconds = min(
            self._config.retry_backoff_max,
            self._config.retry_backoff_base * float(2**attempt),
        ) + random.uniform(0.0, 0.25)
        if retry_after is not None:
            seconds = max(seconds, retry_after)
        _LOG.warning("Retrying GitHub operation", extra={"operation": operation, "attempt": attempt + 1})
        await asyncio.sleep(seconds)
