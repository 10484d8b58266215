"""Cursor-driven page loop shared by both catalog queries."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Generic, TypeVar

from repopoll.contracts.exceptions import MalformedResponseError
from repopoll.contracts.records import DecodedPage

_LOG = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")


class PageState(str, Enum):
    NOT_STARTED = "not_started"
    FETCHING = "fetching"
    HAS_MORE = "has_more"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


class Paginator(Generic[RecordT]):
    """Drives repeated page fetches for a single fetch call.

    ``fetch_page`` receives the cursor of the next page (``None`` for the
    first) and returns a decoded page. Pages are requested until the server
    reports no more results or *page_cap* pages have been fetched. With
    *backward* set, each later page holds older records and is placed in front
    of those already collected, so the result keeps the server's oldest-first
    order. Records are only handed back once the loop completes; a failure
    discards them.
    """

    def __init__(
        self,
        fetch_page: Callable[[str | None], Awaitable[DecodedPage[RecordT]]],
        *,
        page_cap: int = 1,
        backward: bool = False,
    ) -> None:
        if page_cap < 1:
            raise ValueError("page_cap must be >= 1")
        self._fetch_page = fetch_page
        self._page_cap = page_cap
        self._backward = backward
        self._state = PageState.NOT_STARTED
        self._pages = 0
        self._cursor: str | None = None

    @property
    def state(self) -> PageState:
        return self._state

    @property
    def pages(self) -> int:
        return self._pages

    async def run(self) -> tuple[RecordT, ...]:
        if self._state is not PageState.NOT_STARTED:
            raise RuntimeError(f"Paginator already ran (state={self._state.value})")

        records: list[RecordT] = []
        while True:
            self._state = PageState.FETCHING
            try:
                page = await self._fetch_page(self._cursor)
            except BaseException:
                self._state = PageState.FAILED
                raise
            self._pages += 1
            if self._backward:
                records[:0] = page.records
            else:
                records.extend(page.records)
            _LOG.debug("Fetched page %d (%d records, has_more=%s)", self._pages, len(page.records), page.has_more)

            if not page.has_more or self._pages >= self._page_cap:
                self._state = PageState.EXHAUSTED
                return tuple(records)
            if not page.cursor:
                self._state = PageState.FAILED
                raise MalformedResponseError("Page reported more results without a cursor")

            self._cursor = page.cursor
            self._state = PageState.HAS_MORE
