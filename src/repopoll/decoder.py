"""Mapping functions between GraphQL payloads and repopoll records."""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from repopoll.contracts.exceptions import MalformedResponseError
from repopoll.contracts.records import (
    Actor,
    ActorKind,
    DecodedPage,
    IssueRecord,
    PullRequestRecord,
    ReviewRequest,
)


class ResponseDecoder:
    """Decodes raw ``RecentIssues`` / ``OpenPullRequests`` payloads.

    Structural problems (missing ``repository``, connection or ``nodes``) raise
    :class:`MalformedResponseError`. Nullable data such as a deleted author is
    decoded to ``None`` instead. Records are tagged with the ``owner/name``
    passed as *repository*.
    """

    def decode_issues(self, raw: dict[str, Any], *, repository: str | None = None) -> DecodedPage[IssueRecord]:
        connection = self._connection(raw, "issues")
        records = tuple(self._issue(node, repository) for node in self._nodes(connection))
        has_more, cursor = self._page_info(connection, backward=False)
        return DecodedPage(records=records, has_more=has_more, cursor=cursor)

    def decode_pull_requests(
        self, raw: dict[str, Any], *, repository: str | None = None
    ) -> DecodedPage[PullRequestRecord]:
        connection = self._connection(raw, "pullRequests")
        records = tuple(self._pull_request(node, repository) for node in self._nodes(connection))
        has_more, cursor = self._page_info(connection, backward=True)
        return DecodedPage(records=records, has_more=has_more, cursor=cursor)

    # ------------------------------------------------------------------
    # Node decoding
    # ------------------------------------------------------------------

    def _issue(self, node: dict[str, Any], repository: str | None) -> IssueRecord:
        try:
            return IssueRecord(
                number=self._require_int(node, "number"),
                title=self._require_str(node, "title"),
                repository=repository,
                created_at=self._require_str(node, "createdAt"),
                updated_at=self._require_str(node, "updatedAt"),
                closed_at=self._optional_str(node, "closedAt"),
                author=self._actor(node.get("author")),
                assignees=self._logins(node, "assignees"),
                labels=self._names(node, "labels"),
            )
        except ValidationError as exc:
            raise MalformedResponseError(f"Invalid issue node: {exc}") from exc

    def _pull_request(self, node: dict[str, Any], repository: str | None) -> PullRequestRecord:
        requests_connection = self._require_dict(node, "reviewRequests")
        try:
            return PullRequestRecord(
                title=self._require_str(node, "title"),
                number=self._require_int(node, "number"),
                repository=repository,
                review_requests=tuple(
                    self._review_request(entry) for entry in self._nodes(requests_connection)
                ),
                assignees=self._logins(node, "assignees"),
            )
        except ValidationError as exc:
            raise MalformedResponseError(f"Invalid pull request node: {exc}") from exc

    def _actor(self, value: Any) -> Actor | None:
        if value is None:
            return None
        if not isinstance(value, dict):
            raise MalformedResponseError("Missing/invalid object at key 'author'")
        return Actor(kind=self._require_str(value, "__typename"), login=self._require_str(value, "login"))

    def _review_request(self, entry: dict[str, Any]) -> ReviewRequest:
        reviewer = entry.get("requestedReviewer")
        if reviewer is None:
            return ReviewRequest(reviewer_kind=ActorKind.UNKNOWN.value)
        if not isinstance(reviewer, dict):
            raise MalformedResponseError("Missing/invalid object at key 'requestedReviewer'")
        kind = self._require_str(reviewer, "__typename")
        if kind != ActorKind.USER.value:
            return ReviewRequest(reviewer_kind=kind)
        return ReviewRequest(reviewer_kind=kind, login=self._require_str(reviewer, "login"))

    def _logins(self, node: dict[str, Any], key: str) -> tuple[str, ...]:
        return tuple(self._require_str(n, "login") for n in self._nodes(self._require_dict(node, key)))

    def _names(self, node: dict[str, Any], key: str) -> tuple[str, ...]:
        return tuple(self._require_str(n, "name") for n in self._nodes(self._require_dict(node, key)))

    # ------------------------------------------------------------------
    # Structural helpers
    # ------------------------------------------------------------------

    def _connection(self, raw: dict[str, Any], key: str) -> dict[str, Any]:
        data = self._require_dict(raw, "data")
        repository = self._require_dict(data, "repository")
        return self._require_dict(repository, key)

    def _nodes(self, connection: dict[str, Any]) -> list[dict[str, Any]]:
        nodes = self._require_list(connection, "nodes")
        out: list[dict[str, Any]] = []
        for node in nodes:
            if node is None:
                continue
            if not isinstance(node, dict):
                raise MalformedResponseError("Invalid entry in 'nodes'")
            out.append(node)
        return out

    @staticmethod
    def _page_info(connection: dict[str, Any], *, backward: bool) -> tuple[bool, str | None]:
        page_info = connection.get("pageInfo")
        if page_info is None:
            return False, None
        if not isinstance(page_info, dict):
            raise MalformedResponseError("Missing/invalid object at key 'pageInfo'")
        more_key, cursor_key = ("hasPreviousPage", "startCursor") if backward else ("hasNextPage", "endCursor")
        cursor = page_info.get(cursor_key)
        if cursor is not None and not isinstance(cursor, str):
            raise MalformedResponseError(f"Missing/invalid string at key '{cursor_key}'")
        return bool(page_info.get(more_key)), cursor

    @staticmethod
    def _require_dict(data: dict[str, Any], key: str) -> dict[str, Any]:
        value = data.get(key)
        if not isinstance(value, dict):
            raise MalformedResponseError(f"Missing/invalid object at key '{key}'")
        return value

    @staticmethod
    def _require_list(data: dict[str, Any], key: str) -> list[Any]:
        value = data.get(key)
        if not isinstance(value, list):
            raise MalformedResponseError(f"Missing/invalid list at key '{key}'")
        return value

    @staticmethod
    def _require_str(data: dict[str, Any], key: str) -> str:
        value = data.get(key)
        if not isinstance(value, str):
            raise MalformedResponseError(f"Missing/invalid string at key '{key}'")
        return value

    @staticmethod
    def _optional_str(data: dict[str, Any], key: str) -> str | None:
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise MalformedResponseError(f"Missing/invalid string at key '{key}'")
        return value

    @staticmethod
    def _require_int(data: dict[str, Any], key: str) -> int:
        value = data.get(key)
        if not isinstance(value, int) or isinstance(value, bool):
            raise MalformedResponseError(f"Missing/invalid int at key '{key}'")
        return value
