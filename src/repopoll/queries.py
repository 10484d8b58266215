"""GraphQL query documents and the catalog that serves them.

The documents are sent verbatim. Any change to a field selection must be made
together with the matching change in :mod:`repopoll.decoder`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType

from repopoll.contracts.exceptions import UnknownQueryError

RECENT_ISSUES = """
query RecentIssues($owner: String!, $name: String!, $since: DateTime!, $after: String) {
  repository(owner: $owner, name: $name) {
    issues(
      first: 100
      after: $after
      filterBy: { since: $since }
      orderBy: { field: UPDATED_AT, direction: DESC }
    ) {
      nodes {
        number
        title
        createdAt
        updatedAt
        closedAt
        author { __typename login }
        assignees(first: 10) { nodes { login } }
        labels(first: 10) { nodes { name } }
      }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""

OPEN_PULL_REQUESTS = """
query OpenPullRequests($owner: String!, $name: String!, $before: String) {
  repository(owner: $owner, name: $name) {
    pullRequests(last: 20, before: $before, states: OPEN) {
      nodes {
        title
        number
        reviewRequests(first: 10) {
          nodes {
            requestedReviewer {
              __typename
              ... on User { login }
            }
          }
        }
        assignees(first: 10) { nodes { login } }
      }
      pageInfo { hasPreviousPage startCursor }
    }
  }
}
"""

# ``$name: Type`` pairs inside the operation's variable declaration list.
_HEADER_RE = re.compile(r"^\s*(?:query|mutation|subscription)\b[^(]*\(([^)]*)\)", re.MULTILINE)
_VARIABLE_RE = re.compile(r"\$(\w+)\s*:\s*([^,=\s]+)")


def declared_variables(document: str) -> tuple[frozenset[str], frozenset[str]]:
    """Return the ``(required, optional)`` variable names declared by *document*.

    Variables whose type ends in ``!`` are required. A document without a
    variable list declares nothing.
    """
    header = _HEADER_RE.search(document)
    if header is None:
        return frozenset(), frozenset()
    required: set[str] = set()
    optional: set[str] = set()
    for name, type_ref in _VARIABLE_RE.findall(header.group(1)):
        (required if type_ref.endswith("!") else optional).add(name)
    return frozenset(required), frozenset(optional)


@dataclass(frozen=True)
class QueryDefinition:
    """A catalog entry.

    Attributes:
        name: Operation name.
        document: Query text, sent verbatim.
        required_variables: Variables the caller must supply.
        optional_variables: Variables that may be omitted.
        connection: Field under ``repository`` holding the paginated connection.
        cursor_variable: Optional variable that carries the page cursor.
        backward: True when the connection paginates with ``last``/``before``.
    """

    name: str
    document: str
    required_variables: frozenset[str]
    optional_variables: frozenset[str]
    connection: str
    cursor_variable: str
    backward: bool = False

    @classmethod
    def from_document(
        cls,
        name: str,
        document: str,
        *,
        connection: str,
        cursor_variable: str,
        backward: bool = False,
    ) -> QueryDefinition:
        required, optional = declared_variables(document)
        return cls(
            name=name,
            document=document,
            required_variables=required,
            optional_variables=optional,
            connection=connection,
            cursor_variable=cursor_variable,
            backward=backward,
        )


class QueryCatalog:
    """Immutable lookup of the fixed query documents by operation name."""

    def __init__(self) -> None:
        self._queries = MappingProxyType(
            {
                "RecentIssues": QueryDefinition.from_document(
                    "RecentIssues", RECENT_ISSUES, connection="issues", cursor_variable="after"
                ),
                "OpenPullRequests": QueryDefinition.from_document(
                    "OpenPullRequests",
                    OPEN_PULL_REQUESTS,
                    connection="pullRequests",
                    cursor_variable="before",
                    backward=True,
                ),
            }
        )

    def get(self, query_name: str) -> QueryDefinition:
        """Return the catalog entry for *query_name*.

        Raises:
            UnknownQueryError: If the catalog holds no such query.
        """
        try:
            return self._queries[query_name]
        except KeyError:
            known = ", ".join(sorted(self._queries))
            raise UnknownQueryError(f"Unknown query {query_name!r}; expected one of: {known}") from None

    def names(self) -> tuple[str, ...]:
        return tuple(self._queries)


DEFAULT_CATALOG = QueryCatalog()
