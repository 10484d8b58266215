"""Public contracts for repopoll."""

from repopoll.contracts.config import DEFAULT_ENDPOINT, RepoPollConfig
from repopoll.contracts.exceptions import (
    AuthFailureError,
    ConfigError,
    FetchError,
    GraphQLError,
    InvalidArgumentError,
    MalformedResponseError,
    RepoPollError,
    TransportFailureError,
    UnknownQueryError,
    VariableMismatchError,
)
from repopoll.contracts.records import (
    Actor,
    ActorKind,
    DecodedPage,
    FetchResult,
    IssueRecord,
    PullRequestRecord,
    ReviewRequest,
)
from repopoll.contracts.variables import (
    OpenPullRequestsVariables,
    RecentIssuesVariables,
    RepositoryVariables,
    split_repository,
)

__all__ = [
    "DEFAULT_ENDPOINT",
    "Actor",
    "ActorKind",
    "AuthFailureError",
    "ConfigError",
    "DecodedPage",
    "FetchError",
    "FetchResult",
    "GraphQLError",
    "InvalidArgumentError",
    "IssueRecord",
    "MalformedResponseError",
    "OpenPullRequestsVariables",
    "PullRequestRecord",
    "RecentIssuesVariables",
    "RepoPollConfig",
    "RepoPollError",
    "RepositoryVariables",
    "ReviewRequest",
    "TransportFailureError",
    "UnknownQueryError",
    "VariableMismatchError",
    "split_repository",
]
