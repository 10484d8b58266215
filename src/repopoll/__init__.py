"""Public API surface for repopoll."""

__version__ = "0.1.0"

from repopoll.auth import TokenResolver, create_token_resolver
from repopoll.config import load_config
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
    FetchResult,
    IssueRecord,
    PullRequestRecord,
    ReviewRequest,
)
from repopoll.decoder import ResponseDecoder
from repopoll.paginator import PageState, Paginator
from repopoll.queries import DEFAULT_CATALOG, QueryCatalog, QueryDefinition
from repopoll.service import FetchService
from repopoll.transport import TransportClient

__all__ = [
    "DEFAULT_CATALOG",
    "DEFAULT_ENDPOINT",
    "Actor",
    "ActorKind",
    "AuthFailureError",
    "ConfigError",
    "FetchError",
    "FetchResult",
    "FetchService",
    "GraphQLError",
    "InvalidArgumentError",
    "IssueRecord",
    "MalformedResponseError",
    "PageState",
    "Paginator",
    "PullRequestRecord",
    "QueryCatalog",
    "QueryDefinition",
    "RepoPollConfig",
    "RepoPollError",
    "ResponseDecoder",
    "ReviewRequest",
    "TokenResolver",
    "TransportClient",
    "TransportFailureError",
    "UnknownQueryError",
    "VariableMismatchError",
    "__version__",
    "create_token_resolver",
    "load_config",
]
