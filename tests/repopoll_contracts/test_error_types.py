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


def test_exception_hierarchy() -> None:
    assert issubclass(ConfigError, RepoPollError)
    assert issubclass(InvalidArgumentError, RepoPollError)
    assert issubclass(UnknownQueryError, RepoPollError)
    assert issubclass(VariableMismatchError, RepoPollError)
    assert issubclass(FetchError, RepoPollError)
    assert issubclass(TransportFailureError, FetchError)
    assert issubclass(AuthFailureError, FetchError)
    assert issubclass(GraphQLError, FetchError)
    assert issubclass(MalformedResponseError, FetchError)


def test_only_transport_failure_is_retryable() -> None:
    assert TransportFailureError("boom").retryable is True
    assert AuthFailureError("denied").retryable is False
    assert GraphQLError("bad").retryable is False
    assert MalformedResponseError("shape").retryable is False


def test_str_includes_context() -> None:
    err = AuthFailureError("denied", query_name="RecentIssues", repository="octo/repo", attempts=1)

    assert str(err) == "denied (query=RecentIssues, repository=octo/repo, attempts=1)"


def test_str_without_context_is_message() -> None:
    assert str(ConfigError("bad config")) == "bad config"


def test_annotate_keeps_existing_context_and_updates_attempts() -> None:
    err = TransportFailureError("timeout", query_name="OpenPullRequests", attempts=1)

    returned = err.annotate(query_name="RecentIssues", repository="octo/repo", attempts=4)

    assert returned is err
    assert err.query_name == "OpenPullRequests"
    assert err.repository == "octo/repo"
    assert err.attempts == 4


def test_graphql_error_exposes_messages_and_partial_data() -> None:
    err = GraphQLError(
        "GraphQL returned errors",
        errors=[{"message": "Field 'x' doesn't exist"}, {"message": "rate limited", "type": "RATE_LIMITED"}],
        partial_data={"repository": None},
    )

    assert err.messages == ["Field 'x' doesn't exist", "rate limited"]
    assert err.partial_data == {"repository": None}
    assert err.status_code is None


def test_variable_mismatch_error_fields() -> None:
    err = VariableMismatchError("mismatch", missing=("since",), unexpected=("extra",))

    assert err.missing == ("since",)
    assert err.unexpected == ("extra",)


def test_transport_failure_retry_after() -> None:
    assert TransportFailureError("429", retry_after=2.5).retry_after == 2.5
    assert TransportFailureError("reset").retry_after is None
