"""Fetch commands: ``repopoll issues`` and ``repopoll pulls``."""

from __future__ import annotations

import argparse
import json
from collections.abc import Sequence

from pydantic import BaseModel
from rich.console import Console
from rich.table import Table

from repopoll.auth import create_token_resolver
from repopoll.cli.common import format_comma_or_none, format_timestamp, split_repository
from repopoll.config import load_config
from repopoll.contracts.config import RepoPollConfig
from repopoll.contracts.exceptions import ConfigError, InvalidArgumentError
from repopoll.contracts.records import FetchResult, IssueRecord, PullRequestRecord
from repopoll.service import FetchService


def resolve_config(args: argparse.Namespace) -> RepoPollConfig:
    config = load_config(args.config) if args.config else RepoPollConfig()
    if args.page_cap is None:
        return config
    if args.page_cap < 1:
        raise ConfigError("--page-cap must be >= 1")
    return config.model_copy(update={"page_cap": args.page_cap})


def render_json(records: Sequence[BaseModel]) -> str:
    return json.dumps([record.model_dump(mode="json") for record in records], indent=2)


def issues_table(result: FetchResult[IssueRecord], repository: str) -> Table:
    table = Table(title=f"{repository}: {len(result)} issues ({result.attempts} attempts)")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Author")
    table.add_column("Updated")
    table.add_column("Closed")
    table.add_column("Assignees")
    table.add_column("Labels")
    for issue in result:
        author = f"{issue.author.login} ({issue.author.kind})" if issue.author else "ghost"
        table.add_row(
            str(issue.number),
            issue.title,
            author,
            format_timestamp(issue.updated_at),
            format_timestamp(issue.closed_at),
            format_comma_or_none(issue.assignees),
            format_comma_or_none(issue.labels),
        )
    return table


def pulls_table(result: FetchResult[PullRequestRecord], label: str) -> Table:
    table = Table(title=f"{label}: {len(result)} open pull requests ({result.attempts} attempts)")
    table.add_column("Repository")
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Review requests")
    table.add_column("Assignees")
    for pull in result:
        reviewers = [request.login or f"<{request.reviewer_kind}>" for request in pull.review_requests]
        table.add_row(
            pull.repository or "-",
            str(pull.number),
            pull.title,
            format_comma_or_none(reviewers),
            format_comma_or_none(pull.assignees),
        )
    return table


async def run_fetch(args: argparse.Namespace, *, console: Console | None = None) -> None:
    config = resolve_config(args)
    out = console or Console()

    if args.command == "issues":
        owner, name = split_repository(args.repository)
        token = await create_token_resolver(config).resolve()
        async with FetchService(config, token=token) as service:
            issues = await service.fetch_issues(owner, name, args.since)
        if args.json:
            out.print_json(render_json(issues))
        else:
            out.print(issues_table(issues, f"{owner}/{name}"))
        return

    repositories = tuple(args.repositories) or config.repos
    if not repositories:
        raise InvalidArgumentError("No repositories given and none configured in repos")
    for repository in repositories:
        split_repository(repository)
    token = await create_token_resolver(config).resolve()
    async with FetchService(config, token=token) as service:
        pulls = await service.fetch_open_pull_requests_across(repositories)
    if args.json:
        out.print_json(render_json(pulls))
    else:
        out.print(pulls_table(pulls, ", ".join(repositories)))
