"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("repopoll")
    except PackageNotFoundError:
        return "0.0.0"


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if parsed < 1:
        raise argparse.ArgumentTypeError("must be >= 1")
    return parsed


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default=None, help="Path to a repopoll JSON config file")
    parser.add_argument("--page-cap", type=_positive_int, default=None, help="Maximum pages to fetch")
    parser.add_argument("--json", action="store_true", help="Print records as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="repopoll")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    issues_parser = subparsers.add_parser("issues", help="List issues updated since a timestamp")
    issues_parser.add_argument("repository", metavar="OWNER/NAME", help="Repository to query")
    _add_common_options(issues_parser)
    issues_parser.add_argument("--since", required=True, help="RFC 3339 timestamp, e.g. 2024-05-01T00:00:00Z")

    pulls_parser = subparsers.add_parser("pulls", help="List open pull requests")
    pulls_parser.add_argument(
        "repositories",
        metavar="OWNER/NAME",
        nargs="*",
        help="Repositories to query (default: repos from the config file)",
    )
    _add_common_options(pulls_parser)

    return parser


__all__ = ["build_parser"]
