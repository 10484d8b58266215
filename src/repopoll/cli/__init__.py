"""Command-line interface for repopoll."""

from repopoll.cli.app import main
from repopoll.cli.parser import build_parser

__all__ = ["build_parser", "main"]
