"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import asyncio
import logging
import sys

from repopoll.cli.commands.fetch import run_fetch
from repopoll.cli.parser import build_parser
from repopoll.contracts.exceptions import ConfigError, FetchError, InvalidArgumentError, RepoPollError


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        asyncio.run(run_fetch(args))
        return 0
    except (ConfigError, InvalidArgumentError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except FetchError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except RepoPollError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:  # pragma: no cover - last-resort reporting
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
