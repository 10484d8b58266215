"""Module entrypoint for ``python -m repopoll.cli``."""

from __future__ import annotations

from repopoll.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
