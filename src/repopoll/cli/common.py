"""Shared CLI formatting helpers."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from repopoll.contracts.variables import split_repository


def format_comma_or_none(values: Sequence[str]) -> str:
    if not values:
        return "none"
    return ", ".join(values)


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M")


__all__ = ["format_comma_or_none", "format_timestamp", "split_repository"]
