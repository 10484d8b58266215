"""Shared test fixtures for repopoll tests."""

from __future__ import annotations

import pytest

from repopoll.contracts.config import RepoPollConfig


@pytest.fixture
def config() -> RepoPollConfig:
    """A config with tiny backoff so retry tests stay fast."""
    return RepoPollConfig(retry_backoff_base_ms=1, retry_backoff_max_ms=1)
