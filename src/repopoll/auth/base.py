"""Auth resolver interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from repopoll.contracts.config import RepoPollConfig


class TokenResolver(ABC):
    @classmethod
    @abstractmethod
    def from_config(cls, config: RepoPollConfig) -> TokenResolver:
        """Build the resolver from the settings it needs in *config*."""

    @abstractmethod
    async def resolve(self) -> str:
        """Resolve and return a GitHub API token."""
