"""Static token resolver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from repopoll.auth.base import TokenResolver
from repopoll.contracts.exceptions import AuthFailureError

if TYPE_CHECKING:
    from repopoll.contracts.config import RepoPollConfig


@dataclass(frozen=True)
class StaticTokenResolver(TokenResolver):
    token: str = field(repr=False)

    @classmethod
    def from_config(cls, config: RepoPollConfig) -> StaticTokenResolver:
        return cls(token=config.auth_token.get_secret_value() if config.auth_token else "")

    async def resolve(self) -> str:
        resolved = self.token.strip()
        if not resolved:
            raise AuthFailureError("Static token is empty")
        return resolved
