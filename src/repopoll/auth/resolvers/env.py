"""Environment token resolver."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from repopoll.auth.base import TokenResolver
from repopoll.contracts.exceptions import AuthFailureError

if TYPE_CHECKING:
    from repopoll.contracts.config import RepoPollConfig


@dataclass(frozen=True)
class EnvTokenResolver(TokenResolver):
    variable: str = "GITHUB_TOKEN"

    @classmethod
    def from_config(cls, config: RepoPollConfig) -> EnvTokenResolver:
        return cls()

    async def resolve(self) -> str:
        token = (os.getenv(self.variable) or "").strip()
        if not token:
            raise AuthFailureError(f"{self.variable} is not set or empty")
        return token
