"""Token resolver factory."""

from __future__ import annotations

from repopoll.auth.base import TokenResolver
from repopoll.auth.resolvers.env import EnvTokenResolver
from repopoll.auth.resolvers.static import StaticTokenResolver
from repopoll.contracts.config import RepoPollConfig
from repopoll.contracts.exceptions import ConfigError

RESOLVERS: dict[str, type[TokenResolver]] = {
    "env": EnvTokenResolver,
    "token": StaticTokenResolver,
}


def create_token_resolver(config: RepoPollConfig) -> TokenResolver:
    resolver_cls = RESOLVERS.get(config.auth)
    if resolver_cls is None:
        raise ConfigError(f"Unknown auth mode: {config.auth}")
    return resolver_cls.from_config(config)
