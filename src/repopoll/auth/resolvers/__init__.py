"""Concrete token resolvers."""

from repopoll.auth.resolvers.env import EnvTokenResolver
from repopoll.auth.resolvers.static import StaticTokenResolver

__all__ = ["EnvTokenResolver", "StaticTokenResolver"]
