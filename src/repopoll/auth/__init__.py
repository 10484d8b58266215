"""Auth module public exports."""

from repopoll.auth.base import TokenResolver
from repopoll.auth.factory import create_token_resolver

__all__ = ["TokenResolver", "create_token_resolver"]
