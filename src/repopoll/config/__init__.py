"""Configuration loading exports."""

from repopoll.config.loader import load_config

__all__ = ["load_config"]
