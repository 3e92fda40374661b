"""Configuration module for the Slack Knowledge Assistant."""

from .settings import Settings, get_settings, reload_settings

__all__ = ["Settings", "get_settings", "reload_settings"]
