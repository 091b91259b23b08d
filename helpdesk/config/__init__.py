"""
Configuration package for the helpdesk service.

Exposes the cached application settings loaded from the environment.
"""

from helpdesk.config.settings import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
