"""Configuration package for the interview server."""
from .routes import LlmRoute, Provider, route_from_settings
from .settings import Settings, settings

__all__ = [
    "LlmRoute",
    "Provider",
    "route_from_settings",
    "Settings",
    "settings",
]
