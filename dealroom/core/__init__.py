"""Core wiring: settings, lifespan, exception handlers, rate limiting."""

from dealroom.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
