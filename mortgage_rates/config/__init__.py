"""Configuration."""

from .settings import Settings, MORTGAGE_SERIES, RATE_SLOTS

__all__ = ["Settings", "MORTGAGE_SERIES", "RATE_SLOTS"]
