"""Configuration for Cost Insights."""

from costinsights.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
