"""
Configuration management for the aios workspace

Handles defaults, workspace config files, and environment overrides.
"""

from .loader import ConfigurationLoader, configure_logging
from .defaults import DEFAULT_SETTINGS

__all__ = ["ConfigurationLoader", "configure_logging", "DEFAULT_SETTINGS"]
