"""
Default configuration values for the aios workspace.

Centralized defaults that can be overridden by the workspace config file,
environment variables, or explicit command line options.
"""

from pathlib import Path
from typing import Any, Dict

# Global default settings
DEFAULT_SETTINGS: Dict[str, Any] = {
    # Workspace root (inventory file and link tree)
    "workspace_dir": str(Path(".") / ".aios"),

    # Logging
    "log_level": "INFO",

    # Drift watcher polling interval in seconds
    "watch_interval": 2.0,
}

# Environment variable mappings
ENV_VAR_MAPPING: Dict[str, str] = {
    "AIOS_WORKSPACE_DIR": "workspace_dir",
    "AIOS_LOG_LEVEL": "log_level",
    "AIOS_WATCH_INTERVAL": "watch_interval",
}

# Settings a workspace config file may override; the root itself is not one of them
FILE_OVERRIDABLE_KEYS = frozenset({"log_level", "watch_interval"})

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_default_settings() -> Dict[str, Any]:
    """Get a copy of the default settings"""
    return dict(DEFAULT_SETTINGS)
