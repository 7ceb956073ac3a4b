"""
Configuration loading for the aios workspace.

Layers defaults, the optional workspace config file, environment variables,
and explicit overrides into a single WorkspaceSettings instance.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from core.models.config import WorkspaceSettings
from .defaults import (
    ENV_VAR_MAPPING,
    FILE_OVERRIDABLE_KEYS,
    LOG_FORMAT,
    get_default_settings,
)

logger = logging.getLogger(__name__)


class ConfigurationLoader:
    """Load workspace settings with file and environment overrides"""

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self._environ = environ if environ is not None else os.environ

    def load(
        self,
        workspace_dir: Union[str, Path, None] = None,
        **overrides: Any
    ) -> WorkspaceSettings:
        """
        Resolve settings for one workspace.

        Precedence, lowest first: defaults, <workspace>/config.json,
        environment variables, explicit arguments.
        """
        data = get_default_settings()
        env_data = self._read_env_overrides()

        # The workspace root decides which config file applies
        root = workspace_dir or env_data.get("workspace_dir") or data["workspace_dir"]
        data["workspace_dir"] = str(root)

        config_file = Path(root) / "config.json"
        file_values = self._load_config_file(config_file)
        data.update(self._validate_file_values(config_file, data, file_values))
        data.update({k: v for k, v in env_data.items() if k != "workspace_dir"})
        data.update({k: v for k, v in overrides.items() if v is not None})

        return WorkspaceSettings(**data)

    def _read_env_overrides(self) -> Dict[str, str]:
        """Collect non-empty environment variable overrides"""
        values = {}
        for env_var, key in ENV_VAR_MAPPING.items():
            env_value = self._environ.get(env_var)
            if env_value is not None and env_value.strip():
                values[key] = env_value.strip()
        return values

    def _load_config_file(self, config_file: Path) -> Dict[str, Any]:
        """Load overridable keys from a workspace config file, if present"""
        if not config_file.exists():
            return {}

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load config from {config_file}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Ignoring config file {config_file}: expected a JSON object")
            return {}

        ignored = sorted(set(data) - FILE_OVERRIDABLE_KEYS)
        if ignored:
            logger.warning(f"Ignoring unsupported keys in {config_file}: {ignored}")

        return {k: v for k, v in data.items() if k in FILE_OVERRIDABLE_KEYS}

    def _validate_file_values(
        self,
        config_file: Path,
        base: Dict[str, Any],
        file_values: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Drop config file values that do not validate on top of the defaults"""
        if not file_values:
            return file_values

        try:
            WorkspaceSettings(**{**base, **file_values})
        except ValidationError as e:
            invalid = {error["loc"][0] for error in e.errors() if error["loc"]}
            logger.error(
                f"Ignoring invalid values in {config_file}: {sorted(invalid)}"
            )
            return {k: v for k, v in file_values.items() if k not in invalid}
        return file_values

    def save(self, settings: WorkspaceSettings) -> Path:
        """Write the file-overridable settings to the workspace config file"""
        config_file = settings.config_file
        config_file.parent.mkdir(parents=True, exist_ok=True)

        payload = {
            key: value for key, value in settings.model_dump(mode="json").items()
            if key in FILE_OVERRIDABLE_KEYS
        }
        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, sort_keys=True)

        logger.info(f"Saved configuration to {config_file}")
        return config_file


def configure_logging(settings: WorkspaceSettings) -> None:
    """Configure root logging at the settings' level"""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
    )
