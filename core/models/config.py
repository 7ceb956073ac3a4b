"""
Configuration models for the aios workspace.

Handles the workspace root, logging level, and drift watcher polling interval.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_WORKSPACE_DIR = Path(".") / ".aios"
DEFAULT_WATCH_INTERVAL_S = 2.0
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class WorkspaceSettings(BaseSettings):
    """Workspace settings with environment variable support"""
    model_config = SettingsConfigDict(
        env_prefix="AIOS_",
        env_ignore_empty=True,
        case_sensitive=False,
        validate_assignment=True,
    )

    # Root of the inventory file and link tree
    workspace_dir: Path = Field(default_factory=lambda: DEFAULT_WORKSPACE_DIR)

    # Logging
    log_level: str = "INFO"

    # Drift watcher
    watch_interval: float = DEFAULT_WATCH_INTERVAL_S  # seconds

    @field_validator('workspace_dir', mode='before')
    @classmethod
    def validate_workspace_dir(cls, v):
        """Fall back to ./.aios for blank values"""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_WORKSPACE_DIR
        return Path(v.strip()) if isinstance(v, str) else v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level name"""
        level = v.strip().upper()
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f'Log level must be one of: {sorted(VALID_LOG_LEVELS)}')
        return level

    @field_validator('watch_interval')
    @classmethod
    def validate_watch_interval(cls, v: float) -> float:
        """Non-positive intervals fall back to the default"""
        return v if v > 0 else DEFAULT_WATCH_INTERVAL_S

    @property
    def projects_dir(self) -> Path:
        return self.workspace_dir / "projects"

    @property
    def inventory_file(self) -> Path:
        """Path of the persisted project inventory"""
        return self.projects_dir / "inventory.json"

    @property
    def links_dir(self) -> Path:
        """Directory holding one symlink per tracked project"""
        return self.projects_dir / "links"

    @property
    def config_file(self) -> Path:
        return self.workspace_dir / "config.json"
