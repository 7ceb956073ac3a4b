"""
Core data models for aios-workspace

Pydantic models for tracked projects, workspace links, and settings.
"""

from .projects import Project, Inventory, InventoryFile, INVENTORY_SCHEMA_VERSION
from .workspace import (
    LinkStatus,
    ActionKind,
    ProjectRef,
    PlanAction,
    LinkReport,
    ValidationResult,
    PlanResult,
    RepairResult,
)
from .config import WorkspaceSettings

__all__ = [
    # Projects
    "Project",
    "Inventory",
    "InventoryFile",
    "INVENTORY_SCHEMA_VERSION",

    # Workspace links
    "LinkStatus",
    "ActionKind",
    "ProjectRef",
    "PlanAction",
    "LinkReport",
    "ValidationResult",
    "PlanResult",
    "RepairResult",

    # Configuration
    "WorkspaceSettings"
]
