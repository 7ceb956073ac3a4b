"""
aios-workspace core package

Project inventory, workspace link reconciliation, and drift detection.
"""

__version__ = "1.0.0"

from .errors import WorkspaceError
from .models import Project, Inventory, LinkStatus, ActionKind, WorkspaceSettings

__all__ = [
    "WorkspaceError",
    "Project",
    "Inventory",
    "LinkStatus",
    "ActionKind",
    "WorkspaceSettings"
]
