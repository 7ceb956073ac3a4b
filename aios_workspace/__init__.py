"""
aios-workspace - Tracked project inventory, workspace link tree, and drift watching.

Keeps a per-user workspace of symbolic links to tracked project directories
healthy, and watches configuration directories for drift.
"""

__version__ = "1.0.0"

from .app import WorkspaceApp, WorkspaceRepairError

__all__ = [
    "WorkspaceApp",
    "WorkspaceRepairError",
    "__version__",
]
