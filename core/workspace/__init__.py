"""
Workspace link tree: the per-project link driver and the reconciler.
"""

from .links import (
    FilesystemWorkspaceLinks,
    WorkspaceLinks,
    link_name,
    workspace_link_path,
    workspace_links_dir,
)
from .reconciler import InventoryProjectSource, ProjectSource, WorkspaceReconciler

__all__ = [
    "FilesystemWorkspaceLinks",
    "WorkspaceLinks",
    "link_name",
    "workspace_link_path",
    "workspace_links_dir",
    "InventoryProjectSource",
    "ProjectSource",
    "WorkspaceReconciler",
]
