"""
Workspace application wiring.

Builds the inventory, link driver, reconciler and sync engine for one
workspace root and exposes them behind a single object.
"""

import logging
import os
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from core.inventory import AbsPathCanonicalizer, InventoryStore, ProjectInventoryService
from core.models.config import WorkspaceSettings
from core.models.projects import Project
from core.models.workspace import PlanResult, RepairResult, ValidationResult
from core.sync import PollingWatcher, SyncEngine, WatchStream
from core.workspace import FilesystemWorkspaceLinks, InventoryProjectSource, WorkspaceReconciler

logger = logging.getLogger(__name__)


class WorkspaceRepairError(RuntimeError):
    """Raised by the watch repair callback when links remain unresolved"""


class WorkspaceApp:
    """
    Entry point for workspace operations.

    The workspace root comes from the settings passed in; nothing below this
    object reads the environment.
    """

    def __init__(
        self,
        settings: Optional[WorkspaceSettings] = None,
        now: Optional[Callable[[], datetime]] = None
    ):
        self.settings = settings or WorkspaceSettings()
        workspace_dir = self.settings.workspace_dir

        self.store = InventoryStore(workspace_dir)
        self.inventory = ProjectInventoryService(
            self.store,
            canonicalizer=AbsPathCanonicalizer(),
            now=now,
        )
        self.links = FilesystemWorkspaceLinks(workspace_dir)
        self.reconciler = WorkspaceReconciler(InventoryProjectSource(self.store), self.links)
        self.engine = SyncEngine()

    # Inventory

    def list_projects(self) -> List[Project]:
        return self.inventory.list()

    def track(self, path: str) -> Project:
        return self.inventory.track(path)

    def untrack(self, selector: str) -> Project:
        return self.inventory.untrack(selector)

    def inspect(self, selector: str) -> Project:
        return self.inventory.inspect(selector)

    # Link tree

    def validate(self) -> ValidationResult:
        return self.reconciler.validate()

    def plan(self) -> PlanResult:
        return self.reconciler.plan()

    def repair(self) -> RepairResult:
        return self.reconciler.repair()

    def summary(self) -> Dict[str, Any]:
        """Counts of tracked projects and links plus the sync state"""
        projects = self.list_projects()
        validation = self.validate()
        return {
            "tracked_projects": len(projects),
            "workspace_links": len(validation.links),
            "healthy_links": validation.healthy_links,
            "workspace_healthy": validation.healthy,
            "sync_state": self.engine.state().value,
        }

    # Drift watching

    def _repair_links(self, path: str) -> None:
        result = self.repair()
        if result.failed:
            failed = ", ".join(action.link_path for action in result.failed)
            raise WorkspaceRepairError(f"could not repair links after change at {path}: {failed}")

    async def watch_workspace(
        self,
        paths: Optional[Iterable[str]] = None,
        interval_s: Optional[float] = None
    ) -> WatchStream:
        """
        Watch paths and repair the link tree whenever one of them changes.

        Args:
            paths: Paths to poll (default: the links directory, created if absent)
            interval_s: Poll interval (default: the configured interval)
        """
        if paths is None:
            os.makedirs(self.links.links_dir, mode=0o750, exist_ok=True)
            paths = [self.links.links_dir]

        watcher = PollingWatcher(interval_s or self.settings.watch_interval)
        return await watcher.watch(paths, engine=self.engine, repair=self._repair_links)
