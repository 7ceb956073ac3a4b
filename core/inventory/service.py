"""
Project inventory service.

Track, untrack, inspect and list projects on top of an inventory repository
and a path canonicalizer. Each call loads the inventory once and saves it at
most once, only when it changed.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from ..errors import (
    PathRequiredError,
    ProjectNotFoundError,
    SelectorRequiredError,
    WorkspaceError,
)
from ..models.projects import Inventory, Project, format_timestamp, utc_now
from .paths import AbsPathCanonicalizer, PathCanonicalizer, normalize_selector
from .store import InventoryRepository

logger = logging.getLogger(__name__)


def project_id(canonical_path: str) -> str:
    """Default project identity: the canonical path itself"""
    return canonical_path


class ProjectInventoryService:
    """Selector-based operations over the tracked project set"""

    def __init__(
        self,
        repository: InventoryRepository,
        canonicalizer: Optional[PathCanonicalizer] = None,
        now: Optional[Callable[[], datetime]] = None,
        id_factory: Callable[[str], str] = project_id
    ):
        """
        Args:
            repository: Inventory persistence
            canonicalizer: Path canonicalizer (absolute against cwd by default)
            now: Clock used for `added_at` of new projects
            id_factory: Maps a canonical path to a project id
        """
        self.repository = repository
        self.canonicalizer = canonicalizer or AbsPathCanonicalizer()
        self._now = now or utc_now
        self._id_factory = id_factory

    def list(self) -> List[Project]:
        """All tracked projects, ascending by path"""
        return self.repository.load().sorted_projects()

    def track(self, raw_path: str) -> Project:
        """
        Start tracking a project directory.

        Tracking an already tracked path returns the existing record without
        writing the inventory.
        """
        if not normalize_selector(raw_path):
            raise PathRequiredError()
        canonical_path = self.canonicalizer.canonicalize(raw_path)

        inventory = self.repository.load()
        new_id = self._id_factory(canonical_path)
        for existing in inventory.projects:
            if existing.id == new_id or existing.path == canonical_path:
                logger.debug(f"Project already tracked: {canonical_path}")
                return existing

        project = Project(
            id=new_id,
            path=canonical_path,
            added_at=format_timestamp(self._now()),
        )
        inventory.track(project)
        self.repository.save(inventory)

        logger.info(f"Tracked project {project.path} ({project.id})")
        return project

    def untrack(self, selector: str) -> Project:
        """Stop tracking the project matching `selector` and return it"""
        key = self._require_selector(selector)
        inventory = self.repository.load()

        removed = inventory.untrack(key)
        if removed is None:
            canonical_path = self._canonical_or_none(key)
            if canonical_path is not None:
                removed = inventory.untrack(canonical_path)
        if removed is None:
            raise ProjectNotFoundError(key)

        self.repository.save(inventory)
        logger.info(f"Untracked project {removed.path} ({removed.id})")
        return removed

    def inspect(self, selector: str) -> Project:
        """Find the project matching `selector` by id or path"""
        key = self._require_selector(selector)
        return self._resolve(self.repository.load(), key)

    def _resolve(self, inventory: Inventory, key: str) -> Project:
        project = inventory.find_by_selector(key)
        if project is not None:
            return project

        canonical_path = self._canonical_or_none(key)
        if canonical_path is not None:
            project = inventory.find_by_selector(canonical_path)
            if project is not None:
                return project

        raise ProjectNotFoundError(key)

    def _require_selector(self, selector: str) -> str:
        key = normalize_selector(selector)
        if not key:
            raise SelectorRequiredError()
        return key

    def _canonical_or_none(self, key: str) -> Optional[str]:
        """Canonical form of a selector; a canonicalizer failure counts as a miss"""
        try:
            return self.canonicalizer.canonicalize(key)
        except (WorkspaceError, ValueError) as e:
            logger.debug(f"Could not canonicalize selector {key!r}: {e}")
            return None
