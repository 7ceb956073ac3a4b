"""
Workspace link driver.

Inspects and maintains the symbolic link of one project under
<workspace>/projects/links/. A non-symlink at a link path is reported as a
conflict and never removed.
"""

import logging
import os
import stat
from pathlib import Path
from typing import Protocol, Union
from urllib.parse import quote

from ..errors import LinkConflictError
from ..models.workspace import LinkReport, LinkStatus

logger = logging.getLogger(__name__)

LINKS_DIR_MODE = 0o750


class WorkspaceLinks(Protocol):
    def inspect(self, project_id: str, target_path: str) -> LinkReport:
        ...

    def ensure(self, project_id: str, target_path: str) -> None:
        ...


def workspace_links_dir(workspace_dir: Union[str, Path]) -> str:
    return os.path.join(str(workspace_dir), "projects", "links")


def link_name(project_id: str) -> str:
    """
    File name of a project's link inside the links directory.

    Ids are percent-encoded into a single path component, so `/abs/repo1`
    becomes `%2Fabs%2Frepo1` and nested project paths never nest links.
    Entries in the links directory are therefore not named by the raw id;
    `urllib.parse.unquote` recovers it.
    """
    name = quote(project_id, safe="")
    if name in ("", ".", ".."):
        raise ValueError(f"Invalid project id: {project_id!r}")
    return name


def workspace_link_path(workspace_dir: Union[str, Path], project_id: str) -> str:
    return os.path.join(workspace_links_dir(workspace_dir), link_name(project_id))


def _same_target(current: str, target: str) -> bool:
    return os.path.normpath(current) == os.path.normpath(target)


class FilesystemWorkspaceLinks:
    """Link driver backed by real symbolic links"""

    def __init__(self, workspace_dir: Union[str, Path]):
        self.workspace_dir = Path(workspace_dir)

    @property
    def links_dir(self) -> str:
        return workspace_links_dir(self.workspace_dir)

    def link_path(self, project_id: str) -> str:
        return workspace_link_path(self.workspace_dir, project_id)

    def inspect(self, project_id: str, target_path: str) -> LinkReport:
        """
        Classify the link of one project.

        Returns:
            LinkReport with status missing, conflict, ok or broken

        Raises:
            OSError: for stat/readlink failures other than a missing entry
        """
        link_path = self.link_path(project_id)
        report = {
            "project_id": project_id,
            "project_path": target_path,
            "link_path": link_path,
        }

        try:
            st = os.lstat(link_path)
        except FileNotFoundError:
            return LinkReport(status=LinkStatus.MISSING, **report)

        if not stat.S_ISLNK(st.st_mode):
            return LinkReport(status=LinkStatus.CONFLICT, **report)

        current = os.readlink(link_path)
        status = LinkStatus.OK if _same_target(current, target_path) else LinkStatus.BROKEN
        return LinkReport(status=status, current_target=current, **report)

    def ensure(self, project_id: str, target_path: str) -> None:
        """
        Point the project's link at `target_path`.

        Any existing symlink is replaced; the new link stores `target_path`
        verbatim. Unlink and create are separate steps, so the link is briefly
        absent while it is being replaced.

        Raises:
            LinkConflictError: a non-symlink occupies the link path
            OSError: directory creation, unlink or symlink failed
        """
        link_path = self.link_path(project_id)
        os.makedirs(self.links_dir, mode=LINKS_DIR_MODE, exist_ok=True)

        try:
            st = os.lstat(link_path)
        except FileNotFoundError:
            pass
        else:
            if not stat.S_ISLNK(st.st_mode):
                raise LinkConflictError(link_path)
            os.unlink(link_path)

        os.symlink(target_path, link_path)
        logger.info(f"Linked {link_path} -> {target_path}")
