"""
Workspace error types.

Every failure the workspace core raises on purpose derives from
WorkspaceError so callers can catch the family in one clause. Filesystem
failures are not wrapped: the built-in OSError subclasses propagate as-is.
"""

from pathlib import Path
from typing import Optional, Union


class WorkspaceError(Exception):
    """Base class for workspace errors"""


class InputRequiredError(WorkspaceError, ValueError):
    """A required input was empty or whitespace only"""


class PathRequiredError(InputRequiredError):
    def __init__(self, message: str = "path required"):
        super().__init__(message)


class SelectorRequiredError(InputRequiredError):
    def __init__(self, message: str = "selector required"):
        super().__init__(message)


class PathsRequiredError(InputRequiredError):
    def __init__(self, message: str = "paths required"):
        super().__init__(message)


class ProjectNotFoundError(WorkspaceError, LookupError):
    """No tracked project matched the selector, directly or canonicalized"""

    def __init__(self, selector: Optional[str] = None):
        super().__init__("project not found")
        self.selector = selector


class LinkConflictError(WorkspaceError):
    """Something other than a symbolic link occupies a link path"""

    def __init__(self, link_path: Union[str, Path, None] = None):
        super().__init__("non-symlink at link path")
        self.link_path = str(link_path) if link_path is not None else None


class InventoryCorruptError(WorkspaceError):
    """The inventory file exists but could not be parsed"""

    def __init__(self, path: Union[str, Path], detail: str):
        super().__init__(f"inventory parse error: {path}: {detail}")
        self.path = str(path)
        self.detail = detail
