"""
Project inventory models.

A Project is identified by its canonical path; the inventory is the set of
projects tracked in one workspace.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

INVENTORY_SCHEMA_VERSION = 1


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as RFC3339 in UTC with second precision"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Project(BaseModel):
    """A tracked project root"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(
        validation_alias=AliasChoices("ID", "id"),
        serialization_alias="ID",
    )
    path: str = Field(
        validation_alias=AliasChoices("Path", "path"),
        serialization_alias="Path",
    )
    added_at: str = Field(
        default="",
        validation_alias=AliasChoices("AddedAt", "added_at"),
        serialization_alias="AddedAt",
    )

    def matches(self, selector: str) -> bool:
        return self.id == selector or self.path == selector

    def to_dict(self) -> dict:
        """Convert to the on-disk dictionary form"""
        return self.model_dump(by_alias=True)


class Inventory(BaseModel):
    """Unordered set of projects with unique ids"""

    projects: List[Project] = Field(default_factory=list)

    def find_by_selector(self, selector: str) -> Optional[Project]:
        """Look up a project by id or path"""
        for project in self.projects:
            if project.matches(selector):
                return project
        return None

    def track(self, project: Project) -> bool:
        """
        Add a project unless one with the same id or path is already tracked.

        Returns:
            True if the project was added, False if it was already present
        """
        for existing in self.projects:
            if existing.id == project.id or existing.path == project.path:
                return False
        self.projects.append(project)
        return True

    def untrack(self, *selectors: str) -> Optional[Project]:
        """Remove the first project matching any selector and return it"""
        for index, project in enumerate(self.projects):
            if any(project.matches(selector) for selector in selectors):
                return self.projects.pop(index)
        return None

    def sorted_projects(self) -> List[Project]:
        """Projects ordered by path, ascending"""
        return sorted(self.projects, key=lambda p: p.path)


class InventoryFile(BaseModel):
    """Serialized inventory document"""

    version: int = INVENTORY_SCHEMA_VERSION
    updated_at: str = ""
    projects: List[Project] = Field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "updated_at": self.updated_at,
            "projects": [project.to_dict() for project in self.projects],
        }
