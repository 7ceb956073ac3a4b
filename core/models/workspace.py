"""
Workspace link models.

Defines link statuses, plan action kinds, and the result structures produced
by the reconciler's validate / plan / repair phases.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class LinkStatus(str, Enum):
    """Observed state of one project link"""
    OK = "ok"              # Symlink points at the project path
    MISSING = "missing"    # Nothing at the link path
    BROKEN = "broken"      # Symlink points somewhere else
    CONFLICT = "conflict"  # A non-symlink occupies the link path


class ActionKind(str, Enum):
    """What the reconciler intends to do with one link"""
    CREATE = "create"
    REPAIR = "repair"
    SKIP = "skip"


REASON_HEALTHY = "already healthy"
REASON_MISSING = "link missing"
REASON_MISMATCH = "link target mismatch"
REASON_CONFLICT = "non-symlink conflict at link path"


class ProjectRef(BaseModel):
    """Minimal (id, path) view of a tracked project"""
    id: str
    path: str


class PlanAction(BaseModel):
    """A single planned transition for one link"""
    kind: ActionKind
    project_id: str
    link_path: str
    target_path: str
    reason: str

    @property
    def is_applicable(self) -> bool:
        """True for actions that modify the link tree"""
        return self.kind in (ActionKind.CREATE, ActionKind.REPAIR)

    @property
    def is_healthy(self) -> bool:
        """True for the skip recorded for a link that is already ok"""
        return self.kind == ActionKind.SKIP and self.reason == REASON_HEALTHY

    def with_failure(self, error: BaseException) -> 'PlanAction':
        """Copy of this action with the error appended to its reason"""
        return self.model_copy(update={"reason": f"{self.reason}: {error}"})

    def __str__(self) -> str:
        return f"{self.kind.value.upper()}: {self.link_path} -> {self.target_path} ({self.reason})"


# Plan table: status -> (action kind, reason)
RECOMMENDED_ACTIONS: Dict[LinkStatus, tuple] = {
    LinkStatus.OK: (ActionKind.SKIP, REASON_HEALTHY),
    LinkStatus.MISSING: (ActionKind.CREATE, REASON_MISSING),
    LinkStatus.BROKEN: (ActionKind.REPAIR, REASON_MISMATCH),
    LinkStatus.CONFLICT: (ActionKind.SKIP, REASON_CONFLICT),
}


class LinkReport(BaseModel):
    """Classification of one project link"""
    project_id: str
    project_path: str
    link_path: str
    status: LinkStatus
    current_target: Optional[str] = None

    def recommend_action(self) -> PlanAction:
        """Map this report to the plan action for its status"""
        kind, reason = RECOMMENDED_ACTIONS[self.status]
        return PlanAction(
            kind=kind,
            project_id=self.project_id,
            link_path=self.link_path,
            target_path=self.project_path,
            reason=reason,
        )

    @property
    def is_ok(self) -> bool:
        return self.status == LinkStatus.OK


def compute_healthy(links: List[LinkReport]) -> bool:
    """True when every link is ok; vacuously true for no links"""
    return all(link.is_ok for link in links)


class ValidationResult(BaseModel):
    healthy: bool
    links: List[LinkReport] = Field(default_factory=list)

    @property
    def healthy_links(self) -> int:
        return sum(1 for link in self.links if link.is_ok)

    def get_status_counts(self) -> Dict[LinkStatus, int]:
        """Number of links per status"""
        counts = {status: 0 for status in LinkStatus}
        for link in self.links:
            counts[link.status] += 1
        return counts


class PlanResult(BaseModel):
    healthy: bool = True
    actions: List[PlanAction] = Field(default_factory=list)

    @property
    def pending(self) -> List[PlanAction]:
        """Actions that would change the link tree"""
        return [action for action in self.actions if action.is_applicable]


class RepairResult(BaseModel):
    healthy: bool = True  # every link ok once the applied actions landed
    applied: List[PlanAction] = Field(default_factory=list)
    skipped: List[PlanAction] = Field(default_factory=list)

    @property
    def failed(self) -> List[PlanAction]:
        """Create/repair actions whose link could not be ensured"""
        return [action for action in self.skipped if action.is_applicable]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization"""
        return self.model_dump(mode="json")
