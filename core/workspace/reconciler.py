"""
Workspace link reconciliation.

Three phases over the tracked projects:
- validate: inspect every link, no writes
- plan: map each link report to a create / repair / skip action
- repair: enact create and repair actions, recording every outcome

Validate and plan stop at the first error. Repair is best-effort: a failed
link becomes a skipped action with the error appended to its reason.
"""

import logging
from typing import List, Protocol

from ..errors import WorkspaceError
from ..models.workspace import (
    LinkReport,
    PlanAction,
    PlanResult,
    ProjectRef,
    RepairResult,
    ValidationResult,
    compute_healthy,
)
from ..inventory.store import InventoryRepository
from .links import WorkspaceLinks

logger = logging.getLogger(__name__)


class ProjectSource(Protocol):
    def list_projects(self) -> List[ProjectRef]:
        ...


class InventoryProjectSource:
    """Project source reading the persisted inventory"""

    def __init__(self, repository: InventoryRepository):
        self.repository = repository

    def list_projects(self) -> List[ProjectRef]:
        inventory = self.repository.load()
        return [ProjectRef(id=p.id, path=p.path) for p in inventory.projects]


class WorkspaceReconciler:
    """Validate, plan and repair the project link tree"""

    def __init__(self, source: ProjectSource, links: WorkspaceLinks):
        self.source = source
        self.links = links

    def validate(self) -> ValidationResult:
        """Inspect the link of every project, in source order"""
        reports: List[LinkReport] = []
        for project in self.source.list_projects():
            reports.append(self.links.inspect(project.id, project.path))

        result = ValidationResult(healthy=compute_healthy(reports), links=reports)
        logger.debug(
            f"Validated {len(reports)} links: "
            f"{result.healthy_links} ok, healthy={result.healthy}"
        )
        return result

    def plan(self) -> PlanResult:
        """Validate, then recommend one action per link"""
        validation = self.validate()
        actions = [report.recommend_action() for report in validation.links]
        return PlanResult(healthy=validation.healthy, actions=actions)

    def repair(self) -> RepairResult:
        """
        Plan, then ensure every link that is missing or broken.

        Returns:
            RepairResult with applied create/repair actions and skipped
            actions (skip actions and failed ensures)
        """
        plan = self.plan()
        applied: List[PlanAction] = []
        skipped: List[PlanAction] = []
        unresolved = 0

        for action in plan.actions:
            if not action.is_applicable:
                skipped.append(action)
                if not action.is_healthy:
                    unresolved += 1
                continue

            try:
                self.links.ensure(action.project_id, action.target_path)
            except (WorkspaceError, OSError, ValueError) as e:
                logger.warning(f"Failed to {action.kind.value} link {action.link_path}: {e}")
                skipped.append(action.with_failure(e))
                unresolved += 1
                continue

            applied.append(action)

        logger.info(
            f"Workspace repair complete: {len(applied)} applied, "
            f"{len(skipped)} skipped"
        )
        return RepairResult(healthy=unresolved == 0, applied=applied, skipped=skipped)
