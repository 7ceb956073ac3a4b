"""
Project inventory: canonical paths, persistence, and the tracking service.
"""

from .paths import AbsPathCanonicalizer, PathCanonicalizer, canonicalize, normalize_selector
from .store import InventoryRepository, InventoryStore
from .service import ProjectInventoryService, project_id

__all__ = [
    "AbsPathCanonicalizer",
    "PathCanonicalizer",
    "canonicalize",
    "normalize_selector",
    "InventoryRepository",
    "InventoryStore",
    "ProjectInventoryService",
    "project_id",
]
